from __future__ import annotations

"""
Typed facade over NavdataClient.

One coroutine per peer function; each packages its arguments the way the
peer expects them and forwards to ``NavdataClient.call``. Returned records
(airports, waypoints, airways, ...) are the decoded JSON values, untouched.
"""

from typing import Any, Callable, Optional, Sequence, Tuple, Union

from .client import NavdataClient
from .envelopes import Coordinates, DownloadProgress, EventName, FunctionName
from .logs import getLogger

logger = getLogger(__name__)

CoordinatesLike = Union[Coordinates, Tuple[float, float]]
Record = dict[str, Any]


class NavigationDataInterface:
    """
    Application-facing API of the navigation-data peer.

    Wraps a NavdataClient; the client (and its transport) can be shared
    with other code.
    """

    def __init__(self, client: NavdataClient) -> None:
        self._client = client

    @property
    def client(self) -> NavdataClient:
        return self._client

    # ------------------------------------------------------------------ #
    # Readiness and events
    # ------------------------------------------------------------------ #

    def on_ready(self, callback: Callable[[], None]) -> None:
        self._client.on_ready(callback)

    def is_ready(self) -> bool:
        return self._client.is_ready

    async def wait_ready(self, timeout: Optional[float] = None) -> None:
        await self._client.wait_ready(timeout)

    def on_heartbeat(self, callback: Callable[[], None]) -> None:
        """Invoke ``callback()`` for every heartbeat; the heartbeat carries no data."""

        def _deliver(_data: Any) -> None:
            callback()

        self._client.on_event(EventName.HEARTBEAT, _deliver)

    def on_download_progress(self, callback: Callable[[DownloadProgress], None]) -> None:
        """
        Invoke ``callback(progress)`` for every DownloadProgress event.

        Payloads that do not decode are logged and skipped for this
        callback only.
        """

        def _deliver(data: Any) -> None:
            try:
                progress = DownloadProgress.from_payload(data)
            except ValueError as exc:
                logger.warning("Skipping undecodable DownloadProgress payload %r: %s", data, exc)
                return
            callback(progress)

        self._client.on_event(EventName.DOWNLOAD_PROGRESS, _deliver)

    # ------------------------------------------------------------------ #
    # Package management
    # ------------------------------------------------------------------ #

    async def download_navigation_data(self, url: str, set_active: bool = False) -> None:
        """
        Download and install a navigation data package.

        Progress is reported through ``on_download_progress``; the call
        resolves once the package is extracted.

        Parameters
        ----------
        url:
            Signed URL of the package archive.
        set_active:
            Activate the package once installed.
        """
        await self._call(FunctionName.DOWNLOAD_NAVIGATION_DATA, {"url": url, "set_active": set_active})

    async def set_download_options(self, batch_size: int) -> None:
        """Number of files to delete or unzip per peer update tick."""
        await self._call(FunctionName.SET_DOWNLOAD_OPTIONS, {"batch_size": batch_size})

    async def get_navigation_data_install_status(self) -> Record:
        return await self._call(FunctionName.GET_NAVIGATION_DATA_INSTALL_STATUS)

    async def list_available_packages(self, sort: bool = False, filter: bool = False) -> list[Record]:
        """
        List installed packages.

        ``sort`` orders newest cycle first; ``filter`` keeps only packages in
        the active database format.
        """
        return await self._call(FunctionName.LIST_AVAILABLE_PACKAGES, {"sort": sort, "filter": filter})

    async def set_active_package(self, uuid: str) -> bool:
        """Returns False if the package was already active."""
        return await self._call(FunctionName.SET_ACTIVE_PACKAGE, {"uuid": uuid})

    async def delete_package(self, uuid: str) -> None:
        await self._call(FunctionName.DELETE_PACKAGE, {"uuid": uuid})

    async def clean_packages(self, count: Optional[int] = None) -> None:
        """Delete inactive packages, keeping at most ``count`` of them."""
        await self._call(FunctionName.CLEAN_PACKAGES, {"count": count})

    # ------------------------------------------------------------------ #
    # Database
    # ------------------------------------------------------------------ #

    async def execute_sql(self, sql: str, params: Sequence[str] = ()) -> list[Record]:
        """
        Run a SELECT query against the active database.

        The query must not request a special result format.
        """
        return await self._call(FunctionName.EXECUTE_SQL_QUERY, {"sql": sql, "params": list(params)})

    async def get_database_info(self) -> Record:
        return await self._call(FunctionName.GET_DATABASE_INFO)

    # ------------------------------------------------------------------ #
    # Lookups by identifier
    # ------------------------------------------------------------------ #

    async def get_airport(self, ident: str) -> Record:
        """Fails with RemoteError if the airport does not exist."""
        return await self._call(FunctionName.GET_AIRPORT, {"ident": ident})

    async def get_waypoints(self, ident: str) -> list[Record]:
        return await self._call(FunctionName.GET_WAYPOINTS, {"ident": ident})

    async def get_vhf_navaids(self, ident: str) -> list[Record]:
        return await self._call(FunctionName.GET_VHF_NAVAIDS, {"ident": ident})

    async def get_ndb_navaids(self, ident: str) -> list[Record]:
        return await self._call(FunctionName.GET_NDB_NAVAIDS, {"ident": ident})

    async def get_airways(self, ident: str) -> list[Record]:
        return await self._call(FunctionName.GET_AIRWAYS, {"ident": ident})

    async def get_airways_at_fix(self, fix_ident: str, fix_icao_code: str) -> list[Record]:
        """Airways passing through the fix identified by ident and ICAO region code."""
        return await self._call(
            FunctionName.GET_AIRWAYS_AT_FIX,
            {"fix_ident": fix_ident, "fix_icao_code": fix_icao_code},
        )

    # ------------------------------------------------------------------ #
    # Range queries (range in nautical miles)
    # ------------------------------------------------------------------ #

    async def get_airports_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        return await self._in_range(FunctionName.GET_AIRPORTS_IN_RANGE, center, range)

    async def get_waypoints_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        return await self._in_range(FunctionName.GET_WAYPOINTS_IN_RANGE, center, range)

    async def get_vhf_navaids_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        return await self._in_range(FunctionName.GET_VHF_NAVAIDS_IN_RANGE, center, range)

    async def get_ndb_navaids_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        return await self._in_range(FunctionName.GET_NDB_NAVAIDS_IN_RANGE, center, range)

    async def get_airways_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        """Airways with at least one fix inside the circle."""
        return await self._in_range(FunctionName.GET_AIRWAYS_IN_RANGE, center, range)

    async def get_controlled_airspaces_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        """Controlled airspaces with an edge vertex inside the circle."""
        return await self._in_range(FunctionName.GET_CONTROLLED_AIRSPACES_IN_RANGE, center, range)

    async def get_restrictive_airspaces_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        """Restrictive airspaces with an edge vertex inside the circle."""
        return await self._in_range(FunctionName.GET_RESTRICTIVE_AIRSPACES_IN_RANGE, center, range)

    async def get_communications_in_range(self, center: CoordinatesLike, range: float) -> list[Record]:
        return await self._in_range(FunctionName.GET_COMMUNICATIONS_IN_RANGE, center, range)

    # ------------------------------------------------------------------ #
    # Airport-affiliated data
    # ------------------------------------------------------------------ #

    async def get_runways_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_RUNWAYS_AT_AIRPORT, airport_ident)

    async def get_departures_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_DEPARTURES_AT_AIRPORT, airport_ident)

    async def get_arrivals_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_ARRIVALS_AT_AIRPORT, airport_ident)

    async def get_approaches_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_APPROACHES_AT_AIRPORT, airport_ident)

    async def get_waypoints_at_airport(self, airport_ident: str) -> list[Record]:
        """Terminal waypoints affiliated with the airport."""
        return await self._at_airport(FunctionName.GET_WAYPOINTS_AT_AIRPORT, airport_ident)

    async def get_ndb_navaids_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_NDB_NAVAIDS_AT_AIRPORT, airport_ident)

    async def get_gates_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_GATES_AT_AIRPORT, airport_ident)

    async def get_communications_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_COMMUNICATIONS_AT_AIRPORT, airport_ident)

    async def get_gls_navaids_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_GLS_NAVAIDS_AT_AIRPORT, airport_ident)

    async def get_path_points_at_airport(self, airport_ident: str) -> list[Record]:
        return await self._at_airport(FunctionName.GET_PATH_POINTS_AT_AIRPORT, airport_ident)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    async def _call(self, function: FunctionName, data: Any = None) -> Any:
        return await self._client.call(function, data)

    async def _in_range(self, function: FunctionName, center: CoordinatesLike, range: float) -> Any:
        return await self._call(function, {"center": _coordinates(center), "range": range})

    async def _at_airport(self, function: FunctionName, airport_ident: str) -> Any:
        return await self._call(function, {"airport_ident": airport_ident})


def _coordinates(center: CoordinatesLike) -> dict[str, float]:
    if isinstance(center, Coordinates):
        return center.as_payload()
    try:
        lat, long = center
    except (TypeError, ValueError) as exc:
        raise ValueError(f"center must be Coordinates or a (lat, long) pair, got {center!r}") from exc
    return {"lat": float(lat), "long": float(long)}
