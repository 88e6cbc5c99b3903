from __future__ import annotations

"""Envelope definitions for the navigation-data message bus."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Mapping


class FunctionName(StrEnum):
    """Functions exposed by the navigation-data peer."""

    DOWNLOAD_NAVIGATION_DATA = "DownloadNavigationData"
    SET_DOWNLOAD_OPTIONS = "SetDownloadOptions"
    GET_NAVIGATION_DATA_INSTALL_STATUS = "GetNavigationDataInstallStatus"
    LIST_AVAILABLE_PACKAGES = "ListAvailablePackages"
    SET_ACTIVE_PACKAGE = "SetActivePackage"
    DELETE_PACKAGE = "DeletePackage"
    CLEAN_PACKAGES = "CleanPackages"
    EXECUTE_SQL_QUERY = "ExecuteSQLQuery"
    GET_DATABASE_INFO = "GetDatabaseInfo"
    GET_AIRPORT = "GetAirport"
    GET_WAYPOINTS = "GetWaypoints"
    GET_VHF_NAVAIDS = "GetVhfNavaids"
    GET_NDB_NAVAIDS = "GetNdbNavaids"
    GET_AIRWAYS = "GetAirways"
    GET_AIRWAYS_AT_FIX = "GetAirwaysAtFix"
    GET_AIRPORTS_IN_RANGE = "GetAirportsInRange"
    GET_WAYPOINTS_IN_RANGE = "GetWaypointsInRange"
    GET_VHF_NAVAIDS_IN_RANGE = "GetVhfNavaidsInRange"
    GET_NDB_NAVAIDS_IN_RANGE = "GetNdbNavaidsInRange"
    GET_AIRWAYS_IN_RANGE = "GetAirwaysInRange"
    GET_CONTROLLED_AIRSPACES_IN_RANGE = "GetControlledAirspacesInRange"
    GET_RESTRICTIVE_AIRSPACES_IN_RANGE = "GetRestrictiveAirspacesInRange"
    GET_COMMUNICATIONS_IN_RANGE = "GetCommunicationsInRange"
    GET_RUNWAYS_AT_AIRPORT = "GetRunwaysAtAirport"
    GET_DEPARTURES_AT_AIRPORT = "GetDeparturesAtAirport"
    GET_ARRIVALS_AT_AIRPORT = "GetArrivalsAtAirport"
    GET_APPROACHES_AT_AIRPORT = "GetApproachesAtAirport"
    GET_WAYPOINTS_AT_AIRPORT = "GetWaypointsAtAirport"
    GET_NDB_NAVAIDS_AT_AIRPORT = "GetNdbNavaidsAtAirport"
    GET_GATES_AT_AIRPORT = "GetGatesAtAirport"
    GET_COMMUNICATIONS_AT_AIRPORT = "GetCommunicationsAtAirport"
    GET_GLS_NAVAIDS_AT_AIRPORT = "GetGlsNavaidsAtAirport"
    GET_PATH_POINTS_AT_AIRPORT = "GetPathPointsAtAirport"


class EventName(StrEnum):
    """Unsolicited notifications emitted by the peer."""

    HEARTBEAT = "Heartbeat"
    DOWNLOAD_PROGRESS = "DownloadProgress"


class ResultStatus(StrEnum):
    SUCCESS = "Success"
    ERROR = "Error"


class DownloadProgressPhase(StrEnum):
    DOWNLOADING = "Downloading"
    CLEANING = "Cleaning"
    EXTRACTING = "Extracting"


@dataclass(frozen=True, slots=True)
class CallEnvelope:
    """A single function call sent to the peer."""

    function: str
    id: str
    data: Any = None

    kind: Final[str] = "call"


@dataclass(frozen=True, slots=True)
class ResultEnvelope:
    """The peer's answer to the call with the same ``id``."""

    id: str
    status: ResultStatus
    data: Any = None

    kind: Final[str] = "result"

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class EventEnvelope:
    """Uncorrelated notification; may arrive at any time."""

    event: str
    data: Any = None

    kind: Final[str] = "event"


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    long: float

    def as_payload(self) -> dict[str, float]:
        return {"lat": self.lat, "long": self.long}


@dataclass(frozen=True, slots=True)
class DownloadProgress:
    """Payload of a ``DownloadProgress`` event."""

    phase: DownloadProgressPhase
    deleted: int | None = None
    total_to_unzip: int | None = None
    unzipped: int | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DownloadProgress":
        """
        Build from the decoded event data.

        Raises ValueError if ``phase`` is missing or unknown.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"DownloadProgress payload must be an object, got {type(data).__name__}")
        try:
            phase = DownloadProgressPhase(data["phase"])
        except KeyError as exc:
            raise ValueError("DownloadProgress payload is missing 'phase'") from exc
        return cls(
            phase=phase,
            deleted=data.get("deleted"),
            total_to_unzip=data.get("total_to_unzip"),
            unzipped=data.get("unzipped"),
        )
