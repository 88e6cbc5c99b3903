from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from navdata.client import NavdataClient
from navdata.config import AppSettings, ChannelSettings
from navdata.envelopes import Coordinates, DownloadProgress, DownloadProgressPhase
from navdata.interface import NavigationDataInterface

CHANNELS = ChannelSettings()


class AutoAnswerTransport:
    """Answers every call synchronously with a canned value and records it."""

    def __init__(self, answer: Any = None) -> None:
        self.answer = answer
        self.calls: list[dict[str, Any]] = []
        self.handlers: dict[str, list[Callable[[str], None]]] = {}

    def send(self, channel: str, payload: str) -> None:
        call = json.loads(payload)
        self.calls.append(call)
        reply = json.dumps({"id": call["id"], "status": "Success", "data": self.answer})
        for handler in self.handlers.get(CHANNELS.result, []):
            handler(reply)

    def subscribe(self, channel: str, handler: Callable[[str], None]) -> None:
        self.handlers.setdefault(channel, []).append(handler)

    def event(self, name: str, data: Any = None) -> None:
        for handler in self.handlers.get(CHANNELS.event, []):
            handler(json.dumps({"event": name, "data": data}))


def make_interface(answer: Any = None) -> tuple[NavigationDataInterface, AutoAnswerTransport]:
    transport = AutoAnswerTransport(answer)
    client = NavdataClient(transport, settings=AppSettings())
    return NavigationDataInterface(client), transport


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, args, function, data",
    [
        ("get_airport", ("ESSA",), "GetAirport", {"ident": "ESSA"}),
        ("get_waypoints", ("ABBEY",), "GetWaypoints", {"ident": "ABBEY"}),
        ("get_vhf_navaids", ("ARL",), "GetVhfNavaids", {"ident": "ARL"}),
        ("get_ndb_navaids", ("NOR",), "GetNdbNavaids", {"ident": "NOR"}),
        ("get_airways", ("UL620",), "GetAirways", {"ident": "UL620"}),
        (
            "get_airways_at_fix",
            ("ABBEY", "EG"),
            "GetAirwaysAtFix",
            {"fix_ident": "ABBEY", "fix_icao_code": "EG"},
        ),
        ("get_runways_at_airport", ("ESSA",), "GetRunwaysAtAirport", {"airport_ident": "ESSA"}),
        ("get_departures_at_airport", ("ESSA",), "GetDeparturesAtAirport", {"airport_ident": "ESSA"}),
        ("get_arrivals_at_airport", ("ESSA",), "GetArrivalsAtAirport", {"airport_ident": "ESSA"}),
        ("get_approaches_at_airport", ("ESSA",), "GetApproachesAtAirport", {"airport_ident": "ESSA"}),
        ("get_waypoints_at_airport", ("ESSA",), "GetWaypointsAtAirport", {"airport_ident": "ESSA"}),
        ("get_ndb_navaids_at_airport", ("ESSA",), "GetNdbNavaidsAtAirport", {"airport_ident": "ESSA"}),
        ("get_gates_at_airport", ("ESSA",), "GetGatesAtAirport", {"airport_ident": "ESSA"}),
        ("get_communications_at_airport", ("ESSA",), "GetCommunicationsAtAirport", {"airport_ident": "ESSA"}),
        ("get_gls_navaids_at_airport", ("ESSA",), "GetGlsNavaidsAtAirport", {"airport_ident": "ESSA"}),
        ("get_path_points_at_airport", ("ESSA",), "GetPathPointsAtAirport", {"airport_ident": "ESSA"}),
        ("get_database_info", (), "GetDatabaseInfo", None),
        ("get_navigation_data_install_status", (), "GetNavigationDataInstallStatus", None),
        ("execute_sql", ("SELECT 1", ["a"]), "ExecuteSQLQuery", {"sql": "SELECT 1", "params": ["a"]}),
        ("set_download_options", (25,), "SetDownloadOptions", {"batch_size": 25}),
        (
            "download_navigation_data",
            ("https://example.invalid/pkg.zip", True),
            "DownloadNavigationData",
            {"url": "https://example.invalid/pkg.zip", "set_active": True},
        ),
        ("list_available_packages", (True, False), "ListAvailablePackages", {"sort": True, "filter": False}),
        ("set_active_package", ("u-1",), "SetActivePackage", {"uuid": "u-1"}),
        ("delete_package", ("u-1",), "DeletePackage", {"uuid": "u-1"}),
        ("clean_packages", (), "CleanPackages", {"count": None}),
    ],
)
async def test_facade_sends_function_and_data(method: str, args: tuple, function: str, data: Any) -> None:
    interface, transport = make_interface()

    await getattr(interface, method)(*args)

    assert len(transport.calls) == 1
    assert transport.calls[0]["function"] == function
    assert transport.calls[0]["data"] == data


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, function",
    [
        ("get_airports_in_range", "GetAirportsInRange"),
        ("get_waypoints_in_range", "GetWaypointsInRange"),
        ("get_vhf_navaids_in_range", "GetVhfNavaidsInRange"),
        ("get_ndb_navaids_in_range", "GetNdbNavaidsInRange"),
        ("get_airways_in_range", "GetAirwaysInRange"),
        ("get_controlled_airspaces_in_range", "GetControlledAirspacesInRange"),
        ("get_restrictive_airspaces_in_range", "GetRestrictiveAirspacesInRange"),
        ("get_communications_in_range", "GetCommunicationsInRange"),
    ],
)
async def test_range_queries_shape_center(method: str, function: str) -> None:
    interface, transport = make_interface(answer=[])

    assert await getattr(interface, method)(Coordinates(59.65, 17.92), 10) == []
    await getattr(interface, method)((51.47, -0.45), 5.5)

    assert [c["function"] for c in transport.calls] == [function, function]
    assert transport.calls[0]["data"] == {"center": {"lat": 59.65, "long": 17.92}, "range": 10}
    assert transport.calls[1]["data"] == {"center": {"lat": 51.47, "long": -0.45}, "range": 5.5}


@pytest.mark.asyncio
async def test_bad_center_fails_before_sending() -> None:
    interface, transport = make_interface()

    with pytest.raises(ValueError):
        await interface.get_airports_in_range("ESSA", 10)  # type: ignore[arg-type]
    assert transport.calls == []


@pytest.mark.asyncio
async def test_facade_returns_peer_data() -> None:
    airport = {"ident": "ESSA", "name": "Stockholm Arlanda"}
    interface, _ = make_interface(answer=airport)

    assert await interface.get_airport("ESSA") == airport


def test_typed_event_subscriptions() -> None:
    interface, transport = make_interface()
    heartbeats: list[str] = []
    progress: list[DownloadProgress] = []

    interface.on_heartbeat(lambda: heartbeats.append("beat"))
    interface.on_download_progress(progress.append)

    transport.event("Heartbeat")
    transport.event(
        "DownloadProgress",
        {"phase": "Extracting", "deleted": None, "total_to_unzip": 120, "unzipped": 40},
    )
    transport.event("DownloadProgress", {"phase": "Exploding"})

    assert heartbeats == ["beat"]
    assert progress == [
        DownloadProgress(
            phase=DownloadProgressPhase.EXTRACTING,
            deleted=None,
            total_to_unzip=120,
            unzipped=40,
        )
    ]


def test_readiness_passthrough() -> None:
    interface, transport = make_interface()
    calls: list[str] = []
    interface.on_ready(lambda: calls.append("ready"))

    assert not interface.is_ready()
    transport.event("Heartbeat")
    assert interface.is_ready()
    assert calls == ["ready"]


@pytest.mark.asyncio
async def test_download_uses_snake_case_flag_and_defaults_to_inactive() -> None:
    interface, transport = make_interface()

    await interface.download_navigation_data("https://example.invalid/pkg.zip")
    await interface.set_download_options(5)

    assert transport.calls[0]["data"] == {"url": "https://example.invalid/pkg.zip", "set_active": False}
    assert "setActive" not in transport.calls[0]["data"]
    assert transport.calls[1]["data"] == {"batch_size": 5}
