"""Pytest configuration and shared fixtures."""

import pytest
from datetime import datetime, timezone
from typing import Any, Dict, List

from spacex_agent.agent import SpaceXDataAgent
from spacex_agent.config.defaults import get_default_config
from spacex_agent.errors import UpstreamError
from spacex_agent.ledger.tracker import TransactionTracker
from spacex_agent.payments.static import StaticPaymentVerifier
from spacex_agent.spacex.handlers import ROCKET_IDS
from spacex_agent.upstream.fetcher import UpstreamFetcher

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeFetcher(UpstreamFetcher):
    """Serves canned upstream documents keyed by path."""

    def __init__(self, responses: Dict[str, Any]):
        super().__init__(get_default_config().upstream)
        self.responses = responses
        self.requested: List[str] = []

    def fetch_json(self, path: str) -> Any:
        self.requested.append(path)
        response = self.responses[path]
        if isinstance(response, Exception):
            raise response
        return response


class FixedClock:
    """Clock that returns a settable instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _launch(index: int, rocket: str, **extra) -> Dict[str, Any]:
    launch = {
        "id": f"launch-{index}",
        "name": f"Mission {index}",
        "flight_number": 100 + index,
        "date_utc": f"2024-0{(index % 9) + 1}-15T12:00:00.000Z",
        "date_precision": "hour",
        "rocket": rocket,
        "launchpad": "pad-1",
        "upcoming": True,
        "success": None,
        "links": {"webcast": f"https://youtu.be/{index}"},
    }
    launch.update(extra)
    return launch


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def upcoming_launches() -> List[Dict[str, Any]]:
    """Three starship and two falcon9 upcoming launches, interleaved."""
    return [
        _launch(1, ROCKET_IDS["falcon9"]),
        _launch(2, ROCKET_IDS["starship"]),
        _launch(3, ROCKET_IDS["starship"]),
        _launch(4, ROCKET_IDS["falcon9"]),
        _launch(5, ROCKET_IDS["starship"]),
    ]


@pytest.fixture
def past_launches() -> List[Dict[str, Any]]:
    return [
        {
            "id": "5eb87cd9ffd86e000604b32a",
            "name": "FalconSat",
            "flight_number": 1,
            "date_utc": "2006-03-24T22:30:00.000Z",
            "success": False,
            "upcoming": False,
            "details": "Engine failure at 33 seconds",
            "rocket": "5e9d0d95eda69955f709d1eb",
            "launchpad": "5e9e4502f5090995de566f86",
            "links": {"webcast": None, "article": None, "wikipedia": None,
                      "patch": {"small": "https://images2.imgbox.com/falconsat.png"}},
            "cores": [{"core": "core-1", "flight": 1, "reused": False,
                       "landing_success": None, "landing_type": None}],
        },
        {
            "id": "5eb87d46ffd86e000604b388",
            "name": "Crew-5",
            "flight_number": 187,
            "date_utc": "2022-10-05T16:00:00.000Z",
            "success": True,
            "upcoming": False,
            "details": None,
            "rocket": ROCKET_IDS["falcon9"],
            "launchpad": "pad-39a",
            "links": {"webcast": "https://youtu.be/crew5", "article": None,
                      "wikipedia": "https://en.wikipedia.org/wiki/SpaceX_Crew-5",
                      "patch": {"small": None}},
            "cores": [{"core": "core-2", "flight": 3, "reused": True,
                       "landing_success": True, "landing_type": "ASDS"}],
        },
        {
            "id": "5eb87d47ffd86e000604b38a",
            "name": "Starlink 4-36",
            "flight_number": 188,
            "date_utc": "2022-10-20T14:50:00.000Z",
            "success": True,
            "upcoming": False,
            "rocket": ROCKET_IDS["falcon9"],
            "launchpad": "pad-40",
            "links": {},
            "cores": [],
        },
        {
            "id": "future-launch",
            "name": "USCV-6",
            "flight_number": 200,
            "date_utc": "2025-01-01T00:00:00.000Z",
            "success": None,
            "upcoming": True,
        },
    ]


@pytest.fixture
def rockets() -> List[Dict[str, Any]]:
    return [
        {
            "id": ROCKET_IDS["falcon9"],
            "name": "Falcon 9",
            "type": "rocket",
            "active": True,
            "stages": 2,
            "boosters": 0,
            "cost_per_launch": 50000000,
            "success_rate_pct": 98,
            "first_flight": "2010-06-04",
            "height": {"meters": 70},
            "diameter": {"meters": 3.7},
            "mass": {"kg": 549054},
            "payload_weights": [{"id": "leo", "kg": 22800}],
            "engines": {"number": 9, "type": "merlin", "version": "1D+",
                        "propellant_1": "liquid oxygen", "propellant_2": "RP-1 kerosene"},
            "description": "Falcon 9 is a two-stage rocket.",
            "wikipedia": "https://en.wikipedia.org/wiki/Falcon_9",
        },
        {
            "id": ROCKET_IDS["falcon-heavy"],
            "name": "Falcon Heavy",
            "type": "rocket",
            "active": True,
            "success_rate_pct": 100,
            "cost_per_launch": 90000000,
            "engines": {"number": 27},
        },
        {
            "id": ROCKET_IDS["starship"],
            "name": "Starship",
            "type": "rocket",
            "active": False,
            "success_rate_pct": 0,
            "cost_per_launch": 7000000,
        },
    ]


@pytest.fixture
def launchpads() -> List[Dict[str, Any]]:
    return [
        {"name": "KSC LC 39A", "full_name": "Kennedy Space Center Historic Launch Complex 39A",
         "status": "active", "launch_attempts": 55, "launch_successes": 55, "region": "Florida"},
        {"name": "VAFB SLC 3W", "full_name": "Vandenberg Space Force Base Space Launch Complex 3W",
         "status": "retired", "launch_attempts": 0, "launch_successes": 0, "region": "California"},
    ]


@pytest.fixture
def starlinks() -> List[Dict[str, Any]]:
    return [
        {"id": "sat-1", "version": "v1.0", "height_km": 550.1, "latitude": 10.0,
         "longitude": 20.0, "velocity_kms": 7.6,
         "spaceTrack": {"OBJECT_NAME": "STARLINK-1", "LAUNCH_DATE": "2019-05-24",
                        "DECAYED": 0, "PERIOD": 95.6, "APOAPSIS": 551.0, "PERIAPSIS": 549.0}},
        {"id": "sat-2", "version": "v1.0", "spaceTrack": {"OBJECT_NAME": "STARLINK-2", "DECAYED": 1}},
        {"id": "sat-3", "version": "v1.5", "spaceTrack": {"OBJECT_NAME": "STARLINK-3", "DECAYED": 0}},
        {"id": "sat-4", "version": "v1.5", "spaceTrack": None},
    ]


@pytest.fixture
def upstream_responses(upcoming_launches, past_launches, rockets, launchpads, starlinks) -> Dict[str, Any]:
    return {
        "launches/latest": past_launches[2],
        "launches": past_launches,
        "launches/upcoming": upcoming_launches,
        "rockets": rockets,
        "launchpads": launchpads,
        "starlink": starlinks,
    }


@pytest.fixture
def fake_fetcher(upstream_responses) -> FakeFetcher:
    return FakeFetcher(upstream_responses)


@pytest.fixture
def failing_fetcher(upstream_responses) -> FakeFetcher:
    """Fetcher whose upstream answers HTTP 500 for upcoming launches."""
    responses = dict(upstream_responses)
    responses["launches/upcoming"] = UpstreamError(
        "API error: 500", status=500, url="https://api.spacexdata.com/v4/launches/upcoming"
    )
    return FakeFetcher(responses)


@pytest.fixture
def tracker(clock) -> TransactionTracker:
    return TransactionTracker(clock=clock)


@pytest.fixture
def approving_verifier() -> StaticPaymentVerifier:
    return StaticPaymentVerifier(approve=True)


@pytest.fixture
def rejecting_verifier() -> StaticPaymentVerifier:
    return StaticPaymentVerifier(approve=False)


@pytest.fixture
def make_fetcher():
    """Factory for fetchers serving custom upstream documents."""
    return FakeFetcher


@pytest.fixture
def agent(fake_fetcher, approving_verifier, clock):
    """Agent on default config with canned upstream data and approving payments."""
    return SpaceXDataAgent(
        get_default_config(),
        fetcher=fake_fetcher,
        verifier=approving_verifier,
        clock=clock,
    )
