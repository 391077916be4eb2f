"""
SpaceX data entrypoint handlers.

Each handler fetches what it needs from the upstream API and reshapes the
raw documents into a compact, camelCase output. The ``shape_*`` helpers
are pure functions over already-fetched data.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..upstream.fetcher import UpstreamFetcher
from ..utils.time import format_iso, parse_iso, utc_now

DATA_SOURCE = "SpaceX API (live)"

# Upstream rocket document ids
ROCKET_IDS = {
    "falcon9": "5e9d0d95eda69973a809d1ec",
    "falcon-heavy": "5e9d0d95eda69974db09d1ed",
    "starship": "5e9d0d96eda699382d09d1ee",
}

_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)


def _nested(doc: Optional[dict[str, Any]], *keys: str) -> Any:
    """Follow keys through nested dicts, returning None on any gap."""
    value: Any = doc
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def is_decayed(satellite: dict[str, Any]) -> bool:
    """A Starlink satellite counts as decayed when spaceTrack.DECAYED is truthy."""
    return bool(_nested(satellite, "spaceTrack", "DECAYED"))


def _launch_date(launch: dict[str, Any]) -> datetime:
    value = launch.get("date_utc")
    if not isinstance(value, str):
        return _EPOCH
    try:
        return parse_iso(value)
    except ValueError:
        return _EPOCH


def shape_overview(
    latest_launch: dict[str, Any],
    rockets: list[dict[str, Any]],
    launchpads: list[dict[str, Any]],
    now: datetime
) -> dict[str, Any]:
    """Latest launch plus fleet and launchpad counts."""
    return {
        "latestLaunch": {
            "name": latest_launch.get("name"),
            "date": latest_launch.get("date_utc"),
            "success": latest_launch.get("success"),
            "flightNumber": latest_launch.get("flight_number"),
        },
        "stats": {
            "totalRockets": len(rockets),
            "activeRockets": sum(1 for r in rockets if r.get("active")),
            "totalLaunchpads": len(launchpads),
            "activeLaunchpads": sum(1 for p in launchpads if p.get("status") == "active"),
        },
        "fetchedAt": format_iso(now),
        "dataSource": DATA_SOURCE,
    }


def find_launch(launches: list[dict[str, Any]], query: str) -> Optional[dict[str, Any]]:
    """First launch whose id equals the query or whose name contains it, ignoring case."""
    needle = query.lower()
    for launch in launches:
        if launch.get("id") == query or needle in str(launch.get("name") or "").lower():
            return launch
    return None


def shape_launch_detail(launch: dict[str, Any]) -> dict[str, Any]:
    cores = launch.get("cores")
    return {
        "id": launch.get("id"),
        "name": launch.get("name"),
        "flightNumber": launch.get("flight_number"),
        "dateUtc": launch.get("date_utc"),
        "success": launch.get("success"),
        "upcoming": launch.get("upcoming"),
        "details": launch.get("details"),
        "rocket": launch.get("rocket"),
        "launchpad": launch.get("launchpad"),
        "links": {
            "webcast": _nested(launch, "links", "webcast"),
            "article": _nested(launch, "links", "article"),
            "wikipedia": _nested(launch, "links", "wikipedia"),
            "patch": _nested(launch, "links", "patch", "small"),
        },
        "cores": [
            {
                "coreId": core.get("core"),
                "flight": core.get("flight"),
                "reused": core.get("reused"),
                "landingSuccess": core.get("landing_success"),
                "landingType": core.get("landing_type"),
            }
            for core in cores
        ] if isinstance(cores, list) else None,
    }


def shape_upcoming(
    upcoming: list[dict[str, Any]],
    rocket_type: str,
    limit: int,
    now: datetime
) -> dict[str, Any]:
    """Filter upcoming launches by rocket and keep the first ``limit``."""
    filtered = upcoming
    if rocket_type != "all":
        rocket_id = ROCKET_IDS[rocket_type]
        filtered = [launch for launch in upcoming if launch.get("rocket") == rocket_id]

    limited = filtered[:limit]

    return {
        "total": len(upcoming),
        "filtered": len(filtered),
        "returned": len(limited),
        "launches": [
            {
                "id": launch.get("id"),
                "name": launch.get("name"),
                "dateUtc": launch.get("date_utc"),
                "datePrecision": launch.get("date_precision"),
                "flightNumber": launch.get("flight_number"),
                "rocket": launch.get("rocket"),
                "launchpad": launch.get("launchpad"),
                "webcast": _nested(launch, "links", "webcast"),
            }
            for launch in limited
        ],
        "fetchedAt": format_iso(now),
    }


def shape_rocket(rocket: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": rocket.get("id"),
        "name": rocket.get("name"),
        "type": rocket.get("type"),
        "active": rocket.get("active"),
        "stages": rocket.get("stages"),
        "boosters": rocket.get("boosters"),
        "costPerLaunch": rocket.get("cost_per_launch"),
        "successRatePct": rocket.get("success_rate_pct"),
        "firstFlight": rocket.get("first_flight"),
        "height": rocket.get("height"),
        "diameter": rocket.get("diameter"),
        "mass": rocket.get("mass"),
        "payloadWeights": rocket.get("payload_weights"),
        "engines": {
            "number": _nested(rocket, "engines", "number"),
            "type": _nested(rocket, "engines", "type"),
            "version": _nested(rocket, "engines", "version"),
            "propellant1": _nested(rocket, "engines", "propellant_1"),
            "propellant2": _nested(rocket, "engines", "propellant_2"),
        },
        "description": rocket.get("description"),
        "wikipedia": rocket.get("wikipedia"),
    }


def shape_rockets(rockets: list[dict[str, Any]], name: Optional[str], now: datetime) -> dict[str, Any]:
    """Rockets whose name contains ``name`` (any case), or all of them."""
    result = rockets
    if name:
        needle = name.lower()
        result = [r for r in rockets if needle in str(r.get("name") or "").lower()]

    return {
        "count": len(result),
        "rockets": [shape_rocket(r) for r in result],
        "fetchedAt": format_iso(now),
    }


def shape_starlink(
    starlinks: list[dict[str, Any]],
    version: Optional[str],
    limit: int,
    now: datetime
) -> dict[str, Any]:
    """Active satellites of an optional version, first ``limit`` of them."""
    filtered = starlinks
    if version:
        filtered = [s for s in starlinks if s.get("version") == version]

    active = [s for s in filtered if not is_decayed(s)]
    limited = active[:limit]

    return {
        "totalConstellation": len(starlinks),
        "totalActive": sum(1 for s in starlinks if not is_decayed(s)),
        "filtered": len(filtered),
        "returned": len(limited),
        "satellites": [
            {
                "id": s.get("id"),
                "version": s.get("version"),
                "heightKm": s.get("height_km"),
                "latitude": s.get("latitude"),
                "longitude": s.get("longitude"),
                "velocityKms": s.get("velocity_kms"),
                "spaceTrack": {
                    "objectName": _nested(s, "spaceTrack", "OBJECT_NAME"),
                    "launchDate": _nested(s, "spaceTrack", "LAUNCH_DATE"),
                    "decayed": _nested(s, "spaceTrack", "DECAYED"),
                    "period": _nested(s, "spaceTrack", "PERIOD"),
                    "apoapsis": _nested(s, "spaceTrack", "APOAPSIS"),
                    "periapsis": _nested(s, "spaceTrack", "PERIAPSIS"),
                },
            }
            for s in limited
        ],
        "fetchedAt": format_iso(now),
    }


def shape_full_report(
    rockets: list[dict[str, Any]],
    launchpads: list[dict[str, Any]],
    launches: list[dict[str, Any]],
    upcoming: list[dict[str, Any]],
    starlinks: list[dict[str, Any]],
    recent_count: int,
    upcoming_count: int,
    now: datetime
) -> dict[str, Any]:
    """Combined report over every upstream collection."""
    past_launches = sorted(
        (launch for launch in launches if not launch.get("upcoming")),
        key=_launch_date,
        reverse=True,
    )[:recent_count]

    return {
        "summary": {
            "totalLaunches": len(launches),
            "successfulLaunches": sum(1 for l in launches if l.get("success") is True),
            "failedLaunches": sum(1 for l in launches if l.get("success") is False),
            "upcomingLaunches": len(upcoming),
            "totalStarlinks": len(starlinks),
            "activeStarlinks": sum(1 for s in starlinks if not is_decayed(s)),
        },
        "rockets": [
            {
                "name": r.get("name"),
                "active": r.get("active"),
                "successRatePct": r.get("success_rate_pct"),
                "costPerLaunch": r.get("cost_per_launch"),
            }
            for r in rockets
        ],
        "launchpads": [
            {
                "name": p.get("name"),
                "fullName": p.get("full_name"),
                "status": p.get("status"),
                "launchAttempts": p.get("launch_attempts"),
                "launchSuccesses": p.get("launch_successes"),
                "region": p.get("region"),
            }
            for p in launchpads
        ],
        "recentLaunches": [
            {
                "name": l.get("name"),
                "date": l.get("date_utc"),
                "success": l.get("success"),
                "flightNumber": l.get("flight_number"),
            }
            for l in past_launches
        ],
        "upcomingLaunches": [
            {
                "name": l.get("name"),
                "date": l.get("date_utc"),
                "datePrecision": l.get("date_precision"),
                "flightNumber": l.get("flight_number"),
            }
            for l in upcoming[:upcoming_count]
        ],
        "generatedAt": format_iso(now),
        "dataSource": DATA_SOURCE,
    }


class SpaceXHandlers:
    """Entrypoint handlers bound to an upstream fetcher."""

    def __init__(self, fetcher: UpstreamFetcher, clock: Callable[[], datetime] = utc_now):
        self.fetcher = fetcher
        self.clock = clock

    def overview(self, params: dict[str, Any]) -> dict[str, Any]:
        latest, rockets, launchpads = self.fetcher.fetch_all(
            ["launches/latest", "rockets", "launchpads"]
        )
        return shape_overview(latest, rockets, launchpads, self.clock())

    def launch_lookup(self, params: dict[str, Any]) -> dict[str, Any]:
        launches = self.fetcher.fetch_json("launches")
        query = params["query"]

        launch = find_launch(launches, query)
        if launch is None:
            return {"found": False, "message": f'No launch found matching "{query}"'}

        return {"found": True, "launch": shape_launch_detail(launch)}

    def upcoming_launches(self, params: dict[str, Any]) -> dict[str, Any]:
        upcoming = self.fetcher.fetch_json("launches/upcoming")
        return shape_upcoming(upcoming, params["rocketType"], params["limit"], self.clock())

    def rockets(self, params: dict[str, Any]) -> dict[str, Any]:
        rockets = self.fetcher.fetch_json("rockets")
        return shape_rockets(rockets, params.get("name"), self.clock())

    def starlink(self, params: dict[str, Any]) -> dict[str, Any]:
        starlinks = self.fetcher.fetch_json("starlink")
        return shape_starlink(starlinks, params.get("version"), params["limit"], self.clock())

    def full_report(self, params: dict[str, Any]) -> dict[str, Any]:
        rockets, launchpads, launches, upcoming, starlinks = self.fetcher.fetch_all(
            ["rockets", "launchpads", "launches", "launches/upcoming", "starlink"]
        )
        return shape_full_report(
            rockets, launchpads, launches, upcoming, starlinks,
            recent_count=params["recentLaunchCount"],
            upcoming_count=params["upcomingLaunchCount"],
            now=self.clock(),
        )
