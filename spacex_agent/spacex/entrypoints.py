"""SpaceX data entrypoint definitions: contracts and prices."""

from ..registry.models import EntrypointDefinition
from ..validation.contract import FieldSpec, contract
from .handlers import ROCKET_IDS, SpaceXHandlers

ROCKET_TYPES = (*ROCKET_IDS, "all")

PRICES = {
    "launch-lookup": "0.001",
    "upcoming-launches": "0.002",
    "rockets": "0.002",
    "starlink": "0.003",
    "full-report": "0.005",
}


def build_spacex_entrypoints(handlers: SpaceXHandlers) -> list[EntrypointDefinition]:
    """One free overview plus five paid data entrypoints."""
    return [
        EntrypointDefinition(
            key="overview",
            description="Free SpaceX overview - latest launch, rocket count, company stats. Try before you buy.",
            handler=handlers.overview,
            input_contract=contract(),
        ),
        EntrypointDefinition(
            key="launch-lookup",
            description="Look up a specific SpaceX launch by name or ID",
            handler=handlers.launch_lookup,
            input_contract=contract(
                FieldSpec("query", "string", required=True,
                          description='Launch name (e.g. "Crew-5") or launch ID'),
            ),
            price=PRICES["launch-lookup"],
        ),
        EntrypointDefinition(
            key="upcoming-launches",
            description="Get upcoming SpaceX launches with optional filtering",
            handler=handlers.upcoming_launches,
            input_contract=contract(
                FieldSpec("limit", "integer", default=10, minimum=0,
                          description="Max launches to return"),
                FieldSpec("rocketType", "enum", default="all", choices=ROCKET_TYPES),
            ),
            price=PRICES["upcoming-launches"],
        ),
        EntrypointDefinition(
            key="rockets",
            description="Get detailed rocket specifications by name or all rockets",
            handler=handlers.rockets,
            input_contract=contract(
                FieldSpec("name", "string",
                          description='Rocket name (e.g. "Falcon 9", "Falcon Heavy", "Starship") or omit for all'),
            ),
            price=PRICES["rockets"],
        ),
        EntrypointDefinition(
            key="starlink",
            description="Get Starlink satellite constellation data with optional filtering",
            handler=handlers.starlink,
            input_contract=contract(
                FieldSpec("limit", "integer", default=50, minimum=0,
                          description="Max satellites to return"),
                FieldSpec("version", "string",
                          description='Filter by version (e.g. "v1.0", "v1.5")'),
            ),
            price=PRICES["starlink"],
        ),
        EntrypointDefinition(
            key="full-report",
            description=(
                "Comprehensive SpaceX report: all rockets, launchpads, recent launches, "
                "upcoming launches, and Starlink stats"
            ),
            handler=handlers.full_report,
            input_contract=contract(
                FieldSpec("recentLaunchCount", "integer", default=5, minimum=0),
                FieldSpec("upcomingLaunchCount", "integer", default=5, minimum=0),
            ),
            price=PRICES["full-report"],
        ),
    ]
