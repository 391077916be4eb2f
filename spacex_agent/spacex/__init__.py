"""
SpaceX data entrypoints module.

Handlers that proxy and reshape the public SpaceX REST API.
"""
from .entrypoints import PRICES, build_spacex_entrypoints
from .handlers import ROCKET_IDS, SpaceXHandlers

__all__ = ["PRICES", "ROCKET_IDS", "SpaceXHandlers", "build_spacex_entrypoints"]
