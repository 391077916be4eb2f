"""
Upstream data access module.

JSON retrieval from the public SpaceX REST API.
"""
from .fetcher import UpstreamFetcher

__all__ = ["UpstreamFetcher"]
