"""
SpaceX Data Agent - Paid SpaceX data entrypoints

Proxies the public SpaceX API behind a registry of free and paid
entrypoints. Validates input, enforces a price per call, records every
payment in an append-only ledger and serves analytics over that ledger.
"""

__version__ = "1.0.0"
__author__ = "SpaceX Data Agent Team"
