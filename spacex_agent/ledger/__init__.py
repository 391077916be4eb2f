"""
Transaction ledger module.

Append-only record of payment events, with optional SQLite persistence.
"""
from .models import Direction, TransactionRecord, to_amount
from .store import TransactionStore
from .tracker import TransactionTracker, TransactionWindow

__all__ = [
    "Direction",
    "TransactionRecord",
    "TransactionStore",
    "TransactionTracker",
    "TransactionWindow",
    "to_amount",
]
