"""Append-only transaction log."""

import threading
from collections.abc import Iterator
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Union

import structlog

from ..logging.config import get_payment_logger
from ..utils.time import ensure_utc, in_window, utc_now, window_start
from .models import Direction, TransactionRecord
from .store import TransactionStore

logger = structlog.get_logger(__name__)
audit_logger = get_payment_logger(__name__)


class TransactionWindow:
    """
    Lazy, restartable view over the records inside a time window.

    The window bounds are fixed when the view is created. Each iteration
    walks the log again in insertion order, so iterating twice yields the
    same records plus nothing appended later than the upper bound.
    """

    def __init__(
        self,
        tracker: "TransactionTracker",
        start: Optional[datetime],
        end: Optional[datetime]
    ):
        self._tracker = tracker
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[TransactionRecord]:
        for record in self._tracker._snapshot():
            if self.end is None or in_window(record.timestamp, self.start, self.end):
                yield record

    def __repr__(self) -> str:
        return f"TransactionWindow(start={self.start!r}, end={self.end!r})"


class TransactionTracker:
    """
    Ordered, append-only log of payment records.

    Appends are serialised with a lock; records are never mutated or
    removed. An optional store receives every append before it becomes
    visible in memory, and the existing log is replayed from it on start.
    """

    def __init__(
        self,
        store: Optional[TransactionStore] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.logger = logger
        self.store = store
        self.clock = clock
        self._records: list[TransactionRecord] = []
        self._lock = threading.Lock()

        if store is not None:
            self._records.extend(store.load_all())
            self.logger.info("Replayed ledger from store", record_count=len(self._records))

    def record(
        self,
        direction: Union[Direction, str],
        amount: Union[Decimal, str, int],
        entrypoint_key: str,
        metadata: Optional[dict[str, Any]] = None,
        timestamp: Optional[datetime] = None
    ) -> TransactionRecord:
        """
        Append a transaction to the log.

        Args:
            direction: incoming (revenue) or outgoing (expense)
            amount: Non-negative decimal amount
            entrypoint_key: Entrypoint the payment belongs to
            metadata: Arbitrary JSON-serialisable details
            timestamp: Event time, defaults to the tracker clock

        Returns:
            The stored, immutable record

        Raises:
            LedgerStorageError: If the store cannot persist the record
        """
        with self._lock:
            record = TransactionRecord(
                sequence=len(self._records),
                direction=direction,
                amount=amount,
                timestamp=ensure_utc(timestamp) if timestamp is not None else self.clock(),
                entrypoint_key=entrypoint_key,
                metadata=metadata or {},
            )

            if self.store is not None:
                self.store.append(record)

            self._records.append(record)

        audit_logger.info(
            "Transaction recorded",
            sequence=record.sequence,
            direction=record.direction.value,
            amount=str(record.amount),
            entrypoint_key=entrypoint_key
        )
        return record

    def all_since(
        self,
        window_ms: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> TransactionWindow:
        """
        Records with ``now - window_ms <= timestamp <= now``.

        Args:
            window_ms: Trailing window in milliseconds, None for the whole log
            now: Upper bound, defaults to the tracker clock

        Returns:
            Restartable iterable of records in insertion order
        """
        if window_ms is None:
            return TransactionWindow(self, start=None, end=None)

        end = ensure_utc(now) if now is not None else self.clock()
        return TransactionWindow(self, start=window_start(window_ms, end), end=end)

    def get(self, sequence: int) -> TransactionRecord:
        """Record at an insertion position."""
        if sequence < 0:
            raise IndexError(sequence)
        return self._records[sequence]

    def __len__(self) -> int:
        return len(self._records)

    def _snapshot(self) -> Iterator[TransactionRecord]:
        with self._lock:
            count = len(self._records)
        for index in range(count):
            yield self._records[index]
