"""
Windowed analytics over the transaction ledger.

Every figure is recomputed from the ledger's records on each call; no
running totals are kept. Sums use ``Decimal`` throughout.
"""

import csv
import io
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from ..ledger.models import Direction, TransactionRecord
from ..ledger.tracker import TransactionTracker
from ..utils.time import format_iso, parse_iso

DEFAULT_TRANSACTION_LIMIT = 50

CSV_COLUMNS = ("direction", "amount", "timestamp", "entrypointKey", "metadata")


@dataclass(frozen=True)
class AnalyticsSummary:
    """Totals per direction over a window."""
    incoming_total: Decimal
    outgoing_total: Decimal
    transaction_count: int
    window_ms: Optional[int] = None

    @property
    def net_total(self) -> Decimal:
        """Revenue minus expenses."""
        return self.incoming_total - self.outgoing_total

    def to_dict(self) -> dict[str, Any]:
        """Serialise with totals as decimal strings."""
        return {
            "incomingTotal": str(self.incoming_total),
            "outgoingTotal": str(self.outgoing_total),
            "netTotal": str(self.net_total),
            "transactionCount": self.transaction_count,
            "windowMs": self.window_ms,
        }


def summarize(tracker: TransactionTracker, window_ms: Optional[int] = None) -> AnalyticsSummary:
    """
    Sum amounts per direction over the windowed records.

    Args:
        tracker: Ledger to read
        window_ms: Trailing window in milliseconds, None for the whole log

    Returns:
        AnalyticsSummary with exact decimal totals
    """
    incoming = Decimal(0)
    outgoing = Decimal(0)
    count = 0

    for record in tracker.all_since(window_ms):
        if record.direction == Direction.INCOMING:
            incoming += record.amount
        else:
            outgoing += record.amount
        count += 1

    return AnalyticsSummary(
        incoming_total=incoming,
        outgoing_total=outgoing,
        transaction_count=count,
        window_ms=window_ms,
    )


def list_transactions(
    tracker: TransactionTracker,
    window_ms: Optional[int] = None,
    limit: Optional[int] = None
) -> list[TransactionRecord]:
    """
    Windowed records in insertion order, truncated to ``limit``.

    Args:
        tracker: Ledger to read
        window_ms: Trailing window in milliseconds, None for the whole log
        limit: Maximum number of records, defaults to 50

    Returns:
        List of records, oldest first
    """
    if limit is None:
        limit = DEFAULT_TRANSACTION_LIMIT
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    records = []
    if limit == 0:
        return records

    for record in tracker.all_since(window_ms):
        records.append(record)
        if len(records) >= limit:
            break
    return records


def _record_to_row(record: TransactionRecord) -> dict[str, str]:
    return {
        "direction": record.direction.value,
        "amount": str(record.amount),
        "timestamp": format_iso(record.timestamp, timespec="microseconds"),
        "entrypointKey": record.entrypoint_key,
        "metadata": json.dumps(dict(record.metadata), sort_keys=True, separators=(",", ":"), default=str),
    }


def records_to_csv(records) -> str:
    """Render records as RFC 4180 CSV with a header row."""
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=CSV_COLUMNS,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\r\n",
    )
    writer.writeheader()
    for record in records:
        writer.writerow(_record_to_row(record))
    return buffer.getvalue()


def export_csv(tracker: TransactionTracker, window_ms: Optional[int] = None) -> str:
    """
    Export the windowed records as CSV.

    Columns are ``direction,amount,timestamp,entrypointKey,metadata``;
    values containing commas, quotes or line breaks are quoted and inner
    quotes doubled.

    The ``timestamp`` column holds ISO 8601 UTC and replaces the older
    ``timestampISO8601`` header. The ``metadata`` column carries each
    record's metadata as JSON so ``parse_csv`` can rebuild the records;
    consumers reading the older four-column layout must map both changes.

    Args:
        tracker: Ledger to read
        window_ms: Trailing window in milliseconds, None for the whole log

    Returns:
        CSV text
    """
    return records_to_csv(tracker.all_since(window_ms))


def parse_csv(text: str) -> list[TransactionRecord]:
    """
    Read CSV produced by ``export_csv`` back into records.

    Sequences are assigned by row position.

    Raises:
        ValueError: If the header or a row is malformed
    """
    reader = csv.DictReader(io.StringIO(text, newline=""))
    if tuple(reader.fieldnames or ()) != CSV_COLUMNS:
        raise ValueError(f"Unexpected CSV header: {reader.fieldnames}")

    records = []
    for index, row in enumerate(reader):
        try:
            records.append(TransactionRecord(
                sequence=index,
                direction=row["direction"],
                amount=row["amount"],
                timestamp=parse_iso(row["timestamp"]),
                entrypoint_key=row["entrypointKey"],
                metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            ))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Malformed CSV row {index + 1}: {e}") from e
    return records
