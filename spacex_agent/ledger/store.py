"""SQLite persistence for the transaction ledger."""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

import structlog

from ..errors import LedgerStorageError
from ..utils.time import format_iso, parse_iso
from .models import TransactionRecord

logger = structlog.get_logger(__name__)


class TransactionStore:
    """
    SQLite-backed write-through store for ledger records.

    Amounts are stored as TEXT so they round-trip exactly. Any database
    failure is raised as LedgerStorageError: a ledger that cannot persist
    cannot be trusted.
    """

    def __init__(self, db_path: str = "ledger.db"):
        self.db_path = Path(db_path)
        self.logger = logger.bind(db_path=str(self.db_path))

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    sequence INTEGER PRIMARY KEY,
                    direction TEXT NOT NULL CHECK (direction IN ('incoming', 'outgoing')),
                    amount TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    entrypoint_key TEXT NOT NULL,
                    metadata TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_timestamp ON transactions(timestamp)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str):
        """Get database connection; sqlite errors become LedgerStorageError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Ledger database error", operation=operation, error=str(e))
            raise LedgerStorageError(
                f"Ledger storage failed during {operation}: {e}",
                operation=operation,
                target=str(self.db_path)
            ) from e
        finally:
            if conn:
                conn.close()

    def append(self, record: TransactionRecord) -> None:
        """
        Persist one record.

        Args:
            record: Record to persist; its sequence must be new

        Raises:
            LedgerStorageError: If the record could not be written
        """
        with self._get_connection("append") as conn:
            conn.execute("""
                INSERT INTO transactions (
                    sequence, direction, amount, timestamp,
                    entrypoint_key, metadata, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                record.sequence,
                record.direction.value,
                str(record.amount),
                format_iso(record.timestamp, timespec="microseconds"),
                record.entrypoint_key,
                json.dumps(dict(record.metadata), sort_keys=True, default=str),
                datetime.now(timezone.utc).isoformat()
            ))
            conn.commit()

    def load_all(self) -> list[TransactionRecord]:
        """Load every stored record in sequence order."""
        with self._get_connection("load") as conn:
            rows = conn.execute("""
                SELECT * FROM transactions ORDER BY sequence
            """).fetchall()

        records = []
        for expected, row in enumerate(rows):
            if row["sequence"] != expected:
                raise LedgerStorageError(
                    f"Ledger has a gap at sequence {expected}",
                    operation="load",
                    target=str(self.db_path)
                )
            records.append(TransactionRecord(
                sequence=row["sequence"],
                direction=row["direction"],
                amount=row["amount"],
                timestamp=parse_iso(row["timestamp"]),
                entrypoint_key=row["entrypoint_key"],
                metadata=json.loads(row["metadata"]),
            ))
        return records

    def count(self) -> int:
        """Number of stored records."""
        with self._get_connection("count") as conn:
            return conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]
