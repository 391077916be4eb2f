"""
Immutable ledger records.

Amounts are ``Decimal`` end to end. Binary floats are refused at the
boundary so that summing many small per-call charges never drifts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

from ..utils.time import ensure_utc, format_iso


class Direction(str, Enum):
    """Direction of a payment relative to the agent."""
    INCOMING = "incoming"  # revenue received by the agent
    OUTGOING = "outgoing"  # expense paid by the agent


def to_amount(value: Union[Decimal, str, int]) -> Decimal:
    """
    Coerce a monetary amount to a finite, non-negative Decimal.

    Raises:
        TypeError: If given a float or other non-decimal type
        ValueError: If the value is not a finite non-negative decimal
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError("Amounts must be Decimal, str or int, never float")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (str, int)):
        try:
            amount = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    else:
        raise TypeError(f"Unsupported amount type: {type(value).__name__}")

    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Amount must be a finite non-negative decimal: {value!r}")
    return amount


@dataclass(frozen=True)
class TransactionRecord:
    """One payment event in the ledger."""
    sequence: int                    # insertion position in the log
    direction: Direction
    amount: Decimal
    timestamp: datetime              # UTC
    entrypoint_key: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "direction", Direction(self.direction))
        object.__setattr__(self, "amount", to_amount(self.amount))
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view with the amount as a decimal string."""
        return {
            "sequence": self.sequence,
            "direction": self.direction.value,
            "amount": str(self.amount),
            "timestamp": format_iso(self.timestamp, timespec="microseconds"),
            "entrypointKey": self.entrypoint_key,
            "metadata": dict(self.metadata),
        }
