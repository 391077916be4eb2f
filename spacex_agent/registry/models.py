"""Entrypoint definitions and call results."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional

from ..config.validation import is_valid_price
from ..validation.contract import InputContract

Handler = Callable[[dict[str, Any]], Any]


@dataclass(frozen=True)
class EntrypointDefinition:
    """A named operation: input contract, optional price and handler."""
    key: str
    description: str
    handler: Handler
    input_contract: InputContract = field(default_factory=InputContract)
    price: Optional[str] = None  # decimal string, None means free

    def __post_init__(self):
        if not self.key:
            raise ValueError("Entrypoint key must be a non-empty string")
        if self.price is not None and not is_valid_price(self.price):
            raise ValueError(f"Invalid price for {self.key}: {self.price!r}")

    @property
    def price_amount(self) -> Optional[Decimal]:
        """Price as a Decimal, None for free entrypoints."""
        return Decimal(self.price) if self.price is not None else None

    @property
    def is_paid(self) -> bool:
        return self.price is not None

    def describe(self) -> dict[str, Any]:
        """Manifest entry for this entrypoint."""
        return {
            "key": self.key,
            "description": self.description,
            "price": self.price,
            "input": self.input_contract.describe(),
        }


@dataclass(frozen=True)
class CallResult:
    """Structured outcome of a call: output on success, error otherwise."""
    key: str
    output: Any = None
    error: Optional[dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, key: str, output: Any) -> "CallResult":
        """Create successful result."""
        return cls(key=key, output=output)

    @classmethod
    def failure(cls, key: str, error: dict[str, Any]) -> "CallResult":
        """Create failed result."""
        return cls(key=key, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"output": self.output}
        return {"error": self.error}
