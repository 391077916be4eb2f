"""
Call-level error classifications for entrypoint dispatch.

These exceptions describe why a single call could not produce output.
They never corrupt shared state, so the caller receives them as a
structured result and decides whether to retry.
"""

from decimal import Decimal
from typing import Optional, Dict, Any, List


class EntrypointError(Exception):
    """Base class for errors returned to the caller of an entrypoint."""

    kind = "EntrypointError"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = True

    def details(self) -> Dict[str, Any]:
        """Structured details included in the error payload."""
        return dict(self.context)

    def to_dict(self) -> Dict[str, Any]:
        """Render as the error half of a call result."""
        return {
            "kind": self.kind,
            "message": self.message,
            "details": self.details(),
        }


class EntrypointNotFoundError(EntrypointError):
    """No entrypoint is registered under the requested key."""

    kind = "NotFound"

    def __init__(self, key: str, **kwargs):
        super().__init__(f"Unknown entrypoint: {key}", **kwargs)
        self.key = key

    def details(self) -> Dict[str, Any]:
        return {**self.context, "key": self.key}


class InvalidInputError(EntrypointError):
    """Raw input does not satisfy the entrypoint's input contract."""

    kind = "InvalidInput"

    def __init__(self, message: str, field_errors: Optional[List[Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field_errors = field_errors or []

    @property
    def fields(self) -> List[str]:
        """Names of the offending fields."""
        return [error.field for error in self.field_errors]

    def details(self) -> Dict[str, Any]:
        return {
            **self.context,
            "fields": [
                {"field": error.field, "reason": error.message}
                for error in self.field_errors
            ],
        }


class PaymentRequiredError(EntrypointError):
    """The charge for a priced entrypoint could not be verified."""

    kind = "PaymentRequired"

    def __init__(self, message: str, price: Optional[Decimal] = None,
                 entrypoint_key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.price = price
        self.entrypoint_key = entrypoint_key

    def details(self) -> Dict[str, Any]:
        return {
            **self.context,
            "price": str(self.price) if self.price is not None else None,
            "entrypoint_key": self.entrypoint_key,
        }


class UpstreamError(EntrypointError):
    """The upstream data API answered with a non-success status or not at all."""

    kind = "UpstreamError"

    def __init__(self, message: str, status: Optional[int] = None,
                 url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status
        self.url = url

    def details(self) -> Dict[str, Any]:
        return {**self.context, "status": self.status, "url": self.url}


class HandlerError(EntrypointError):
    """Unexpected failure inside an entrypoint handler."""

    kind = "HandlerError"

    def __init__(self, message: str, entrypoint_key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.entrypoint_key = entrypoint_key

    def details(self) -> Dict[str, Any]:
        return {**self.context, "entrypoint_key": self.entrypoint_key}


class DuplicateEntrypointError(Exception):
    """An entrypoint with the same key is already registered."""

    def __init__(self, key: str):
        super().__init__(f"Entrypoint already registered: {key}")
        self.key = key
