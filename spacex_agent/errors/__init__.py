"""
Error classification for entrypoint dispatch and ledger bookkeeping.

This module provides the exception hierarchy used across the agent:
call-level errors that are returned to the caller as structured results,
and system failures that must stop the process.
"""

from .call_errors import (
    EntrypointError,
    EntrypointNotFoundError,
    InvalidInputError,
    PaymentRequiredError,
    UpstreamError,
    HandlerError,
    DuplicateEntrypointError,
)
from .system_failures import (
    SystemFailureError,
    LedgerStorageError,
    ConfigurationError,
)

__all__ = [
    # Call errors
    "EntrypointError",
    "EntrypointNotFoundError",
    "InvalidInputError",
    "PaymentRequiredError",
    "UpstreamError",
    "HandlerError",
    "DuplicateEntrypointError",
    # System failures
    "SystemFailureError",
    "LedgerStorageError",
    "ConfigurationError",
]
