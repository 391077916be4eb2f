"""
Entrypoint registry and payment-gated dispatch.

Dispatch runs the same pipeline for every call:
Lookup → Input Contract → Charge (priced only) → Ledger → Handler
"""

import time
from typing import Any, Optional

import structlog

from ..errors import (
    DuplicateEntrypointError,
    EntrypointError,
    EntrypointNotFoundError,
    HandlerError,
    InvalidInputError,
    PaymentRequiredError,
    SystemFailureError,
)
from ..ledger.models import Direction
from ..ledger.tracker import TransactionTracker
from ..payments.base import ChargeRequest, PaymentVerifier
from .models import CallResult, EntrypointDefinition

logger = structlog.get_logger(__name__)


class EntrypointRegistry:
    """Maps entrypoint keys to definitions and dispatches calls to them."""

    def __init__(
        self,
        tracker: Optional[TransactionTracker] = None,
        verifier: Optional[PaymentVerifier] = None
    ) -> None:
        self.logger = logger
        self.tracker = tracker if tracker is not None else TransactionTracker()
        self.verifier = verifier
        self._entrypoints: dict[str, EntrypointDefinition] = {}

    def register(self, definition: EntrypointDefinition) -> None:
        """
        Register an entrypoint.

        Raises:
            DuplicateEntrypointError: If the key is already registered
        """
        if definition.key in self._entrypoints:
            raise DuplicateEntrypointError(definition.key)

        self._entrypoints[definition.key] = definition
        self.logger.info(
            "Registered entrypoint",
            key=definition.key,
            price=definition.price or "free"
        )

    def get(self, key: str) -> EntrypointDefinition:
        """Look up a definition, raising EntrypointNotFoundError if absent."""
        try:
            return self._entrypoints[key]
        except KeyError:
            raise EntrypointNotFoundError(key) from None

    def keys(self) -> list[str]:
        return list(self._entrypoints)

    def list_entrypoints(self) -> list[dict[str, Any]]:
        """Describe every registered entrypoint in registration order."""
        return [definition.describe() for definition in self._entrypoints.values()]

    def __contains__(self, key: str) -> bool:
        return key in self._entrypoints

    def __len__(self) -> int:
        return len(self._entrypoints)

    def dispatch(
        self,
        key: str,
        raw_input: Any = None,
        payment_proof: Optional[str] = None
    ) -> Any:
        """
        Validate, charge, record and run one entrypoint call.

        Args:
            key: Entrypoint key
            raw_input: Untyped input to check against the contract
            payment_proof: Opaque proof handed to the payment verifier

        Returns:
            The handler's output, unchanged

        Raises:
            EntrypointNotFoundError: Unknown key
            InvalidInputError: Input violates the contract
            PaymentRequiredError: Charge could not be verified
            UpstreamError: Upstream API failed while the handler ran
            HandlerError: Any other handler failure
            LedgerStorageError: Ledger could not persist the payment (fatal)
        """
        definition = self.get(key)

        result = definition.input_contract.validate(raw_input)
        if not result.success:
            raise InvalidInputError(
                "Invalid input: " + ", ".join(
                    f"{err.field} ({err.message})" for err in result.errors
                ),
                field_errors=list(result.errors),
                context={"key": key}
            )

        if definition.is_paid:
            self._charge(definition, payment_proof)

        try:
            return definition.handler(result.value)
        except (EntrypointError, SystemFailureError):
            raise
        except Exception as e:
            self.logger.error(
                "Entrypoint handler failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__
            )
            raise HandlerError(str(e), entrypoint_key=key) from e

    def call(
        self,
        key: str,
        raw_input: Any = None,
        payment_proof: Optional[str] = None
    ) -> CallResult:
        """
        Dispatch and convert every call-level error into a CallResult.

        System failures are not converted; they propagate to the caller.
        """
        start_time = time.time()

        try:
            output = self.dispatch(key, raw_input, payment_proof)
        except EntrypointError as e:
            self.logger.warning(
                "Entrypoint call failed",
                key=key,
                error_kind=e.kind,
                error=e.message,
                duration_ms=int((time.time() - start_time) * 1000)
            )
            return CallResult.failure(key, e.to_dict())

        self.logger.info(
            "Entrypoint call succeeded",
            key=key,
            duration_ms=int((time.time() - start_time) * 1000)
        )
        return CallResult.success(key, output)

    def _charge(self, definition: EntrypointDefinition, payment_proof: Optional[str]) -> None:
        """Verify the charge for a priced entrypoint and record the revenue."""
        price = definition.price_amount

        if self.verifier is None:
            raise PaymentRequiredError(
                "Payments are not configured",
                price=price,
                entrypoint_key=definition.key
            )

        charge = ChargeRequest(
            entrypoint_key=definition.key,
            amount=price,
            payment_proof=payment_proof,
            description=definition.description
        )
        payment = self.verifier.verify(charge)

        if not payment.verified:
            raise PaymentRequiredError(
                payment.message or "Payment could not be verified",
                price=price,
                entrypoint_key=definition.key,
                context={"status": payment.status.value}
            )

        if payment.amount != price:
            raise PaymentRequiredError(
                f"Verified amount {payment.amount} does not match price {price}",
                price=price,
                entrypoint_key=definition.key
            )

        metadata = {
            "verifier": self.verifier.name,
            "payer": payment.payer,
            "reference": payment.reference,
        }
        metadata.update(payment.metadata)

        self.tracker.record(
            direction=Direction.INCOMING,
            amount=price,
            entrypoint_key=definition.key,
            metadata=metadata
        )
