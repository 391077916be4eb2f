"""Base classes for payment verification."""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import structlog

from ..logging.config import get_payment_logger, log_payment_event


class PaymentStatus(Enum):
    """Outcome of a charge verification."""
    VERIFIED = "verified"
    MISSING = "missing"
    REJECTED = "rejected"
    ERROR = "error"


@dataclass(frozen=True)
class ChargeRequest:
    """A charge the caller must cover before a priced entrypoint runs."""
    entrypoint_key: str
    amount: Decimal
    payment_proof: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class PaymentResult:
    """Result of verifying a charge."""
    status: PaymentStatus
    amount: Decimal
    payer: Optional[str] = None
    reference: Optional[str] = None
    message: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def verified(self) -> bool:
        return self.status == PaymentStatus.VERIFIED


class PaymentVerificationError(Exception):
    """Verifier could not reach a decision."""
    pass


class PaymentVerifier(ABC):
    """Base class for payment verification collaborators."""

    def __init__(self, name: str, config: Any = None):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"payments.{name}")
        self.audit_logger = get_payment_logger(f"payments.{name}")
        self._verified_count = 0
        self._rejected_count = 0
        self._stats_lock = threading.Lock()

    @abstractmethod
    def _verify(self, charge: ChargeRequest) -> PaymentResult:
        """
        Decide whether the charge is covered.

        Implementations raise PaymentVerificationError when no decision
        can be reached.
        """
        pass

    def verify(self, charge: ChargeRequest) -> PaymentResult:
        """
        Verify a charge and record the decision in the audit log.

        Args:
            charge: Charge to verify

        Returns:
            PaymentResult; never raises for verifier failures
        """
        try:
            result = self._verify(charge)
        except PaymentVerificationError as e:
            result = PaymentResult(
                status=PaymentStatus.ERROR,
                amount=charge.amount,
                message=str(e)
            )

        with self._stats_lock:
            if result.verified:
                self._verified_count += 1
            else:
                self._rejected_count += 1

        log_payment_event(
            self.audit_logger,
            entrypoint_key=charge.entrypoint_key,
            amount=charge.amount,
            approved=result.verified,
            reason=result.message,
            context={"verifier": self.name, "status": result.status.value}
        )
        return result

    def get_stats(self) -> dict[str, Any]:
        """Get verification statistics."""
        with self._stats_lock:
            verified, rejected = self._verified_count, self._rejected_count

        total = verified + rejected
        return {
            "name": self.name,
            "verified_count": verified,
            "rejected_count": rejected,
            "approval_rate": verified / total if total > 0 else 0.0,
        }
