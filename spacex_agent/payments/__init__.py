"""
Payment verification module.

Verifiers decide whether the charge for a priced entrypoint is covered.
Settlement itself happens outside the agent.
"""
from typing import Optional

from ..config.defaults import PaymentParams
from .base import (
    ChargeRequest,
    PaymentResult,
    PaymentStatus,
    PaymentVerificationError,
    PaymentVerifier,
)
from .facilitator import FacilitatorPaymentVerifier
from .static import StaticPaymentVerifier


def create_payment_verifier(
    config: PaymentParams,
    resource_base_url: Optional[str] = None
) -> PaymentVerifier:
    """Create the verifier selected by ``payments.method``."""
    if config.method == "facilitator":
        return FacilitatorPaymentVerifier(config, resource_base_url=resource_base_url)
    if config.method == "static":
        return StaticPaymentVerifier(approve=config.static_approve, config=config)
    raise ValueError(f"Unknown payment method: {config.method}")


__all__ = [
    "ChargeRequest",
    "PaymentResult",
    "PaymentStatus",
    "PaymentVerificationError",
    "PaymentVerifier",
    "FacilitatorPaymentVerifier",
    "StaticPaymentVerifier",
    "create_payment_verifier",
]
