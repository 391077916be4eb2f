"""Static payment verifier for local runs and tests."""

from typing import Optional

from ..config.defaults import PaymentParams
from .base import ChargeRequest, PaymentResult, PaymentStatus, PaymentVerifier


class StaticPaymentVerifier(PaymentVerifier):
    """Approves or rejects every charge with a fixed decision."""

    def __init__(self, approve: bool = True, config: Optional[PaymentParams] = None):
        super().__init__("static", config)
        self.approve = approve

    def _verify(self, charge: ChargeRequest) -> PaymentResult:
        if not self.approve:
            return PaymentResult(
                status=PaymentStatus.REJECTED,
                amount=charge.amount,
                message="Static verifier rejects all charges"
            )

        return PaymentResult(
            status=PaymentStatus.VERIFIED,
            amount=charge.amount,
            payer="static",
            reference=charge.payment_proof
        )
