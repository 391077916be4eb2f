"""x402-style facilitator payment verification over HTTP POST."""

import base64
import binascii
import json
import socket
from decimal import Decimal
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..config.defaults import PaymentParams
from .base import (
    ChargeRequest,
    PaymentResult,
    PaymentStatus,
    PaymentVerificationError,
    PaymentVerifier,
)

# USDC carries six decimal places on every supported network.
ASSET_DECIMALS = 6


def to_atomic_units(amount: Decimal, decimals: int = ASSET_DECIMALS) -> int:
    """
    Convert a decimal amount to integer atomic units.

    Raises:
        ValueError: If the amount has more precision than the asset allows
    """
    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} exceeds {decimals} decimal places")
    return int(scaled)


def decode_payment_proof(proof: str) -> dict[str, Any]:
    """Decode a base64 JSON payment header into its payload."""
    try:
        raw = base64.b64decode(proof, validate=True)
        payload = json.loads(raw.decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Malformed payment proof: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError("Malformed payment proof: expected an object")
    return payload


def authorization_nonce(payload: dict[str, Any]) -> Optional[str]:
    """Nonce of the signed transfer authorization, if the proof carries one."""
    inner = payload.get("payload")
    authorization = inner.get("authorization") if isinstance(inner, dict) else None
    if not isinstance(authorization, dict):
        return None
    nonce = authorization.get("nonce")
    return nonce if isinstance(nonce, str) else None


class FacilitatorPaymentVerifier(PaymentVerifier):
    """Verifies payment proofs with a facilitator's /verify endpoint."""

    def __init__(self, config: PaymentParams, resource_base_url: Optional[str] = None):
        super().__init__("facilitator", config)
        self.config: PaymentParams = config
        self.resource_base_url = resource_base_url

        parsed = urlparse(config.facilitator_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid facilitator URL: {config.facilitator_url}")

    def payment_requirements(self, charge: ChargeRequest) -> dict[str, Any]:
        """Describe what the caller must pay for this charge."""
        try:
            max_amount = to_atomic_units(charge.amount)
        except ValueError as e:
            raise PaymentVerificationError(f"Price not payable in the settlement asset: {e}") from e

        resource = charge.entrypoint_key
        if self.resource_base_url:
            resource = f"{self.resource_base_url.rstrip('/')}/entrypoints/{charge.entrypoint_key}/invoke"

        return {
            "scheme": "exact",
            "network": self.config.network,
            "maxAmountRequired": str(max_amount),
            "payTo": self.config.pay_to,
            "resource": resource,
            "description": charge.description,
            "mimeType": "application/json",
        }

    def _verify(self, charge: ChargeRequest) -> PaymentResult:
        if not charge.payment_proof:
            return PaymentResult(
                status=PaymentStatus.MISSING,
                amount=charge.amount,
                message="No payment proof supplied"
            )

        try:
            payload = decode_payment_proof(charge.payment_proof)
        except ValueError as e:
            return PaymentResult(
                status=PaymentStatus.REJECTED,
                amount=charge.amount,
                message=str(e)
            )

        body = {
            "x402Version": payload.get("x402Version", 1),
            "paymentPayload": payload,
            "paymentRequirements": self.payment_requirements(charge),
        }
        response = self._post("verify", body)

        if not response.get("isValid"):
            return PaymentResult(
                status=PaymentStatus.REJECTED,
                amount=charge.amount,
                payer=response.get("payer"),
                message=response.get("invalidReason") or "Payment rejected by facilitator"
            )

        return PaymentResult(
            status=PaymentStatus.VERIFIED,
            amount=charge.amount,
            payer=response.get("payer"),
            reference=authorization_nonce(payload),
            metadata={"network": self.config.network}
        )

    def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST JSON to the facilitator and decode the JSON reply."""
        url = f"{self.config.facilitator_url.rstrip('/')}/{endpoint}"
        data = json.dumps(body).encode('utf-8')
        headers = {
            'Content-Type': 'application/json',
            'Content-Length': str(len(data)),
            'User-Agent': 'spacex-data-agent/1.0'
        }
        req = Request(url, data=data, headers=headers, method='POST')

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                response_code = response.getcode()
                response_data = response.read()

        except HTTPError as e:
            self.logger.warning(
                "Facilitator HTTP error",
                url=url,
                error_code=e.code,
                error_reason=str(e.reason)
            )
            raise PaymentVerificationError(f"Facilitator HTTP {e.code}: {e.reason}") from e

        except (OSError, URLError, socket.timeout) as e:
            self.logger.warning("Facilitator network error", url=url, error=str(e))
            raise PaymentVerificationError(f"Facilitator network error: {e}") from e

        if not 200 <= response_code < 300:
            raise PaymentVerificationError(f"Facilitator HTTP {response_code}: {response_data[:200]!r}")

        try:
            decoded = json.loads(response_data.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PaymentVerificationError(f"Facilitator returned invalid JSON: {e}") from e

        if not isinstance(decoded, dict):
            raise PaymentVerificationError("Facilitator returned a non-object reply")
        return decoded
