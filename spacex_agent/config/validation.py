"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import urlparse

from .defaults import (
    AgentParams,
    AnalyticsParams,
    LedgerParams,
    PaymentParams,
    ServerParams,
    UpstreamParams,
)

SECTIONS = {
    "agent": AgentParams,
    "upstream": UpstreamParams,
    "payments": PaymentParams,
    "ledger": LedgerParams,
    "analytics": AnalyticsParams,
    "server": ServerParams,
}

PAYMENT_METHODS = ("static", "facilitator")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_price(value: Any) -> bool:
    """Check that a price is a non-negative decimal string."""
    if not isinstance(value, str):
        return False
    try:
        price = Decimal(value)
    except InvalidOperation:
        return False
    return price.is_finite() and price >= 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_known_keys(config: dict[str, Any]) -> list[ValidationError]:
        """Reject sections and keys the typed configuration does not have."""
        errors = []

        for section, values in config.items():
            if section not in SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=values
                ))
                continue
            if not isinstance(values, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=values
                ))
                continue
            allowed = {f.name for f in fields(SECTIONS[section])}
            for key in values:
                if key not in allowed:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration key",
                        value=values[key]
                    ))

        return errors

    @staticmethod
    def validate_upstream_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate upstream API parameters."""
        errors = []

        if "base_url" in params and not _is_http_url(params["base_url"]):
            errors.append(ValidationError(
                field="upstream.base_url",
                message="Must be an http(s) URL",
                value=params["base_url"]
            ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="upstream.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "max_parallel_fetches" in params:
            value = params["max_parallel_fetches"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="upstream.max_parallel_fetches",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_payment_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate payment verifier parameters."""
        errors = []

        method = params.get("method")
        if method is not None and method not in PAYMENT_METHODS:
            errors.append(ValidationError(
                field="payments.method",
                message=f"Must be one of {', '.join(PAYMENT_METHODS)}",
                value=method
            ))

        if method == "facilitator" and not _is_http_url(params.get("facilitator_url")):
            errors.append(ValidationError(
                field="payments.facilitator_url",
                message="Must be an http(s) URL when method is facilitator",
                value=params.get("facilitator_url")
            ))

        if "static_approve" in params and not isinstance(params["static_approve"], bool):
            errors.append(ValidationError(
                field="payments.static_approve",
                message="Must be a boolean",
                value=params["static_approve"]
            ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="payments.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_analytics_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate analytics parameters."""
        errors = []

        if "default_transaction_limit" in params:
            value = params["default_transaction_limit"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="analytics.default_transaction_limit",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_server_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate parameters handed to the HTTP layer."""
        errors = []

        if "port" in params:
            value = params["port"]
            if not isinstance(value, int) or isinstance(value, bool) or not 0 < value < 65536:
                errors.append(ValidationError(
                    field="server.port",
                    message="Must be an integer between 1 and 65535",
                    value=value
                ))

        if "base_url" in params and not _is_http_url(params["base_url"]):
            errors.append(ValidationError(
                field="server.base_url",
                message="Must be an http(s) URL",
                value=params["base_url"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = ConfigValidator.validate_known_keys(config)
        if errors:
            return errors

        if "upstream" in config:
            errors.extend(ConfigValidator.validate_upstream_params(config["upstream"]))

        if "payments" in config:
            errors.extend(ConfigValidator.validate_payment_params(config["payments"]))

        if "analytics" in config:
            errors.extend(ConfigValidator.validate_analytics_params(config["analytics"]))

        if "server" in config:
            errors.extend(ConfigValidator.validate_server_params(config["server"]))

        return errors
