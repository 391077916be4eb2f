"""
Centralized logging configuration for the SpaceX data agent.

This module provides standardized logging configuration using structlog
for all components. Every module logs through this configuration so that
dispatch, payment and ledger events share one structured format.
"""
import logging
import sys
from decimal import Decimal
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_payment_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for payment and ledger events.

    Every line it emits is part of the payment audit trail.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for payment decisions
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="payments",
        audit_trail=True
    )


def log_payment_event(
    logger: FilteringBoundLogger,
    entrypoint_key: str,
    amount: Decimal,
    approved: bool,
    reason: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a payment verification decision with standardized format.

    Args:
        logger: Structlog logger instance
        entrypoint_key: Entrypoint the charge was made for
        amount: Charged amount
        approved: Whether the verifier approved the charge
        reason: Verifier's reason when the charge was rejected
        context: Additional context data
    """
    bound_logger = logger.bind(
        entrypoint_key=entrypoint_key,
        amount=str(amount),
        payment_result="APPROVED" if approved else "REJECTED",
        payment_event="payment_decision"
    )

    if reason:
        bound_logger = bound_logger.bind(reason=reason)

    if context:
        bound_logger = bound_logger.bind(context=context)

    if approved:
        bound_logger.info("Payment approved")
    else:
        bound_logger.warning("Payment rejected")
