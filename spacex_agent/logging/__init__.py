"""
Logging configuration and utilities for the SpaceX data agent.
"""
from .config import configure_logging, get_logger, get_payment_logger

__all__ = ["configure_logging", "get_logger", "get_payment_logger"]
