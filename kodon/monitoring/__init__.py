"""
Monitoring for Kodon.

Structured logging built on loguru.
"""

from .logging_config import LogContext, configure_from_settings, configure_logging, get_logger

__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "LogContext",
]
