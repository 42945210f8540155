"""
Logging Configuration for Kodon.

Provides structured logging with loguru. The library itself only emits
records; applications call ``configure_logging`` to choose sinks and levels.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

if TYPE_CHECKING:
    from ..config import LoggingSettings


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_string: Optional[str] = None,
    serialize: bool = False,
) -> None:
    """
    Configure logging for Kodon.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rotation: Log rotation size/time
        retention: Log retention period
        format_string: Custom format string
        serialize: Whether to serialize logs as JSON
    """
    # Remove default handler
    logger.remove()

    if format_string is None:
        format_string = "{message}" if serialize else DEFAULT_FORMAT

    # Console handler
    logger.add(
        sys.stderr,
        format=format_string,
        level=log_level.upper(),
        colorize=not serialize,
        serialize=serialize,
    )

    # File handler
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_file),
            format=format_string,
            level=log_level.upper(),
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=serialize,
        )

    logger.configure(extra={"component": "kodon"})


def configure_from_settings(settings: LoggingSettings) -> None:
    """Apply the ``logging`` section of a ``KodonConfig``."""
    configure_logging(
        log_level=settings.level,
        log_file=settings.log_file,
        serialize=settings.serialize,
    )


def get_logger(name: str):
    """
    Get logger instance for component.

    Args:
        name: Component name

    Returns:
        Logger bound to the component
    """
    return logger.bind(component=name)


class LogContext:
    """Context manager for structured logging."""

    def __init__(self, **kwargs):
        """
        Initialize log context.

        Args:
            **kwargs: Context key-value pairs
        """
        self.context = kwargs
        self._token = None

    def __enter__(self):
        self._token = logger.contextualize(**self.context)
        self._token.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            self._token.__exit__(exc_type, exc_val, exc_tb)
            self._token = None
