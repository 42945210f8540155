"""
Exception hierarchy for Kodon.

Misconfiguration and malformed genomes fail fast with typed errors. Both
derive from ``ValueError`` so callers that already guard engine setup with
``except ValueError`` keep working.
"""

from __future__ import annotations

from typing import Any


class KodonError(Exception):
    """Base class for all Kodon specific exceptions."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(KodonError, ValueError):
    """Raised when the engine is set up or driven with invalid parameters."""


class InvalidGenomeSize(KodonError, ValueError):
    """Raised when a genome buffer does not match the layout's byte length."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Genome must be exactly {expected} bytes (got {actual})",
            context={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "KodonError",
    "ConfigurationError",
    "InvalidGenomeSize",
]
