"""
Genome Encoding Module

Defines how a caller's candidate solution is represented inside the engine.

Every genome is a fixed-length run of raw bytes. Genetic operators only ever
see those bytes; a ``GenomeLayout`` converts them to and from the value the
caller's scoring and repair functions work with:

- raw layout: the value is the ``bytes`` object itself
- array layout: the value is a 1-D ``numpy.ndarray`` (e.g. a city ordering)
- record layout: the value is a ``numpy`` structured record, the Python
  counterpart of a plain fixed-layout struct

The module also carries the range helpers used by problem encodings that map
raw unsigned integers onto bounded integer or fixed-precision float ranges.

Author: Kodon Developers
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

import numpy as np

from ..exceptions import ConfigurationError, InvalidGenomeSize


T = TypeVar("T")

FitnessFunction = Callable[[Any], float]
RepairFunction = Callable[[Any], Any]


# =============================================================================
# Genome Layout
# =============================================================================


class LayoutKind(str, Enum):
    """How raw genome bytes are presented to caller functions."""

    RAW = "raw"
    ARRAY = "array"
    RECORD = "record"


@dataclass(frozen=True)
class GenomeLayout(Generic[T]):
    """
    Fixed byte-length view over a caller-defined genome.

    The engine stores and recombines ``bytes`` only. ``decode`` hands the
    caller a fresh value built from those bytes, so scoring or repair code can
    never modify a genome that already belongs to an individual.
    """

    size: int
    kind: LayoutKind = LayoutKind.RAW
    dtype: np.dtype | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ConfigurationError(f"Genome size must be >= 1 byte (got {self.size})")
        if self.kind is not LayoutKind.RAW and self.dtype is None:
            raise ConfigurationError(f"{self.kind.value} layout requires a numpy dtype")

    @classmethod
    def array(cls, length: int, dtype: Any = np.uint8) -> GenomeLayout[np.ndarray]:
        """Layout whose decoded value is a 1-D array of ``length`` items."""
        dt = np.dtype(dtype)
        if length < 1:
            raise ConfigurationError(f"Array genome length must be >= 1 (got {length})")
        return cls(size=length * dt.itemsize, kind=LayoutKind.ARRAY, dtype=dt)

    @classmethod
    def record(cls, dtype: Any) -> GenomeLayout[np.void]:
        """Layout whose decoded value is a single structured record."""
        dt = np.dtype(dtype)
        if dt.names is None:
            raise ConfigurationError("Record layout requires a structured dtype with named fields")
        return cls(size=dt.itemsize, kind=LayoutKind.RECORD, dtype=dt)

    def decode(self, raw: bytes) -> T:
        """Convert raw genome bytes into the caller's value."""
        self.check(raw)
        match self.kind:
            case LayoutKind.RAW:
                return bytes(raw)  # type: ignore[return-value]
            case LayoutKind.ARRAY:
                return np.frombuffer(raw, dtype=self.dtype).copy()  # type: ignore[return-value]
            case LayoutKind.RECORD:
                return np.frombuffer(raw, dtype=self.dtype).copy()[0]  # type: ignore[return-value]

    def encode(self, value: T) -> bytes:
        """Convert a caller value back into raw genome bytes."""
        match self.kind:
            case LayoutKind.RAW:
                raw = bytes(value)  # type: ignore[arg-type]
            case LayoutKind.ARRAY:
                raw = np.asarray(value, dtype=self.dtype).tobytes()
            case LayoutKind.RECORD:
                raw = np.asarray(value, dtype=self.dtype).tobytes()
        self.check(raw)
        return raw

    def check(self, raw: bytes) -> None:
        """Raise ``InvalidGenomeSize`` unless ``raw`` has exactly ``size`` bytes."""
        if len(raw) != self.size:
            raise InvalidGenomeSize(self.size, len(raw))

    def random(self, rng: random.Random) -> bytes:
        """Draw ``size`` uniformly random bytes."""
        return bytes(rng.getrandbits(8) for _ in range(self.size))

    def wrap_repair(self, repair_function: RepairFunction) -> Callable[[bytes], bytes]:
        """Lift a value-level repair function to operate on raw bytes."""

        def repair(raw: bytes) -> bytes:
            return self.encode(repair_function(self.decode(raw)))

        return repair


def as_layout(layout: GenomeLayout | int) -> GenomeLayout:
    """Accept either a layout or a plain byte count."""
    if isinstance(layout, GenomeLayout):
        return layout
    if isinstance(layout, int) and not isinstance(layout, bool):
        return GenomeLayout(size=layout)
    raise ConfigurationError(f"Expected GenomeLayout or byte size, got {type(layout).__name__}")


# =============================================================================
# Range Helpers
# =============================================================================


def range_modulus(low: int, high: int) -> int:
    """Number of integers in the inclusive range ``[low, high]``."""
    if high < low:
        raise ConfigurationError(f"Invalid range: high ({high}) < low ({low})")
    return 1 + int(high) - int(low)


def decode_range(value: int, modulus: int, low: int) -> int:
    """Map a raw unsigned integer onto ``[low, low + modulus)``."""
    return int(value) % modulus + low


def range_modulus_float(low: int, high: int, points: int) -> int:
    """
    Number of fixed-precision steps in ``[low, high)`` at ``points`` decimals.

    Example: ``range_modulus_float(0, 10, 3)`` covers 0.000 through 9.999.
    """
    return range_modulus(low, high - 1) * 10**points


def decode_range_float(value: int, modulus: int, low: float, points: int) -> float:
    """Map a raw unsigned integer onto a float range with ``points`` decimals."""
    return (int(value) % modulus) / 10**points + low


__all__ = [
    "FitnessFunction",
    "RepairFunction",
    "LayoutKind",
    "GenomeLayout",
    "as_layout",
    "range_modulus",
    "decode_range",
    "range_modulus_float",
    "decode_range_float",
]
