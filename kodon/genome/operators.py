"""
Genome Evolution Operators - Crossover & Mutation

This module implements the recombination operators of the engine. All of them
work on raw genome bytes and know nothing about what the bytes mean:

- Uniform: per-bit lottery between random bit, parent 1 and parent 2
- One-point: split at one byte, crossing the split byte at bit level
- Two-point: keep parent 1 outside two split bytes, parent 2 in between
- Mixed: weighted random choice among the three per mating event

One-point and two-point apply a single mutation event after assembly (byte
swap or bit flip). Uniform folds mutation into its per-bit lottery. When a
repair hook is set, every child passes through it before it is returned.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from loguru import logger

from ..exceptions import ConfigurationError, InvalidGenomeSize


ByteRepair = Callable[[bytes], bytes]


# =============================================================================
# Enums & Configuration
# =============================================================================


class CrossoverMethod(str, Enum):
    """Crossover operator used to produce offspring."""

    UNIFORM = "uniform"
    ONE_POINT = "one_point"
    TWO_POINT = "two_point"
    MIXED = "mixed"


class MutationType(str, Enum):
    """Post-crossover mutation events of the split operators."""

    SWAP_BYTES = "swap_bytes"
    FLIP_BIT = "flip_bit"


@dataclass
class CrossoverConfig:
    """Configuration for crossover operations."""

    mutation_percentage: float = 1.5   # Mutation chance, in percent

    # MIXED weights, in percent
    uniform_weight: float = 40.0
    one_point_weight: float = 25.0
    two_point_weight: float = 35.0

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration."""
        errors = []

        if not (0.0 <= self.mutation_percentage <= 100.0):
            errors.append("mutation_percentage must be in [0, 100]")

        weights = (self.uniform_weight, self.one_point_weight, self.two_point_weight)
        if any(w < 0 for w in weights):
            errors.append("Crossover weights must be >= 0")

        total = sum(weights)
        if not (99.99 <= total <= 100.01):
            errors.append(f"Crossover weights should sum to 100 (got {total})")

        return (len(errors) == 0, errors)


# =============================================================================
# Crossover Operator
# =============================================================================


class CrossoverOperator:
    """Combines two parent genomes into one child genome."""

    def __init__(
        self,
        rng: random.Random,
        config: CrossoverConfig | None = None,
        repair: ByteRepair | None = None,
    ):
        """
        Initialize crossover operator.

        Args:
            rng: Random generator owned by the engine
            config: Crossover configuration (uses defaults if None)
            repair: Optional hook applied to every child's raw bytes
        """
        self.config = config or CrossoverConfig()

        is_valid, errors = self.config.validate()
        if not is_valid:
            raise ConfigurationError(f"Invalid crossover config: {', '.join(errors)}")

        self.rng = rng
        self.repair = repair

        logger.debug(
            "Initialized CrossoverOperator",
            mutation_percentage=self.config.mutation_percentage,
            uniform_weight=self.config.uniform_weight,
        )

    @property
    def mutation_percentage(self) -> float:
        return self.config.mutation_percentage

    def crossover(self, parent1: bytes, parent2: bytes, method: CrossoverMethod) -> bytes:
        """
        Produce one child genome from two parents.

        Args:
            parent1: Raw bytes of the first parent
            parent2: Raw bytes of the second parent
            method: Crossover method to apply

        Returns:
            Raw bytes of the (repaired) child, same length as the parents
        """
        if len(parent1) != len(parent2):
            raise InvalidGenomeSize(len(parent1), len(parent2))

        match CrossoverMethod(method):
            case CrossoverMethod.UNIFORM:
                child = self.uniform(parent1, parent2)
            case CrossoverMethod.ONE_POINT:
                child = self.one_point(parent1, parent2)
            case CrossoverMethod.TWO_POINT:
                child = self.two_point(parent1, parent2)
            case CrossoverMethod.MIXED:
                return self.crossover(parent1, parent2, self.select_method())

        if self.repair is not None:
            child = self.repair(child)
        return child

    def select_method(self) -> CrossoverMethod:
        """Pick a concrete crossover method using the MIXED weights."""
        roll = self.rng.random() * 100.0
        cumulative = self.config.uniform_weight
        if roll < cumulative:
            return CrossoverMethod.UNIFORM

        cumulative += self.config.one_point_weight
        if roll < cumulative:
            return CrossoverMethod.ONE_POINT

        return CrossoverMethod.TWO_POINT

    def uniform(self, parent1: bytes, parent2: bytes) -> bytes:
        """Per-bit mix of random bits and bits from either parent."""
        rng = self.rng
        m = self.config.mutation_percentage
        parent1_band = m + (100.0 - m) / 2.0

        child = bytearray(len(parent1))
        for i, (a, b) in enumerate(zip(parent1, parent2)):
            value = 0
            for bit in range(8):
                r = rng.random() * 100.0
                if r < m:
                    source = rng.getrandbits(1)
                elif r < parent1_band:
                    source = (a >> bit) & 1
                else:
                    source = (b >> bit) & 1
                value |= source << bit
            child[i] = value
        return bytes(child)

    def one_point(self, parent1: bytes, parent2: bytes) -> bytes:
        """Parent 1 before a random split byte, parent 2 after it."""
        split = self.rng.randrange(len(parent1))

        child = bytearray(parent1[:split])
        child.append(self._cross_byte(parent1[split], parent2[split]))
        child.extend(parent2[split + 1:])

        self.mutate(child)
        return bytes(child)

    def two_point(self, parent1: bytes, parent2: bytes) -> bytes:
        """Parent 2 between two random split bytes, parent 1 elsewhere."""
        size = len(parent1)
        start, end = sorted((self.rng.randrange(size), self.rng.randrange(size)))

        child = bytearray(size)
        for i in range(size):
            if i < start or i > end:
                child[i] = parent1[i]
            elif start < i < end:
                child[i] = parent2[i]
            else:
                child[i] = self._cross_byte(parent1[i], parent2[i])

        self.mutate(child)
        return bytes(child)

    def mutate(self, genome: bytearray) -> MutationType | None:
        """
        Apply at most one mutation event in place.

        Half of the mutation chance swaps two random bytes, the other half
        flips one random bit.
        """
        r = self.rng.random() * 100.0
        m = self.config.mutation_percentage
        size = len(genome)

        if r < m / 2.0:
            i, j = self.rng.randrange(size), self.rng.randrange(size)
            genome[i], genome[j] = genome[j], genome[i]
            return MutationType.SWAP_BYTES

        if r < m:
            i = self.rng.randrange(size)
            genome[i] ^= 1 << self.rng.randrange(8)
            return MutationType.FLIP_BIT

        return None

    def _cross_byte(self, a: int, b: int) -> int:
        """Low bits from ``a`` and high bits from ``b`` around a random bit split."""
        mask = (1 << self.rng.randrange(8)) - 1
        return (a & mask) | (b & ~mask & 0xFF)


__all__ = [
    "CrossoverMethod",
    "MutationType",
    "CrossoverConfig",
    "CrossoverOperator",
]
