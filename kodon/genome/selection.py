"""
Parent Selection Strategies

Every strategy picks a pair of parent indices from a population that the
engine has already sorted best-first.

- FAST: tiered sampling over an elite band and a wider "good" band with a
  uniform tail, O(1) per draw
- ROULETTE_WHEEL: fitness-proportionate sampling over prefix sums,
  O(log n) per draw after an O(n) preparation
- MIXED: prepares both and picks one per mating event

Strategies are prepared once per generation and then sampled for each
offspring slot.
"""

from __future__ import annotations

import bisect
import itertools
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from loguru import logger

from ..exceptions import ConfigurationError


# -log(1 / 5000): maps the smallest draw of biased_random onto the last index
_BIAS_SCALE = 8.517193
_BIAS_RESOLUTION = 5000


class SelectionMethod(str, Enum):
    """Parent selection method."""

    FAST = "fast"
    ROULETTE_WHEEL = "roulette_wheel"
    MIXED = "mixed"


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class SelectionConfig:
    """Probability bands for parent selection, in percent."""

    # First parent: elite band / good band / whole population
    first_parent_elite: float = 65.0
    first_parent_good: float = 27.0
    first_parent_any: float = 8.0

    # Second parent: good band / biased-low index / whole population
    second_parent_good: float = 75.0
    second_parent_biased: float = 15.0
    second_parent_any: float = 10.0

    good_range_factor: float = 1.5     # good band size relative to elite band
    mixed_fast_percentage: float = 60.0  # MIXED: chance of using FAST

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration."""
        errors = []

        first = self.first_parent_elite + self.first_parent_good + self.first_parent_any
        if not (99.99 <= first <= 100.01):
            errors.append(f"First parent bands should sum to 100 (got {first})")

        second = self.second_parent_good + self.second_parent_biased + self.second_parent_any
        if not (99.99 <= second <= 100.01):
            errors.append(f"Second parent bands should sum to 100 (got {second})")

        bands = (
            self.first_parent_elite, self.first_parent_good, self.first_parent_any,
            self.second_parent_good, self.second_parent_biased, self.second_parent_any,
        )
        if any(b < 0 for b in bands):
            errors.append("Selection bands must be >= 0")

        if self.good_range_factor < 1.0:
            errors.append("good_range_factor must be >= 1.0")

        if not (0.0 <= self.mixed_fast_percentage <= 100.0):
            errors.append("mixed_fast_percentage must be in [0, 100]")

        return (len(errors) == 0, errors)


def biased_random(rng: random.Random, max_output: int) -> int:
    """
    Random index in ``[0, max_output)`` skewed toward small values.

    Draws are log-weighted, so better ranked individuals near index 0 are
    picked far more often than the tail.
    """
    if max_output < 1:
        raise ConfigurationError(f"max_output must be >= 1 (got {max_output})")
    top = max_output - 1
    x = (rng.randrange(_BIAS_RESOLUTION) + 1.0) / _BIAS_RESOLUTION
    sig = -top / _BIAS_SCALE
    return min(int(sig * math.log(x)), top)


# =============================================================================
# Strategies
# =============================================================================


class FastSelection:
    """Tiered parent sampling over elite and good bands."""

    def __init__(self, rng: random.Random, config: SelectionConfig | None = None):
        self.rng = rng
        self.config = config or SelectionConfig()
        self.population_size = 0
        self.elite = 0
        self.good_range = 0

    def prepare(self, population_size: int, elite_count: int) -> None:
        if population_size <= 2:
            raise ConfigurationError(
                "No population yet",
                context={"population_size": population_size},
            )
        self.population_size = population_size
        # An empty elite band would leave the first parent undrawable
        self.elite = max(1, min(elite_count, population_size))
        self.good_range = max(
            1, min(int(self.config.good_range_factor * self.elite), population_size)
        )

    def select(self) -> tuple[int, int]:
        cfg = self.config
        rng = self.rng

        r = rng.random() * 100.0
        if r < cfg.first_parent_elite:
            p1 = rng.randrange(self.elite)
        elif r < cfg.first_parent_elite + cfg.first_parent_good:
            p1 = rng.randrange(self.good_range)
        else:
            p1 = rng.randrange(self.population_size)

        r = rng.random() * 100.0
        if r < cfg.second_parent_good:
            p2 = rng.randrange(self.good_range)
        elif r < cfg.second_parent_good + cfg.second_parent_biased:
            p2 = biased_random(rng, self.population_size)
        else:
            p2 = rng.randrange(self.population_size)

        return p1, p2


class RouletteWheelSelection:
    """Fitness-proportionate parent sampling."""

    def __init__(self, rng: random.Random):
        self.rng = rng
        self.fitness_sum = 0.0
        self.cumulative: list[float] = []

    def prepare(self, fitness_values: Sequence[float]) -> None:
        if len(fitness_values) <= 2:
            raise ConfigurationError(
                "No population yet",
                context={"population_size": len(fitness_values)},
            )
        if any(f < 0 for f in fitness_values):
            logger.warning(
                "Roulette wheel selection received negative fitness values; "
                "selection probabilities are undefined for them"
            )
        self.cumulative = list(itertools.accumulate(fitness_values))
        self.fitness_sum = self.cumulative[-1]

    def select(self) -> tuple[int, int]:
        return self._spin(), self._spin()

    def _spin(self) -> int:
        target = self.fitness_sum * self.rng.uniform(0.0, 1.0)
        index = bisect.bisect_left(self.cumulative, target)
        return min(index, len(self.cumulative) - 1)


class ParentSelector:
    """Dispatches to the configured selection method each mating event."""

    def __init__(
        self,
        method: SelectionMethod,
        rng: random.Random,
        config: SelectionConfig | None = None,
    ):
        self.config = config or SelectionConfig()

        is_valid, errors = self.config.validate()
        if not is_valid:
            raise ConfigurationError(f"Invalid selection config: {', '.join(errors)}")

        self.method = SelectionMethod(method)
        self.rng = rng
        self.fast = FastSelection(rng, self.config)
        self.roulette = RouletteWheelSelection(rng)

    def prepare(self, fitness_values: Sequence[float], elite_count: int) -> None:
        """Precompute per-generation state for the active method."""
        match self.method:
            case SelectionMethod.FAST:
                self.fast.prepare(len(fitness_values), elite_count)
            case SelectionMethod.ROULETTE_WHEEL:
                self.roulette.prepare(fitness_values)
            case SelectionMethod.MIXED:
                self.fast.prepare(len(fitness_values), elite_count)
                self.roulette.prepare(fitness_values)

    def select(self) -> tuple[int, int]:
        """Draw a pair of parent indices."""
        match self.method:
            case SelectionMethod.FAST:
                return self.fast.select()
            case SelectionMethod.ROULETTE_WHEEL:
                return self.roulette.select()
            case _:
                if self.rng.random() * 100.0 < self.config.mixed_fast_percentage:
                    return self.fast.select()
                return self.roulette.select()


__all__ = [
    "SelectionMethod",
    "SelectionConfig",
    "biased_random",
    "FastSelection",
    "RouletteWheelSelection",
    "ParentSelector",
]
