"""
Termination Conditions

Four independent stopping checks, each disabled until its threshold is set:

- generation cap: stop when the generation counter reaches ``max_generation``
- timeout: stop once ``max_running_time_ms`` of wall-clock time has elapsed
- fitness goal: stop when the best fitness reaches the goal
- stagnation: stop after ``max_iterations`` consecutive generations without a
  strict improvement of the best fitness

The engine calls ``check`` once per generation with the current best fitness.
Checks run in the order above and the first one satisfied wins.
"""

from __future__ import annotations

import time
from enum import Enum

from loguru import logger

from .individual import is_better
from ..exceptions import ConfigurationError


class TerminationReason(str, Enum):
    """Why a run stopped."""

    MAX_GENERATION = "max_generation"
    TIMEOUT = "timeout"
    FITNESS_GOAL = "fitness_goal"
    STAGNATION = "stagnation"


class TerminationConditions:
    """Composable stopping policy evaluated against the best individual."""

    def __init__(self, max_generation: int | None = 500):
        """
        Initialize termination conditions.

        Args:
            max_generation: Generation cap (``None`` runs without a cap)
        """
        self.max_generation: int | None = None
        self.set_max_generation(max_generation)

        self.fitness_goal: float | None = None
        self.max_running_time_ms: float | None = None
        self.max_iterations: int | None = None

        self.maximize = True
        self._start_time = time.perf_counter()
        self._first_evaluation = True
        self._last_best_fitness: float | None = None
        self._stagnation_count = 0

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_max_generation(self, max_generation: int | None) -> None:
        if max_generation is not None and max_generation < 0:
            raise ConfigurationError(f"max_generation must be >= 0 or None (got {max_generation})")
        self.max_generation = max_generation

    def set_fitness_goal(self, goal: float) -> None:
        self.fitness_goal = float(goal)

    def set_max_running_time_ms(self, max_running_time_ms: float) -> None:
        if max_running_time_ms < 0:
            raise ConfigurationError(f"max_running_time_ms must be >= 0 (got {max_running_time_ms})")
        self.max_running_time_ms = max_running_time_ms

    def set_max_iterations(self, max_iterations: int) -> None:
        if max_iterations < 1:
            raise ConfigurationError(f"max_iterations must be >= 1 (got {max_iterations})")
        self.max_iterations = max_iterations

    def clear(self) -> None:
        """Disable the goal, timeout and stagnation checks."""
        self.fitness_goal = None
        self.max_running_time_ms = None
        self.max_iterations = None

    @property
    def goal_enabled(self) -> bool:
        return self.fitness_goal is not None

    @property
    def timeout_enabled(self) -> bool:
        return self.max_running_time_ms is not None

    @property
    def stagnation_enabled(self) -> bool:
        return self.max_iterations is not None

    # -------------------------------------------------------------------------
    # Run state
    # -------------------------------------------------------------------------

    def start(self, maximize: bool = True) -> None:
        """Reset the clock and stagnation tracking for a new run."""
        self.maximize = maximize
        self._start_time = time.perf_counter()
        self._first_evaluation = True
        self._last_best_fitness = None
        self._stagnation_count = 0

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start_time) * 1000.0

    @property
    def stagnation_count(self) -> int:
        return self._stagnation_count

    def check(self, generation: int, best_fitness: float) -> TerminationReason | None:
        """Return the first satisfied condition for this generation, if any."""
        if self.check_generation(generation):
            return TerminationReason.MAX_GENERATION
        if self.check_time():
            return TerminationReason.TIMEOUT
        if self.check_fitness_goal(best_fitness):
            return TerminationReason.FITNESS_GOAL
        if self.check_stagnation(best_fitness):
            return TerminationReason.STAGNATION
        return None

    def check_generation(self, generation: int) -> bool:
        return self.max_generation is not None and generation == self.max_generation

    def check_time(self) -> bool:
        if self.max_running_time_ms is None:
            return False
        return self.elapsed_ms >= self.max_running_time_ms

    def check_fitness_goal(self, best_fitness: float) -> bool:
        if self.fitness_goal is None:
            return False
        if self.maximize:
            return best_fitness >= self.fitness_goal
        return best_fitness <= self.fitness_goal

    def check_stagnation(self, best_fitness: float) -> bool:
        if self.max_iterations is None:
            return False

        # No baseline yet
        if self._first_evaluation:
            self._first_evaluation = False
            self._last_best_fitness = best_fitness
            self._stagnation_count = 0
            return False

        if is_better(best_fitness, self._last_best_fitness, self.maximize):
            self._last_best_fitness = best_fitness
            self._stagnation_count = 0
            return False

        self._stagnation_count += 1
        if self._stagnation_count >= self.max_iterations:
            logger.debug(
                f"No improvement for {self._stagnation_count} generations "
                f"(best={self._last_best_fitness})"
            )
            return True
        return False

    def __repr__(self) -> str:
        return (
            f"TerminationConditions(max_generation={self.max_generation}, "
            f"fitness_goal={self.fitness_goal}, "
            f"max_running_time_ms={self.max_running_time_ms}, "
            f"max_iterations={self.max_iterations})"
        )


__all__ = ["TerminationReason", "TerminationConditions"]
