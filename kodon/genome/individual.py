"""
Individual: a genome paired with its cached fitness and age.

Fitness is computed exactly once, when the individual is created. Carrying an
individual into the next generation goes through ``clone()`` so the scoring
function is never called again for an unchanged genome.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from .encoding import FitnessFunction, GenomeLayout
from ..exceptions import ConfigurationError


T = TypeVar("T")


class Individual(Generic[T]):
    """Candidate solution with cached fitness and an age counter."""

    __slots__ = ("_layout", "_raw", "_fitness", "_age")

    def __init__(
        self,
        fitness_function: FitnessFunction,
        genome: T,
        age: int = 0,
        layout: GenomeLayout[T] | None = None,
    ):
        """
        Create an individual and score it.

        Args:
            fitness_function: Scoring function called with the decoded genome
            genome: Caller genome value (``bytes`` when no layout is given)
            age: Initial age
            layout: Genome layout (defaults to a raw layout sized to ``genome``)
        """
        if layout is None:
            if not isinstance(genome, (bytes, bytearray, memoryview)):
                raise ConfigurationError(
                    "A GenomeLayout is required for non-bytes genomes",
                    context={"genome_type": type(genome).__name__},
                )
            layout = GenomeLayout(size=len(genome))
        self._init(fitness_function, layout, layout.encode(genome), age)

    def _init(
        self,
        fitness_function: FitnessFunction | None,
        layout: GenomeLayout[T],
        raw: bytes,
        age: int,
        fitness: float | None = None,
    ) -> None:
        if age < 0:
            raise ConfigurationError(f"age must be >= 0 (got {age})")
        self._layout = layout
        self._raw = raw
        self._age = age
        if fitness is None:
            if fitness_function is None:
                raise ConfigurationError("No fitness function")
            fitness = float(fitness_function(layout.decode(raw)))
        self._fitness = fitness

    @classmethod
    def from_bytes(
        cls,
        fitness_function: FitnessFunction,
        raw: bytes | bytearray,
        layout: GenomeLayout[T],
        age: int = 0,
    ) -> Individual[T]:
        """Build an individual from an external byte buffer of ``layout.size`` bytes."""
        layout.check(raw)
        individual = cls.__new__(cls)
        individual._init(fitness_function, layout, bytes(raw), age)
        return individual

    @property
    def fitness(self) -> float:
        return self._fitness

    @property
    def genome(self) -> T:
        """Decoded copy of the genome."""
        return self._layout.decode(self._raw)

    @property
    def raw(self) -> bytes:
        """Raw genome bytes, as seen by the genetic operators."""
        return self._raw

    @property
    def age(self) -> int:
        return self._age

    @property
    def layout(self) -> GenomeLayout[T]:
        return self._layout

    def increment_age(self) -> None:
        self._age += 1

    def clone(self) -> Individual[T]:
        """Copy with the same genome, fitness and age; the genome is not re-scored."""
        twin = Individual.__new__(Individual)
        twin._init(None, self._layout, self._raw, self._age, fitness=self._fitness)
        return twin

    def __repr__(self) -> str:
        return f"Individual(fitness={self._fitness!r}, age={self._age}, raw={self._raw.hex()})"


def rank_key(maximize: bool):
    """
    Sort key putting the best individual first.

    Fitness is ordered by the objective; equal fitness is broken in favor of
    the older individual.
    """
    if maximize:
        return lambda ind: (-ind.fitness, -ind.age)
    return lambda ind: (ind.fitness, -ind.age)


def is_better(a: float, b: float, maximize: bool) -> bool:
    """True when fitness ``a`` strictly improves on ``b``."""
    return a > b if maximize else a < b


__all__ = ["Individual", "rank_key", "is_better"]