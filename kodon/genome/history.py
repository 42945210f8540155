"""
Evolution History Tracking

Records one entry per evaluated generation:
- population statistics (best, mean, worst and spread of fitness)
- genome diversity (share of distinct genomes)
- elapsed wall-clock time

The history is a read-only trace of a run. It can be exported to JSON for
analysis and loaded back, but it never holds genomes and cannot resume a run.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

import numpy as np
from loguru import logger

from .individual import Individual


# =============================================================================
# Population Statistics
# =============================================================================


@dataclass
class PopulationStatistics:
    """Statistics about one sorted population."""

    population_size: int

    # Fitness statistics
    best_fitness: float
    mean_fitness: float
    worst_fitness: float
    std_fitness: float

    # Best individual
    best_age: int

    # Diversity
    unique_genomes: int
    diversity_score: float

    @classmethod
    def from_population(cls, population: Sequence[Individual]) -> PopulationStatistics:
        """
        Compute statistics for a population sorted best-first.

        Args:
            population: Non-empty, sorted population

        Returns:
            Population statistics
        """
        fitness = np.fromiter((ind.fitness for ind in population), dtype=float, count=len(population))
        unique = len({ind.raw for ind in population})

        return cls(
            population_size=len(population),
            best_fitness=float(fitness[0]),
            mean_fitness=float(fitness.mean()),
            worst_fitness=float(fitness[-1]),
            std_fitness=float(fitness.std()),
            best_age=population[0].age,
            unique_genomes=unique,
            diversity_score=unique / len(population),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


# =============================================================================
# Generation Record
# =============================================================================


@dataclass
class GenerationRecord:
    """Record of a single evaluated generation."""

    generation: int
    elapsed_ms: float
    statistics: PopulationStatistics

    @property
    def best_fitness(self) -> float:
        return self.statistics.best_fitness

    def to_dict(self) -> dict[str, Any]:
        return {
            "generation": self.generation,
            "elapsed_ms": self.elapsed_ms,
            "statistics": self.statistics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationRecord:
        return cls(
            generation=data["generation"],
            elapsed_ms=data["elapsed_ms"],
            statistics=PopulationStatistics(**data["statistics"]),
        )


# =============================================================================
# Evolution History
# =============================================================================


@dataclass
class EvolutionHistory:
    """Per-generation trace of one engine run."""

    maximize: bool = True
    seed: int | None = None
    start_time: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    records: list[GenerationRecord] = field(default_factory=list)
    termination_reason: str | None = None
    max_records: int | None = None         # None keeps every generation

    def record_generation(
        self,
        generation: int,
        population: Sequence[Individual],
        elapsed_ms: float,
    ) -> GenerationRecord:
        """
        Append statistics for a sorted population.

        When ``max_records`` is set, the oldest records are dropped so at most
        that many are kept.

        Args:
            generation: Generation number
            population: Population sorted best-first
            elapsed_ms: Time since the run started

        Returns:
            The new record
        """
        record = GenerationRecord(
            generation=generation,
            elapsed_ms=elapsed_ms,
            statistics=PopulationStatistics.from_population(population),
        )
        self.records.append(record)
        if self.max_records is not None and len(self.records) > self.max_records:
            del self.records[: len(self.records) - self.max_records]
        return record

    def __len__(self) -> int:
        return len(self.records)

    @property
    def last(self) -> GenerationRecord | None:
        return self.records[-1] if self.records else None

    def get_fitness_progression(self) -> list[tuple[int, float]]:
        """
        Get fitness progression over generations.

        Returns:
            List of (generation, best_fitness) tuples
        """
        return [(r.generation, r.best_fitness) for r in self.records]

    def improvements(self) -> list[GenerationRecord]:
        """Records where the best fitness strictly improved on the previous one."""
        improved = []
        best: float | None = None
        for record in self.records:
            if best is None or (
                record.best_fitness > best if self.maximize else record.best_fitness < best
            ):
                improved.append(record)
                best = record.best_fitness
        return improved

    def to_dict(self) -> dict[str, Any]:
        return {
            "maximize": self.maximize,
            "seed": self.seed,
            "start_time": self.start_time,
            "termination_reason": self.termination_reason,
            "max_records": self.max_records,
            "records": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvolutionHistory:
        return cls(
            maximize=data.get("maximize", True),
            seed=data.get("seed"),
            start_time=data["start_time"],
            termination_reason=data.get("termination_reason"),
            max_records=data.get("max_records"),
            records=[GenerationRecord.from_dict(r) for r in data.get("records", [])],
        )

    def export_to_json(self, filepath: Path | str) -> None:
        """
        Export complete history to JSON file.

        Args:
            filepath: Output file path
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Exported evolution history to {filepath}", generations=len(self.records))

    @classmethod
    def load_from_json(cls, filepath: Path | str) -> EvolutionHistory:
        """Load a history previously written by ``export_to_json``."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"History file not found: {filepath}")

        with open(filepath, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)


__all__ = [
    "PopulationStatistics",
    "GenerationRecord",
    "EvolutionHistory",
]
