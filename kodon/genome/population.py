"""
Population Engine & Generation Loop

``GeneticAlgorithm`` owns the population and drives the search:

1. Sort: best first under the objective, older individuals win ties
2. Record statistics and check the termination conditions
3. Survivor selection: elitism, optionally with age-based eviction
4. Mating: parent selection + crossover fill the remaining slots
5. Advance: the offspring generation replaces the population

All randomness comes from one ``random.Random`` owned by the engine, so a
fixed seed reproduces a run exactly.

Author: Kodon Developers
"""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Generic, Iterable, TypeVar

from loguru import logger

from .encoding import FitnessFunction, GenomeLayout, RepairFunction, as_layout
from .history import EvolutionHistory
from .individual import Individual, rank_key
from .operators import CrossoverConfig, CrossoverMethod, CrossoverOperator
from .selection import ParentSelector, SelectionConfig, SelectionMethod
from .termination import TerminationConditions, TerminationReason
from ..exceptions import ConfigurationError, InvalidGenomeSize
from ..monitoring.logging_config import LogContext

if TYPE_CHECKING:
    from ..config import KodonConfig


T = TypeVar("T")

MIN_POPULATION_SIZE = 11


# =============================================================================
# Aging Configuration
# =============================================================================


@dataclass
class AgingConfig:
    """Age-based eviction of elite individuals ("dying of old age")."""

    kick_out_age: int | None = None        # None disables eviction
    except_best: bool = True               # Never evict the current best
    best_survival_percentage: float = 30.0   # Chance an over-age best survives
    elite_survival_percentage: float = 45.0  # Chance an over-age elite survives

    @property
    def enabled(self) -> bool:
        return self.kick_out_age is not None

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration."""
        errors = []

        if self.kick_out_age is not None and self.kick_out_age < 0:
            errors.append("kick_out_age must be >= 0 or None")

        if not (0.0 <= self.best_survival_percentage <= 100.0):
            errors.append("best_survival_percentage must be in [0, 100]")

        if not (0.0 <= self.elite_survival_percentage <= 100.0):
            errors.append("elite_survival_percentage must be in [0, 100]")

        return (len(errors) == 0, errors)


# =============================================================================
# Genetic Algorithm
# =============================================================================


class GeneticAlgorithm(Generic[T]):
    """
    Population-based search over fixed-size genomes.

    Example:
        >>> ga = GeneticAlgorithm(score, GenomeLayout(size=3), max_generation=None, seed=7)
        >>> ga.termination.set_fitness_goal(3)
        >>> ga.initialize_population(50)
        >>> best = ga.solve()
    """

    def __init__(
        self,
        fitness_function: FitnessFunction,
        layout: GenomeLayout[T] | int,
        maximize: bool = True,
        max_generation: int | None = 500,
        mutation_percentage: float | None = None,
        elite_percentage: float = 15.0,
        selection: SelectionMethod | str = SelectionMethod.FAST,
        crossover: CrossoverMethod | str = CrossoverMethod.UNIFORM,
        *,
        seed: int | None = None,
        selection_config: SelectionConfig | None = None,
        crossover_config: CrossoverConfig | None = None,
        aging_config: AgingConfig | None = None,
        repair_function: RepairFunction | None = None,
        history_limit: int | None = None,
    ):
        """
        Initialize the engine.

        Args:
            fitness_function: Scores a decoded genome; must be pure
            layout: Genome layout, or a byte count for raw ``bytes`` genomes
            maximize: True to maximize fitness, False to minimize
            max_generation: Generation cap (``None`` for no cap)
            mutation_percentage: Mutation chance in percent (overrides crossover_config)
            elite_percentage: Share of the population kept as elite, in percent
            selection: Parent selection method
            crossover: Crossover method
            seed: Random seed (derived from the wall clock if None)
            selection_config: Selection probability bands
            crossover_config: Mutation chance and MIXED crossover weights
            aging_config: Age-based eviction settings
            repair_function: Optional hook restoring genome validity
            history_limit: Generations kept in ``history`` (None keeps all, 0 records none)
        """
        if fitness_function is None:
            raise ConfigurationError("No fitness function")

        self.fitness_function = fitness_function
        self.layout: GenomeLayout[T] = as_layout(layout)
        self.maximize = maximize

        self.seed = seed if seed is not None else time.time_ns() % (2**32)
        self.rng = random.Random(self.seed)

        crossover_config = crossover_config or CrossoverConfig()
        if mutation_percentage is not None:
            crossover_config = replace(crossover_config, mutation_percentage=mutation_percentage)

        self.elite_percentage = 0.0
        self.set_elite_percentage(elite_percentage)

        self.aging = aging_config or AgingConfig()
        is_valid, errors = self.aging.validate()
        if not is_valid:
            raise ConfigurationError(f"Invalid aging config: {', '.join(errors)}")

        self._selector = ParentSelector(selection, self.rng, selection_config)
        self._crossover = CrossoverOperator(self.rng, crossover_config)
        self.crossover_method = CrossoverMethod(crossover)

        self._repair_function: RepairFunction | None = None
        self._repair_enabled = False
        if repair_function is not None:
            self.set_repair_function(repair_function)

        self.termination = TerminationConditions(max_generation)

        if history_limit is not None and history_limit < 0:
            raise ConfigurationError(f"history_limit must be >= 0 or None (got {history_limit})")
        self.history_limit = history_limit

        self._population: list[Individual[T]] = []
        self.generation = 0
        self.termination_reason: TerminationReason | None = None
        self.history = self._new_history()

        logger.info(
            "Initialized GeneticAlgorithm",
            genome_size=self.layout.size,
            maximize=maximize,
            selection=self._selector.method.value,
            crossover=self.crossover_method.value,
            seed=self.seed,
        )

    @classmethod
    def from_config(
        cls,
        fitness_function: FitnessFunction,
        layout: GenomeLayout[T] | int,
        config: KodonConfig,
        repair_function: RepairFunction | None = None,
    ) -> GeneticAlgorithm[T]:
        """
        Build an engine from a ``KodonConfig`` and seed its initial population.

        Args:
            fitness_function: Scores a decoded genome
            layout: Genome layout or byte count
            config: Loaded configuration
            repair_function: Optional repair hook

        Returns:
            Engine with termination conditions applied and population initialized
        """
        engine = config.engine
        ga = cls(
            fitness_function,
            layout,
            maximize=engine.maximize,
            max_generation=config.termination.max_generation,
            elite_percentage=engine.elite_percentage,
            selection=engine.selection,
            crossover=engine.crossover,
            seed=engine.seed,
            selection_config=config.selection.to_config(),
            crossover_config=config.crossover.to_config(),
            aging_config=config.aging.to_config(),
            repair_function=repair_function,
            history_limit=engine.history_limit,
        )
        config.termination.apply(ga.termination)
        ga.initialize_population(engine.population_size)
        return ga

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def selection_method(self) -> SelectionMethod:
        return self._selector.method

    @selection_method.setter
    def selection_method(self, method: SelectionMethod | str) -> None:
        self._selector.method = SelectionMethod(method)

    @property
    def mutation_percentage(self) -> float:
        return self._crossover.mutation_percentage

    def set_elite_percentage(self, elite_percentage: float) -> None:
        if not (0.0 <= elite_percentage <= 100.0):
            raise ConfigurationError(f"elite_percentage must be in [0, 100] (got {elite_percentage})")
        self.elite_percentage = float(elite_percentage)

    def set_kick_out_age(self, kick_out_age: int, except_best: bool = True) -> None:
        """Evict elite individuals once they reach ``kick_out_age`` generations."""
        if not self._population:
            raise ConfigurationError("No population yet, use initialize_population(size)")
        if kick_out_age < 0:
            raise ConfigurationError(f"kick_out_age must be >= 0 (got {kick_out_age})")
        self.aging = replace(self.aging, kick_out_age=kick_out_age, except_best=except_best)

    def disable_kick_out(self) -> None:
        self.aging = replace(self.aging, kick_out_age=None)

    def set_repair_function(self, repair_function: RepairFunction) -> None:
        """Register and enable a repair hook applied to every new genome."""
        self._repair_function = repair_function
        self.repair_enabled = True

    @property
    def repair_enabled(self) -> bool:
        return self._repair_enabled

    @repair_enabled.setter
    def repair_enabled(self, status: bool) -> None:
        if status and self._repair_function is None:
            raise ConfigurationError("Repair function not found")
        self._repair_enabled = status
        self._crossover.repair = (
            self.layout.wrap_repair(self._repair_function) if status else None
        )

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    @property
    def population(self) -> list[Individual[T]]:
        return self._population

    @property
    def population_size(self) -> int:
        return len(self._population)

    @property
    def elite_count(self) -> int:
        """Number of elite slots: ``ceil(elite_percentage * N / 100)``."""
        return self._percentage_size(self.elite_percentage)

    def _percentage_size(self, percentage: float) -> int:
        if percentage == 0:
            return 0
        if not self._population:
            raise ConfigurationError("No population yet")
        return math.ceil(percentage * len(self._population) / 100)

    def generate_random_genome(self) -> T:
        """Random genome value, repaired when a repair hook is enabled."""
        return self.layout.decode(self._random_raw())

    def _random_raw(self) -> bytes:
        raw = self.layout.random(self.rng)
        if self._crossover.repair is not None:
            raw = self._crossover.repair(raw)
        return raw

    def _new_individual(self, raw: bytes) -> Individual[T]:
        return Individual.from_bytes(self.fitness_function, raw, self.layout)

    def initialize_population(self, size: int) -> None:
        """Create ``size`` random individuals."""
        self._check_population_size(size)
        self._population = [self._new_individual(self._random_raw()) for _ in range(size)]
        logger.info(f"Initialized random population of {size}")

    def initialize_population_from(self, individuals: Iterable[Individual[T]]) -> None:
        """Start from caller-supplied individuals."""
        population = list(individuals)
        self._check_population_size(len(population))
        for individual in population:
            if individual.layout.size != self.layout.size:
                raise InvalidGenomeSize(self.layout.size, individual.layout.size)
        self._population = population
        logger.info(f"Initialized population from {len(population)} individuals")

    @staticmethod
    def _check_population_size(size: int) -> None:
        if size < MIN_POPULATION_SIZE:
            raise ConfigurationError(
                f"Population size must be greater than {MIN_POPULATION_SIZE - 1} (got {size})",
                context={"population_size": size},
            )

    def sort_population(self) -> None:
        """Best first under the objective; older individuals win ties."""
        self._population.sort(key=rank_key(self.maximize))

    @property
    def best(self) -> Individual[T]:
        if not self._population:
            raise ConfigurationError("No population yet")
        return min(self._population, key=rank_key(self.maximize))

    # -------------------------------------------------------------------------
    # Generation Loop
    # -------------------------------------------------------------------------

    def solve(self) -> Individual[T]:
        """
        Run generations until a termination condition fires.

        Returns:
            Best individual of the final generation
        """
        if not self._population:
            raise ConfigurationError("No population, use initialize_population(size)")

        self.termination.start(self.maximize)
        self.history = self._new_history()
        self.termination_reason = None
        self.generation = 0

        logger.info(f"Start solving (max generation: {self.termination.max_generation})")

        with LogContext(seed=self.seed):
            while True:
                self.sort_population()
                best = self._population[0]
                if self.history_limit != 0:
                    self.history.record_generation(
                        self.generation, self._population, self.termination.elapsed_ms
                    )

                reason = self.termination.check(self.generation, best.fitness)
                if reason is not None:
                    self.termination_reason = reason
                    self.history.termination_reason = reason.value
                    logger.info(
                        f"Stopped on {reason.value} at generation {self.generation} "
                        f"with best fitness {best.fitness}",
                        elapsed_ms=round(self.termination.elapsed_ms, 3),
                    )
                    return best

                next_generation = self._select_survivors()
                self._mate(next_generation)
                self._population = next_generation

                logger.debug(
                    f"Generation: {self.generation}\tFitness: {best.fitness}"
                )
                self.generation += 1

    def _new_history(self) -> EvolutionHistory:
        return EvolutionHistory(
            maximize=self.maximize, seed=self.seed, max_records=self.history_limit
        )

    def _select_survivors(self) -> list[Individual[T]]:
        """Carry the elite into the next generation as aged clones."""
        population = self._population
        elite = self.elite_count
        survivors: list[Individual[T]] = []

        def keep(individual: Individual[T]) -> None:
            survivor = individual.clone()
            survivor.increment_age()
            survivors.append(survivor)

        if not self.aging.enabled:
            for individual in population[:elite]:
                keep(individual)
            return survivors

        if elite == 0:
            return survivors

        kick_out_age = self.aging.kick_out_age
        best = population[0]
        if (
            self.aging.except_best
            or best.age < kick_out_age
            or self.rng.random() * 100.0 < self.aging.best_survival_percentage
        ):
            keep(best)

        for individual in population[1:]:
            if len(survivors) >= elite:
                break
            if (
                individual.age < kick_out_age
                or self.rng.random() * 100.0 < self.aging.elite_survival_percentage
            ):
                keep(individual)

        # Keep the elite count by backfilling with newcomers
        while len(survivors) < elite:
            survivors.append(self._new_individual(self._random_raw()))

        return survivors

    def _mate(self, next_generation: list[Individual[T]]) -> None:
        """Fill the remaining slots with offspring."""
        population = self._population
        self._selector.prepare([ind.fitness for ind in population], self.elite_count)

        for _ in range(len(population) - len(next_generation)):
            p1, p2 = self._selector.select()
            child = self._crossover.crossover(
                population[p1].raw, population[p2].raw, self.crossover_method
            )
            next_generation.append(self._new_individual(child))


__all__ = [
    "MIN_POPULATION_SIZE",
    "AgingConfig",
    "GeneticAlgorithm",
]
