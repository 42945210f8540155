"""
Kodon Genome Evolution System

Generic genetic-algorithm engine over fixed-size byte genomes:
- Genome layouts and range helpers
- Individuals with cached fitness and age
- Parent selection and crossover/mutation operators
- Termination conditions
- The population engine and its run history
"""

# Core encoding
from .encoding import (
    GenomeLayout,
    LayoutKind,
    as_layout,
    range_modulus,
    decode_range,
    range_modulus_float,
    decode_range_float,
)

from .individual import Individual, rank_key, is_better

# Evolution operators
from .operators import (
    CrossoverConfig,
    CrossoverMethod,
    CrossoverOperator,
    MutationType,
)

from .selection import (
    SelectionConfig,
    SelectionMethod,
    FastSelection,
    RouletteWheelSelection,
    ParentSelector,
    biased_random,
)

from .termination import TerminationConditions, TerminationReason

# Population management
from .population import AgingConfig, GeneticAlgorithm, MIN_POPULATION_SIZE

# Evolution history
from .history import EvolutionHistory, GenerationRecord, PopulationStatistics

__all__ = [
    # Encoding
    "GenomeLayout",
    "LayoutKind",
    "as_layout",
    "range_modulus",
    "decode_range",
    "range_modulus_float",
    "decode_range_float",
    # Individual
    "Individual",
    "rank_key",
    "is_better",
    # Operators
    "CrossoverConfig",
    "CrossoverMethod",
    "CrossoverOperator",
    "MutationType",
    "SelectionConfig",
    "SelectionMethod",
    "FastSelection",
    "RouletteWheelSelection",
    "ParentSelector",
    "biased_random",
    # Termination
    "TerminationConditions",
    "TerminationReason",
    # Population
    "AgingConfig",
    "GeneticAlgorithm",
    "MIN_POPULATION_SIZE",
    # History
    "EvolutionHistory",
    "GenerationRecord",
    "PopulationStatistics",
]
