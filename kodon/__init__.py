"""
Kodon - genetic algorithm engine for fixed-size genomes.

Callers describe a genome by its byte layout and supply a scoring function;
the engine evolves a population toward the best score it can find.

Quick start:
    >>> from kodon import GeneticAlgorithm, GenomeLayout
    >>> ga = GeneticAlgorithm(lambda g: sum(g), GenomeLayout(size=4), seed=1)
    >>> ga.initialize_population(50)
    >>> best = ga.solve()
"""

__version__ = "0.1.0"

from .exceptions import ConfigurationError, InvalidGenomeSize, KodonError
from .genome import (
    AgingConfig,
    CrossoverConfig,
    CrossoverMethod,
    EvolutionHistory,
    GeneticAlgorithm,
    GenomeLayout,
    Individual,
    SelectionConfig,
    SelectionMethod,
    TerminationConditions,
    TerminationReason,
)
from .config import KodonConfig, load_config

__all__ = [
    "__version__",
    "KodonError",
    "ConfigurationError",
    "InvalidGenomeSize",
    "AgingConfig",
    "CrossoverConfig",
    "CrossoverMethod",
    "EvolutionHistory",
    "GeneticAlgorithm",
    "GenomeLayout",
    "Individual",
    "SelectionConfig",
    "SelectionMethod",
    "TerminationConditions",
    "TerminationReason",
    "KodonConfig",
    "load_config",
]
