"""
Pytest configuration and shared fixtures for Kodon tests.

This module provides reusable test fixtures for:
- Seeded random generators
- Sample fitness functions and genome layouts
- Engine factories
- Loguru message capture
"""

import random

import numpy as np
import pytest
from loguru import logger

from kodon import GeneticAlgorithm, GenomeLayout


TARGET = b"K\x9d\x07"


# ============================================================================
# Randomness
# ============================================================================

@pytest.fixture
def rng():
    """Seeded generator so stochastic assertions are reproducible."""
    return random.Random(1234)


# ============================================================================
# Fitness Fixtures
# ============================================================================

def match_count(genome: bytes) -> float:
    """Number of bytes equal to TARGET at the same position."""
    return float(sum(a == b for a, b in zip(genome, TARGET)))


@pytest.fixture
def target():
    return TARGET


@pytest.fixture
def password_fitness():
    return match_count


@pytest.fixture
def byte_sum_fitness():
    """Fitness equal to the sum of all genome bytes."""
    return lambda genome: float(sum(genome))


@pytest.fixture
def array_layout():
    return GenomeLayout.array(6, np.uint8)


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def make_engine():
    """Factory building a seeded engine with a ready population."""

    def factory(fitness_function=match_count, layout=3, population_size=50, **kwargs):
        kwargs.setdefault("seed", 42)
        ga = GeneticAlgorithm(fitness_function, layout, **kwargs)
        ga.initialize_population(population_size)
        return ga

    return factory


# ============================================================================
# Logging Fixtures
# ============================================================================

@pytest.fixture
def log_records():
    """Collect loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
