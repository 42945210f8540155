"""
Traveling Salesman Example

Minimization with a repair hook. Each genome byte names a city; crossover can
duplicate or drop cities, so the repair function turns every child back into
a permutation before it is scored.
"""

import math
import random

import numpy as np

from kodon import CrossoverMethod, GeneticAlgorithm, GenomeLayout, SelectionMethod
from kodon.monitoring import configure_logging


CITIES = [
    (-10, 10), (-11, 20), (22, 20), (-151, -25), (-211, 24), (-66, -32), (-34, 54),
    (-43, 76), (-62, -78), (-55, 99), (221, -12), (12, 20), (124, -30),
]
N = len(CITIES)

_shuffle = random.Random(0)


def repair(tour: np.ndarray) -> np.ndarray:
    """Replace duplicated cities with the missing ones."""
    tour = tour % N
    positions: list[list[int]] = [[] for _ in range(N)]
    for i, city in enumerate(tour):
        positions[city].append(i)

    missing = [city for city in range(N) if not positions[city]]
    duplicates = []
    for slots in positions:
        if len(slots) > 1:
            _shuffle.shuffle(slots)
            duplicates.extend(slots[:-1])
    _shuffle.shuffle(missing)

    for slot, city in zip(duplicates, missing):
        tour[slot] = city
    return tour


def tour_length(tour: np.ndarray) -> float:
    route = [CITIES[c % N] for c in tour]
    return sum(math.dist(route[i - 1], route[i]) for i in range(N))


def main():
    configure_logging("INFO")

    ga = GeneticAlgorithm(
        tour_length,
        GenomeLayout.array(N, np.uint8),
        maximize=False,
        max_generation=None,
        mutation_percentage=4,
        elite_percentage=30,
        selection=SelectionMethod.MIXED,
        crossover=CrossoverMethod.MIXED,
        repair_function=repair,
        history_limit=1000,
    )
    ga.termination.set_fitness_goal(1010)
    ga.termination.set_max_running_time_ms(10_000)
    ga.termination.set_max_iterations(500)
    ga.initialize_population(500)
    ga.set_kick_out_age(20, except_best=False)

    best = ga.solve()
    route = "".join(chr(ord("A") + c) for c in best.genome)
    print(f"Best: {route} (length {best.fitness:.1f}, age {best.age}, stopped on {ga.termination_reason.value})")


if __name__ == "__main__":
    main()
