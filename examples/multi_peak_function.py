"""
Multi-Peak Function Example

Maximize f(x) = x * (0.4 + sin(x / 2)) over [-205, 205] with three decimals.
The genome is a single uint32 mapped onto the range with the range helpers.
"""

import math

import numpy as np

from kodon import GeneticAlgorithm, GenomeLayout
from kodon.genome import decode_range_float, range_modulus_float
from kodon.monitoring import configure_logging


LOW, HIGH, POINTS = -205, 205, 3
MOD = range_modulus_float(LOW, HIGH, POINTS)

LAYOUT = GenomeLayout.record(np.dtype([("x", "<u4")]))


def decode(genome) -> float:
    return decode_range_float(int(genome["x"]), MOD, LOW, POINTS)


def fitness(genome) -> float:
    x = decode(genome)
    return x * (0.4 + math.sin(x / 2))


def main():
    configure_logging("INFO")

    ga = GeneticAlgorithm(fitness, LAYOUT, maximize=True, max_generation=1500,
                          mutation_percentage=2, elite_percentage=30)
    ga.initialize_population(300)
    ga.termination.set_max_iterations(150)

    best = ga.solve()
    print(f"Best: f({decode(best.genome):.3f}) = {best.fitness:.3f}")


if __name__ == "__main__":
    main()
