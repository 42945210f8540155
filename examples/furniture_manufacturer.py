"""
Furniture Manufacturer Example

Resource allocation loaded from a YAML config. Chairs and sofas compete for
carpentry, finishing and upholstery hours; infeasible plans score a very low
sentinel fitness instead of raising, which keeps the population sortable.
"""

from pathlib import Path

import numpy as np

from kodon import GeneticAlgorithm, GenomeLayout, load_config
from kodon.monitoring import configure_from_settings


INFEASIBLE = -1e9

LAYOUT = GenomeLayout.record(np.dtype([("chairs", "u1"), ("sofas", "u1")]))


def decode(genome) -> tuple[int, int]:
    return int(genome["chairs"]) % 21, int(genome["sofas"]) % 21


def profit(genome) -> float:
    chairs, sofas = decode(genome)

    carpentry = 3 * chairs + 2 * sofas
    finishing = 9 * chairs + 4 * sofas
    upholstery = 2 * chairs + 10 * sofas

    if carpentry > 66 or finishing > 180 or upholstery > 200:
        return INFEASIBLE

    return 90.0 * chairs + 75.0 * sofas


def main():
    config = load_config(Path(__file__).with_name("furniture_manufacturer.yaml"))
    configure_from_settings(config.logging)

    ga = GeneticAlgorithm.from_config(profit, LAYOUT, config)
    best = ga.solve()

    chairs, sofas = decode(best.genome)
    print(f"Best: chairs={chairs}, sofas={sofas}, profit=${best.fitness:.0f}")


if __name__ == "__main__":
    main()
