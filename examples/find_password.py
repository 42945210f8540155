"""
Find Password Example

Each genome byte indexes into a known alphabet; fitness counts characters
that already match the password. The run stops as soon as every character
matches.
"""

from kodon import GeneticAlgorithm, GenomeLayout
from kodon.monitoring import configure_logging


PASSWORD = "Ali Marouf ali marouf ALI MAROUF 2022"
ELEMENTS = "ALIMROUFalimrouf 20"


def decode(genome: bytes) -> str:
    return "".join(ELEMENTS[b % len(ELEMENTS)] for b in genome)


def fitness(genome: bytes) -> float:
    return float(sum(c == p for c, p in zip(decode(genome), PASSWORD)))


def main():
    configure_logging("INFO")

    ga = GeneticAlgorithm(
        fitness,
        GenomeLayout(size=len(PASSWORD)),
        maximize=True,
        max_generation=1000,
        mutation_percentage=2,
        elite_percentage=15,
    )
    ga.termination.set_fitness_goal(len(PASSWORD))
    ga.initialize_population(500)

    best = ga.solve()
    print(f"Best: {decode(best.genome)!r} (fitness {best.fitness}, generation {ga.generation})")


if __name__ == "__main__":
    main()
