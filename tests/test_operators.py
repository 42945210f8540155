"""
Unit tests for crossover and mutation operators.

Tests cover:
- Child length for every crossover method
- Bit provenance for uniform, one-point and two-point crossover
- Post-crossover mutation events
- MIXED method weights
- Repair hook
- Configuration validation
"""

import pytest

from kodon.exceptions import ConfigurationError, InvalidGenomeSize
from kodon.genome import CrossoverConfig, CrossoverMethod, CrossoverOperator, MutationType


def _operator(rng, mutation=0.0, **kwargs):
    return CrossoverOperator(rng, CrossoverConfig(mutation_percentage=mutation, **kwargs))


ZEROS = bytes(16)
ONES = b"\xff" * 16


# ============================================================================
# Crossover Tests
# ============================================================================

class TestCrossoverOperator:
    """Test recombination of raw genomes."""

    @pytest.mark.parametrize("method", list(CrossoverMethod))
    @pytest.mark.parametrize("size", [1, 2, 7, 32])
    def test_child_has_parent_length(self, rng, method, size):
        operator = _operator(rng, mutation=10.0)
        p1 = bytes(rng.getrandbits(8) for _ in range(size))
        p2 = bytes(rng.getrandbits(8) for _ in range(size))
        for _ in range(20):
            assert len(operator.crossover(p1, p2, method)) == size

    @pytest.mark.parametrize("method", list(CrossoverMethod))
    def test_identical_parents_without_mutation(self, rng, method):
        operator = _operator(rng)
        parent = bytes(range(40, 60))
        for _ in range(20):
            assert operator.crossover(parent, parent, method) == parent

    def test_parent_length_mismatch(self, rng):
        with pytest.raises(InvalidGenomeSize):
            _operator(rng).crossover(b"\x00\x01", b"\x00", CrossoverMethod.UNIFORM)

    def test_uniform_bits_come_from_parents(self, rng):
        operator = _operator(rng)
        p1 = b"\x00" * 32
        p2 = b"\x0f" * 32
        for _ in range(20):
            child = operator.uniform(p1, p2)
            assert all(b & 0xF0 == 0 for b in child)

    def test_uniform_mixes_both_parents(self, rng):
        operator = _operator(rng)
        child = operator.uniform(bytes(64), b"\xff" * 64)
        ones = sum(bin(b).count("1") for b in child)
        # 512 bits split roughly evenly between the parents
        assert 150 < ones < 362

    def test_uniform_full_mutation_randomizes_bits(self, rng):
        operator = _operator(rng, mutation=100.0)
        child = operator.uniform(bytes(64), bytes(64))
        assert any(child)

    def test_one_point_keeps_prefix_and_suffix(self, rng):
        operator = _operator(rng)
        for _ in range(50):
            child = operator.one_point(ZEROS, ONES)
            # zeros, one bit-crossed byte, then ones
            assert child == bytes(sorted(child))
            assert sum(b not in (0x00, 0xFF) for b in child) <= 1

    def test_one_point_split_byte_takes_low_bits_from_first_parent(self, rng):
        operator = _operator(rng)
        for _ in range(50):
            child = operator.one_point(ZEROS, ONES)
            for b in child:
                low = b & -b
                # every set bit lies above every clear bit
                assert b == 0 or b == (0xFF & ~(low - 1))

    def test_two_point_middle_comes_from_second_parent(self, rng):
        operator = _operator(rng)
        for _ in range(50):
            child = operator.two_point(ZEROS, ONES)
            touched = [i for i, b in enumerate(child) if b]
            if touched:
                assert touched == list(range(touched[0], touched[-1] + 1))
            assert sum(b not in (0x00, 0xFF) for b in child) <= 2

    def test_two_point_outside_comes_from_first_parent(self, rng):
        operator = _operator(rng)
        shapes = [operator.two_point(ZEROS, ONES) for _ in range(50)]
        assert any(c[0] == 0 and c[-1] == 0 and 0xFF in c for c in shapes)

    def test_repair_hook_applied(self, rng):
        operator = CrossoverOperator(
            rng,
            CrossoverConfig(mutation_percentage=5.0),
            repair=lambda raw: bytes(sorted(raw)),
        )
        for method in CrossoverMethod:
            child = operator.crossover(bytes(range(16, 0, -1)), bytes(range(16)), method)
            assert child == bytes(sorted(child))


# ============================================================================
# Mutation Tests
# ============================================================================

class TestMutation:
    """Test the single post-crossover mutation event."""

    def test_no_mutation_at_zero_percent(self, rng):
        operator = _operator(rng)
        genome = bytearray(range(8))
        for _ in range(100):
            assert operator.mutate(genome) is None
        assert genome == bytearray(range(8))

    def test_flip_bit_changes_exactly_one_bit(self, rng):
        operator = _operator(rng, mutation=100.0)
        seen = set()
        for _ in range(200):
            genome = bytearray(8)
            event = operator.mutate(genome)
            seen.add(event)
            if event is MutationType.FLIP_BIT:
                assert sum(bin(b).count("1") for b in genome) == 1
            else:
                assert event is MutationType.SWAP_BYTES
                assert genome == bytearray(8)
        assert seen == {MutationType.FLIP_BIT, MutationType.SWAP_BYTES}

    def test_swap_preserves_byte_multiset(self, rng):
        operator = _operator(rng, mutation=100.0)
        for _ in range(100):
            genome = bytearray(range(10))
            operator.mutate(genome)
            if genome != bytearray(range(10)) and sorted(genome) == list(range(10)):
                return
        pytest.fail("no swap mutation observed")


# ============================================================================
# Mixed Crossover Tests
# ============================================================================

class TestMixedCrossover:
    """Test weighted choice of the crossover method."""

    def test_single_weight_always_chosen(self, rng):
        operator = _operator(rng, uniform_weight=0.0, one_point_weight=100.0, two_point_weight=0.0)
        assert {operator.select_method() for _ in range(100)} == {CrossoverMethod.ONE_POINT}

    def test_default_weights(self, rng):
        operator = _operator(rng)
        counts = {method: 0 for method in CrossoverMethod}
        for _ in range(10_000):
            counts[operator.select_method()] += 1
        assert counts[CrossoverMethod.MIXED] == 0
        assert 3_600 < counts[CrossoverMethod.UNIFORM] < 4_400
        assert 2_100 < counts[CrossoverMethod.ONE_POINT] < 2_900
        assert 3_100 < counts[CrossoverMethod.TWO_POINT] < 3_900


# ============================================================================
# Configuration Tests
# ============================================================================

class TestCrossoverConfig:
    """Test crossover configuration validation."""

    def test_defaults_valid(self):
        is_valid, errors = CrossoverConfig().validate()
        assert is_valid
        assert errors == []

    def test_weights_must_sum_to_100(self, rng):
        config = CrossoverConfig(uniform_weight=50.0, one_point_weight=10.0, two_point_weight=30.0)
        assert not config.validate()[0]
        with pytest.raises(ConfigurationError):
            CrossoverOperator(rng, config)

    def test_mutation_percentage_range(self, rng):
        with pytest.raises(ConfigurationError):
            CrossoverOperator(rng, CrossoverConfig(mutation_percentage=150.0))
