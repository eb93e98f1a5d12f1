"""Tests for seed hashing, mulberry32 and the seeded shuffle."""

import random

import pytest

from arcana.utils import rng as rng_module
from arcana.utils.rng import (
    MASK32,
    Mulberry32,
    create_seed,
    imul,
    mulberry32_step,
    seed_hash,
    shuffle_with_seed,
)


class TestSeedHash:
    """Text seeds fold into stable 32-bit integers."""

    def test_same_text_same_hash(self):
        assert seed_hash("abc-conver") == seed_hash("abc-conver")

    def test_empty_string_is_fixed(self):
        h = seed_hash("")
        assert h == 167010153
        assert h == seed_hash("")
        assert 0 <= h <= MASK32

    def test_range(self):
        for seed in ["a", "abc", "é", "🜁", "x" * 500]:
            assert 0 <= seed_hash(seed) <= MASK32

    def test_distinct_short_seeds(self):
        hashes = {seed_hash(f"seed-{i}") for i in range(200)}
        assert len(hashes) == 200


class TestMulberry32:
    """The generator is bit-for-bit reproducible from its state."""

    def test_step_is_pure(self):
        assert mulberry32_step(12345) == mulberry32_step(12345)

    def test_known_first_output(self):
        assert mulberry32_step(0) == (0.26642920868471265, 1831565813)

    def test_state_advances_by_increment(self):
        _, state = mulberry32_step(0)
        assert state == 0x6D2B79F5
        _, state = mulberry32_step(MASK32)
        assert state == 0x6D2B79F4

    def test_outputs_in_unit_interval(self):
        gen = Mulberry32("range")
        for _ in range(5000):
            value = gen.next()
            assert 0.0 <= value < 1.0

    def test_same_seed_same_sequence(self):
        a = Mulberry32("test_seed")
        b = Mulberry32("test_seed")
        assert [a() for _ in range(20)] == [b() for _ in range(20)]

    def test_different_seeds_different_sequences(self):
        a = Mulberry32("seed1")
        b = Mulberry32("seed2")
        assert [a() for _ in range(10)] != [b() for _ in range(10)]

    def test_generator_matches_step_function(self):
        gen = Mulberry32("stepwise")
        state = seed_hash("stepwise")
        for _ in range(10):
            expected, state = mulberry32_step(state)
            assert gen.next() == expected
        assert gen.state == state

    def test_imul_wraps(self):
        assert imul(0xFFFFFFFF, 2) == 0xFFFFFFFE
        assert imul(-1, 1) == MASK32


class TestShuffle:
    """Fisher-Yates permutation driven by a text seed."""

    deck = [f"card_{i}" for i in range(78)]

    def test_deterministic(self):
        assert shuffle_with_seed(self.deck, "seed") == shuffle_with_seed(self.deck, "seed")

    def test_permutation(self):
        shuffled = shuffle_with_seed(self.deck, "seed")
        assert len(shuffled) == len(self.deck)
        assert sorted(shuffled) == sorted(self.deck)
        assert len(set(shuffled)) == len(self.deck)

    def test_input_not_mutated(self):
        deck = list(self.deck)
        shuffle_with_seed(deck, "seed")
        assert deck == self.deck

    def test_returns_new_list(self):
        deck = ["a"]
        assert shuffle_with_seed(deck, "x") is not deck

    def test_seed_sensitivity(self):
        for i in range(20):
            base = f"seed-{i}a"
            changed = f"seed-{i}b"
            assert shuffle_with_seed(self.deck, base) != shuffle_with_seed(self.deck, changed)

    def test_empty_seed_is_valid(self):
        assert shuffle_with_seed(self.deck, "") == shuffle_with_seed(self.deck, "")

    @pytest.mark.parametrize("size", [0, 1, 2, 5, 78])
    def test_consumes_length_minus_one_draws(self, monkeypatch, size):
        created = []

        class Counting(Mulberry32):
            def __init__(self, seed):
                super().__init__(seed)
                created.append(self)

        monkeypatch.setattr(rng_module, "Mulberry32", Counting)
        shuffle_with_seed(list(range(size)), "count")
        assert created[0].draws == max(size - 1, 0)

    def test_not_identity_for_full_deck(self):
        assert shuffle_with_seed(self.deck, "abc-conver") != self.deck


class TestCreateSeed:
    """Fresh base seeds come from an injectable source."""

    def test_injected_source_is_reproducible(self):
        assert create_seed(random.Random(42)) == create_seed(random.Random(42))

    def test_shape(self):
        seed = create_seed(random.Random(7))
        assert len(seed) == 8
        assert all(ch in "0123456789abcdefghijklmnopqrstuvwxyz" for ch in seed)

    def test_system_source(self):
        assert len(create_seed()) == 8
