"""Deterministic RNG utilities for reproducible card shuffling."""

import secrets
import random
from typing import List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
SEED_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def imul(a: int, b: int) -> int:
    """Wrapping 32-bit multiplication, returned as an unsigned integer."""
    return (a * b) & MASK32


def seed_hash(seed: str) -> int:
    """Fold a text seed into an unsigned 32-bit integer.

    Args:
        seed: Any text, including the empty string

    Returns:
        Integer in [0, 2**32)
    """
    h = (1779033703 ^ len(seed)) & MASK32
    for ch in seed:
        h = imul(h ^ ord(ch), 3432918353)
        h = ((h << 13) | (h >> 19)) & MASK32

    # Final avalanche so short seeds spread over the whole 32-bit space
    h = imul(h ^ (h >> 16), 2246822507)
    h = imul(h ^ (h >> 13), 3266489909)
    return (h ^ (h >> 16)) & MASK32


def mulberry32_step(state: int) -> Tuple[float, int]:
    """Advance a mulberry32 state once.

    Args:
        state: Current unsigned 32-bit state

    Returns:
        Tuple of (float in [0, 1), new state)
    """
    state = (state + MULBERRY_INCREMENT) & MASK32
    t = state
    t = imul(t ^ (t >> 15), t | 1)
    t ^= (t + imul(t ^ (t >> 7), t | 61)) & MASK32
    t = (t ^ (t >> 14)) & MASK32
    return t / 4294967296, state


class Mulberry32:
    """Stateful mulberry32 generator seeded from text."""

    def __init__(self, seed: str):
        self.state = seed_hash(seed)
        self.draws = 0

    def next(self) -> float:
        value, self.state = mulberry32_step(self.state)
        self.draws += 1
        return value

    def __call__(self) -> float:
        return self.next()


def shuffle_with_seed(cards: Sequence[T], seed: str) -> List[T]:
    """Shuffle a sequence deterministically with Fisher-Yates.

    Args:
        cards: Items to shuffle; left untouched
        seed: Text seed driving the permutation

    Returns:
        New list holding a permutation of ``cards``
    """
    rand = Mulberry32(seed)
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rand.next() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def create_seed(rng: Optional[random.Random] = None, length: int = 8) -> str:
    """Create a fresh base-36 seed.

    Uses the system entropy source unless ``rng`` is given, so tests can pass
    a seeded ``random.Random``. Never used on the shuffle path.
    """
    source = rng if rng is not None else secrets.SystemRandom()
    return "".join(source.choice(SEED_ALPHABET) for _ in range(length))
