"""Deterministic random source for zone generation.

A tiny linear congruential generator. It is deliberately independent of the
``random`` module's global state so two generations with different seeds can
run side by side without interfering, and the same seed always reproduces the
same zone.
"""
from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

_MULTIPLIER = 9301
_INCREMENT = 49297
_MODULUS = 233280


def random_seed() -> int:
    return random.randint(1, 1_000_000)


class SeededRandom:
    """LCG producing floats in [0, 1).

    ``seed=None`` draws a fresh seed; 0 is a valid deterministic seed.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = random_seed()
        self.seed = int(seed)
        self._state = self.seed

    def random(self) -> float:
        self._state = (self._state * _MULTIPLIER + _INCREMENT) % _MODULUS
        return self._state / _MODULUS

    def randint_below(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        return int(self.random() * n)

    def randint(self, a: int, b: int) -> int:
        """Uniform integer in [a, b] inclusive."""
        return a + self.randint_below(b - a + 1)

    def choice(self, seq: Sequence[T]) -> T:
        return seq[self.randint_below(len(seq))]

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a Fisher-Yates shuffled copy of ``items``."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.randint_below(i + 1)
            result[i], result[j] = result[j], result[i]
        return result

    def __repr__(self):
        return f"<SeededRandom seed={self.seed}>"


__all__ = ["SeededRandom", "random_seed"]
