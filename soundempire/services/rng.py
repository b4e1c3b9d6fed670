"""
Single randomness source for every randomized formula in the engine.

Everything derives from `random()`, so a subclass that scripts `random()`
pins down offers, streams, feed and bonuses in tests.
"""
from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self._random.random()

    def chance(self, p: float) -> bool:
        return self.random() < p

    def randint(self, a: int, b: int) -> int:
        """Uniform integer in [a, b], both ends inclusive."""
        return min(b, a + int(self.random() * (b - a + 1)))

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def choice(self, seq: Sequence[T]) -> T:
        return seq[min(len(seq) - 1, int(self.random() * len(seq)))]

    def weighted_choice(self, weights: Sequence[tuple[T, float]]) -> T:
        """Pick a value from (value, weight) pairs proportionally to weight."""
        total = sum(w for _, w in weights)
        roll = self.random() * total
        for value, weight in weights:
            roll -= weight
            if roll < 0:
                return value
        return weights[-1][0]

    def sample(self, seq: Sequence[T], k: int) -> list[T]:
        """k distinct items in draw order (partial Fisher-Yates)."""
        pool = list(seq)
        k = min(k, len(pool))
        for i in range(k):
            j = i + int(self.random() * (len(pool) - i))
            pool[i], pool[j] = pool[j], pool[i]
        return pool[:k]
