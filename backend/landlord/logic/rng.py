"""Injectable randomness for grid placement and shop offers."""
import secrets
from abc import ABC, abstractmethod
from typing import TypeVar

T = TypeVar("T")


class RNGBase(ABC):
    """Abstract RNG interface."""

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    @abstractmethod
    def randint(self, a: int, b: int) -> int:
        """Return random int in [a, b] inclusive."""
        pass

    def shuffle(self, items: list[T]) -> list[T]:
        """
        Return a shuffled copy of items (Fisher-Yates).

        The input list is left untouched.
        """
        shuffled = list(items)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled


class ProductionRNG(RNGBase):
    """
    Production RNG.

    Uses a cryptographically secure source with no fixed seed, so every
    placement draws fresh randomness that no other subsystem shares.
    """

    def random(self) -> float:
        return secrets.randbelow(2**32) / (2**32)

    def randint(self, a: int, b: int) -> int:
        return secrets.randbelow(b - a + 1) + a


class SeededRNG(RNGBase):
    """
    Test/Simulation RNG.

    Deterministic, fully controlled by seed.
    """

    def __init__(self, seed: int):
        import random

        self._rng = random.Random(seed)
        self.seed = seed

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)
