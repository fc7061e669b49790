from __future__ import annotations

import random
from typing import List, Protocol, Sequence, TypeVar

T = TypeVar("T")


class Randomizer(Protocol):
    def randbelow(self, n: int) -> int:
        """Return a uniformly distributed integer in ``[0, n)``."""


class StdRandomizer:
    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def randbelow(self, n: int) -> int:
        return self._random.randrange(n)


def fisher_yates(items: Sequence[T], randomizer: Randomizer) -> List[T]:
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = randomizer.randbelow(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sample(items: Sequence[T], k: int, randomizer: Randomizer) -> List[T]:
    return fisher_yates(items, randomizer)[:max(0, k)]
