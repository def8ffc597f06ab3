from __future__ import annotations

import random
from collections.abc import Callable, Hashable
from typing import Any, TypeVar

T = TypeVar("T")


class Randomizer:
    """RNG with seed for reproducibility.

    Every randomized step of generation draws from one instance, so a fixed
    seed replays a whole search exactly.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self.rng = random.Random(seed)

    def shuffle(self, items: list[Any]) -> None:
        """Shuffle list in-place."""
        self.rng.shuffle(items)

    def choice(self, items: list[T]) -> T:
        """Pick random item from list."""
        return self.rng.choice(items)

    def uniform(self, low: float, high: float) -> float:
        return self.rng.uniform(low, high)

    def coin(self) -> bool:
        return self.rng.random() < 0.5

    def shuffle_within_groups(self, items: list[T], key: Callable[[T], Hashable]) -> None:
        """Shuffle runs of adjacent items sharing the same key, in place.

        ``items`` is expected to be sorted by ``key`` already; the relative
        order of the groups is kept.
        """
        i = 0
        while i < len(items):
            j = i + 1
            current = key(items[i])
            while j < len(items) and key(items[j]) == current:
                j += 1
            if j - i > 1:
                group = items[i:j]
                self.rng.shuffle(group)
                items[i:j] = group
            i = j
