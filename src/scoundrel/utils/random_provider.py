from __future__ import annotations

import random
from dataclasses import dataclass
from typing import MutableSequence, Optional


@dataclass
class RandomProvider:
    """
    Thin wrapper around random.Random to make RNG deterministic and injectable
    for tests while avoiding global state.
    """

    seed: Optional[int] = None

    def __post_init__(self):
        self._rng = random.Random(self.seed)

    def random(self) -> float:
        return self._rng.random()

    def randbelow(self, n: int) -> int:
        """Return a random integer in [0, n)."""
        return self._rng.randrange(n)

    def shuffle(self, items: MutableSequence) -> None:
        """Shuffle in place with Fisher-Yates."""
        for i in range(len(items) - 1, 0, -1):
            j = self.randbelow(i + 1)
            items[i], items[j] = items[j], items[i]
