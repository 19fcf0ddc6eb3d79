"""Injectable uniform random sources for the simulation kernel."""

import copy
from abc import ABC, abstractmethod

import numpy as np


class RandomSource(ABC):
    """Uniform(0, 1) draws, splittable into independent child streams."""

    @abstractmethod
    def uniform(self, size: int) -> np.ndarray:
        """Return ``size`` independent draws from [0, 1)."""

    @abstractmethod
    def spawn(self, n: int) -> list["RandomSource"]:
        """Return ``n`` statistically independent child sources."""

    def clone(self) -> "RandomSource":
        """Independent copy with identical state (replays the same draws)."""
        return copy.deepcopy(self)


class NumpyRandomSource(RandomSource):
    """PCG64 generator seeded from a ``SeedSequence``.

    ``seed=None`` pulls fresh OS entropy (production); an int makes every run,
    and every spawned child, reproducible (tests, "same seed" UI toggles).
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None) -> None:
        if isinstance(seed, np.random.SeedSequence):
            self._seed_seq = seed
        else:
            self._seed_seq = np.random.SeedSequence(seed)
        self._rng = np.random.Generator(np.random.PCG64(self._seed_seq))

    @property
    def entropy(self) -> int:
        return self._seed_seq.entropy

    def uniform(self, size: int) -> np.ndarray:
        return self._rng.random(size)

    def spawn(self, n: int) -> list["RandomSource"]:
        return [NumpyRandomSource(child) for child in self._seed_seq.spawn(n)]

