"""Seedable random source shared by every part of the simulation.

Each stream is a numpy Generator keyed by ``(seed, *key)`` so parallel tasks
can draw from their own stream without depending on scheduling order.
"""

from __future__ import annotations

import numpy as np


class DeterministicRng:
    def __init__(self, seed: int | None, *key: int):
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)
        self._seed = int(seed)
        self._key = tuple(int(k) for k in key)
        self._generator = np.random.default_rng(
            np.random.SeedSequence(self._seed, spawn_key=self._key)
        )

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def key(self) -> tuple[int, ...]:
        return self._key

    def derive(self, *key: int) -> "DeterministicRng":
        """Independent stream for ``key``, appended to this stream's own key."""
        return DeterministicRng(self._seed, *self._key, *key)

    def next_float(self, size=None):
        return self._generator.random(size)

    def next_range(self, low: float, high: float, size=None):
        return self._generator.uniform(low, high, size)

    def next_normal(self, mean: float, std: float, size=None):
        return self._generator.normal(mean, std, size)

    def next_sign(self, size=None):
        return self._generator.choice(np.array([-1, 1], dtype=np.int8), size)
