from __future__ import annotations

import math
import random

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reseed(self, seed: int) -> None:
        self._seed = seed
        self._random.seed(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_bool(self, probability: float) -> bool:
        return self._random.random() < probability

    def next_range(self, low: float, high: float) -> float:
        # half-open [low, high)
        return low + (high - low) * self._random.random()

    def next_int(self, max_value: int) -> int:
        return self._random.randrange(max_value)

    def next_angle(self) -> float:
        return self._random.random() * math.tau

    def next_unit_circle(self) -> Vector2:
        angle = self.next_angle()
        return Vector2(math.cos(angle), math.sin(angle))

    def getstate(self) -> object:
        return self._random.getstate()
