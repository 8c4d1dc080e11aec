from __future__ import annotations

import math
import random

from pygame.math import Vector3


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_inside_unit_sphere(self) -> Vector3:
        # rejection sampling
        while True:
            point = Vector3(
                self._random.uniform(-1.0, 1.0),
                self._random.uniform(-1.0, 1.0),
                self._random.uniform(-1.0, 1.0),
            )
            if point.length_squared() <= 1.0:
                return point

    def next_yaw_forward(self) -> Vector3:
        yaw = math.radians(self._random.uniform(0.0, 360.0))
        return Vector3(math.sin(yaw), 0.0, math.cos(yaw))
