from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Union, runtime_checkable

from pygame.math import Vector3

from .config import ObstacleConfig

_PARALLEL_EPSILON = 1e-12


@runtime_checkable
class SpatialQuery(Protocol):
    """Ray query against static geometry, filtered by a layer mask."""

    def cast(self, origin: Vector3, direction: Vector3, max_distance: float, mask: int) -> Optional[Vector3]:
        """Return the nearest hit point within `max_distance`, or None."""
        ...


@dataclass(slots=True)
class SphereObstacle:
    center: Vector3
    radius: float
    layer: int = 0

    def intersect(self, origin: Vector3, direction: Vector3) -> Optional[float]:
        offset = origin - self.center
        b = offset.dot(direction)
        c = offset.length_squared() - self.radius * self.radius
        if c <= 0.0:
            return 0.0
        discriminant = b * b - c
        if discriminant < 0.0:
            return None
        t = -b - math.sqrt(discriminant)
        return t if t >= 0.0 else None


@dataclass(slots=True)
class BoxObstacle:
    minimum: Vector3
    maximum: Vector3
    layer: int = 0

    def intersect(self, origin: Vector3, direction: Vector3) -> Optional[float]:
        t_near = -math.inf
        t_far = math.inf
        for o, d, lo, hi in (
            (origin.x, direction.x, self.minimum.x, self.maximum.x),
            (origin.y, direction.y, self.minimum.y, self.maximum.y),
            (origin.z, direction.z, self.minimum.z, self.maximum.z),
        ):
            if abs(d) < _PARALLEL_EPSILON:
                if o < lo or o > hi:
                    return None
                continue
            t1 = (lo - o) / d
            t2 = (hi - o) / d
            if t1 > t2:
                t1, t2 = t2, t1
            t_near = max(t_near, t1)
            t_far = min(t_far, t2)
            if t_near > t_far:
                return None
        if t_far < 0.0:
            return None
        return max(t_near, 0.0)


Obstacle = Union[SphereObstacle, BoxObstacle]


class ObstacleField:
    """Brute-force `SpatialQuery` over a list of static spheres and boxes."""

    def __init__(self, obstacles: Iterable[Obstacle] = ()) -> None:
        self._obstacles: List[Obstacle] = list(obstacles)
        self.cast_count = 0

    @classmethod
    def from_config(cls, entries: Iterable[ObstacleConfig]) -> "ObstacleField":
        obstacles: List[Obstacle] = []
        for entry in entries:
            center = Vector3(entry.center)
            if entry.shape == "box":
                half = Vector3(entry.size) * 0.5
                obstacles.append(BoxObstacle(center - half, center + half, entry.layer))
            else:
                obstacles.append(SphereObstacle(center, entry.radius, entry.layer))
        return cls(obstacles)

    @property
    def obstacles(self) -> List[Obstacle]:
        return self._obstacles

    def add(self, obstacle: Obstacle) -> None:
        self._obstacles.append(obstacle)

    def cast(self, origin: Vector3, direction: Vector3, max_distance: float, mask: int) -> Optional[Vector3]:
        self.cast_count += 1
        length = direction.length()
        if length <= 0.0 or max_distance < 0.0:
            return None
        unit = direction / length
        nearest = math.inf
        for obstacle in self._obstacles:
            if not mask & (1 << obstacle.layer):
                continue
            t = obstacle.intersect(origin, unit)
            if t is not None and t <= max_distance and t < nearest:
                nearest = t
        if nearest == math.inf:
            return None
        return origin + unit * nearest
