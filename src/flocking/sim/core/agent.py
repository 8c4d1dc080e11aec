from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from pygame.math import Vector3

if TYPE_CHECKING:
    from .group import Group


@dataclass(slots=True, eq=False)
class FlockAgent:
    id: int
    position: Vector3
    orientation: Vector3
    speed: float
    velocity_filter: Vector3 = field(default_factory=Vector3)
    avoidance_direction: Optional[Vector3] = None
    group: Optional["Group"] = field(default=None, repr=False)
    cohesion_neighbours: List["FlockAgent"] = field(default_factory=list, repr=False)
    avoidance_neighbours: List["FlockAgent"] = field(default_factory=list, repr=False)
    alignment_neighbours: List["FlockAgent"] = field(default_factory=list, repr=False)
    # distance checks made by the last neighbour scan
    neighbor_checks: int = field(default=0, repr=False)

    @property
    def is_avoiding(self) -> bool:
        return self.avoidance_direction is not None
