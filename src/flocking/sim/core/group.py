from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List, Optional

from pygame.math import Vector3

from .agent import FlockAgent
from .config import BehaviorConfig

if TYPE_CHECKING:
    from .spatial import SpatialQuery


class Group:
    """Ordered roster of flock members sharing one behavior config and anchor."""

    def __init__(
        self,
        config: BehaviorConfig,
        anchor: Vector3 | None = None,
        spatial_query: Optional["SpatialQuery"] = None,
    ) -> None:
        self.config = config
        self.anchor = Vector3(anchor) if anchor is not None else Vector3()
        self.spatial_query = spatial_query
        self._agents: List[FlockAgent] = []

    @property
    def all_units(self) -> List[FlockAgent]:
        return self._agents

    def add(self, agent: FlockAgent) -> FlockAgent:
        agent.group = self
        self._agents.append(agent)
        return agent

    def clear(self) -> None:
        for agent in self._agents:
            agent.group = None
        self._agents.clear()

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[FlockAgent]:
        return iter(self._agents)
