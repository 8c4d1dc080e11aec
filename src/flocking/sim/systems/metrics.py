from __future__ import annotations

from typing import Sequence

from pygame.math import Vector3

from ..core.agent import FlockAgent
from ..types.metrics import TickMetrics
from .steering import _BOUNDS_THRESHOLD


def create_metrics(
    tick: int,
    agents: Sequence[FlockAgent],
    anchor: Vector3,
    bounds_distance: float,
    neighbor_checks: int,
    duration_ms: float,
) -> TickMetrics:
    population = len(agents)
    speed_sum = 0.0
    avoiding = 0
    out_of_bounds = 0
    limit_sq = (bounds_distance * _BOUNDS_THRESHOLD) ** 2
    for agent in agents:
        speed_sum += agent.speed
        if agent.avoidance_direction is not None:
            avoiding += 1
        if (agent.position - anchor).length_squared() >= limit_sq:
            out_of_bounds += 1
    return TickMetrics(
        tick=tick,
        population=population,
        average_speed=speed_sum / population if population else 0.0,
        neighbor_checks=neighbor_checks,
        avoiding=avoiding,
        out_of_bounds=out_of_bounds,
        tick_duration_ms=duration_ms,
    )
