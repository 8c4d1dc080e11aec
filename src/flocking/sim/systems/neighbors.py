from __future__ import annotations

from typing import Sequence

from ..core.agent import FlockAgent
from ..core.config import BehaviorConfig


def find_neighbours(agent: FlockAgent, all_units: Sequence[FlockAgent], config: BehaviorConfig) -> int:
    """
    Fill the agent's three neighbour buffers from `all_units`.

    Each set is tested against its own squared radius, so one unit can land in
    several sets. The agent itself is skipped. Returns the number of distance
    checks performed.
    """

    cohesion = agent.cohesion_neighbours
    avoidance = agent.avoidance_neighbours
    alignment = agent.alignment_neighbours
    cohesion.clear()
    avoidance.clear()
    alignment.clear()

    cohesion_sq = config.cohesion_distance * config.cohesion_distance
    avoidance_sq = config.avoidance_distance * config.avoidance_distance
    alignment_sq = config.alignment_distance * config.alignment_distance
    pos_x = agent.position.x
    pos_y = agent.position.y
    pos_z = agent.position.z

    checks = 0
    for other in all_units:
        if other is agent:
            continue
        checks += 1
        pos = other.position
        offset_x = pos.x - pos_x
        offset_y = pos.y - pos_y
        offset_z = pos.z - pos_z
        dist_sq = offset_x * offset_x + offset_y * offset_y + offset_z * offset_z
        if dist_sq <= cohesion_sq:
            cohesion.append(other)
        if dist_sq <= avoidance_sq:
            avoidance.append(other)
        if dist_sq <= alignment_sq:
            alignment.append(other)
    return checks
