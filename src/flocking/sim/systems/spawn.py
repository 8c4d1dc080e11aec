from __future__ import annotations

from typing import List

from pygame.math import Vector3

from ..core.agent import FlockAgent
from ..core.config import SpawnConfig
from ..core.group import Group
from ..core.rng import DeterministicRng


def spawn_flock(group: Group, spawn: SpawnConfig, rng: DeterministicRng, first_id: int = 0) -> List[FlockAgent]:
    """Place `spawn.flock_size` agents around the group anchor and register them in order."""
    config = group.config
    bounds = spawn.spawn_bounds
    spawned: List[FlockAgent] = []
    for offset in range(spawn.flock_size):
        jitter = rng.next_inside_unit_sphere()
        position = group.anchor + Vector3(jitter.x * bounds[0], jitter.y * bounds[1], jitter.z * bounds[2])
        agent = FlockAgent(
            id=first_id + offset,
            position=position,
            orientation=rng.next_yaw_forward(),
            speed=rng.next_range(config.min_speed, config.max_speed),
        )
        spawned.append(group.add(agent))
    return spawned
