from __future__ import annotations

import logging
from time import perf_counter
from typing import List

from pygame.math import Vector3

from .agent import FlockAgent
from .config import SimulationConfig
from .group import Group
from .rng import DeterministicRng
from .spatial import ObstacleField, SpatialQuery
from ..systems import metrics as metrics_system, spawn, steering
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata

logger = logging.getLogger(__name__)


class World:
    """Owns one flock and drives every member once per tick in roster order."""

    def __init__(self, config: SimulationConfig, spatial_query: SpatialQuery | None = None):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        if spatial_query is None:
            spatial_query = ObstacleField.from_config(config.obstacles)
        self._spatial_query = spatial_query
        self._group = Group(config.behavior, Vector3(config.spawn.anchor), spatial_query)
        self._metrics: TickMetrics | None = None
        self._bootstrap_flock()

    @property
    def agents(self) -> List[FlockAgent]:
        return self._group.all_units

    @property
    def group(self) -> Group:
        return self._group

    @property
    def spatial_query(self) -> SpatialQuery:
        return self._spatial_query

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def reset(self) -> None:
        self._group.clear()
        self._rng.reset()
        self._metrics = None
        logger.info("World reset (seed=%d)", self._config.seed)
        self._bootstrap_flock()

    def step(self, tick: int) -> TickMetrics:
        start = perf_counter()
        dt = self._config.time_step
        agents = self._group.all_units
        for agent in agents:
            steering.update_agent(agent, dt, self._group)
        neighbor_checks = sum(agent.neighbor_checks for agent in agents)
        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            tick,
            agents,
            self._group.anchor,
            self._config.behavior.bounds_distance,
            neighbor_checks,
            duration_ms,
        )
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        config = self._config
        agents = [
            {
                "id": agent.id,
                "x": agent.position.x,
                "y": agent.position.y,
                "z": agent.position.z,
                "fx": agent.orientation.x,
                "fy": agent.orientation.y,
                "fz": agent.orientation.z,
                "speed": agent.speed,
                "avoiding": agent.is_avoiding,
            }
            for agent in self._group.all_units
        ]
        metadata = SnapshotMetadata(
            sim_dt=config.time_step,
            tick_rate=1.0 / config.time_step,
            seed=config.seed,
            flock_size=len(self._group),
            bounds_distance=config.behavior.bounds_distance,
            anchor=tuple(config.spawn.anchor),
            config_version=config.config_version,
        )
        return Snapshot(tick=tick, metrics=self._metrics, agents=agents, metadata=metadata)

    def _bootstrap_flock(self) -> None:
        spawn.spawn_flock(self._group, self._config.spawn, self._rng)
        logger.info(
            "Spawned %d agents around %s (seed=%d)",
            len(self._group),
            tuple(self._config.spawn.anchor),
            self._config.seed,
        )
