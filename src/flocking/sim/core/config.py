from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List

import yaml

from ...errors import ConfigurationError

logger = logging.getLogger(__name__)

Triple = tuple[float, float, float]

_DEFAULT_PROBE_DIRECTIONS: List[Triple] = [
    (1.0, 0.0, 1.0),
    (-1.0, 0.0, 1.0),
    (0.0, 1.0, 1.0),
    (0.0, -1.0, 1.0),
    (1.0, 0.0, 0.0),
    (-1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, -1.0, 0.0),
]

OBSTACLE_SHAPES = ("sphere", "box")


@dataclass
class BehaviorConfig:
    cohesion_distance: float = 4.0
    avoidance_distance: float = 1.5
    alignment_distance: float = 5.0
    cohesion_weight: float = 1.0
    avoidance_weight: float = 1.5
    alignment_weight: float = 1.0
    bounds_weight: float = 2.0
    obstacle_weight: float = 8.0
    bounds_distance: float = 30.0
    # degrees from forward; a neighbour is visible when its angle is <= this
    fov_angle: float = 135.0
    obstacle_distance: float = 4.0
    obstacle_mask: int = 1
    probe_directions: List[Triple] = field(default_factory=lambda: list(_DEFAULT_PROBE_DIRECTIONS))
    smooth_time: float = 0.5
    min_speed: float = 2.0
    max_speed: float = 5.0


@dataclass
class SpawnConfig:
    flock_size: int = 60
    spawn_bounds: Triple = (10.0, 4.0, 10.0)
    anchor: Triple = (0.0, 0.0, 0.0)


@dataclass
class ObstacleConfig:
    shape: str = "sphere"
    center: Triple = (0.0, 0.0, 0.0)
    radius: float = 1.0
    # full extents for boxes
    size: Triple = (1.0, 1.0, 1.0)
    layer: int = 0


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 50.0
    seed: int = 42
    config_version: str = "v1"
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)
    obstacles: List[ObstacleConfig] = field(default_factory=list)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        logger.info("Loading simulation config from %s", path)
        return load_config(data)


def _coerce(value, kind: type, name: str):
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(name, f"expected {kind.__name__}, got {value!r}") from exc


def _check_keys(section: dict, cls: type, prefix: str) -> None:
    known = {f.name for f in fields(cls)}
    for key in section:
        if key not in known:
            raise ConfigurationError(f"{prefix}{key}", "unknown setting")


def load_config(raw: dict) -> SimulationConfig:
    def _triple(value: Triple | list[float] | None, default: Triple, name: str) -> Triple:
        if value is None:
            return default
        if isinstance(value, (tuple, list)) and len(value) == 3:
            return (_coerce(value[0], float, name), _coerce(value[1], float, name), _coerce(value[2], float, name))
        raise ConfigurationError(name, "expected three numbers")

    behavior_raw = dict(raw.get("behavior", {}))
    _check_keys(behavior_raw, BehaviorConfig, "behavior.")
    default_behavior = BehaviorConfig()
    probes_raw = behavior_raw.pop("probe_directions", None)
    probes = (
        list(default_behavior.probe_directions)
        if probes_raw is None
        else [_triple(p, (0.0, 0.0, 0.0), "behavior.probe_directions") for p in probes_raw]
    )
    behavior_values = {
        key: _coerce(value, type(getattr(default_behavior, key)), f"behavior.{key}")
        for key, value in behavior_raw.items()
    }
    behavior = BehaviorConfig(probe_directions=probes, **behavior_values)

    spawn_raw = raw.get("spawn", {})
    _check_keys(spawn_raw, SpawnConfig, "spawn.")
    default_spawn = SpawnConfig()
    spawn = SpawnConfig(
        flock_size=_coerce(spawn_raw.get("flock_size", default_spawn.flock_size), int, "spawn.flock_size"),
        spawn_bounds=_triple(spawn_raw.get("spawn_bounds"), default_spawn.spawn_bounds, "spawn.spawn_bounds"),
        anchor=_triple(spawn_raw.get("anchor"), default_spawn.anchor, "spawn.anchor"),
    )

    obstacles = []
    for index, entry in enumerate(raw.get("obstacles", [])):
        default_obstacle = ObstacleConfig()
        prefix = f"obstacles[{index}]"
        _check_keys(entry, ObstacleConfig, f"{prefix}.")
        obstacles.append(
            ObstacleConfig(
                shape=str(entry.get("shape", default_obstacle.shape)),
                center=_triple(entry.get("center"), default_obstacle.center, f"{prefix}.center"),
                radius=_coerce(entry.get("radius", default_obstacle.radius), float, f"{prefix}.radius"),
                size=_triple(entry.get("size"), default_obstacle.size, f"{prefix}.size"),
                layer=_coerce(entry.get("layer", default_obstacle.layer), int, f"{prefix}.layer"),
            )
        )

    sim_raw = {k: v for k, v in raw.items() if k not in {"behavior", "spawn", "obstacles"}}
    _check_keys(sim_raw, SimulationConfig, "")
    default_sim = SimulationConfig()
    sim_values = {key: _coerce(value, type(getattr(default_sim, key)), key) for key, value in sim_raw.items()}
    config = SimulationConfig(behavior=behavior, spawn=spawn, obstacles=obstacles, **sim_values)
    validate_config(config)
    return config


def validate_config(config: SimulationConfig) -> None:
    """Reject configurations the steering core cannot run; it does not re-check per tick."""
    behavior = config.behavior
    if config.time_step <= 0.0:
        raise ConfigurationError("time_step", "must be positive")
    for name in (
        "cohesion_distance",
        "avoidance_distance",
        "alignment_distance",
        "cohesion_weight",
        "avoidance_weight",
        "alignment_weight",
        "bounds_weight",
        "obstacle_weight",
        "bounds_distance",
        "obstacle_distance",
        "smooth_time",
        "min_speed",
        "max_speed",
    ):
        value = getattr(behavior, name)
        if not math.isfinite(value) or value < 0.0:
            raise ConfigurationError(f"behavior.{name}", "must be a non-negative number")
    if behavior.min_speed > behavior.max_speed:
        raise ConfigurationError("behavior.min_speed", "must not exceed max_speed")
    if not 0.0 <= behavior.fov_angle <= 180.0:
        raise ConfigurationError("behavior.fov_angle", "must be between 0 and 180 degrees")
    for direction in behavior.probe_directions:
        if all(component == 0.0 for component in direction):
            raise ConfigurationError("behavior.probe_directions", "zero-length direction")
    if config.spawn.flock_size < 0:
        raise ConfigurationError("spawn.flock_size", "must be non-negative")
    for index, obstacle in enumerate(config.obstacles):
        if obstacle.shape not in OBSTACLE_SHAPES:
            raise ConfigurationError(f"obstacles[{index}].shape", f"unknown shape {obstacle.shape!r}")
        if not 0 <= obstacle.layer < 32:
            raise ConfigurationError(f"obstacles[{index}].layer", "must be in 0..31")
        if obstacle.radius < 0.0 or any(extent < 0.0 for extent in obstacle.size):
            raise ConfigurationError(f"obstacles[{index}]", "extents must be non-negative")
