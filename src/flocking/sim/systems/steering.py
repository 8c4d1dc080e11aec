from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

from pygame.math import Vector3

from ...errors import FlockingError
from ..core.agent import FlockAgent
from ..core.config import BehaviorConfig
from ..utils.math3d import _clamp_value, _is_zero, _safe_normalize, angle_between, smooth_damp, transform_direction
from .neighbors import find_neighbours

if TYPE_CHECKING:
    from ..core.group import Group
    from ..core.spatial import SpatialQuery

logger = logging.getLogger(__name__)

_BOUNDS_THRESHOLD = 0.9


def update_agent(agent: FlockAgent, dt: float, group: Optional["Group"] = None) -> Vector3:
    """
    Advance one agent by `dt` seconds and return the applied move vector.

    Reads the other members of `group` (the agent's own group by default) as
    they are at call time, so members updated earlier in the same tick are seen
    in their new state.
    """

    group = group if group is not None else agent.group
    if group is None:
        raise FlockingError(f"agent {agent.id} is not assigned to a group")
    config = group.config

    agent.neighbor_checks = find_neighbours(agent, group.all_units, config)
    calculate_speed(agent, config)

    fov = config.fov_angle
    move = cohesion_vector(agent, fov) * config.cohesion_weight
    move += avoidance_vector(agent, fov) * config.avoidance_weight
    move += alignment_vector(agent, fov) * config.alignment_weight
    move += bounds_vector(agent, group.anchor, config.bounds_distance) * config.bounds_weight
    if config.obstacle_weight > 0.0 and group.spatial_query is not None:
        move += obstacle_vector(agent, config, group.spatial_query) * config.obstacle_weight

    forward = Vector3(agent.orientation)
    smoothed, agent.velocity_filter = smooth_damp(forward, move, agent.velocity_filter, config.smooth_time, dt)
    move = _safe_normalize(smoothed) * agent.speed
    if _is_zero(move):
        move = forward
    agent.orientation = _safe_normalize(move)
    agent.position = agent.position + move * dt
    return move


def calculate_speed(agent: FlockAgent, config: BehaviorConfig) -> float:
    neighbours = agent.cohesion_neighbours
    if not neighbours:
        return agent.speed
    total = 0.0
    for other in neighbours:
        total += other.speed
    agent.speed = _clamp_value(total / len(neighbours), config.min_speed, config.max_speed)
    return agent.speed


def is_in_fov(agent: FlockAgent, position: Vector3, fov_angle: float) -> bool:
    return angle_between(agent.orientation, position - agent.position) <= fov_angle


def cohesion_vector(agent: FlockAgent, fov_angle: float) -> Vector3:
    neighbours = agent.cohesion_neighbours
    if not neighbours:
        return Vector3()
    centre = Vector3()
    in_fov = 0
    for other in neighbours:
        if is_in_fov(agent, other.position, fov_angle):
            in_fov += 1
            centre += other.position
    if in_fov == 0:
        return Vector3()
    return _safe_normalize(centre / in_fov - agent.position)


def alignment_vector(agent: FlockAgent, fov_angle: float) -> Vector3:
    neighbours = agent.alignment_neighbours
    if not neighbours:
        # an isolated agent keeps its heading
        return Vector3(agent.orientation)
    heading = Vector3(agent.orientation)
    in_fov = 0
    for other in neighbours:
        if is_in_fov(agent, other.position, fov_angle):
            in_fov += 1
            heading += other.orientation
    if in_fov == 0:
        return Vector3()
    return _safe_normalize(heading / in_fov)


def avoidance_vector(agent: FlockAgent, fov_angle: float) -> Vector3:
    neighbours = agent.avoidance_neighbours
    if not neighbours:
        return Vector3()
    away = Vector3()
    in_fov = 0
    for other in neighbours:
        if is_in_fov(agent, other.position, fov_angle):
            in_fov += 1
            away += agent.position - other.position
    if in_fov == 0:
        return Vector3()
    return _safe_normalize(away / in_fov)


def bounds_vector(agent: FlockAgent, anchor: Vector3, bounds_distance: float) -> Vector3:
    offset = anchor - agent.position
    if offset.length() >= bounds_distance * _BOUNDS_THRESHOLD:
        return _safe_normalize(offset)
    return Vector3()


def obstacle_vector(agent: FlockAgent, config: BehaviorConfig, query: "SpatialQuery") -> Vector3:
    hit = query.cast(agent.position, agent.orientation, config.obstacle_distance, config.obstacle_mask)
    if hit is None:
        if agent.avoidance_direction is not None:
            logger.debug("agent %d: path ahead clear, dropping avoidance direction", agent.id)
        agent.avoidance_direction = None
        return Vector3()
    return find_best_direction(agent, config, query)


def find_best_direction(agent: FlockAgent, config: BehaviorConfig, query: "SpatialQuery") -> Vector3:
    """
    Pick an escape direction for a blocked agent.

    A remembered direction is reused while the forward ray is clear again or
    the remembered direction itself is still unobstructed, even when an earlier
    candidate direction is also clear. Otherwise the candidate directions are
    tried in order: the first clear one is remembered and returned. If all of
    them hit, the one with the farthest hit is returned and the remembered
    direction is left as it was.
    """

    origin = agent.position
    forward = agent.orientation
    distance = config.obstacle_distance
    mask = config.obstacle_mask

    remembered = agent.avoidance_direction
    if remembered is not None:
        if query.cast(origin, forward, distance, mask) is None:
            return Vector3(remembered)
        if query.cast(origin, remembered, distance, mask) is None:
            return Vector3(remembered)

    farthest_sq = -math.inf
    selected = Vector3()
    for local in config.probe_directions:
        direction = transform_direction(forward, _safe_normalize(Vector3(local)))
        hit = query.cast(origin, direction, distance, mask)
        if hit is None:
            chosen = _safe_normalize(direction)
            agent.avoidance_direction = chosen
            logger.debug("agent %d: avoiding obstacle towards %s", agent.id, chosen)
            return Vector3(chosen)
        hit_sq = (hit - origin).length_squared()
        if hit_sq > farthest_sq:
            farthest_sq = hit_sq
            selected = direction
    return _safe_normalize(selected)
