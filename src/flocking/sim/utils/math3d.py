from __future__ import annotations

import math

from pygame.math import Vector3

WORLD_UP = Vector3(0.0, 1.0, 0.0)
_WORLD_RIGHT = Vector3(1.0, 0.0, 0.0)

_NORMALIZE_EPSILON = 1e-5
_MIN_SMOOTH_TIME = 1e-4


def _safe_normalize(vector: Vector3) -> Vector3:
    magnitude = vector.length()
    if magnitude <= _NORMALIZE_EPSILON:
        return Vector3()
    return vector / magnitude


def _is_zero(vector: Vector3) -> bool:
    return vector.x == 0.0 and vector.y == 0.0 and vector.z == 0.0


def angle_between(a: Vector3, b: Vector3) -> float:
    """Unsigned angle in degrees; degenerate inputs count as aligned."""
    denominator = math.sqrt(a.length_squared() * b.length_squared())
    if denominator < 1e-15:
        return 0.0
    cosine = _clamp_value(a.dot(b) / denominator, -1.0, 1.0)
    return math.degrees(math.acos(cosine))


def transform_direction(forward: Vector3, local: Vector3) -> Vector3:
    """
    Rotate a local-space direction into world space.

    The basis is the look rotation of `forward` with world up, so local +z maps
    onto `forward`, local +x onto the agent's right and local +y onto its up.
    """

    f = _safe_normalize(forward)
    if _is_zero(f):
        return Vector3(local)
    right = WORLD_UP.cross(f)
    if right.length_squared() < 1e-12:
        right = Vector3(_WORLD_RIGHT)
    else:
        right.normalize_ip()
    up = f.cross(right)
    return right * local.x + up * local.y + f * local.z


def smooth_damp(
    current: Vector3,
    target: Vector3,
    velocity: Vector3,
    smooth_time: float,
    dt: float,
) -> tuple[Vector3, Vector3]:
    """
    Critically damped spring from `current` toward `target`.

    Returns the smoothed value and the new filter velocity; the caller keeps the
    velocity and passes it back on the next call. Never overshoots `target`.
    """

    smooth_time = max(_MIN_SMOOTH_TIME, smooth_time)
    omega = 2.0 / smooth_time
    x = omega * dt
    decay = 1.0 / (1.0 + x + 0.48 * x * x + 0.235 * x * x * x)

    change = current - target
    temp = (velocity + change * omega) * dt
    new_velocity = (velocity - temp * omega) * decay
    output = target + (change + temp) * decay

    # snap to target on overshoot
    if (target - current).dot(output - target) > 0.0:
        output = Vector3(target)
        new_velocity = Vector3()
    return output, new_velocity


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
