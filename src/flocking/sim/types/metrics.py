from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    average_speed: float
    neighbor_checks: int
    avoiding: int
    out_of_bounds: int
    tick_duration_ms: float = 0.0
