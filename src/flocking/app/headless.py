from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "population",
    "avg_speed",
    "neighbor_checks",
    "avoiding",
    "out_of_bounds",
    "tick_ms",
]

_DETAILED_HEADER = _BASIC_HEADER + [
    "min_speed",
    "max_speed",
    "avg_anchor_distance",
    "max_anchor_distance",
    "avg_cohesion_neighbours",
    "avg_avoidance_neighbours",
    "avg_alignment_neighbours",
    "avoiding_ratio",
    "neighbor_checks_per_agent",
    "tick_ms_per_agent",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        f"{metrics.average_speed:.4f}",
        metrics.neighbor_checks,
        metrics.avoiding,
        metrics.out_of_bounds,
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    row = _format_basic_row(metrics, tick_ms)
    if population <= 0:
        return row + ["0.0000", "0.0000", "0.0000", "0.0000", "0.0000", "0.0000", "0.0000", "0.0000", "0.0000", "0.0000"]

    anchor = world.group.anchor
    min_speed = math.inf
    max_speed = -math.inf
    distance_sum = 0.0
    max_distance = 0.0
    cohesion_sum = 0
    avoidance_sum = 0
    alignment_sum = 0
    for agent in world.agents:
        min_speed = min(min_speed, agent.speed)
        max_speed = max(max_speed, agent.speed)
        distance = (agent.position - anchor).length()
        distance_sum += distance
        max_distance = max(max_distance, distance)
        cohesion_sum += len(agent.cohesion_neighbours)
        avoidance_sum += len(agent.avoidance_neighbours)
        alignment_sum += len(agent.alignment_neighbours)

    return row + [
        f"{min_speed:.4f}",
        f"{max_speed:.4f}",
        f"{distance_sum / population:.4f}",
        f"{max_distance:.4f}",
        f"{cohesion_sum / population:.4f}",
        f"{avoidance_sum / population:.4f}",
        f"{alignment_sum / population:.4f}",
        f"{metrics.avoiding / population:.4f}",
        f"{metrics.neighbor_checks / population:.4f}",
        f"{tick_ms / population:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)
    logger.info("Running %d steps with %d agents", steps, len(world.agents))

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    avoiding_series: list[float] = []
    out_of_bounds_series: list[float] = []

    csv_file = Path(log_path).open("w", newline="") if log_path else None
    try:
        writer = None
        if csv_file is not None:
            writer = csv.writer(csv_file)
            writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            speed_series.append(metrics.average_speed)
            avoiding_series.append(float(metrics.avoiding))
            out_of_bounds_series.append(float(metrics.out_of_bounds))
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "population": len(world.agents),
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(speed_series),
            "avoiding": _summary_stats(avoiding_series),
            "out_of_bounds": _summary_stats(out_of_bounds_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "avg_speed": _summary_stats(speed_series[tail_slice]),
                "out_of_bounds": _summary_stats(out_of_bounds_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    logger.info("Finished %d steps", steps)
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON summary file.")
    parser.add_argument("--summary-window", type=int, default=500, help="Tail window size (ticks) for summary stats.")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        config_path=args.config,
        summary_path=args.summary,
        summary_window=args.summary_window,
    )


if __name__ == "__main__":
    main()
