import csv
import json
from pathlib import Path

import pytest

from flocking.app.headless import run_headless

REPO_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "flock.yaml"


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_basic_log_header(tmp_path):
    log_path = tmp_path / "basic.csv"
    run_headless(steps=2, seed=1, log_path=log_path, deterministic_log=True, log_format="basic")
    rows = _read_csv(log_path)
    assert len(rows) == 3
    assert rows[0] == ["tick", "population", "avg_speed", "neighbor_checks", "avoiding", "out_of_bounds", "tick_ms"]
    assert rows[1][0] == "0"
    assert rows[2][-1] == "0.000"


def test_headless_detailed_log_ratios(tmp_path):
    log_path = tmp_path / "detailed.csv"
    run_headless(steps=3, seed=2, log_path=log_path, deterministic_log=True, log_format="detailed")
    rows = _read_csv(log_path)
    assert len(rows) == 4
    header = rows[0]
    assert header[:7] == ["tick", "population", "avg_speed", "neighbor_checks", "avoiding", "out_of_bounds", "tick_ms"]
    assert "avg_cohesion_neighbours" in header

    idx = {name: i for i, name in enumerate(header)}
    row = rows[1]
    population = int(row[idx["population"]])
    neighbor_checks = int(row[idx["neighbor_checks"]])
    assert float(row[idx["neighbor_checks_per_agent"]]) == pytest.approx(neighbor_checks / population, abs=1e-4)
    assert float(row[idx["min_speed"]]) <= float(row[idx["avg_speed"]]) <= float(row[idx["max_speed"]])
    assert float(row[idx["tick_ms_per_agent"]]) == 0.0


def test_headless_deterministic_logs_match(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    run_headless(steps=5, seed=9, log_path=first, deterministic_log=True)
    run_headless(steps=5, seed=9, log_path=second, deterministic_log=True)
    assert first.read_text() == second.read_text()


def test_headless_uses_yaml_config_and_writes_summary(tmp_path):
    summary_path = tmp_path / "summary.json"
    world = run_headless(
        steps=4,
        seed=3,
        log_path=None,
        deterministic_log=True,
        log_format="basic",
        config_path=REPO_CONFIG,
        summary_path=summary_path,
        summary_window=2,
    )
    assert len(world.agents) == 40
    payload = json.loads(summary_path.read_text())
    assert payload["steps"] == 4
    assert payload["seed"] == 3
    assert payload["population"] == 40
    assert payload["log_format"] == "basic"
    assert payload["tick_ms"]["max"] == 0.0
    assert payload["tail_window"]["window"] == 2


def test_headless_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        run_headless(steps=1, seed=1, log_path=tmp_path / "x.csv", log_format="fancy")
