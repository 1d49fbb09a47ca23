import csv
import json

import pytest

from heroes.app.headless import run_headless


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_log_header_and_rows(tmp_path):
    log_path = tmp_path / "run.csv"
    world = run_headless(steps=3, seed=1, log_path=log_path, deterministic_log=True)
    rows = _read_csv(log_path)

    assert len(rows) == 4
    assert rows[0] == [
        "tick",
        "population",
        "heroes",
        "cowards",
        "center_x",
        "center_y",
        "deviation",
        "avg_speed",
        "blind_agents",
        "tick_ms",
    ]
    idx = {name: i for i, name in enumerate(rows[0])}
    last = rows[-1]
    assert int(last[idx["tick"]]) == 3
    assert int(last[idx["population"]]) == 30
    assert int(last[idx["heroes"]]) + int(last[idx["cowards"]]) == 30
    assert float(last[idx["deviation"]]) == pytest.approx(world.stats.deviation, abs=1e-4)
    assert float(last[idx["tick_ms"]]) == 0.0


def test_headless_deterministic_logs_match(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    run_headless(steps=20, seed=77, log_path=first, deterministic_log=True)
    run_headless(steps=20, seed=77, log_path=second, deterministic_log=True)
    assert first.read_text() == second.read_text()


def test_headless_reads_yaml_config(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        "time_step: 0.5\n"
        "settings:\n"
        "  seed: 4\n"
        "  agent_count: 5\n"
        "  arena_size: 20.0\n"
        "  use_vision_limit: true\n"
        "  vision_limit: 0.0\n"
    )
    log_path = tmp_path / "run.csv"
    world = run_headless(steps=2, log_path=log_path, deterministic_log=True, config_path=config_path)
    rows = _read_csv(log_path)

    assert world.settings.seed == 4
    assert len(world.agents) == 5
    # nobody can see anything with a zero vision limit
    assert all(row[8] == "5" for row in rows[1:])
    assert all(row[7] == "0.0000" for row in rows[1:])


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    run_headless(steps=4, seed=3, deterministic_log=True, summary_path=summary_path, summary_window=2)
    payload = json.loads(summary_path.read_text())

    assert payload["steps"] == 4
    assert payload["seed"] == 3
    assert "deviation" in payload
    assert "tick_ms" in payload
    assert len(payload["final"]["center_of_mass"]) == 2
    assert payload["tail_window"]["window"] == 2
