from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import AppConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

_HEADER = [
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


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    center_x, center_y = metrics.center_of_mass
    return [
        metrics.tick,
        metrics.population,
        metrics.heroes,
        metrics.cowards,
        f"{center_x:.4f}",
        f"{center_y:.4f}",
        f"{metrics.deviation:.4f}",
        f"{metrics.average_speed:.4f}",
        metrics.blind_agents,
        f"{tick_ms:.3f}",
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


def load_app_config(config_path: Optional[Path]) -> AppConfig:
    if config_path is None:
        return AppConfig()
    return AppConfig.from_yaml(config_path)


def run_headless(
    steps: int,
    seed: Optional[int] = None,
    log_path: Optional[Path] = None,
    deterministic_log: bool = False,
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    time_step: Optional[float] = None,
) -> World:
    config = load_app_config(config_path)
    if seed is not None:
        config.settings.seed = seed
    if time_step is not None:
        config.time_step = time_step
    world = World(config)
    world.start(config.settings)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    deviation_series: list[float] = []
    tick_ms_series: list[float] = []
    blind_series: list[float] = []

    try:
        for _ in range(steps):
            metrics = world.step(config.time_step)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            deviation_series.append(metrics.deviation)
            tick_ms_series.append(tick_ms)
            blind_series.append(float(metrics.blind_agents))
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info(
        "Headless run finished: %d ticks, deviation=%.4f", world.tick, world.stats.deviation
    )

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(deviation_series) - window), len(deviation_series))
        summary = {
            "steps": steps,
            "seed": config.settings.seed,
            "time_step": config.time_step,
            "deterministic_log": deterministic_log,
            "deviation": _summary_stats(deviation_series),
            "tick_ms": _summary_stats(tick_ms_series),
            "blind_agents": _summary_stats(blind_series),
            "final": {
                "center_of_mass": [world.stats.center_of_mass.x, world.stats.center_of_mass.y],
                "deviation": world.stats.deviation,
            },
            "tail_window": {
                "window": window,
                "deviation": _summary_stats(deviation_series[tail_slice]),
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless heroes and cowards simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with run settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=500,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument("--time-step", type=float, default=None, help="Elapsed seconds per tick.")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()
    configure_logging(level=args.log_level)
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        config_path=args.config,
        summary_path=args.summary,
        summary_window=args.summary_window,
        time_step=args.time_step,
    )


if __name__ == "__main__":
    main()
