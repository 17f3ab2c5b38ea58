from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..logging_config import setup_logging
from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import FrameMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "population",
    "orbs",
    "avg_speed",
    "max_speed",
    "polarization",
    "tick_ms",
    "tick_ms_per_agent",
]


def _format_row(metrics: FrameMetrics, tick_ms: float) -> list[object]:
    per_agent = 0.0 if metrics.population <= 0 else tick_ms / metrics.population
    return [
        metrics.tick,
        metrics.population,
        metrics.orbs,
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed:.4f}",
        f"{metrics.polarization:.4f}",
        f"{tick_ms:.3f}",
        f"{per_agent:.4f}",
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
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    config_path: Optional[Path] = None,
    bounce: bool = False,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    if bounce:
        config.flock.wrap_boundary = False
    world = World(config)
    logger.info(
        "Running %d frames with %d boids (seed=%d, %s edges)",
        steps,
        len(world.agents),
        config.seed,
        "wrap" if config.flock.wrap_boundary else "bounce",
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    polarization_series: list[float] = []

    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            speed_series.append(metrics.average_speed)
            polarization_series.append(metrics.polarization)
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "population": len(world.agents),
            "wrap_boundary": config.flock.wrap_boundary,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(speed_series),
            "polarization": _summary_stats(polarization_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail]),
                "polarization": _summary_stats(polarization_series[tail]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("Wrote summary to %s", summary_path)
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless boids flocking simulation")
    parser.add_argument("--steps", type=int, default=600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-frame metrics")
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
        help="Tail window size (frames) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--bounce", action="store_true", help="Bounce off the canvas edges instead of wrapping.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    setup_logging(getattr(logging, args.log_level))
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config_path=args.config,
        bounce=args.bounce,
    )


if __name__ == "__main__":
    main()
