from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FrameMetrics:
    tick: int
    population: int
    orbs: int
    average_speed: float
    max_speed: float
    polarization: float
    tick_duration_ms: float = 0.0
