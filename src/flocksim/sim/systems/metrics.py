from __future__ import annotations

import math
from typing import Sequence

from ..core.agent import Agent
from ..types.metrics import FrameMetrics


def create_metrics(tick: int, agents: Sequence[Agent], orb_count: int, duration_ms: float) -> FrameMetrics:
    population = len(agents)
    if population == 0:
        return FrameMetrics(
            tick=tick,
            population=0,
            orbs=orb_count,
            average_speed=0.0,
            max_speed=0.0,
            polarization=0.0,
            tick_duration_ms=duration_ms,
        )
    speed_sum = 0.0
    max_speed = 0.0
    heading_x = 0.0
    heading_y = 0.0
    for agent in agents:
        vx = agent.velocity.x
        vy = agent.velocity.y
        speed = math.hypot(vx, vy)
        speed_sum += speed
        if speed > max_speed:
            max_speed = speed
        if speed > 1e-12:
            heading_x += vx / speed
            heading_y += vy / speed
    # Order parameter: length of the mean unit heading, 1.0 for a fully aligned flock.
    polarization = math.hypot(heading_x, heading_y) / population
    return FrameMetrics(
        tick=tick,
        population=population,
        orbs=orb_count,
        average_speed=speed_sum / population,
        max_speed=max_speed,
        polarization=polarization,
        tick_duration_ms=duration_ms,
    )
