from __future__ import annotations

from typing import Sequence

from ..core.agent import Agent, Orb, OrbKind
from ..core.config import FlockParameters
from ..core.vector import ZERO, Vec2

# Agents closer than this to an orb's center feel nothing from it.
MIN_ORB_DISTANCE = 1.0


def orb_force(agent: Agent, orb: Orb, params: FlockParameters) -> Vec2:
    offset = orb.position - agent.position
    dist = offset.length()
    if dist <= MIN_ORB_DISTANCE or dist >= params.perception_radius * 2.0:
        return ZERO
    direction = offset.normalized()
    if orb.kind is OrbKind.REPULSOR:
        direction = -direction
    return (direction * (params.orb_strength / dist)).clamp_length(params.max_force)


def apply_orb_forces(agent: Agent, orbs: Sequence[Orb], params: FlockParameters) -> None:
    for orb in orbs:
        force = orb_force(agent, orb, params)
        if force is not ZERO:
            agent.apply_force(force)
