from __future__ import annotations

from typing import Sequence

from ..core.agent import Agent
from ..core.config import FlockParameters
from ..core.vector import ZERO, Vec2


def _steer_towards(desired: Vec2, agent: Agent, params: FlockParameters) -> Vec2:
    """Reynolds steering: full-speed desired velocity minus current velocity, capped."""
    steering = desired.with_length(params.max_speed) - agent.velocity
    return steering.clamp_length(params.max_force)


def separation(
    agent: Agent,
    agents: Sequence[Agent],
    params: FlockParameters,
    desired_separation: float,
) -> Vec2:
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    pos = agent.position
    for other in agents:
        if other is agent:
            continue
        dx = pos.x - other.position.x
        dy = pos.y - other.position.y
        dist_sq = dx * dx + dy * dy
        # Coincident agents have no direction to push along.
        if dist_sq <= 0.0 or dist_sq >= desired_separation * desired_separation:
            continue
        sum_x += dx / dist_sq
        sum_y += dy / dist_sq
        count += 1
    if count == 0:
        return ZERO
    return _steer_towards(Vec2(sum_x / count, sum_y / count), agent, params)


def alignment(agent: Agent, agents: Sequence[Agent], params: FlockParameters) -> Vec2:
    radius_sq = params.perception_radius * params.perception_radius
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    pos = agent.position
    for other in agents:
        if other is agent:
            continue
        dx = other.position.x - pos.x
        dy = other.position.y - pos.y
        if dx * dx + dy * dy >= radius_sq:
            continue
        sum_x += other.velocity.x
        sum_y += other.velocity.y
        count += 1
    if count == 0:
        return ZERO
    return _steer_towards(Vec2(sum_x / count, sum_y / count), agent, params)


def cohesion(agent: Agent, agents: Sequence[Agent], params: FlockParameters) -> Vec2:
    radius_sq = params.perception_radius * params.perception_radius
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    pos = agent.position
    for other in agents:
        if other is agent:
            continue
        dx = other.position.x - pos.x
        dy = other.position.y - pos.y
        if dx * dx + dy * dy >= radius_sq:
            continue
        sum_x += other.position.x
        sum_y += other.position.y
        count += 1
    if count == 0:
        return ZERO
    centroid = Vec2(sum_x / count, sum_y / count)
    return _steer_towards(centroid - pos, agent, params)


def flock(
    agent: Agent,
    agents: Sequence[Agent],
    params: FlockParameters,
    desired_separation: float,
) -> None:
    """Apply the three weighted flocking rules to the agent's acceleration."""
    agent.apply_force(separation(agent, agents, params, desired_separation) * params.separation_weight)
    agent.apply_force(alignment(agent, agents, params) * params.alignment_weight)
    agent.apply_force(cohesion(agent, agents, params) * params.cohesion_weight)


def integrate(agent: Agent, params: FlockParameters) -> None:
    velocity = (agent.velocity + agent.acceleration).clamp_length(params.max_speed)
    agent.velocity = velocity
    agent.position = agent.position + velocity
    agent.acceleration = ZERO
    if velocity.length_squared() > 1e-8:
        agent.heading = velocity.heading()
