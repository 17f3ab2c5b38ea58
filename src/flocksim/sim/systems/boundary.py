from __future__ import annotations

from ..core.agent import Agent
from ..core.vector import Vec2


def wrap(x: float, y: float, width: float, height: float) -> tuple[float, float]:
    if x > width:
        x = 0.0
    elif x < 0:
        x = width
    if y > height:
        y = 0.0
    elif y < 0:
        y = height
    return x, y


def bounce(
    x: float, y: float, vx: float, vy: float, width: float, height: float
) -> tuple[float, float, float, float]:
    if x > width:
        x = width - 1.0
        vx = -vx
    elif x < 0:
        x = 1.0
        vx = -vx
    if y > height:
        y = height - 1.0
        vy = -vy
    elif y < 0:
        y = 1.0
        vy = -vy
    return x, y, vx, vy


def resolve_edges(agent: Agent, width: float, height: float, wrap_boundary: bool) -> None:
    pos = agent.position
    if wrap_boundary:
        x, y = wrap(pos.x, pos.y, width, height)
        if x != pos.x or y != pos.y:
            agent.position = Vec2(x, y)
        return
    vel = agent.velocity
    x, y, vx, vy = bounce(pos.x, pos.y, vel.x, vel.y, width, height)
    if x != pos.x or y != pos.y:
        agent.position = Vec2(x, y)
        agent.velocity = Vec2(vx, vy)
