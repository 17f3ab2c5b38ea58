from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pygame import Color

from .vector import ZERO, Vec2


class OrbKind(str, Enum):
    ATTRACTOR = "attractor"
    REPULSOR = "repulsor"


@dataclass(slots=True)
class Agent:
    id: int
    position: Vec2
    velocity: Vec2
    size: float = 2.0
    color: Color = field(default_factory=lambda: Color(255, 255, 255))
    acceleration: Vec2 = ZERO
    heading: float = 0.0

    def apply_force(self, force: Vec2) -> None:
        self.acceleration = self.acceleration + force


@dataclass(slots=True)
class Orb:
    position: Vec2
    radius: float
    kind: OrbKind

    @property
    def color(self) -> Color:
        # Attractors render blue, repulsors red, both half transparent.
        if self.kind is OrbKind.ATTRACTOR:
            return Color(0, 100, 255, 128)
        return Color(255, 0, 0, 128)
