from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalized(self) -> Vec2:
        mag = self.length()
        if mag <= 0.0:
            return self
        return Vec2(self.x / mag, self.y / mag)

    def with_length(self, length: float) -> Vec2:
        return self.normalized() * length

    def clamp_length(self, max_length: float) -> Vec2:
        mag_sq = self.length_squared()
        if mag_sq <= max_length * max_length:
            return self
        return self.with_length(max_length)

    def heading(self) -> float:
        if self.length_squared() < 1e-12:
            return 0.0
        return math.atan2(self.y, self.x)

    def copy(self) -> Vec2:
        return Vec2(self.x, self.y)

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    @staticmethod
    def dot(a: Vec2, b: Vec2) -> float:
        return a.x * b.x + a.y * b.y

    @staticmethod
    def distance(a: Vec2, b: Vec2) -> float:
        return (a - b).length()


ZERO = Vec2(0.0, 0.0)
