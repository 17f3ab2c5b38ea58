from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .agent import OrbKind


_FINITE_PARAMETERS = (
    "perception_radius",
    "max_force",
    "max_speed",
    "separation_weight",
    "alignment_weight",
    "cohesion_weight",
    "orb_strength",
)


@dataclass
class FlockParameters:
    num_boids: int = 500
    perception_radius: float = 50.0
    max_force: float = 0.5
    max_speed: float = 5.0
    separation_weight: float = 1.5
    alignment_weight: float = 1.0
    cohesion_weight: float = 1.0
    orb_strength: float = 40.0
    wrap_boundary: bool = True

    def validate(self) -> None:
        for name in _FINITE_PARAMETERS:
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        if self.num_boids < 0:
            raise ValueError(f"num_boids must be >= 0, got {self.num_boids}")
        if self.perception_radius < 0:
            raise ValueError(f"perception_radius must be >= 0, got {self.perception_radius}")
        if self.max_force <= 0:
            raise ValueError(f"max_force must be > 0, got {self.max_force}")
        if self.max_speed <= 0:
            raise ValueError(f"max_speed must be > 0, got {self.max_speed}")


# Parameters driven by the control panel sliders; restored on reset.
SLIDER_PARAMETERS = (
    "num_boids",
    "perception_radius",
    "separation_weight",
    "alignment_weight",
    "cohesion_weight",
)


@dataclass
class OrbConfig:
    radius: float = 10.0
    primary_button: OrbKind = OrbKind.REPULSOR
    secondary_button: OrbKind = OrbKind.ATTRACTOR

    def kind_for_button(self, button: int) -> OrbKind | None:
        if button == 0:
            return self.primary_button
        if button == 2:
            return self.secondary_button
        return None


@dataclass
class SimulationConfig:
    width: float = 800.0
    height: float = 600.0
    time_step: float = 1.0 / 60.0
    seed: int = 42
    boid_size: float = 2.0
    separation_factor: float = 6.0
    initial_velocity_range: float = 2.0
    color_saturation: float = 70.0
    color_lightness: float = 65.0
    config_version: str = "v1"
    flock: FlockParameters = field(default_factory=FlockParameters)
    orbs: OrbConfig = field(default_factory=OrbConfig)

    def validate(self) -> None:
        validate_canvas(self.width, self.height)
        self.flock.validate()

    @property
    def desired_separation(self) -> float:
        return self.boid_size * self.separation_factor

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def validate_canvas(width: float, height: float) -> None:
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {width}x{height}")


def coerce_parameter(name: str, value: object) -> int | float | bool:
    """Convert a raw control value to the type declared on FlockParameters."""
    declared = {f.name: f.type for f in fields(FlockParameters)}
    if name not in declared:
        raise ValueError(f"Unknown flock parameter: {name}")
    kind = declared[name]
    if kind == "bool":
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)
    try:
        if kind == "int":
            return int(value)  # type: ignore[call-overload]
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for {name}: {value!r}") from exc


def _orb_kind(value: object, default: OrbKind) -> OrbKind:
    if value is None:
        return default
    if isinstance(value, OrbKind):
        return value
    try:
        return OrbKind(str(value).lower())
    except ValueError as exc:
        raise ValueError(f"Unknown orb kind: {value!r}") from exc


def load_config(raw: dict) -> SimulationConfig:
    flock = FlockParameters(**raw.get("flock", {}))
    orbs_raw = raw.get("orbs", {})
    defaults = OrbConfig()
    orbs = OrbConfig(
        radius=float(orbs_raw.get("radius", defaults.radius)),
        primary_button=_orb_kind(orbs_raw.get("primary_button"), defaults.primary_button),
        secondary_button=_orb_kind(orbs_raw.get("secondary_button"), defaults.secondary_button),
    )
    sim_values = {k: v for k, v in raw.items() if k not in {"flock", "orbs"}}
    config = SimulationConfig(flock=flock, orbs=orbs, **sim_values)
    config.validate()
    return config
