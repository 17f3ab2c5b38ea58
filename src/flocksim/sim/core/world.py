from __future__ import annotations

import logging
from dataclasses import replace
from time import perf_counter
from typing import Any, Dict, List

from pygame import Color

from .agent import Agent, Orb, OrbKind
from .config import SLIDER_PARAMETERS, FlockParameters, SimulationConfig, coerce_parameter, validate_canvas
from .rng import DeterministicRng
from .vector import Vec2
from ..systems import boundary, metrics as metrics_system, orbs as orb_system, steering
from ..types.metrics import FrameMetrics
from ..types.snapshot import Snapshot, SnapshotCanvas, SnapshotMetadata

logger = logging.getLogger(__name__)


class World:
    def __init__(self, config: SimulationConfig):
        config.validate()
        self._config = config
        self._defaults = replace(config.flock)
        self._rng = DeterministicRng(config.seed)
        self._agents: List[Agent] = []
        self._orbs: List[Orb] = []
        self._width = float(config.width)
        self._height = float(config.height)
        self._metrics: FrameMetrics | None = None
        self._bootstrap_population()

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def orbs(self) -> List[Orb]:
        return self._orbs

    @property
    def parameters(self) -> FlockParameters:
        return self._config.flock

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def metrics(self) -> FrameMetrics | None:
        return self._metrics

    def reset(self) -> None:
        self._agents.clear()
        self._orbs.clear()
        self._rng.reset()
        self._metrics = None
        self._bootstrap_population()
        logger.info("Simulation reset with %d boids", len(self._agents))

    def restore_defaults(self) -> None:
        flock = self._config.flock
        for name in SLIDER_PARAMETERS:
            setattr(flock, name, getattr(self._defaults, name))
        logger.info("Slider parameters restored to defaults")
        self.reset()

    def update_parameters(self, **changes: object) -> None:
        """
        Write control-panel values into the flock parameters.

        Values are validated as a whole before anything is applied, so a bad
        update leaves the current parameters untouched. Changing the population
        size rebuilds the flock.
        """

        coerced = {name: coerce_parameter(name, value) for name, value in changes.items()}
        candidate = replace(self._config.flock, **coerced)
        candidate.validate()
        resize_population = candidate.num_boids != self._config.flock.num_boids
        flock = self._config.flock
        for name, value in coerced.items():
            setattr(flock, name, value)
        logger.debug("Flock parameters updated: %s", coerced)
        if resize_population:
            self.reset()

    def place_orb(self, x: float, y: float, kind: OrbKind | str) -> Orb:
        orb_kind = kind if isinstance(kind, OrbKind) else OrbKind(str(kind).lower())
        orb = Orb(position=Vec2(float(x), float(y)), radius=self._config.orbs.radius, kind=orb_kind)
        self._orbs.append(orb)
        logger.debug("Placed %s orb at (%.1f, %.1f)", orb_kind.value, orb.position.x, orb.position.y)
        return orb

    def place_orb_for_button(self, button: int, x: float, y: float) -> Orb | None:
        kind = self._config.orbs.kind_for_button(button)
        if kind is None:
            return None
        return self.place_orb(x, y, kind)

    def resize(self, width: float, height: float) -> None:
        validate_canvas(width, height)
        self._width = float(width)
        self._height = float(height)
        logger.info("Canvas resized to %.0fx%.0f", self._width, self._height)

    def step(self, tick: int) -> FrameMetrics:
        start = perf_counter()
        params = replace(self._config.flock)
        desired_separation = self._config.desired_separation
        agents = self._agents
        orbs = self._orbs
        width = self._width
        height = self._height

        for agent in agents:
            steering.flock(agent, agents, params, desired_separation)
            orb_system.apply_orb_forces(agent, orbs, params)
            steering.integrate(agent, params)
            boundary.resolve_edges(agent, width, height, params.wrap_boundary)

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(tick, agents, len(orbs), elapsed_ms)
        self._metrics = metrics
        return metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(tick, self._agents, len(self._orbs), 0.0)
        metadata = SnapshotMetadata(
            sim_dt=self._config.time_step,
            tick_rate=0.0 if self._config.time_step <= 0 else 1.0 / self._config.time_step,
            seed=self._config.seed,
            config_version=self._config.config_version,
        )
        return Snapshot(
            tick=tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            orbs=[self._orb_snapshot(orb) for orb in self._orbs],
            canvas=SnapshotCanvas(
                width=self._width,
                height=self._height,
                wrap_boundary=self._config.flock.wrap_boundary,
            ),
            metadata=metadata,
        )

    def _bootstrap_population(self) -> None:
        config = self._config
        max_speed = config.flock.max_speed
        spread = config.initial_velocity_range
        for index in range(config.flock.num_boids):
            position = Vec2(
                self._rng.next_range(0.0, self._width),
                self._rng.next_range(0.0, self._height),
            )
            velocity = Vec2(
                self._rng.next_range(-spread, spread),
                self._rng.next_range(-spread, spread),
            ).clamp_length(max_speed)
            agent = Agent(
                id=index,
                position=position,
                velocity=velocity,
                size=config.boid_size,
                color=self._sample_color(),
                heading=velocity.heading(),
            )
            self._agents.append(agent)

    def _sample_color(self) -> Color:
        color = Color(0, 0, 0)
        color.hsla = (
            self._rng.next_range(0.0, 360.0),
            self._config.color_saturation,
            self._config.color_lightness,
            100.0,
        )
        return color

    @staticmethod
    def _color_hex(color: Color) -> str:
        return f"#{color.r:02x}{color.g:02x}{color.b:02x}"

    def _agent_snapshot(self, agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "heading": agent.heading,
            "size": agent.size,
            "color": self._color_hex(agent.color),
        }

    def _orb_snapshot(self, orb: Orb) -> Dict[str, Any]:
        color = orb.color
        return {
            "x": orb.position.x,
            "y": orb.position.y,
            "radius": orb.radius,
            "kind": orb.kind.value,
            "color": self._color_hex(color),
            "alpha": color.a / 255.0,
        }
