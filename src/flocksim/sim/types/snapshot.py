from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import FrameMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: FrameMetrics
    agents: List[Dict[str, Any]]
    orbs: List[Dict[str, Any]]
    canvas: "SnapshotCanvas"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotCanvas:
    width: float
    height: float
    wrap_boundary: bool


@dataclass(slots=True)
class SnapshotMetadata:
    sim_dt: float
    tick_rate: float
    seed: int
    config_version: str
