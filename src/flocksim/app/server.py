from __future__ import annotations

import asyncio
import json
import logging
import math
from dataclasses import asdict
from typing import Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..logging_config import setup_logging
from ..sim.core.config import SimulationConfig
from ..sim.core.world import World

logger = logging.getLogger(__name__)


class SimulationController:
    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.tick = 0
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
            self._broadcast_task.add_done_callback(self._on_loop_done)
        self.running = True
        logger.info("Frame loop started")

    async def stop(self) -> None:
        self.running = False
        logger.info("Frame loop paused at tick %d", self.tick)

    def _on_loop_done(self, task: asyncio.Task) -> None:
        self._broadcast_task = None
        self.running = False
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Frame loop stopped at tick %d", self.tick, exc_info=exc)

    async def reset(self) -> None:
        async with self._lock:
            self.world.restore_defaults()
            self.tick = 0
        await self._broadcast_snapshot()

    async def update_parameters(self, changes: dict) -> dict:
        async with self._lock:
            population = self.world.parameters.num_boids
            self.world.update_parameters(**changes)
            if self.world.parameters.num_boids != population:
                self.tick = 0
            return asdict(self.world.parameters)

    async def place_orb(self, payload: dict) -> dict:
        try:
            x = float(payload["x"])
            y = float(payload["y"])
            button = int(payload.get("button", 0))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError("Orb placement needs numeric 'x', 'y' and 'button'") from exc
        async with self._lock:
            if "kind" in payload:
                orb = self.world.place_orb(x, y, payload["kind"])
            else:
                orb = self.world.place_orb_for_button(button, x, y)
        if orb is None:
            return {"placed": False}
        return {"placed": True, "kind": orb.kind.value, "x": orb.position.x, "y": orb.position.y}

    async def resize(self, width: float, height: float) -> None:
        async with self._lock:
            self.world.resize(width, height)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.speed_multiplier)
            if not self.running:
                continue
            async with self._lock:
                self.world.step(self.tick)
                self.tick += 1
            if self.tick % self.broadcast_interval == 0:
                await self._broadcast_snapshot()

    def serialize_snapshot(self) -> dict:
        snapshot = self.world.snapshot(self.tick)
        return {
            "type": "snapshot",
            "tick": snapshot.tick,
            "metrics": asdict(snapshot.metrics),
            "agents": snapshot.agents,
            "orbs": snapshot.orbs,
            "canvas": asdict(snapshot.canvas),
            "metadata": asdict(snapshot.metadata),
        }

    async def _broadcast_snapshot(self) -> None:
        if not self.clients:
            return
        payload = json.dumps(self.serialize_snapshot())
        stale: Set[WebSocket] = set()
        for client in list(self.clients):
            try:
                await client.send_text(payload)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)


app = FastAPI(title="Flocking Simulation")
controller = SimulationController(SimulationConfig())


@app.on_event("startup")
async def _startup() -> None:
    setup_logging()
    await controller.start()


@app.get("/api/status")
async def status() -> JSONResponse:
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "population": len(controller.world.agents),
            "orbs": len(controller.world.orbs),
            "parameters": asdict(controller.world.parameters),
        }
    )


@app.get("/api/snapshot")
async def snapshot() -> JSONResponse:
    return JSONResponse(controller.serialize_snapshot())


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    try:
        speed = float(payload.get("multiplier", 1.0))
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail="multiplier must be a number") from exc
    if not math.isfinite(speed):
        raise HTTPException(status_code=400, detail="multiplier must be finite")
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/parameters")
async def update_parameters(payload: dict) -> JSONResponse:
    try:
        parameters = await controller.update_parameters(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse(parameters)


@app.post("/api/orbs")
async def place_orb(payload: dict) -> JSONResponse:
    try:
        result = await controller.place_orb(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse(result)


@app.post("/api/canvas")
async def resize_canvas(payload: dict) -> JSONResponse:
    try:
        await controller.resize(float(payload.get("width", 0)), float(payload.get("height", 0)))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse({"width": controller.world.width, "height": controller.world.height})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    await websocket.send_text(json.dumps(controller.serialize_snapshot()))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        controller.clients.discard(websocket)


__all__ = ["app", "controller"]
