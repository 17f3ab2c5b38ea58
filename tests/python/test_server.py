import asyncio
import json
import logging

from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from flocksim.app.server import SimulationController, app, controller
from flocksim.sim.core.config import FlockParameters, SimulationConfig


def _controller() -> SimulationController:
    return SimulationController(SimulationConfig(flock=FlockParameters(num_boids=15)))


def test_controller_parameter_update_and_reset() -> None:
    sim = _controller()

    async def exercise() -> None:
        sim.tick = 7
        params = await sim.update_parameters({"num_boids": 25, "alignment_weight": 2.0})
        assert params["num_boids"] == 25
        assert params["alignment_weight"] == 2.0
        assert len(sim.world.agents) == 25
        assert sim.tick == 0

        sim.tick = 3
        await sim.reset()
        assert sim.tick == 0
        assert len(sim.world.agents) == 15
        assert sim.world.parameters.alignment_weight == 1.0

    asyncio.run(exercise())


def test_controller_places_orbs_by_button() -> None:
    sim = _controller()

    async def exercise() -> None:
        placed = await sim.place_orb({"x": 10, "y": 20, "button": 2})
        assert placed == {"placed": True, "kind": "attractor", "x": 10.0, "y": 20.0}
        ignored = await sim.place_orb({"x": 10, "y": 20, "button": 1})
        assert ignored == {"placed": False}
        explicit = await sim.place_orb({"x": 1, "y": 2, "kind": "repulsor"})
        assert explicit["kind"] == "repulsor"

    asyncio.run(exercise())
    assert len(sim.world.orbs) == 2


def test_http_surface() -> None:
    client = TestClient(app)

    response = client.post("/api/parameters", json={"cohesion_weight": 1.7})
    assert response.status_code == 200
    assert response.json()["cohesion_weight"] == 1.7

    response = client.post("/api/parameters", json={"num_boids": -3})
    assert response.status_code == 400

    response = client.post("/api/orbs", json={"x": 50, "y": 60, "button": 0})
    assert response.json()["kind"] == "repulsor"

    response = client.post("/api/orbs", json={"y": 60})
    assert response.status_code == 400

    response = client.post("/api/canvas", json={"width": 640, "height": 480})
    assert response.json() == {"width": 640.0, "height": 480.0}
    assert client.post("/api/canvas", json={"width": -1, "height": 480}).status_code == 400

    snapshot = client.get("/api/snapshot").json()
    assert snapshot["type"] == "snapshot"
    assert len(snapshot["agents"]) == len(controller.world.agents)
    assert snapshot["orbs"][-1]["kind"] == "repulsor"
    assert snapshot["canvas"]["width"] == 640.0

    status = client.get("/api/status").json()
    assert status["parameters"]["cohesion_weight"] == 1.7

    response = client.post("/api/control/reset")
    assert response.json()["tick"] == 0
    assert controller.world.parameters.cohesion_weight == 1.0
    assert controller.world.orbs == []


def test_same_population_update_keeps_tick() -> None:
    sim = _controller()

    async def exercise() -> None:
        sim.tick = 5
        params = await sim.update_parameters({"num_boids": 15, "cohesion_weight": 2.0})
        assert params["cohesion_weight"] == 2.0
        assert sim.tick == 5
        assert len(sim.world.agents) == 15

    asyncio.run(exercise())


class _LeavingClient:
    """Drops out of the client set while its frame is being sent."""

    def __init__(self, clients: set):
        self.clients = clients
        self.sent: list[str] = []

    async def send_text(self, payload: str) -> None:
        self.sent.append(payload)
        self.clients.discard(self)


class _ClosedClient:
    async def send_text(self, payload: str) -> None:
        raise WebSocketDisconnect(code=1001)


class _ListeningClient:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send_text(self, payload: str) -> None:
        self.sent.append(payload)


def test_broadcast_survives_clients_leaving_mid_send() -> None:
    sim = _controller()
    leaving = [_LeavingClient(sim.clients) for _ in range(3)]
    closed = _ClosedClient()
    listener = _ListeningClient()
    sim.clients.update(leaving)
    sim.clients.add(closed)
    sim.clients.add(listener)

    asyncio.run(sim._broadcast_snapshot())

    assert sim.clients == {listener}
    assert len(listener.sent) == 1
    assert json.loads(listener.sent[0])["type"] == "snapshot"
    assert all(len(client.sent) == 1 for client in leaving)


def test_failed_frame_loop_is_logged_and_cleared(caplog) -> None:
    sim = SimulationController(SimulationConfig(time_step=0.001, flock=FlockParameters(num_boids=5)))

    def broken_step(tick: int):
        raise RuntimeError("frame exploded")

    sim.world.step = broken_step

    async def exercise() -> None:
        await sim.start()
        task = sim._broadcast_task
        assert task is not None
        await asyncio.wait([task])
        await asyncio.sleep(0)

    with caplog.at_level(logging.ERROR, logger="flocksim.app.server"):
        asyncio.run(exercise())

    assert sim._broadcast_task is None
    assert sim.running is False
    assert any(record.exc_info and "frame exploded" in str(record.exc_info[1]) for record in caplog.records)


def test_http_rejects_malformed_controls() -> None:
    client = TestClient(app)
    before = controller.speed_multiplier

    assert client.post("/api/control/speed", json={"multiplier": "fast"}).status_code == 400
    assert client.post("/api/control/speed", json={"multiplier": None}).status_code == 400
    assert controller.speed_multiplier == before

    response = client.post("/api/control/speed", json={"multiplier": 9})
    assert response.json() == {"multiplier": 5.0}

    orbs_before = len(controller.world.orbs)
    assert client.post("/api/orbs", json={"x": 1, "y": 1, "button": None}).status_code == 400
    assert client.post("/api/orbs", json={"x": 1, "y": 1, "button": "left"}).status_code == 400
    assert len(controller.world.orbs) == orbs_before

    client.post("/api/control/speed", json={"multiplier": before})
