from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Dict, Set

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import MAX_SEED, AppConfig, ConfigurationError, SimulationSettings, load_settings
from ..sim.core.world import World
from ..sim.systems.lifecycle import InvalidTransitionError
from ..sim.utils.math2d import _clamp_value
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

MIN_SPEED = 1.0
MAX_SPEED = 1000.0
# oldest unacknowledged snapshots are dropped past this
MAX_QUEUED_SNAPSHOTS = 256


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    def __init__(self, config: AppConfig, broadcast_interval: int | None = None):
        self.config = config
        self.world = World(config)
        interval = config.broadcast_interval if broadcast_interval is None else broadcast_interval
        self.broadcast_interval = max(1, interval)
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=MAX_QUEUED_SNAPSHOTS)
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    async def launch(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())

    async def start_run(self, overrides: Dict[str, Any] | None = None, random_seed: bool = False) -> SimulationSettings:
        values = asdict(self.world.settings)
        values.update(overrides or {})
        if random_seed:
            values["seed"] = random.randint(0, MAX_SEED)
        settings = load_settings(values)
        async with self._lock:
            self.world.start(settings)
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()
        return settings

    async def pause(self) -> None:
        async with self._lock:
            self.world.pause()

    async def resume(self) -> None:
        async with self._lock:
            self.world.resume()

    def set_speed(self, speed: float) -> float:
        self.world.simulation_speed = _clamp_value(float(speed), MIN_SPEED, MAX_SPEED)
        return self.world.simulation_speed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step)
            async with self._lock:
                metrics = self.world.step(self.config.time_step)
            if metrics is not None and metrics.tick % self.broadcast_interval == 0:
                await self._broadcast_snapshot()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def snapshot_payload(self) -> Dict[str, Any]:
        snapshot = self.world.snapshot()
        return {
            "tick": snapshot.tick,
            "state": snapshot.state,
            "stats": asdict(snapshot.stats),
            "agents": snapshot.agents,
            "world": asdict(snapshot.world),
            "metadata": asdict(snapshot.metadata),
            "debug": asdict(snapshot.debug),
        }

    def _serialize_snapshot(self) -> QueuedSnapshot:
        payload = self.snapshot_payload()
        message = {"type": "snapshot", "tick": payload["tick"], "payload": payload}
        return QueuedSnapshot(tick=payload["tick"], payload=json.dumps(message))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        if not self.clients:
            return
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)
            logger.info("Dropped disconnected client (%d remaining)", len(self.clients))


app = FastAPI(title="Heroes and Cowards Simulation")
controller = SimulationController(AppConfig())


@app.on_event("startup")
async def _startup() -> None:
    await controller.launch()


@app.get("/api/status")
async def status() -> JSONResponse:
    world = controller.world
    return JSONResponse(
        {
            "state": world.state.value,
            "tick": world.tick,
            "seed": world.settings.seed,
            "population": len(world.agents),
            "stats": world.stats.as_dict(),
            "simulation_speed": world.simulation_speed,
            "debug": asdict(world.debug),
        }
    )


@app.get("/api/snapshot")
async def snapshot() -> JSONResponse:
    return JSONResponse(controller.snapshot_payload())


@app.post("/api/control/start")
async def start_simulation(payload: dict | None = None) -> JSONResponse:
    payload = payload or {}
    try:
        settings = await controller.start_run(
            payload.get("settings", {}), random_seed=bool(payload.get("random_seed", False))
        )
    except (ConfigurationError, TypeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse({"state": controller.world.state.value, "seed": settings.seed})


@app.post("/api/control/pause")
async def pause_simulation() -> JSONResponse:
    try:
        await controller.pause()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return JSONResponse({"state": controller.world.state.value})


@app.post("/api/control/resume")
async def resume_simulation() -> JSONResponse:
    try:
        await controller.resume()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return JSONResponse({"state": controller.world.state.value})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    try:
        speed = controller.set_speed(payload.get("speed", controller.config.simulation_speed))
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"invalid speed: {exc}") from exc
    return JSONResponse({"speed": speed})


@app.post("/api/control/debug")
async def set_debug(payload: dict) -> JSONResponse:
    try:
        debug = controller.world.set_debug(**payload)
    except AttributeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse(asdict(debug))


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    logger.info("Client connected (%d total)", len(controller.clients))
    await controller._broadcast_snapshot()
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)
        logger.info("Client disconnected (%d remaining)", len(controller.clients))


def main() -> None:
    parser = argparse.ArgumentParser(description="Heroes and cowards web controller")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()
    configure_logging(level=args.log_level, include_uvicorn=True)
    uvicorn.run(app, host=args.host, port=args.port)


__all__ = ["app", "controller", "main"]
