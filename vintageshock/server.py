"""
HTTP ingress for the shock engine.

Game integrations that cannot embed the engine post damage here, or
connect a mod over the ``/mod`` WebSocket using the mod protocol.

    uvicorn.run(create_app(engine), host="127.0.0.1", port=3051)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from . import __version__
from .actuator import ShockCommand
from .bridge import ShockBridge
from .engine import ShockEngine
from .events import DamageObservation, Subject

logger = logging.getLogger(__name__)


class DamagePayload(BaseModel):
    damage: float
    current_health: Optional[float] = None
    max_health: Optional[float] = None
    timestamp: Optional[float] = None


class HurtOtherPayload(BaseModel):
    damage: float
    timestamp: Optional[float] = None


def _result(command: Optional[ShockCommand]) -> Dict[str, Any]:
    if command is None:
        return {"fired": False}
    return {
        "fired": True,
        "reason": command.reason,
        "intensity": command.intensity,
        "duration_ms": command.duration_ms,
    }


def create_app(engine: ShockEngine) -> FastAPI:
    """Build the app. Its lifespan starts and stops the engine."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await engine.start()
        logger.info("Shock engine started")
        try:
            yield
        finally:
            await engine.stop()
            logger.info("Shock engine stopped")

    app = FastAPI(
        title="VintageShock",
        description="Damage events in, OpenShock commands out",
        version=__version__,
        lifespan=lifespan,
    )
    bridge = ShockBridge(engine)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "vintageshock"}

    @app.get("/status")
    async def status():
        stats = getattr(engine.dispatcher, "stats", None)
        return {
            "settings": engine.settings.to_dict(),
            "configured": engine.settings.is_configured_for_api(),
            "decay_active": engine.scheduler.active,
            "actuation": stats.to_dict() if stats is not None else None,
            "text": engine.status_text(),
        }

    @app.post("/events/damage")
    async def damage(payload: DamagePayload):
        obs = DamageObservation(
            Subject.SELF,
            payload.damage,
            current_health=payload.current_health,
            max_health=payload.max_health,
            timestamp=payload.timestamp,
        )
        return _result(engine.on_damage(obs))

    @app.post("/events/hurt-other")
    async def hurt_other(payload: HurtOtherPayload):
        obs = DamageObservation(Subject.OTHER, payload.damage, timestamp=payload.timestamp)
        return _result(engine.on_damage(obs))

    @app.post("/reload")
    async def reload():
        settings = engine.reload()
        return {"ok": True, "settings": settings.to_dict()}

    @app.post("/test")
    async def test():
        ok, message = engine.test_shock()
        if not ok:
            raise HTTPException(status_code=409, detail=message)
        return {"ok": True, "message": message}

    @app.websocket("/mod")
    async def mod_socket(websocket: WebSocket):
        await websocket.accept()
        logger.info("Mod connected")
        try:
            while True:
                raw = await websocket.receive_text()
                reply = bridge.handle_message(raw)
                if reply:
                    await websocket.send_text(reply)
        except WebSocketDisconnect:
            logger.info("Mod disconnected")

    return app
