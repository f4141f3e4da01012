from __future__ import annotations

from fastapi import HTTPException, Request

from lastinn.core.engine.game import GameEngine


def get_engine(request: Request) -> GameEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Game engine is not running")
    return engine
