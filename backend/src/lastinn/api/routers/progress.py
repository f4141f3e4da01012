from __future__ import annotations

from fastapi import APIRouter, Depends

from lastinn.api.deps import get_engine
from lastinn.api.schemas import ProgressOut, UpgradesOut
from lastinn.core.engine.game import GameEngine

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("", response_model=ProgressOut)
def get_progress(engine: GameEngine = Depends(get_engine)):
    progress = engine.state.progress
    return ProgressOut(
        echoes=progress.echoes,
        upgrades=UpgradesOut(bonus_hp=progress.upgrades.bonus_hp),
    )
