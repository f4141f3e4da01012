from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # attack: outcome of the timing bar
    timed_hit: bool = False
    # purchase-upgrade
    cost: Optional[int] = None


class ApplyCommandRequest(BaseModel):
    command: Dict[str, Any]


class GameStateResponse(BaseModel):
    state: Dict[str, Any]
    events_delta: List[Dict[str, Any]] = Field(default_factory=list)
    # True when the engine ignored the action (wrong phase, no potions, ...)
    rejected: bool = False


class UpgradesOut(BaseModel):
    bonus_hp: int = 0


class ProgressOut(BaseModel):
    echoes: int = 0
    upgrades: UpgradesOut = Field(default_factory=UpgradesOut)
