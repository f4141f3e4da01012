# backend/src/lastinn/core/engine/commands.py

from typing import Literal, Union
from pydantic import BaseModel, ConfigDict


class CommandBase(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: str


class LeaveInn(CommandBase):
    type: Literal["LeaveInn"] = "LeaveInn"


class FallThroughTrapdoor(CommandBase):
    type: Literal["FallThroughTrapdoor"] = "FallThroughTrapdoor"


class MoveForward(CommandBase):
    type: Literal["MoveForward"] = "MoveForward"


class Attack(CommandBase):
    type: Literal["Attack"] = "Attack"
    # result of the timing bar at the moment of the swing
    timed_hit: bool = False


class UseHealthPotion(CommandBase):
    type: Literal["UseHealthPotion"] = "UseHealthPotion"


class PurchaseUpgrade(CommandBase):
    type: Literal["PurchaseUpgrade"] = "PurchaseUpgrade"
    upgrade: Literal["bonus_hp"] = "bonus_hp"
    cost: int


class ResetGame(CommandBase):
    type: Literal["ResetGame"] = "ResetGame"


class ContinueAfterCombat(CommandBase):
    type: Literal["ContinueAfterCombat"] = "ContinueAfterCombat"


class ApplyPendingStateChange(CommandBase):
    type: Literal["ApplyPendingStateChange"] = "ApplyPendingStateChange"


class EndTransition(CommandBase):
    type: Literal["EndTransition"] = "EndTransition"


Command = Union[
    LeaveInn,
    FallThroughTrapdoor,
    MoveForward,
    Attack,
    UseHealthPotion,
    PurchaseUpgrade,
    ResetGame,
    ContinueAfterCombat,
    ApplyPendingStateChange,
    EndTransition,
]
