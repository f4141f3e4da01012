from __future__ import annotations

from typing import Callable, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import TypeAdapter, ValidationError

from lastinn.api.deps import get_engine
from lastinn.api.schemas import (
    ActionRequest,
    ApplyCommandRequest,
    GameStateResponse,
)
from lastinn.core.engine.commands import Command
from lastinn.core.engine.game import GameEngine

router = APIRouter(prefix="/game", tags=["game"])

_COMMAND_ADAPTER = TypeAdapter(Command)

ActionHandler = Callable[[GameEngine, ActionRequest], List[dict]]

ACTIONS: Dict[str, ActionHandler] = {
    "leave-inn": lambda eng, req: eng.leave_inn(),
    "fall-through-trapdoor": lambda eng, req: eng.fall_through_trapdoor(),
    "move-forward": lambda eng, req: eng.move_forward(),
    "attack": lambda eng, req: eng.attack(timed_hit=req.timed_hit),
    "use-health-potion": lambda eng, req: eng.use_health_potion(),
    "purchase-upgrade": lambda eng, req: eng.purchase_upgrade(cost=req.cost or 0),
    "reset-game": lambda eng, req: eng.reset_game(),
    "continue-after-combat": lambda eng, req: eng.continue_after_combat(),
    "apply-pending-state-change": lambda eng, req: eng.apply_pending_state_change(),
    "end-transition": lambda eng, req: eng.end_transition(),
}


def _response(engine: GameEngine, events: List[dict]) -> GameStateResponse:
    rejected = len(events) == 1 and events[0].get("type") == "CommandRejected"
    return GameStateResponse(
        state=engine.snapshot(),
        events_delta=events,
        rejected=rejected,
    )


@router.get("/state", response_model=GameStateResponse)
def get_state(engine: GameEngine = Depends(get_engine)):
    return GameStateResponse(state=engine.snapshot())


@router.post("/actions/{action}", response_model=GameStateResponse)
def run_action(
    action: str,
    req: ActionRequest | None = None,
    engine: GameEngine = Depends(get_engine),
):
    handler = ACTIONS.get(action)
    if handler is None:
        raise HTTPException(status_code=404, detail=f"Unknown action: {action}")

    events = handler(engine, req or ActionRequest())
    return _response(engine, events)


@router.post("/commands:apply", response_model=GameStateResponse)
def apply_command(req: ApplyCommandRequest, engine: GameEngine = Depends(get_engine)):
    try:
        cmd_obj = _COMMAND_ADAPTER.validate_python(req.command)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Bad command: {e}")

    events = engine.dispatch(cmd_obj)
    return _response(engine, events)
