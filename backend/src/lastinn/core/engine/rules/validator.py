from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from lastinn.core.engine.commands import (
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
    Command,
)
from lastinn.core.engine.state import (
    EXPLORATION_PHASES,
    POTION_PHASES,
    TERMINAL_PHASES,
    RunState,
)


@dataclass
class ValidationError:
    code: str
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[ValidationError] = field(default_factory=list)


def _err(code: str, message: str, **meta: Any) -> ValidationResult:
    return ValidationResult(
        ok=False, errors=[ValidationError(code=code, message=message, meta=meta)]
    )


def _bad_phase(cmd: Command, state: RunState, *allowed: str) -> ValidationResult:
    return _err(
        "BAD_PHASE",
        f"{cmd.type} is not allowed in phase {state.game_phase!r}",
        phase=state.game_phase,
        allowed=list(allowed),
    )


def validate_command(state: RunState, cmd: Command) -> ValidationResult:
    # --- transition gating ---
    if isinstance(cmd, ApplyPendingStateChange):
        if state.transition.status != "staged":
            return _err(
                "NOTHING_STAGED",
                "No pending state change to apply",
                status=state.transition.status,
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, EndTransition):
        if state.transition.status != "applying":
            return _err(
                "NOT_APPLYING",
                "No applied transition to finish",
                status=state.transition.status,
            )
        return ValidationResult(ok=True)

    # while a transition is in flight only the two commands above get through
    if state.transition.is_transitioning:
        return _err(
            "TRANSITION_IN_FLIGHT",
            "A transition is in progress; wait for it to finish",
            status=state.transition.status,
        )

    if isinstance(cmd, LeaveInn):
        if state.game_phase != "start":
            return _bad_phase(cmd, state, "start")
        return ValidationResult(ok=True)

    if isinstance(cmd, FallThroughTrapdoor):
        if state.game_phase != "trapdoor":
            return _bad_phase(cmd, state, "trapdoor")
        return ValidationResult(ok=True)

    if isinstance(cmd, MoveForward):
        if state.game_phase not in EXPLORATION_PHASES:
            return _bad_phase(cmd, state, *EXPLORATION_PHASES)
        return ValidationResult(ok=True)

    if isinstance(cmd, ContinueAfterCombat):
        if state.game_phase != "goblin-killed":
            return _bad_phase(cmd, state, "goblin-killed")
        return ValidationResult(ok=True)

    if isinstance(cmd, Attack):
        if state.game_phase != "combat":
            return _bad_phase(cmd, state, "combat")
        if state.current_enemy is None:
            return _err("NO_ENEMY", "There is nothing to attack")
        return ValidationResult(ok=True)

    if isinstance(cmd, UseHealthPotion):
        # the dead stay dead
        if state.game_phase not in POTION_PHASES or state.player.is_down:
            return _bad_phase(cmd, state, *POTION_PHASES)
        if state.health_potions <= 0:
            return _err("NO_POTIONS", "No health potions left")
        if state.player.hp >= state.player.max_hp:
            return _err(
                "FULL_HP",
                "Already at full health",
                hp=state.player.hp,
                max_hp=state.player.max_hp,
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, PurchaseUpgrade):
        if cmd.cost < 1:
            return _err("BAD_COST", "Upgrade cost must be positive", cost=cmd.cost)
        if state.progress.echoes < cmd.cost:
            return _err(
                "NOT_ENOUGH_ECHOES",
                "Not enough echoes for this upgrade",
                echoes=state.progress.echoes,
                cost=cmd.cost,
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, ResetGame):
        if state.game_phase not in TERMINAL_PHASES:
            return _bad_phase(cmd, state, *TERMINAL_PHASES)
        return ValidationResult(ok=True)

    return _err("UNKNOWN_COMMAND", "Unhandled command", type=getattr(cmd, "type", None))
