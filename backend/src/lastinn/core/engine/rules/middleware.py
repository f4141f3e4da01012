from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Literal

from lastinn.core.engine.characters import Character
from lastinn.core.engine.events import Roll, RollMod
from lastinn.core.engine.state import RunState


# --- context ---


@dataclass(frozen=True)
class AttackRollContext:
    attacker_id: str
    target_id: str
    side: Literal["player", "enemy"]  # who is swinging
    timed_hit: bool = False


# --- middleware protocol ---


class RollMiddleware(Protocol):
    def before_attack_roll(
        self,
        state: RunState,
        attacker: Character,
        target: Character,
        ctx: AttackRollContext,
        roll: Roll,
    ) -> List[RollMod]: ...


def apply_roll_mods(roll: Roll, mods: List[RollMod]) -> Roll:
    if not mods:
        return roll
    roll.mods.extend(mods)
    if any(m.forced_hit for m in mods):
        roll.hit = True
    # is_critical is left alone: only the die grants a crit
    return roll


class TimedHitMiddleware:
    """A successful timing bar guarantees the player's hit, never a crit."""

    def before_attack_roll(
        self,
        state: RunState,
        attacker: Character,
        target: Character,
        ctx: AttackRollContext,
        roll: Roll,
    ) -> List[RollMod]:
        if ctx.side != "player" or not ctx.timed_hit:
            return []
        return [RollMod(name="timed_hit", forced_hit=True)]


DEFAULT_ROLL_MIDDLEWARES: List[RollMiddleware] = [
    TimedHitMiddleware(),
]
