from __future__ import annotations

from random import Random

from lastinn.core.engine.characters import goblin, troll
from lastinn.core.engine.encounters import TEXT_BOSS, TEXT_GOBLIN, Encounter
from lastinn.core.engine.state import RunState


class ScriptedRandom(Random):
    """Random whose random() replays a fixed list; runs dry -> AssertionError."""

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def random(self):
        if not self._values:
            raise AssertionError("scripted rng exhausted")
        return self._values.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._values)


def die(value: int) -> float:
    # int(die(v) * 6) + 1 == v
    return (value - 0.5) / 6


# encounter draws
HALLWAY, ROOM = 0.9, 0.1
YES, NO = 0.1, 0.9


def combat_state(rng, *, enemy=None, boss=False, **kw) -> RunState:
    if enemy is None:
        enemy = troll() if boss else goblin()
    enc = Encounter(
        type="combat",
        text=TEXT_BOSS if boss else TEXT_GOBLIN,
        enemy=enemy,
        is_final_boss=boss,
    )
    state = RunState(
        game_phase="combat",
        current_enemy=enemy,
        current_encounter=enc,
        troll_aggroed=boss,
        **kw,
    )
    return state.with_rng(rng)


def settle(state: RunState, apply_command) -> RunState:
    """Play out a staged transition the way the UI timers would."""
    from lastinn.core.engine.commands import ApplyPendingStateChange, EndTransition

    state, _ = apply_command(state, ApplyPendingStateChange())
    state, _ = apply_command(state, EndTransition())
    return state
