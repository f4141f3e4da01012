from lastinn.core.engine.characters import warrior
from lastinn.core.engine.commands import ResetGame
from lastinn.core.engine.rules.apply import apply_command
from lastinn.core.engine.state import PersistentProgress, RunState, Upgrades

from helpers import settle


def _finished_run(phase: str) -> RunState:
    progress = PersistentProgress(echoes=7, upgrades=Upgrades(bonus_hp=2))
    state = RunState(
        game_phase=phase,
        goblins_killed=4,
        troll_aggroed=True,
        health_potions=3,
        attack_turn=12,
        last_attack_result="miss",
        log=["Your strength fails. Darkness claims you."],
        player=warrior(bonus_hp=2),
        progress=progress,
    )
    state.player.hp = 0
    return state.with_seed(1)


def test_reset_keeps_progress_and_starts_fresh_run():
    state = _finished_run("lose")
    progress = state.progress

    state, ev = apply_command(state, ResetGame())
    assert ev[0]["type"] == "RunResetStaged"
    assert state.goblins_killed == 4  # still pending

    state = settle(state, apply_command)

    assert state.game_phase == "start"
    assert state.goblins_killed == 0
    assert state.troll_aggroed is False
    assert state.health_potions == 1
    assert state.attack_turn == 0
    assert state.last_attack_result is None
    assert state.log == []
    assert state.current_enemy is None
    assert (state.player.hp, state.player.max_hp) == (10, 10)

    assert state.progress is progress
    assert progress.echoes == 7
    assert progress.upgrades.bonus_hp == 2


def test_reset_from_win():
    state = _finished_run("win")

    state, _ = apply_command(state, ResetGame())
    state = settle(state, apply_command)

    assert state.game_phase == "start"


def test_reset_refused_mid_run():
    state = _finished_run("dungeon")

    state, ev = apply_command(state, ResetGame())

    assert ev[0]["payload"]["code"] == "BAD_PHASE"
    assert state.goblins_killed == 4
    assert not state.is_transitioning
