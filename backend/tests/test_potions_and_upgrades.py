import pytest

from lastinn.core.engine.commands import LeaveInn, PurchaseUpgrade, UseHealthPotion
from lastinn.core.engine.rules.apply import apply_command
from lastinn.core.engine.state import PersistentProgress, RunState, Upgrades
from lastinn.core.persistence.state_codec import run_state_to_dict

from helpers import settle


def test_potion_heals_half_max_hp():
    state = RunState(game_phase="dungeon", health_potions=1).with_seed(1)
    state.player.hp = 3

    state, ev = apply_command(state, UseHealthPotion())

    assert state.player.hp == 8
    assert state.health_potions == 0
    assert state.log[-1] == "You drink a potion and recover 5 HP."
    payload = ev[0]["payload"]
    assert (payload["hp_before"], payload["hp_after"]) == (3, 8)


def test_potion_heal_is_capped_and_floored():
    state = RunState(game_phase="combat", health_potions=2).with_seed(1)
    state.player.max_hp = 11
    state.player.hp = 9

    state, _ = apply_command(state, UseHealthPotion())

    # 11 // 2 == 5, capped at 11
    assert state.player.hp == 11
    assert state.health_potions == 1


def test_potion_use_appends_to_log():
    state = RunState(game_phase="dungeon", log=["earlier"]).with_seed(1)
    state.player.hp = 1

    state, _ = apply_command(state, UseHealthPotion())

    assert state.log[0] == "earlier"
    assert len(state.log) == 2


@pytest.mark.parametrize("potions, hp", [(0, 4), (3, 10)])
def test_potion_is_a_noop_without_potions_or_at_full_hp(potions, hp):
    state = RunState(game_phase="dungeon", health_potions=potions).with_seed(1)
    state.player.hp = hp
    before = run_state_to_dict(state)

    state, ev = apply_command(state, UseHealthPotion())

    assert ev[0]["type"] == "CommandRejected"
    assert run_state_to_dict(state) == before


@pytest.mark.parametrize("phase, hp", [("lose", 0), ("win", 4)])
def test_potion_is_refused_once_the_run_is_over(phase, hp):
    state = RunState(game_phase=phase, health_potions=1).with_seed(1)
    state.player.hp = hp
    before = run_state_to_dict(state)

    state, ev = apply_command(state, UseHealthPotion())

    assert ev[0]["type"] == "CommandRejected"
    assert ev[0]["payload"]["code"] == "BAD_PHASE"
    assert run_state_to_dict(state) == before


def test_purchase_upgrade_spends_echoes():
    progress = PersistentProgress(echoes=7)
    state = RunState(progress=progress).with_seed(1)

    state, ev = apply_command(state, PurchaseUpgrade(cost=3))

    assert ev[0]["type"] == "UpgradePurchased"
    assert ev[0]["payload"]["level"] == 1
    assert progress.echoes == 4
    assert progress.upgrades.bonus_hp == 1
    # nothing about the current run changes
    assert state.player.max_hp == 10
    assert not state.is_transitioning


@pytest.mark.parametrize(
    "echoes, cost, code", [(2, 3, "NOT_ENOUGH_ECHOES"), (5, 0, "BAD_COST")]
)
def test_purchase_upgrade_refused(echoes, cost, code):
    progress = PersistentProgress(echoes=echoes)
    state = RunState(progress=progress).with_seed(1)

    state, ev = apply_command(state, PurchaseUpgrade(cost=cost))

    assert ev[0]["payload"]["code"] == code
    assert progress.echoes == echoes
    assert progress.upgrades.bonus_hp == 0


def test_bonus_hp_shows_up_on_next_leave_inn():
    progress = PersistentProgress(echoes=0, upgrades=Upgrades(bonus_hp=2))
    state = RunState(progress=progress).with_seed(1)

    state, _ = apply_command(state, LeaveInn())
    state = settle(state, apply_command)

    assert state.game_phase == "trapdoor"
    assert state.player.max_hp == 12
    assert state.player.hp == 12
    assert state.log == [
        "You walk for what feels like hours through the dark forest.",
        "The trees twist tighter. Half-buried in the muck, a mossy cellar door beckons.",
    ]
