from lastinn.core.engine.characters import goblin, troll
from lastinn.core.engine.commands import Attack
from lastinn.core.engine.rules.apply import _resolve_attack, apply_command
from lastinn.core.engine.rules.tuning import Tuning
from lastinn.core.engine.state import RunState

from helpers import ScriptedRandom, combat_state, die, settle


def test_exchange_hit_then_enemy_miss():
    # player rolls 4 (plain hit), goblin rolls 1 (miss)
    rng = ScriptedRandom([die(4), die(1)])
    state = combat_state(rng)

    state, ev = apply_command(state, Attack(timed_hit=False))

    types = [e["type"] for e in ev]
    assert types == [
        "AttackRolled",
        "HitConfirmed",
        "DamageApplied",
        "AttackRolled",
        "MissConfirmed",
    ]
    assert ev[0]["payload"]["roll"]["die"] == 4
    assert ev[1]["payload"]["is_critical"] is False

    assert state.current_enemy.hp == 1
    assert state.player.hp == 10
    assert state.last_attack_result == "hit"
    assert state.attack_turn == 1
    assert state.game_phase == "combat"
    assert not state.is_transitioning
    assert state.log == [
        "You strike the Goblin. A clean hit! (1 damage)",
        "The Goblin swings wide and misses you!",
    ]


def test_exchange_miss_then_enemy_hit():
    rng = ScriptedRandom([die(2), die(5)])
    state = combat_state(rng)

    state, ev = apply_command(state, Attack())

    assert state.current_enemy.hp == 2
    assert state.player.hp == 9
    assert state.last_attack_result == "miss"
    applied = [e for e in ev if e["type"] == "DamageApplied"]
    assert len(applied) == 1
    assert applied[0]["payload"]["target_id"] == "Warrior"


def test_timed_hit_forces_a_plain_hit_on_a_bad_roll():
    rng = ScriptedRandom([die(1), die(1)])
    state = combat_state(rng)

    state, ev = apply_command(state, Attack(timed_hit=True))

    roll = ev[0]["payload"]["roll"]
    assert roll["die"] == 1
    assert roll["hit"] is True
    assert roll["is_critical"] is False
    assert [m["name"] for m in roll["mods"]] == ["timed_hit"]
    assert ev[1]["type"] == "HitConfirmed"
    assert ev[1]["payload"]["timed_hit"] is True

    assert state.current_enemy.hp == 1
    assert state.log[0].endswith("(Perfect!)")


def test_timed_hit_keeps_a_natural_crit():
    # 6 is a crit on its own: double damage against the troll
    rng = ScriptedRandom([die(6), die(1)])
    state = combat_state(rng, boss=True)

    state, ev = apply_command(state, Attack(timed_hit=True))

    assert ev[1]["payload"]["is_critical"] is True
    assert state.current_enemy.hp == 3


def test_timed_hit_does_not_help_the_enemy():
    # player misses without the bar, goblin rolls 3: still a miss
    rng = ScriptedRandom([die(3), die(3)])
    state = combat_state(rng)

    state, ev = apply_command(state, Attack(timed_hit=False))

    assert [e["type"] for e in ev].count("MissConfirmed") == 2
    enemy_roll = ev[2]["payload"]["roll"]
    assert enemy_roll["mods"] == []


def test_killing_a_goblin_skips_retaliation():
    # a single draw: the goblin never gets to roll
    rng = ScriptedRandom([die(4)])
    enemy = goblin()
    enemy.hp = 1
    state = combat_state(rng, enemy=enemy, goblins_killed=2)
    state.player.hp = 1

    state, ev = apply_command(state, Attack())

    types = [e["type"] for e in ev]
    assert "EnemyDefeated" in types
    assert types.count("AttackRolled") == 1
    assert rng.remaining == 0
    assert state.player.hp == 1
    assert state.progress.echoes == 1

    state = settle(state, apply_command)

    assert state.goblins_killed == 3
    assert state.game_phase == "goblin-killed"
    assert state.current_enemy is None
    assert state.current_encounter is None
    assert state.log[-1] == (
        "You step over the corpse and steel yourself for what lies ahead."
    )


def test_killing_the_troll_wins_without_retaliation():
    rng = ScriptedRandom([die(5)])
    boss = troll()
    boss.hp = 1
    state = combat_state(rng, enemy=boss, boss=True, goblins_killed=5)

    state, ev = apply_command(state, Attack())

    defeated = next(e for e in ev if e["type"] == "EnemyDefeated")["payload"]
    assert defeated["is_final_boss"] is True
    assert rng.remaining == 0
    assert state.progress.echoes == 5

    state = settle(state, apply_command)

    assert state.game_phase == "win"
    assert state.goblins_killed == 5
    assert state.current_enemy is None
    assert state.current_encounter is None
    assert len(state.log) == 3


def test_dying_in_combat_stages_lose():
    rng = ScriptedRandom([die(1), die(4)])
    state = combat_state(rng, goblins_killed=3)
    state.player.hp = 1

    state, ev = apply_command(state, Attack())

    assert state.player.hp == 0
    assert state.progress.echoes == 0
    assert state.pending_state_change["game_phase"] == "lose"
    # the failed exchange does not count as a turn
    assert state.attack_turn == 0

    state = settle(state, apply_command)
    assert state.game_phase == "lose"
    assert state.current_enemy is None
    assert state.log[-1] == "Your strength fails. Darkness claims you."


def test_troll_hits_for_two():
    rng = ScriptedRandom([die(1), die(6)])
    state = combat_state(rng, boss=True)

    state, _ = apply_command(state, Attack())

    # standard policy: 6 is a plain hit, no crit
    assert state.player.hp == 8


def test_attack_without_enemy_is_a_noop():
    rng = ScriptedRandom([])
    state = RunState(game_phase="combat").with_rng(rng)

    state, ev = apply_command(state, Attack(timed_hit=True))

    assert ev[0]["type"] == "CommandRejected"
    assert ev[0]["payload"]["code"] == "NO_ENEMY"
    assert state.seq == 0

    # resolution on its own does not draw or touch the state either
    assert _resolve_attack(state, Attack()) == []
    assert state.seq == 0
    assert state.log == []


def test_attack_outside_combat_is_a_noop():
    rng = ScriptedRandom([])
    state = RunState(game_phase="dungeon").with_rng(rng)
    state.current_enemy = goblin()

    state, ev = apply_command(state, Attack())

    assert ev[0]["payload"]["code"] == "BAD_PHASE"
    assert state.current_enemy.hp == 2


def test_defeat_bonus_is_paid_only_when_tuned():
    tuning = Tuning(echoes_per_kill_on_defeat=2)
    rng = ScriptedRandom([die(1), die(4)])
    state = combat_state(rng, goblins_killed=3, tuning=tuning)
    state.player.hp = 1

    state, ev = apply_command(state, Attack())

    types = [e["type"] for e in ev]
    assert types.index("PlayerDefeated") < types.index("EchoesAwarded")
    awarded = next(e for e in ev if e["type"] == "EchoesAwarded")["payload"]
    assert awarded["reason"] == "defeat"
    assert state.progress.echoes == 6
