from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Tuple

from lastinn.core.engine.characters import Character, warrior
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
from lastinn.core.engine.encounters import generate_encounter
from lastinn.core.engine.events import (
    Roll,
    ev_command_rejected,
    ev_transition_staged,
    ev_pending_state_applied,
    ev_transition_ended,
    ev_inn_left,
    ev_encounter_generated,
    ev_trap_triggered,
    ev_potion_found,
    ev_attack_rolled,
    ev_hit_confirmed,
    ev_miss_confirmed,
    ev_damage_applied,
    ev_enemy_defeated,
    ev_player_defeated,
    ev_echoes_awarded,
    ev_potion_used,
    ev_upgrade_purchased,
    ev_run_reset_staged,
)
from lastinn.core.engine.rules.middleware import (
    DEFAULT_ROLL_MIDDLEWARES,
    AttackRollContext,
    apply_roll_mods,
)
from lastinn.core.engine.rules.validator import validate_command
from lastinn.core.engine.state import RunState, fresh_run_fields

logger = logging.getLogger(__name__)

Side = Literal["player", "enemy"]

LEAVE_INN_LOG = [
    "You walk for what feels like hours through the dark forest.",
    "The trees twist tighter. Half-buried in the muck, a mossy cellar door beckons.",
]
TRAPDOOR_LOG = [
    "The rotted hinges groan as the door gives way beneath you.",
    "You crash into the dark, landing on a mound of bones.",
    "This is no cellar. It's a dungeon.",
]
TRAP_DEATH_LINE = "Your wounds overwhelm you. You collapse in the black."
COMBAT_DEATH_LINE = "Your strength fails. Darkness claims you."


def _bump(state: RunState) -> int:
    state.seq += 1
    return state.seq


def _roll_d6(state: RunState) -> int:
    return int(state.rng.random() * 6) + 1


def _stage(state: RunState, events: List[dict], changes: Dict[str, Any]) -> None:
    state.transition.stage(changes)

    seq = _bump(state)
    events.append(
        ev_transition_staged(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            to_phase=changes.get("game_phase"),
            fields=sorted(changes.keys()),
        ).model_dump()
    )


def _award_echoes(
    state: RunState, events: List[dict], amount: int, reason: str
) -> None:
    if amount <= 0:
        return
    state.progress.echoes += amount

    seq = _bump(state)
    events.append(
        ev_echoes_awarded(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            amount=amount,
            reason=reason,
            total=state.progress.echoes,
        ).model_dump()
    )


def _stage_defeat(
    state: RunState, events: List[dict], log: List[str], cause: str
) -> None:
    """Player is down: bank echoes for the progress made and fade to lose."""
    seq = _bump(state)
    events.append(
        ev_player_defeated(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            player_id=state.player.name,
            cause=cause,
        ).model_dump()
    )

    _award_echoes(
        state,
        events,
        state.goblins_killed * state.tuning.echoes_per_kill_on_defeat,
        reason="defeat",
    )

    _stage(
        state,
        events,
        {
            "game_phase": "lose",
            "log": log,
            "current_enemy": None,
            "current_encounter": None,
        },
    )


def _before_attack_roll(
    state: RunState,
    *,
    attacker: Character,
    target: Character,
    side: Side,
    timed_hit: bool,
    roll: Roll,
) -> Roll:
    ctx = AttackRollContext(
        attacker_id=attacker.name,
        target_id=target.name,
        side=side,
        timed_hit=timed_hit,
    )
    mods = []
    for mw in DEFAULT_ROLL_MIDDLEWARES:
        mods.extend(mw.before_attack_roll(state, attacker, target, ctx, roll))
    return apply_roll_mods(roll, mods)


def _swing(
    state: RunState,
    events: List[dict],
    *,
    attacker: Character,
    target: Character,
    side: Side,
    timed_hit: bool = False,
) -> Tuple[Roll, int]:
    """
    One attack from attacker to target.
    return (roll, damage dealt)
    """
    die = _roll_d6(state)
    outcome = attacker.attack_roll(die)
    roll = Roll(die=die, hit=outcome.hit, is_critical=outcome.crit)
    roll = _before_attack_roll(
        state,
        attacker=attacker,
        target=target,
        side=side,
        timed_hit=timed_hit,
        roll=roll,
    )

    seq = _bump(state)
    events.append(
        ev_attack_rolled(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            attacker_id=attacker.name,
            target_id=target.name,
            roll=roll,
        ).model_dump()
    )

    if not roll.hit:
        seq = _bump(state)
        events.append(
            ev_miss_confirmed(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                attacker_id=attacker.name,
                target_id=target.name,
            ).model_dump()
        )
        return roll, 0

    seq = _bump(state)
    events.append(
        ev_hit_confirmed(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            attacker_id=attacker.name,
            target_id=target.name,
            is_critical=roll.is_critical,
            timed_hit=any(m.name == "timed_hit" for m in roll.mods),
        ).model_dump()
    )

    damage = attacker.damage * 2 if roll.is_critical else attacker.damage
    hp_before, hp_after = target.take_damage(damage)

    seq = _bump(state)
    events.append(
        ev_damage_applied(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            source_id=attacker.name,
            target_id=target.name,
            amount=damage,
            hp_before=hp_before,
            hp_after=hp_after,
        ).model_dump()
    )
    return roll, damage


def _resolve_move_forward(state: RunState) -> List[dict]:
    events: List[dict] = []
    encounter = generate_encounter(
        state.goblins_killed, state.troll_aggroed, state.rng.random, state.tuning
    )

    seq = _bump(state)
    events.append(
        ev_encounter_generated(
            seq=seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            encounter_type=encounter.type,
            text=encounter.text,
            damage=encounter.damage,
            enemy_name=encounter.enemy.name if encounter.enemy else None,
            is_final_boss=encounter.is_final_boss,
        ).model_dump()
    )

    log = [encounter.text]

    if encounter.type == "combat":
        _stage(
            state,
            events,
            {
                "current_encounter": encounter,
                "current_enemy": encounter.enemy,
                "log": log,
                "game_phase": "combat",
                "troll_aggroed": state.troll_aggroed or encounter.is_final_boss,
            },
        )
        return events

    if encounter.type == "trap":
        # the HP loss lands now; only the scene swap waits for the fade
        hp_before, hp_after = state.player.take_damage(encounter.damage)

        seq = _bump(state)
        events.append(
            ev_trap_triggered(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                target_id=state.player.name,
                damage=encounter.damage,
                hp_before=hp_before,
                hp_after=hp_after,
            ).model_dump()
        )

        if state.player.is_down:
            _stage_defeat(state, events, log + [TRAP_DEATH_LINE], cause="trap")
            return events

        _stage(state, events, {"log": log, "game_phase": "trap"})
        return events

    if encounter.type == "potion":
        potions = state.health_potions + 1

        seq = _bump(state)
        events.append(
            ev_potion_found(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                potions=potions,
            ).model_dump()
        )
        _stage(
            state,
            events,
            {"log": log, "game_phase": "empty-room", "health_potions": potions},
        )
        return events

    if encounter.type == "empty":
        _stage(state, events, {"log": log, "game_phase": "empty-room"})
        return events

    # empty-hallway
    _stage(state, events, {"log": log, "game_phase": "dungeon"})
    return events


def _resolve_attack(state: RunState, cmd: Attack) -> List[dict]:
    events: List[dict] = []
    player = state.player
    enemy = state.current_enemy
    if enemy is None:
        # validate_command rejects this; nothing to swing at
        logger.warning("attack with no enemy in phase %r", state.game_phase)
        return events
    encounter = state.current_encounter
    log: List[str] = []

    # --- player swings first ---
    roll, damage = _swing(
        state,
        events,
        attacker=player,
        target=enemy,
        side="player",
        timed_hit=cmd.timed_hit,
    )
    if roll.hit:
        line = f"You strike the {enemy.name}. A clean hit! ({damage} damage)"
        if cmd.timed_hit:
            line += " (Perfect!)"
        log.append(line)
    else:
        log.append(f"You swing at the {enemy.name} and miss!")

    # --- a kill ends the exchange: no retaliation ---
    if enemy.is_down:
        is_boss = encounter is not None and encounter.is_final_boss
        kills = state.goblins_killed if is_boss else state.goblins_killed + 1

        seq = _bump(state)
        events.append(
            ev_enemy_defeated(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                enemy_id=enemy.name,
                is_final_boss=is_boss,
                goblins_killed=kills,
            ).model_dump()
        )

        if is_boss:
            _award_echoes(state, events, state.tuning.echoes_per_boss, reason="boss")
            _stage(
                state,
                events,
                {
                    "current_enemy": None,
                    "current_encounter": None,
                    "game_phase": "win",
                    "log": [
                        f"You strike the {enemy.name}. A clean hit!",
                        f"The {enemy.name}'s corpse hits the ground with a final, shuddering thud.",
                        "Above, a shaft of sunlight breaks through. You climb toward freedom and ale.",
                    ],
                },
            )
            return events

        _award_echoes(state, events, state.tuning.echoes_per_kill, reason="kill")
        log.append(f"The {enemy.name} collapses in a pool of its own foul blood.")
        log.append("You step over the corpse and steel yourself for what lies ahead.")
        _stage(
            state,
            events,
            {
                "goblins_killed": kills,
                "current_enemy": None,
                "current_encounter": None,
                "game_phase": "goblin-killed",
                "log": log,
            },
        )
        return events

    # --- enemy answers; the timing bar never helps it ---
    enemy_roll, enemy_damage = _swing(
        state, events, attacker=enemy, target=player, side="enemy"
    )
    if enemy_roll.hit:
        log.append(
            f"The {enemy.name} swings wide and hits you for {enemy_damage} damage!"
        )
    else:
        log.append(f"The {enemy.name} swings wide and misses you!")

    if player.is_down:
        _stage_defeat(state, events, log + [COMBAT_DEATH_LINE], cause="combat")
        return events

    # fight goes on in the same phase
    state.log = log
    state.attack_turn += 1
    state.last_attack_result = "hit" if roll.hit else "miss"
    return events


def apply_command(state: RunState, cmd: Command) -> Tuple[RunState, List[dict]]:
    """
    Returns (state, events_as_dicts).
    On a validation failure returns a single CommandRejected and leaves the
    state untouched (seq included).
    """
    vr = validate_command(state, cmd)
    if not vr.ok:
        e = vr.errors[0]
        logger.debug("rejected %s: %s (%s)", cmd.type, e.code, e.message)
        rej = ev_command_rejected(
            seq=state.seq,
            phase=state.game_phase,
            turn=state.attack_turn,
            command=cmd.model_dump(),
            code=e.code,
            message=e.message,
            meta=e.meta,
        ).model_dump()
        return state, [rej]

    events: List[dict] = []

    if isinstance(cmd, LeaveInn):
        bonus_hp = state.progress.upgrades.bonus_hp
        player = warrior(bonus_hp)

        seq = _bump(state)
        events.append(
            ev_inn_left(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                player_name=player.name,
                max_hp=player.max_hp,
                bonus_hp=bonus_hp,
            ).model_dump()
        )
        _stage(
            state,
            events,
            {
                "game_phase": state.tuning.leave_inn_phase,
                "log": list(LEAVE_INN_LOG),
                "player": player,
            },
        )
        return state, events

    if isinstance(cmd, FallThroughTrapdoor):
        _stage(state, events, {"game_phase": "dungeon", "log": list(TRAPDOOR_LOG)})
        return state, events

    if isinstance(cmd, (MoveForward, ContinueAfterCombat)):
        events.extend(_resolve_move_forward(state))
        return state, events

    if isinstance(cmd, Attack):
        events.extend(_resolve_attack(state, cmd))
        return state, events

    if isinstance(cmd, UseHealthPotion):
        player = state.player
        heal_amount = player.max_hp // 2
        hp_before, hp_after = player.heal(heal_amount)
        state.health_potions -= 1
        state.log = state.log + [f"You drink a potion and recover {heal_amount} HP."]

        seq = _bump(state)
        events.append(
            ev_potion_used(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                player_id=player.name,
                heal_amount=heal_amount,
                hp_before=hp_before,
                hp_after=hp_after,
                potions_left=state.health_potions,
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, PurchaseUpgrade):
        progress = state.progress
        progress.echoes -= cmd.cost
        progress.upgrades.bonus_hp += 1

        seq = _bump(state)
        events.append(
            ev_upgrade_purchased(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                upgrade=cmd.upgrade,
                cost=cmd.cost,
                level=progress.upgrades.bonus_hp,
                echoes_left=progress.echoes,
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, ResetGame):
        seq = _bump(state)
        events.append(
            ev_run_reset_staged(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                echoes=state.progress.echoes,
                bonus_hp=state.progress.upgrades.bonus_hp,
            ).model_dump()
        )
        _stage(state, events, fresh_run_fields(state.tuning))
        return state, events

    if isinstance(cmd, ApplyPendingStateChange):
        from_phase = state.game_phase
        changes = state.transition.commit()
        for name, value in changes.items():
            setattr(state, name, value)

        seq = _bump(state)
        events.append(
            ev_pending_state_applied(
                seq=seq,
                phase=state.game_phase,
                turn=state.attack_turn,
                from_phase=from_phase,
                fields=sorted(changes.keys()),
            ).model_dump()
        )
        return state, events

    if isinstance(cmd, EndTransition):
        state.transition.complete()

        seq = _bump(state)
        events.append(
            ev_transition_ended(
                seq=seq, phase=state.game_phase, turn=state.attack_turn
            ).model_dump()
        )
        return state, events

    # validator already covers this
    rej = ev_command_rejected(
        seq=state.seq,
        phase=state.game_phase,
        turn=state.attack_turn,
        command=cmd.model_dump(),
        code="UNKNOWN_COMMAND",
        message="Unhandled command",
        meta={},
    ).model_dump()
    return state, [rej]
