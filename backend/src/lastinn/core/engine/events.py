from __future__ import annotations

from typing import Any, Literal, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, ConfigDict


class RollMod(BaseModel):
    name: str  # "timed_hit"
    forced_hit: bool = False


class Roll(BaseModel):
    roll_id: UUID = Field(default_factory=uuid4)
    kind: Literal["d6"] = "d6"
    die: int
    mods: list[RollMod] = Field(default_factory=list)
    hit: bool
    is_critical: bool = False


class EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    event_id: UUID = Field(default_factory=uuid4)
    seq: int
    type: str

    phase: str
    turn: int = 0
    actor_id: Optional[str] = None

    payload: dict[str, Any] = Field(default_factory=dict)


def ev_command_rejected(
    *,
    seq: int,
    phase: str,
    turn: int,
    command: dict,
    code: str,
    message: str,
    meta: dict,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="CommandRejected",
        phase=phase,
        turn=turn,
        actor_id=None,
        payload={
            "command": command,
            "code": code,
            "message": message,
            "meta": meta,
        },
    )


def ev_transition_staged(
    *, seq: int, phase: str, turn: int, to_phase: Optional[str], fields: list[str]
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="TransitionStaged",
        phase=phase,
        turn=turn,
        payload={"from_phase": phase, "to_phase": to_phase, "fields": fields},
    )


def ev_pending_state_applied(
    *, seq: int, phase: str, turn: int, from_phase: str, fields: list[str]
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="PendingStateApplied",
        phase=phase,
        turn=turn,
        payload={"from_phase": from_phase, "to_phase": phase, "fields": fields},
    )


def ev_transition_ended(*, seq: int, phase: str, turn: int) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="TransitionEnded",
        phase=phase,
        turn=turn,
        payload={},
    )


def ev_inn_left(
    *, seq: int, phase: str, turn: int, player_name: str, max_hp: int, bonus_hp: int
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="InnLeft",
        phase=phase,
        turn=turn,
        actor_id=player_name,
        payload={"max_hp": max_hp, "bonus_hp": bonus_hp},
    )


def ev_encounter_generated(
    *,
    seq: int,
    phase: str,
    turn: int,
    encounter_type: str,
    text: str,
    damage: int,
    enemy_name: Optional[str],
    is_final_boss: bool,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="EncounterGenerated",
        phase=phase,
        turn=turn,
        payload={
            "encounter_type": encounter_type,
            "text": text,
            "damage": damage,
            "enemy_name": enemy_name,
            "is_final_boss": is_final_boss,
        },
    )


def ev_trap_triggered(
    *,
    seq: int,
    phase: str,
    turn: int,
    target_id: str,
    damage: int,
    hp_before: int,
    hp_after: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="TrapTriggered",
        phase=phase,
        turn=turn,
        actor_id=None,
        payload={
            "target_id": target_id,
            "damage": damage,
            "hp_before": hp_before,
            "hp_after": hp_after,
        },
    )


def ev_potion_found(
    *, seq: int, phase: str, turn: int, potions: int
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="PotionFound",
        phase=phase,
        turn=turn,
        payload={"potions": potions},
    )


def ev_attack_rolled(
    *,
    seq: int,
    phase: str,
    turn: int,
    attacker_id: str,
    target_id: str,
    roll: Roll,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="AttackRolled",
        phase=phase,
        turn=turn,
        actor_id=attacker_id,
        payload={
            "attacker_id": attacker_id,
            "target_id": target_id,
            "roll": roll.model_dump(mode="json"),
        },
    )


def ev_hit_confirmed(
    *,
    seq: int,
    phase: str,
    turn: int,
    attacker_id: str,
    target_id: str,
    is_critical: bool,
    timed_hit: bool,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="HitConfirmed",
        phase=phase,
        turn=turn,
        actor_id=attacker_id,
        payload={
            "attacker_id": attacker_id,
            "target_id": target_id,
            "is_critical": is_critical,
            "timed_hit": timed_hit,
        },
    )


def ev_miss_confirmed(
    *, seq: int, phase: str, turn: int, attacker_id: str, target_id: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="MissConfirmed",
        phase=phase,
        turn=turn,
        actor_id=attacker_id,
        payload={"attacker_id": attacker_id, "target_id": target_id},
    )


def ev_damage_applied(
    *,
    seq: int,
    phase: str,
    turn: int,
    source_id: str,
    target_id: str,
    amount: int,
    hp_before: int,
    hp_after: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="DamageApplied",
        phase=phase,
        turn=turn,
        actor_id=source_id,
        payload={
            "source_id": source_id,
            "target_id": target_id,
            "amount": amount,
            "hp_before": hp_before,
            "hp_after": hp_after,
        },
    )


def ev_enemy_defeated(
    *,
    seq: int,
    phase: str,
    turn: int,
    enemy_id: str,
    is_final_boss: bool,
    goblins_killed: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="EnemyDefeated",
        phase=phase,
        turn=turn,
        actor_id=enemy_id,
        payload={
            "enemy_id": enemy_id,
            "is_final_boss": is_final_boss,
            "goblins_killed": goblins_killed,
        },
    )


def ev_player_defeated(
    *, seq: int, phase: str, turn: int, player_id: str, cause: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="PlayerDefeated",
        phase=phase,
        turn=turn,
        actor_id=player_id,
        payload={"player_id": player_id, "cause": cause},
    )


def ev_echoes_awarded(
    *, seq: int, phase: str, turn: int, amount: int, reason: str, total: int
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="EchoesAwarded",
        phase=phase,
        turn=turn,
        payload={"amount": amount, "reason": reason, "total": total},
    )


def ev_potion_used(
    *,
    seq: int,
    phase: str,
    turn: int,
    player_id: str,
    heal_amount: int,
    hp_before: int,
    hp_after: int,
    potions_left: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="PotionUsed",
        phase=phase,
        turn=turn,
        actor_id=player_id,
        payload={
            "heal_amount": heal_amount,
            "hp_before": hp_before,
            "hp_after": hp_after,
            "potions_left": potions_left,
        },
    )


def ev_upgrade_purchased(
    *,
    seq: int,
    phase: str,
    turn: int,
    upgrade: str,
    cost: int,
    level: int,
    echoes_left: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="UpgradePurchased",
        phase=phase,
        turn=turn,
        payload={
            "upgrade": upgrade,
            "cost": cost,
            "level": level,
            "echoes_left": echoes_left,
        },
    )


def ev_run_reset_staged(
    *, seq: int, phase: str, turn: int, echoes: int, bonus_hp: int
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="RunResetStaged",
        phase=phase,
        turn=turn,
        payload={"echoes": echoes, "bonus_hp": bonus_hp},
    )
