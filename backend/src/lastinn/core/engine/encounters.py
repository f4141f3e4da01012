from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from lastinn.core.engine.characters import Enemy, goblin, troll
from lastinn.core.engine.rules.tuning import DEFAULT_TUNING, Tuning

EncounterType = Literal["empty", "empty-hallway", "potion", "trap", "combat"]

# () -> float in [0, 1)
RandomSource = Callable[[], float]


TEXT_BOSS = "A thunderous growl shakes the stone. A towering Troll looms ahead!"
TEXT_GOBLIN = "A Goblin screeches from the shadows and lunges!"
TEXT_POTION = "A cracked vial glimmers faintly. A healing potion. You pocket it."
TEXT_EMPTY_ROOM = "The room lies still. You move on, senses sharp."
TEXT_EMPTY_HALLWAY = "The hall is silent, but the walls seem to breathe."


def trap_text(damage: int) -> str:
    return (
        f"A sharp click underfoot. A dart pierces your arm! You take {damage} damage."
    )


@dataclass
class Encounter:
    type: EncounterType
    text: str

    # trap
    damage: int = 0

    # combat: enemy is a fresh copy owned by this encounter
    enemy: Optional[Enemy] = None
    is_final_boss: bool = False


def _roll_trap_damage(rng: RandomSource, tuning: Tuning) -> int:
    lo, hi = tuning.trap_damage_min, tuning.trap_damage_max
    if lo == hi:
        return lo
    return lo + int(rng() * (hi - lo + 1))


def generate_encounter(
    goblins_killed: int,
    troll_aggroed: bool,
    rng: RandomSource,
    tuning: Tuning = DEFAULT_TUNING,
) -> Encounter:
    """
    Pick the next encounter for a step forward.

    Draw order is fixed (hallway/room, then trap or enemy, then potion) so that
    a scripted rng reproduces the same sequence of encounters.
    """
    # guaranteed boss once enough goblins are down
    if goblins_killed >= tuning.boss_threshold and not troll_aggroed:
        return Encounter(
            type="combat", text=TEXT_BOSS, enemy=troll(), is_final_boss=True
        )

    is_hallway = rng() > 1.0 - tuning.p_hallway

    if is_hallway:
        if rng() < tuning.p_trap:
            damage = _roll_trap_damage(rng, tuning)
            return Encounter(type="trap", text=trap_text(damage), damage=damage)
        return Encounter(type="empty-hallway", text=TEXT_EMPTY_HALLWAY)

    if rng() < tuning.p_enemy:
        return Encounter(
            type="combat", text=TEXT_GOBLIN, enemy=goblin(), is_final_boss=False
        )

    if rng() < tuning.p_potion:
        return Encounter(type="potion", text=TEXT_POTION)
    return Encounter(type="empty", text=TEXT_EMPTY_ROOM)
