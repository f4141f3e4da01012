from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Tuning:
    # encounter table
    boss_threshold: int = 5
    p_hallway: float = 0.5
    p_trap: float = 0.6
    p_enemy: float = 0.7
    p_potion: float = 0.4
    trap_damage_min: int = 1
    trap_damage_max: int = 1

    # run setup
    starting_potions: int = 1
    leave_inn_phase: Literal["trapdoor", "dungeon-intro"] = "trapdoor"

    # echoes economy
    echoes_per_kill: int = 1
    echoes_per_boss: int = 5
    # kills are paid as they happen; a defeat bonus on top is opt-in
    echoes_per_kill_on_defeat: int = 0

    def __post_init__(self) -> None:
        if self.trap_damage_min > self.trap_damage_max:
            raise ValueError(
                f"trap_damage_min > trap_damage_max: "
                f"{self.trap_damage_min} > {self.trap_damage_max}"
            )
        for name in ("p_hallway", "p_trap", "p_enemy", "p_potion"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]: {p!r}")


DEFAULT_TUNING = Tuning()
