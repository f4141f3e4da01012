from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable


@dataclass(frozen=True)
class AttackOutcome:
    hit: bool
    crit: bool = False


# die (1..6) -> outcome
AttackRoll = Callable[[int], AttackOutcome]


def skilled_attack_roll(die: int) -> AttackOutcome:
    # 1-3 miss, 4-5 hit, 6 crit
    if die <= 3:
        return AttackOutcome(hit=False, crit=False)
    if die <= 5:
        return AttackOutcome(hit=True, crit=False)
    return AttackOutcome(hit=True, crit=True)


def standard_attack_roll(die: int) -> AttackOutcome:
    # 1-3 miss, 4-6 hit, never crit
    if die <= 3:
        return AttackOutcome(hit=False, crit=False)
    return AttackOutcome(hit=True, crit=False)


@dataclass
class Character:
    name: str
    hp: int
    max_hp: int
    damage: int
    attack_roll: AttackRoll = standard_attack_roll

    def __post_init__(self) -> None:
        if self.max_hp <= 0:
            raise ValueError(f"max_hp must be positive: {self.max_hp!r}")
        self.hp = min(self.max_hp, max(0, self.hp))

    @property
    def is_down(self) -> bool:
        return self.hp <= 0

    def take_damage(self, amount: int) -> tuple[int, int]:
        """
        return (hp_before, hp_after)
        """
        hp_before = self.hp
        self.hp = max(0, self.hp - max(0, amount))
        return hp_before, self.hp

    def heal(self, amount: int) -> tuple[int, int]:
        hp_before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return hp_before, self.hp

    def copy(self) -> "Character":
        return replace(self)


# Player / Enemy differ only by role for now
Player = Character
Enemy = Character


WARRIOR = Character(
    name="Warrior", hp=10, max_hp=10, damage=1, attack_roll=skilled_attack_roll
)
GOBLIN = Character(
    name="Goblin", hp=2, max_hp=2, damage=1, attack_roll=standard_attack_roll
)
TROLL = Character(
    name="Troll", hp=5, max_hp=5, damage=2, attack_roll=standard_attack_roll
)
SPIKE_TRAP = Character(
    name="Spike Trap", hp=1, max_hp=1, damage=1, attack_roll=standard_attack_roll
)


def warrior(bonus_hp: int = 0) -> Player:
    """Fresh player for a new run, with permanent bonus HP applied."""
    max_hp = WARRIOR.max_hp + max(0, bonus_hp)
    return replace(WARRIOR, hp=max_hp, max_hp=max_hp)


def goblin() -> Enemy:
    return GOBLIN.copy()


def troll() -> Enemy:
    return TROLL.copy()


def spike_trap() -> Enemy:
    return SPIKE_TRAP.copy()
