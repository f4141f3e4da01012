from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Any, Dict, List, Literal, Optional, get_args

from lastinn.core.engine.characters import Enemy, Player, warrior
from lastinn.core.engine.encounters import Encounter
from lastinn.core.engine.rules.tuning import DEFAULT_TUNING, Tuning

GamePhase = Literal[
    "start",
    "dungeon-intro",
    "trapdoor",
    "dungeon",
    "empty-room",
    "trap",
    "combat",
    "goblin-killed",
    "win",
    "lose",
]

TransitionStatus = Literal["idle", "staged", "applying"]

AttackResult = Literal["hit", "miss"]

# phases from which the player can step forward
EXPLORATION_PHASES: tuple[str, ...] = ("dungeon-intro", "dungeon", "empty-room", "trap")
TERMINAL_PHASES: tuple[str, ...] = ("win", "lose")
POTION_PHASES: tuple[str, ...] = tuple(
    p for p in get_args(GamePhase) if p not in TERMINAL_PHASES
)


class RandomSourceUnavailable(RuntimeError):
    pass


class TransitionError(RuntimeError):
    pass


@dataclass
class Upgrades:
    bonus_hp: int = 0


@dataclass
class PersistentProgress:
    echoes: int = 0
    upgrades: Upgrades = field(default_factory=Upgrades)


@dataclass
class Transition:
    """
    Two-step deferred state change driven by the presentation layer:

    idle --stage()--> staged --commit()--> applying --complete()--> idle

    commit() hands back the pending changes; the caller merges them into the
    run. At most one change is pending at a time.
    """

    status: TransitionStatus = "idle"
    pending: Optional[Dict[str, Any]] = None

    @property
    def is_transitioning(self) -> bool:
        return self.status != "idle"

    def stage(self, changes: Dict[str, Any]) -> None:
        if self.status != "idle":
            raise TransitionError(f"cannot stage while {self.status}")
        self.pending = dict(changes)
        self.status = "staged"

    def commit(self) -> Dict[str, Any]:
        if self.status != "staged" or self.pending is None:
            raise TransitionError(f"nothing staged (status={self.status})")
        changes = self.pending
        self.pending = None
        self.status = "applying"
        return changes

    def complete(self) -> None:
        if self.status != "applying":
            raise TransitionError(f"cannot complete while {self.status}")
        self.status = "idle"


def require_rng(rng: Any) -> Random:
    if rng is None or not callable(getattr(rng, "random", None)):
        raise RandomSourceUnavailable(
            f"a random source with random() is required, got {rng!r}"
        )
    return rng


@dataclass
class RunState:
    player: Player = field(default_factory=warrior)
    goblins_killed: int = 0
    troll_aggroed: bool = False
    game_phase: GamePhase = "start"
    log: List[str] = field(default_factory=list)
    current_enemy: Optional[Enemy] = None
    current_encounter: Optional[Encounter] = None
    health_potions: int = DEFAULT_TUNING.starting_potions
    attack_turn: int = 0
    last_attack_result: Optional[AttackResult] = None

    transition: Transition = field(default_factory=Transition)

    # shared across runs, survives reset
    progress: PersistentProgress = field(default_factory=PersistentProgress)
    tuning: Tuning = DEFAULT_TUNING

    seq: int = 0
    rng: Random = field(default_factory=Random)

    @property
    def is_transitioning(self) -> bool:
        return self.transition.is_transitioning

    @property
    def pending_state_change(self) -> Optional[Dict[str, Any]]:
        return self.transition.pending

    def with_seed(self, seed: int) -> "RunState":
        self.rng = Random(seed)
        return self

    def with_rng(self, rng: Random) -> "RunState":
        self.rng = require_rng(rng)
        return self


# fields a fresh run starts with; everything else carries over on reset
RUN_FIELDS: tuple[str, ...] = (
    "player",
    "goblins_killed",
    "troll_aggroed",
    "game_phase",
    "log",
    "current_enemy",
    "current_encounter",
    "health_potions",
    "attack_turn",
    "last_attack_result",
)


def fresh_run_fields(tuning: Tuning = DEFAULT_TUNING) -> Dict[str, Any]:
    return {
        "player": warrior(),
        "goblins_killed": 0,
        "troll_aggroed": False,
        "game_phase": "start",
        "log": [],
        "current_enemy": None,
        "current_encounter": None,
        "health_potions": tuning.starting_potions,
        "attack_turn": 0,
        "last_attack_result": None,
    }


def new_run(
    *,
    rng: Random,
    progress: Optional[PersistentProgress] = None,
    tuning: Tuning = DEFAULT_TUNING,
) -> RunState:
    state = RunState(
        progress=progress if progress is not None else PersistentProgress(),
        tuning=tuning,
        health_potions=tuning.starting_potions,
    )
    return state.with_rng(rng)
