from __future__ import annotations

import logging
from random import Random
from typing import Any, Callable, Dict, List, Optional, Protocol

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
from lastinn.core.engine.rules.apply import apply_command
from lastinn.core.engine.rules.tuning import DEFAULT_TUNING, Tuning
from lastinn.core.engine.state import (
    PersistentProgress,
    RunState,
    new_run,
    require_rng,
)
from lastinn.core.persistence.progress_store import ProgressStore
from lastinn.core.persistence.state_codec import progress_to_dict, run_state_to_dict

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, event: dict) -> None: ...


# (old_snapshot, new_snapshot)
StateListener = Callable[[Dict[str, Any], Dict[str, Any]], None]


def _is_rejection(events: List[dict]) -> bool:
    return len(events) == 1 and events[0].get("type") == "CommandRejected"


class GameEngine:
    """
    The one entry point the presentation layer talks to.

    Every verb goes through apply_command. Accepted events are pushed to the
    notifier (audio, haptics, ...), listeners get old/new snapshots, and
    progress is saved whenever it changes. Rejected commands are silent.
    """

    def __init__(
        self,
        rng: Random,
        *,
        notifier: Optional[Notifier] = None,
        progress_store: Optional[ProgressStore] = None,
        tuning: Tuning = DEFAULT_TUNING,
    ):
        rng = require_rng(rng)
        self._notifier = notifier
        self._store = progress_store
        self._listeners: List[StateListener] = []

        progress = PersistentProgress()
        if progress_store is not None:
            progress = progress_store.load()
        self.state: RunState = new_run(rng=rng, progress=progress, tuning=tuning)

    # --- observation ---

    def snapshot(self) -> Dict[str, Any]:
        return run_state_to_dict(self.state)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- dispatch ---

    def dispatch(self, cmd: Command) -> List[dict]:
        before = self.snapshot() if self._listeners else None
        progress_before = progress_to_dict(self.state.progress)

        self.state, events = apply_command(self.state, cmd)

        if _is_rejection(events):
            return events

        progress_changed = progress_to_dict(self.state.progress) != progress_before
        if self._store is not None and progress_changed:
            self._store.save(self.state.progress)

        if self._notifier is not None:
            for ev in events:
                self._notifier.notify(ev)

        if before is not None:
            after = self.snapshot()
            for listener in list(self._listeners):
                listener(before, after)

        logger.debug(
            "%s -> %s (%d events)", cmd.type, self.state.game_phase, len(events)
        )
        return events

    # --- verbs ---

    def leave_inn(self) -> List[dict]:
        return self.dispatch(LeaveInn())

    def fall_through_trapdoor(self) -> List[dict]:
        return self.dispatch(FallThroughTrapdoor())

    def move_forward(self) -> List[dict]:
        return self.dispatch(MoveForward())

    def attack(self, timed_hit: bool = False) -> List[dict]:
        return self.dispatch(Attack(timed_hit=timed_hit))

    def use_health_potion(self) -> List[dict]:
        return self.dispatch(UseHealthPotion())

    def purchase_upgrade(self, cost: int) -> List[dict]:
        return self.dispatch(PurchaseUpgrade(cost=cost))

    def reset_game(self) -> List[dict]:
        return self.dispatch(ResetGame())

    def continue_after_combat(self) -> List[dict]:
        return self.dispatch(ContinueAfterCombat())

    def apply_pending_state_change(self) -> List[dict]:
        return self.dispatch(ApplyPendingStateChange())

    def end_transition(self) -> List[dict]:
        return self.dispatch(EndTransition())
