from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Any, Dict, Optional, cast

from lastinn.core.engine.characters import Character
from lastinn.core.engine.encounters import Encounter
from lastinn.core.engine.state import (
    PersistentProgress,
    RunState,
    Transition,
    Upgrades,
)

# bookkeeping that never leaves the process
_SKIP_RUN_FIELDS = {"rng", "tuning", "progress", "transition"}


# ---------- helpers ----------


def _jsonable(v: Any) -> Any:
    """Bring a value to a JSON-friendly shape (dataclass -> dict, tuple -> list)."""
    if v is None:
        return None
    if isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, (list, tuple, set)):
        return [_jsonable(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _jsonable(val) for k, val in v.items()}
    if isinstance(v, Character):
        return character_to_dict(v)
    if isinstance(v, Encounter):
        return encounter_to_dict(v)
    if is_dataclass(v) and not isinstance(v, type):
        return {f.name: _jsonable(getattr(v, f.name)) for f in fields(v)}

    md = getattr(v, "model_dump", None)
    if callable(md):
        return _jsonable(md())

    # attack policies and other callables travel by name
    if callable(v):
        return getattr(v, "__name__", repr(v))
    return str(v)


def _as_int(v: Any, default: int = 0) -> int:
    if isinstance(v, bool):
        return default
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v)
        except ValueError:
            return default
    return default


# ---------- Character / Encounter ----------


def character_to_dict(c: Character) -> dict[str, Any]:
    return {
        "name": c.name,
        "hp": c.hp,
        "max_hp": c.max_hp,
        "damage": c.damage,
        "attack_roll": getattr(c.attack_roll, "__name__", repr(c.attack_roll)),
    }


def encounter_to_dict(e: Encounter) -> dict[str, Any]:
    return {
        "type": e.type,
        "text": e.text,
        "damage": e.damage,
        "enemy": character_to_dict(e.enemy) if e.enemy is not None else None,
        "is_final_boss": e.is_final_boss,
    }


# ---------- Transition ----------


def transition_to_dict(t: Transition) -> dict[str, Any]:
    return {
        "status": t.status,
        "is_transitioning": t.is_transitioning,
        "pending": _jsonable(t.pending) if t.pending is not None else None,
    }


# ---------- PersistentProgress ----------


def progress_to_dict(p: PersistentProgress) -> dict[str, Any]:
    return {"echoes": p.echoes, "upgrades": {"bonus_hp": p.upgrades.bonus_hp}}


def progress_from_dict(d: Optional[Dict[str, Any]]) -> PersistentProgress:
    """
    Tolerant: anything missing or malformed falls back to zero, negatives are
    clamped.
    """
    if not isinstance(d, dict):
        return PersistentProgress()

    upgrades_raw = d.get("upgrades")
    upgrades = cast(dict, upgrades_raw) if isinstance(upgrades_raw, dict) else {}

    return PersistentProgress(
        echoes=max(0, _as_int(d.get("echoes"))),
        upgrades=Upgrades(bonus_hp=max(0, _as_int(upgrades.get("bonus_hp")))),
    )


# ---------- RunState ----------


def run_state_to_dict(state: RunState) -> dict[str, Any]:
    """
    Read-only snapshot for the presentation layer. Not meant to be loaded
    back: runs are ephemeral.
    """
    base: dict[str, Any] = {}
    for f in fields(state):
        if f.name in _SKIP_RUN_FIELDS:
            continue
        base[f.name] = _jsonable(getattr(state, f.name))

    base["transition"] = transition_to_dict(state.transition)
    base["is_transitioning"] = state.is_transitioning
    base["progress"] = progress_to_dict(state.progress)
    return base
