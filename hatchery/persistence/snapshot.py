"""
Snapshot - Versioned, JSON-safe encoding of RunState.

A snapshot is an envelope:

    {"version": 1, "state": {...}}

The state body is produced by a pydantic TypeAdapter over the RunState
dataclass, so decoding validates every field (enums, nested entities,
optional election record) instead of trusting the file.

Older formats are upgraded step by step through MIGRATIONS before
validation. Version 0 is the bare camelCase RunState layout with no envelope,
where unions carry their archetype only as a tag.

A state that parses but breaks the run rules (resources out of range, a
stray current event, shared or missing federation members) is rejected too.
"""

from __future__ import annotations
from dataclasses import fields
from typing import Any, Callable
import json
import re

from pydantic import TypeAdapter, ValidationError

from ..engine_core.state import CLAMPS, Archetype, GamePhase, RunState


SAVE_VERSION = 1

_STATE_ADAPTER = TypeAdapter(RunState)


class SaveFormatError(Exception):
    """A snapshot could not be read, migrated or validated."""
    pass


# =============================================================================
# Encoding
# =============================================================================

def encode_snapshot(state: RunState) -> dict[str, Any]:
    """RunState -> JSON-safe envelope at the current version."""
    return {
        "version": SAVE_VERSION,
        "state": _STATE_ADAPTER.dump_python(state, mode="json"),
    }


def dumps_snapshot(state: RunState, indent: int | None = None) -> str:
    return json.dumps(encode_snapshot(state), indent=indent)


# =============================================================================
# Migrations
# =============================================================================

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_SERIAL_SUFFIX = re.compile(r"_(\d+)$")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _snake_keys(record: dict[str, Any]) -> dict[str, Any]:
    return {_snake(k): v for k, v in record.items()}


def _archetype_from_tags(tags: list[str]) -> str:
    """Version 0 unions only carry the archetype as a tag."""
    values = {a.value for a in Archetype}
    for tag in tags:
        if tag in values:
            return tag
    if "compliant" in tags:
        return Archetype.SHELL.value
    if "restless" in tags:
        return Archetype.AUTHENTIC.value
    if "unpredictable" in tags:
        return Archetype.VOLATILE.value
    return Archetype.CAPTURED.value


def _next_serial(ids: list[str]) -> int:
    serials = [int(m.group(1)) for m in map(_SERIAL_SUFFIX.search, ids) if m]
    return max(serials + [len(ids)]) + 1


def _migrate_v0_to_v1(body: dict[str, Any]) -> dict[str, Any]:
    state = _snake_keys(body)
    state["resources"] = _snake_keys(state.get("resources", {}))

    unions = {}
    for union_id, raw in (state.get("unions") or {}).items():
        union = _snake_keys(raw)
        union.setdefault("archetype", _archetype_from_tags(union.get("tags", [])))
        unions[union_id] = union
    state["unions"] = unions

    state["federations"] = {
        fed_id: _snake_keys(raw)
        for fed_id, raw in (state.get("federations") or {}).items()
    }

    state.setdefault(
        "next_entity_serial",
        _next_serial(list(unions) + list(state["federations"])),
    )
    state.setdefault("election", None)
    return state


# from_version -> upgrade of the state body to from_version + 1
MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _migrate_v0_to_v1,
}


def _split_envelope(data: Any) -> tuple[int, dict[str, Any]]:
    if not isinstance(data, dict):
        raise SaveFormatError("Snapshot must be a JSON object")

    if "version" not in data:
        # Version 0: bare camelCase RunState
        if "rngCursor" in data:
            return 0, data
        raise SaveFormatError("Snapshot has no version")

    version = data["version"]
    body = data.get("state")
    if not isinstance(version, int) or isinstance(version, bool):
        raise SaveFormatError(f"Invalid snapshot version: {version!r}")
    if not isinstance(body, dict):
        raise SaveFormatError("Snapshot has no state object")
    return version, body


def migrate(version: int, body: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a state body from `version` to SAVE_VERSION."""
    if version > SAVE_VERSION:
        raise SaveFormatError(
            f"Snapshot version {version} is newer than supported ({SAVE_VERSION})"
        )
    while version < SAVE_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise SaveFormatError(f"No migration from snapshot version {version}")
        try:
            body = step(body)
        except (AttributeError, TypeError, KeyError) as exc:
            raise SaveFormatError(f"Migration from version {version} failed: {exc}") from exc
        version += 1
    return body


# =============================================================================
# Decoding
# =============================================================================

def _check_state(state: RunState) -> list[str]:
    """Rules a validated state must also satisfy to be playable."""
    problems = []

    for f in fields(state.resources):
        low, high = CLAMPS[f.name]
        value = getattr(state.resources, f.name)
        if not low <= value <= high:
            problems.append(f"resources.{f.name}: {value} outside {low}..{high}")

    for union_id, union in state.unions.items():
        for name in ("plausibility", "loyalty", "integrity"):
            low, high = CLAMPS[name]
            value = getattr(union, name)
            if not low <= value <= high:
                problems.append(f"unions.{union_id}.{name}: {value} outside {low}..{high}")

    if (state.phase == GamePhase.EVENT) != (state.current_event_id is not None):
        problems.append(
            f"current_event_id: {state.current_event_id!r} in phase {state.phase.value}"
        )

    owner: dict[str, str] = {}
    for fed_id, federation in state.federations.items():
        for union_id in federation.union_ids:
            if union_id not in state.unions:
                problems.append(f"federations.{fed_id}: unknown member {union_id}")
            elif union_id in owner:
                problems.append(
                    f"federations.{fed_id}: {union_id} already belongs to {owner[union_id]}"
                )
            else:
                owner[union_id] = fed_id

    if not 1 <= state.cycle <= state.max_cycles:
        problems.append(f"cycle: {state.cycle} outside 1..{state.max_cycles}")

    return problems


def decode_snapshot(data: Any) -> RunState:
    """
    Envelope (any supported version) -> validated RunState.

    Field types are checked by the adapter, then the state itself: resource
    ranges, event phase, federation membership and cycle bounds.
    """
    version, body = _split_envelope(data)
    body = migrate(version, body)
    try:
        state = _STATE_ADAPTER.validate_python(body)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise SaveFormatError("Invalid snapshot: " + "; ".join(problems)) from exc

    problems = _check_state(state)
    if problems:
        raise SaveFormatError("Inconsistent snapshot: " + "; ".join(problems))
    return state


def loads_snapshot(text: str | bytes) -> RunState:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise SaveFormatError(f"Snapshot is not valid JSON: {exc}") from exc
    return decode_snapshot(data)
