"""
Content Gate - Which events and choices the current state allows.

An event is eligible when its own conditions hold and at least one of its
choices is eligible, so the player is never shown a dead end. Selection
among eligible events is a weighted pick on the RNG passed in; the gate has
no randomness of its own.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Sequence

from .schemas import EventCard, EventChoice, EventConditions

if TYPE_CHECKING:
    from ..engine_core.rng import SeededRNG
    from ..engine_core.state import RunState


def _state_value(state: RunState, key: str) -> int:
    resources = state.resources
    values = {
        "paperwork": resources.paperwork,
        "patronage": resources.patronage,
        "legitimacy": resources.legitimacy,
        "audit_risk": resources.audit_risk,
        "street_heat": resources.street_heat,
        "cycle": state.cycle,
        "federation_count": len(state.federations),
        "union_count": len(state.unions),
    }
    return values[key]


_CONDITION_KEYS = (
    "paperwork",
    "patronage",
    "legitimacy",
    "audit_risk",
    "street_heat",
    "cycle",
    "federation_count",
    "union_count",
)


def check_conditions(conditions: EventConditions | None, state: RunState) -> bool:
    """True if every threshold present is satisfied (inclusive)."""
    if conditions is None:
        return True

    for key in _CONDITION_KEYS:
        minimum = getattr(conditions, f"{key}_min")
        maximum = getattr(conditions, f"{key}_max")
        if minimum is None and maximum is None:
            continue
        value = _state_value(state, key)
        if minimum is not None and value < minimum:
            return False
        if maximum is not None and value > maximum:
            return False

    return True


def get_eligible_choices(event: EventCard, state: RunState) -> list[EventChoice]:
    return [c for c in event.choices if check_conditions(c.conditions, state)]


def is_event_eligible(event: EventCard, state: RunState) -> bool:
    if not check_conditions(event.conditions, state):
        return False
    return any(check_conditions(c.conditions, state) for c in event.choices)


def get_eligible_events(events: Sequence[EventCard], state: RunState) -> list[EventCard]:
    return [e for e in events if is_event_eligible(e, state)]


def select_event(
    events: Sequence[EventCard],
    state: RunState,
    rng: SeededRNG,
) -> EventCard | None:
    """
    Weighted pick among eligible events.

    Returns None (without consuming the RNG) when nothing is eligible.
    """
    eligible = get_eligible_events(events, state)
    if not eligible:
        return None
    return rng.weighted_pick(eligible, [e.weight for e in eligible])
