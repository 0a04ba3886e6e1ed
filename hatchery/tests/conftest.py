"""
Pytest fixtures for Hatchery tests.
"""

import pytest

from ..content.loader import build_bundle, load_default_content
from ..content.schemas import ContentBundle
from ..engine_core.action import Action
from ..engine_core.reducer import Reducer
from ..engine_core.state import (
    Archetype,
    FederationEntity,
    RunState,
    UnionEntity,
    create_initial_state,
)


NAME_PARTS = {
    "prefixes": ["United", "Patriotic"],
    "sectors": ["Dockworkers", "Bakers"],
    "suffixes": ["Union", "Brotherhood"],
    "modifiers": ["(Reformed)"],
}

FOOTNOTES = [
    {
        "id": "fn_test",
        "title": "A Footnote",
        "summary": "Short summary",
        "content": "Longer body text",
        "era": "1950s",
        "date": "1951",
    },
]

# One unconditional event and one that needs a federation
EVENTS = [
    {
        "id": "evt_calm",
        "category": "general",
        "headline": "Nothing Happens",
        "flavor": "Really, nothing.",
        "weight": 1,
        "choices": [
            {"id": "shrug", "label": "Shrug"},
            {
                "id": "read",
                "label": "Read the footnote",
                "effects": {"legitimacy": 1},
                "unlocks": ["fn_test", "fn_test"],
            },
            {
                "id": "implode",
                "label": "Implode",
                "effects": {"legitimacy": -100},
            },
        ],
    },
    {
        "id": "evt_congress",
        "category": "political",
        "headline": "Congress",
        "flavor": "Delegates gather.",
        "weight": 1,
        "conditions": {"federationCountMin": 1},
        "choices": [
            {"id": "attend", "label": "Attend", "effects": {"patronage": 1}},
            {
                "id": "leak",
                "label": "Leak the files",
                "triggersEnding": "whistleblower",
                "unlocks": ["fn_test"],
            },
        ],
    },
]


@pytest.fixture
def content() -> ContentBundle:
    """The bundled default content."""
    return load_default_content()


@pytest.fixture
def small_content() -> ContentBundle:
    """A tiny, fully predictable content bundle."""
    return build_bundle(EVENTS, FOOTNOTES, NAME_PARTS)


@pytest.fixture
def reducer(small_content) -> Reducer:
    return Reducer(content=small_content)


@pytest.fixture
def menu_state() -> RunState:
    return create_initial_state(42)


@pytest.fixture
def playing_state(reducer, menu_state) -> RunState:
    """Seed 42, started, cycle 1."""
    return reducer.apply(menu_state, Action.start_run()).new_state


@pytest.fixture
def make_union():
    """Factory for hand-built unions."""
    def _make(union_id: str = "union_0001", **overrides) -> UnionEntity:
        fields = dict(
            id=union_id,
            name=f"Test Union {union_id}",
            sector="Bakers",
            archetype=Archetype.CAPTURED,
            plausibility=60,
            loyalty=70,
            integrity=40,
            maintenance_cost=1,
            tags=("captured",),
        )
        fields.update(overrides)
        return UnionEntity(**fields)
    return _make


@pytest.fixture
def make_federation():
    def _make(fed_id: str, union_ids, **overrides) -> FederationEntity:
        return FederationEntity(id=fed_id, name=f"Federation {fed_id}", union_ids=tuple(union_ids), **overrides)
    return _make


@pytest.fixture
def state_with_unions(playing_state, make_union) -> RunState:
    """Playing state with two licensed unions and one unlicensed union."""
    state = playing_state
    state = state.with_union(make_union("union_0001", is_licensed=True))
    state = state.with_union(make_union("union_0002", is_licensed=True, loyalty=90))
    state = state.with_union(make_union("union_0003"))
    return state._copy_with(next_entity_serial=4)

