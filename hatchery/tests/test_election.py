"""
Tests for election resolution.
"""

from ..engine_core.election import resolve_election
from ..engine_core.rules import RulesConfig
from ..engine_core.state import Ending, Recognition


def _with_federations(state, make_union, make_federation, count, loyalty, **fed_overrides):
    for i in range(count):
        a, b = f"union_a{i}", f"union_b{i}"
        state = state.with_union(make_union(a, is_licensed=True, loyalty=loyalty))
        state = state.with_union(make_union(b, is_licensed=True, loyalty=loyalty))
        state = state.with_federation(make_federation(f"fed_{i}", [a, b], **fed_overrides))
    return state


class TestElection:
    """Delegates secured by loyalty rolls."""

    def test_no_federations(self, playing_state):
        result = resolve_election(playing_state)
        assert result.expected_delegates == 0
        assert result.secured_delegates == 0
        assert result.ending == Ending.COLLAPSE
        assert result.rolls == ()

    def test_loyal_single_federation_is_not_enough(self, playing_state, make_union, make_federation):
        state = _with_federations(playing_state, make_union, make_federation, 1, 100)
        result = resolve_election(state)
        assert result.secured_delegates == 2
        assert result.expected_delegates == 2
        assert result.ending == Ending.COLLAPSE

    def test_capture_at_threshold(self, playing_state, make_union, make_federation):
        """Six fully loyal federations secure every delegate."""
        state = _with_federations(playing_state, make_union, make_federation, 6, 100)
        result = resolve_election(state)
        assert result.secured_delegates == 12
        assert result.threshold == 6
        assert result.ending == Ending.CAPTURE
        assert all(r.loyalty_percent == 100 for r in result.rolls)

    def test_disloyal_federations_secure_nothing(self, playing_state, make_union, make_federation):
        state = _with_federations(playing_state, make_union, make_federation, 6, 0)
        result = resolve_election(state)
        assert result.expected_delegates == 12
        assert result.secured_delegates == 0
        assert result.ending == Ending.COLLAPSE

    def test_unrecognized_federations_ignored(self, playing_state, make_union, make_federation):
        state = _with_federations(
            playing_state, make_union, make_federation, 6, 100,
            recognition=Recognition.UNRECOGNIZED,
        )
        result = resolve_election(state)
        assert result.expected_delegates == 0
        assert result.rolls == ()

    def test_per_federation_breakdown(self, playing_state, make_union, make_federation):
        state = _with_federations(playing_state, make_union, make_federation, 2, 50)
        result = resolve_election(state)
        assert [r.federation_id for r in result.rolls] == ["fed_0", "fed_1"]
        for roll in result.rolls:
            assert roll.expected == 2
            assert len(roll.rolls) == 2
            assert roll.secured == sum(roll.rolls)
            assert roll.loyalty_percent == 50
        assert result.secured_delegates == sum(r.secured for r in result.rolls)

    def test_deterministic_and_leaves_cursor(self, playing_state, make_union, make_federation):
        state = _with_federations(playing_state, make_union, make_federation, 4, 60)
        assert resolve_election(state) == resolve_election(state)
        assert state.rng_cursor == playing_state.rng_cursor

    def test_threshold_from_rules(self, playing_state, make_union, make_federation):
        state = _with_federations(playing_state, make_union, make_federation, 1, 100)
        result = resolve_election(state, RulesConfig(delegate_threshold=2))
        assert result.ending == Ending.CAPTURE
