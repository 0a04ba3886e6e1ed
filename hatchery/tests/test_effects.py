"""
Tests for effects, upkeep and crack checks.
"""

from ..engine_core.effects import (
    CLAMPS,
    ResourceEffects,
    UnionStatEffects,
    apply_cycle_end,
    apply_resource_effects,
    apply_union_effects,
    calculate_upkeep,
    process_crack_checks,
)
from ..engine_core.rules import RulesConfig
from ..engine_core.state import Archetype, Resources


class TestResourceEffects:
    """Clamped resource application."""

    def test_apply_deltas(self):
        resources = apply_resource_effects(
            Resources(), ResourceEffects(paperwork=2, legitimacy=-10, street_heat=3)
        )
        assert resources == Resources(
            paperwork=5, patronage=5, legitimacy=60, audit_risk=10, street_heat=8
        )

    def test_clamps_high_and_low(self):
        """Every resource stays inside its range."""
        resources = apply_resource_effects(
            Resources(),
            ResourceEffects(paperwork=50, patronage=-50, legitimacy=500, audit_risk=-500, street_heat=500),
        )
        assert resources.paperwork == CLAMPS["paperwork"][1] == 10
        assert resources.patronage == 0
        assert resources.legitimacy == 100
        assert resources.audit_risk == 0
        assert resources.street_heat == 100

    def test_patronage_cap(self):
        assert apply_resource_effects(Resources(), ResourceEffects(patronage=30)).patronage == 20

    def test_effects_add(self):
        total = ResourceEffects(paperwork=1, audit_risk=2) + ResourceEffects(paperwork=2, legitimacy=-1)
        assert total == ResourceEffects(paperwork=3, legitimacy=-1, audit_risk=2)
        assert ResourceEffects().is_empty
        assert not total.is_empty


class TestUnionEffects:
    def test_apply_and_clamp(self, make_union):
        union = make_union(plausibility=95, loyalty=5, integrity=50)
        updated = apply_union_effects(union, UnionStatEffects(plausibility=15, loyalty=-10, integrity=10))
        assert updated.plausibility == 100
        assert updated.loyalty == 0
        assert updated.integrity == 60
        # Original untouched
        assert union.plausibility == 95


class TestUpkeep:
    """End-of-cycle upkeep."""

    def test_empty_run(self, playing_state):
        """Paperwork refills to 6, patronage +7, street heat decays by 2."""
        upkeep = calculate_upkeep(playing_state)
        assert upkeep == ResourceEffects(
            paperwork=3, patronage=7, legitimacy=0, audit_risk=0, street_heat=-2
        )

    def test_refill_is_delta_to_target(self, playing_state):
        """Paperwork above the target is brought back down to it."""
        state = playing_state._copy_with(resources=Resources(paperwork=9))
        after = apply_resource_effects(state.resources, calculate_upkeep(state))
        assert after.paperwork == 6

    def test_no_decay_without_heat(self, playing_state):
        state = playing_state._copy_with(resources=Resources(street_heat=0))
        assert calculate_upkeep(state).street_heat == 0

    def test_audit_and_legitimacy_pressure(self, playing_state, make_union, make_federation):
        """Audit: +1 per 5 unions, per federation, per shell. Legitimacy: -1 per shell above 2."""
        state = playing_state
        for i in range(1, 4):
            state = state.with_union(make_union(f"union_000{i}", archetype=Archetype.SHELL))
        for i in range(4, 6):
            state = state.with_union(make_union(f"union_000{i}", is_licensed=True))
        state = state.with_federation(make_federation("fed_0001", ["union_0004", "union_0005"]))

        upkeep = calculate_upkeep(state)
        assert upkeep.audit_risk == 1 + 1 + 3
        assert upkeep.legitimacy == -1
        # Base income plus one per recognized delegate
        assert upkeep.patronage == 7 + 2

    def test_patronage_income_is_tunable(self, playing_state):
        rules = RulesConfig(patronage_base_income=3)
        assert calculate_upkeep(playing_state, rules).patronage == 3


class TestCrackChecks:
    """Stochastic structural failure."""

    def test_unlicensed_unions_are_not_rolled(self, playing_state, make_union):
        """No licensed unions: no rolls, cursor unchanged."""
        state = playing_state.with_union(make_union(integrity=0))
        report = process_crack_checks(state)
        assert report.cracked_ids == ()
        assert report.rng_cursor == state.rng_cursor
        assert report.penalties.is_empty

    def test_one_roll_per_licensed_union(self, playing_state, make_union):
        """Each licensed, uncracked union consumes exactly one draw."""
        state = playing_state
        state = state.with_union(make_union("union_0001", is_licensed=True))
        state = state.with_union(make_union("union_0002", is_licensed=True))
        state = state.with_union(make_union("union_0003", is_licensed=True, is_cracked=True))
        report = process_crack_checks(state)
        assert report.rng_cursor == (state.rng_cursor + 2 * 0x6D2B79F5) & 0xFFFFFFFF

    def test_cracked_unions_lose_license_and_cost(self, playing_state, make_union):
        """Cracks revoke the licence and cost -2 legitimacy / +2 audit each."""
        state = playing_state
        for i in range(1, 10):
            state = state.with_union(make_union(f"union_000{i}", is_licensed=True, integrity=0))

        report = process_crack_checks(state)
        cracked = len(report.cracked_ids)
        assert report.penalties == ResourceEffects(legitimacy=-2 * cracked, audit_risk=2 * cracked)
        for union_id in report.cracked_ids:
            assert report.unions[union_id].is_cracked
            assert not report.unions[union_id].is_licensed
        for union_id, union in report.unions.items():
            if union_id not in report.cracked_ids:
                assert union.is_licensed

    def test_deterministic(self, playing_state, make_union):
        state = playing_state
        for i in range(1, 10):
            state = state.with_union(make_union(f"union_000{i}", is_licensed=True, integrity=0))
        assert process_crack_checks(state) == process_crack_checks(state)


class TestCycleEnd:
    def test_cycle_end_opens_next_cycle(self, playing_state):
        state = playing_state._copy_with(unions_generated_in_cycle=True)
        after = apply_cycle_end(state)
        assert after.cycle == 2
        assert after.unions_generated_in_cycle is False
        assert after.resources == Resources(
            paperwork=6, patronage=12, legitimacy=70, audit_risk=10, street_heat=3
        )
