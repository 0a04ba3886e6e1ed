"""
Tests for run state construction, selectors and probability formulas.
"""

from ..engine_core.rules import RulesConfig
from ..engine_core.state import (
    Archetype,
    GamePhase,
    LossCondition,
    Recognition,
    Resources,
    check_lose_condition,
    create_initial_state,
    find_federation_of,
    get_available_unions,
    get_crack_risk,
    get_delegate_reliability,
    get_dissolve_reward,
    get_federated_union_ids,
    get_federation_reliability,
    get_license_chance,
    get_reassign_reward,
    get_shell_count,
    get_total_delegates,
    get_total_maintenance_cost,
)


class TestInitialState:
    """Tests for create_initial_state."""

    def test_defaults(self):
        """A new run starts in the menu with the shipped resources."""
        state = create_initial_state(42)
        assert state.seed == 42
        assert state.rng_cursor == 42
        assert state.cycle == 1
        assert state.max_cycles == 5
        assert state.phase == GamePhase.MENU
        assert state.resources == Resources(
            paperwork=3, patronage=5, legitimacy=70, audit_risk=10, street_heat=5
        )
        assert state.unions == {}
        assert state.federations == {}
        assert state.ending is None
        assert state.unions_generated_in_cycle is False

    def test_random_seed_is_recorded(self):
        """Without a seed one is drawn and stored for replay."""
        state = create_initial_state()
        assert 0 <= state.seed < 2 ** 32
        assert state.rng_cursor == state.seed

    def test_rules_shape_the_start(self):
        rules = RulesConfig(max_cycles=3, starting_patronage=9)
        state = create_initial_state(1, rules=rules)
        assert state.max_cycles == 3
        assert state.resources.patronage == 9

    def test_starting_resources_are_clamped(self):
        rules = RulesConfig(starting_paperwork=50, starting_legitimacy=-5, starting_street_heat=140)
        state = create_initial_state(1, rules=rules)
        assert state.resources == Resources(
            paperwork=10, patronage=5, legitimacy=0, audit_risk=10, street_heat=100
        )

    def test_show_tips_flag(self):
        assert create_initial_state(1, show_tips=True).show_tips is True


class TestSelectors:
    """Tests for derived selectors."""

    def test_total_delegates_counts_recognized_only(self, playing_state, make_union, make_federation):
        """Unrecognized federations send nobody."""
        state = playing_state
        for i in range(1, 5):
            state = state.with_union(make_union(f"union_000{i}", is_licensed=True))
        state = state.with_federation(make_federation("fed_a", ["union_0001", "union_0002"]))
        state = state.with_federation(make_federation(
            "fed_b", ["union_0003", "union_0004"], recognition=Recognition.UNRECOGNIZED,
        ))
        assert get_total_delegates(state) == 2

    def test_available_unions(self, state_with_unions, make_federation):
        """Available = licensed and not in any federation."""
        state = state_with_unions
        assert [u.id for u in get_available_unions(state)] == ["union_0001", "union_0002"]

        state = state.with_federation(make_federation("fed_a", ["union_0001", "union_0002"]))
        assert get_available_unions(state) == []
        assert get_federated_union_ids(state) == {"union_0001", "union_0002"}
        assert find_federation_of(state, "union_0002").id == "fed_a"
        assert find_federation_of(state, "union_0003") is None

    def test_maintenance_and_shells(self, playing_state, make_union):
        state = playing_state
        state = state.with_union(make_union("union_0001", maintenance_cost=3))
        state = state.with_union(make_union(
            "union_0002", archetype=Archetype.SHELL, maintenance_cost=0,
        ))
        assert get_total_maintenance_cost(state) == 3
        assert get_shell_count(state) == 1


class TestLoseCondition:
    """Tests for check_lose_condition."""

    def test_no_loss(self, playing_state):
        assert check_lose_condition(playing_state) is None

    def test_legitimacy_zero(self, playing_state):
        state = playing_state._copy_with(resources=Resources(legitimacy=0))
        assert check_lose_condition(state) == LossCondition.LEGITIMACY

    def test_audit_full(self, playing_state):
        state = playing_state._copy_with(resources=Resources(audit_risk=100))
        assert check_lose_condition(state) == LossCondition.AUDIT

    def test_street_full(self, playing_state):
        state = playing_state._copy_with(resources=Resources(street_heat=100))
        assert check_lose_condition(state) == LossCondition.STREET

    def test_legitimacy_reported_first(self, playing_state):
        """With several limits crossed, legitimacy is reported."""
        state = playing_state._copy_with(
            resources=Resources(legitimacy=0, audit_risk=100, street_heat=100)
        )
        assert check_lose_condition(state) == LossCondition.LEGITIMACY


class TestFormulas:
    """Probability formulas."""

    def test_license_chance(self, make_union):
        """30% at plausibility 0, rising 0.6 per point."""
        assert get_license_chance(make_union(plausibility=0)) == 30
        assert get_license_chance(make_union(plausibility=50)) == 60
        assert get_license_chance(make_union(plausibility=55)) == 63
        assert get_license_chance(make_union(plausibility=100)) == 90

    def test_license_chance_bounds(self, make_union):
        for plausibility in range(0, 101):
            chance = get_license_chance(make_union(plausibility=plausibility))
            assert 30 <= chance <= 95

    def test_crack_risk(self, make_union):
        """40% at integrity 0, floor of 5%."""
        assert get_crack_risk(make_union(integrity=0)) == 40
        assert get_crack_risk(make_union(integrity=50)) == 23
        assert get_crack_risk(make_union(integrity=100)) == 5

    def test_crack_risk_bounds(self, make_union):
        for integrity in range(0, 101):
            assert 5 <= get_crack_risk(make_union(integrity=integrity)) <= 40

    def test_shells_crack_more_than_authentic(self, make_union):
        """Low integrity means fragile."""
        shell = make_union(archetype=Archetype.SHELL, integrity=10)
        authentic = make_union(archetype=Archetype.AUTHENTIC, integrity=90)
        assert get_crack_risk(shell) > get_crack_risk(authentic)

    def test_delegate_reliability(self, make_union):
        assert get_delegate_reliability(make_union(loyalty=50)) == 1.0
        assert get_delegate_reliability(make_union(loyalty=100)) == 2.0

    def test_federation_reliability_uses_average_loyalty(self, make_union, make_federation):
        unions = {
            "a": make_union("a", loyalty=80),
            "b": make_union("b", loyalty=60),
        }
        federation = make_federation("fed", ["a", "b"])
        assert get_federation_reliability(federation, unions) == 1.4

    def test_federation_reliability_ignores_missing_members(self, make_union, make_federation):
        unions = {"a": make_union("a", loyalty=100)}
        assert get_federation_reliability(make_federation("fed", ["a", "gone"]), unions) == 2.0
        assert get_federation_reliability(make_federation("fed", ["gone"]), unions) == 0.0

    def test_dissolve_reward(self, make_union):
        assert get_dissolve_reward(make_union(plausibility=0)) == 1
        assert get_dissolve_reward(make_union(plausibility=29)) == 1
        assert get_dissolve_reward(make_union(plausibility=30)) == 2
        assert get_dissolve_reward(make_union(plausibility=95)) == 4

    def test_reassign_reward(self, make_union):
        assert get_reassign_reward(make_union(loyalty=24)) == 1
        assert get_reassign_reward(make_union(loyalty=25)) == 2
        assert get_reassign_reward(make_union(loyalty=100)) == 5
