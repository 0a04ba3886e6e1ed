"""
Tests for bot policies and the autoplay driver.
"""

import pytest

from ..bots.policy import POLICIES, RandomPolicy, ReformPolicy
from ..engine_core.action import ActionType
from ..engine_core.state import GamePhase
from ..session.autoplay import SimulationStats, make_policy, play_run, simulate, simulate_run


class TestPolicies:
    def test_registry(self):
        assert set(POLICIES) == {"random", "reform"}
        assert make_policy("reform").get_name() == "ReformPolicy"

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            make_policy("genius")

    def test_reform_generates_on_empty_roster(self, playing_state):
        action = ReformPolicy().act(playing_state)
        assert action.action_type == ActionType.GENERATE_UNIONS

    def test_reform_federates_when_possible(self, state_with_unions):
        action = ReformPolicy().act(state_with_unions)
        assert action.action_type == ActionType.CREATE_FEDERATION
        assert action.payload.union_ids == ("union_0001", "union_0002")

    def test_reform_passes_when_broke(self, playing_state):
        state = playing_state._copy_with(unions_generated_in_cycle=True)
        assert ReformPolicy().act(state) is None

    def test_reform_prefers_patronage_over_legitimacy(self, content, playing_state):
        event = content.get_event("evt_minister_favour")
        assert ReformPolicy().choose(playing_state, event) == "hire_cousin"

    def test_random_choice_is_eligible(self, content, playing_state):
        event = content.get_event("evt_quiet_week")
        ids = {c.id for c in event.choices}
        policy = RandomPolicy(seed=3)
        assert all(policy.choose(playing_state, event) in ids for _ in range(20))

    def test_random_is_seeded(self, state_with_unions):
        a = RandomPolicy(seed=8)
        b = RandomPolicy(seed=8)
        assert [a.act(state_with_unions) for _ in range(10)] == [b.act(state_with_unions) for _ in range(10)]


class TestAutoplay:
    """Complete runs driven through the reducer."""

    @pytest.mark.parametrize("name", ["random", "reform"])
    def test_run_reaches_an_ending(self, content, name):
        state = play_run(make_policy(name, seed=4), content, seed=4)
        assert state.phase == GamePhase.ENDED
        assert state.ending is not None

    def test_step_limit(self, content, caplog):
        state = play_run(ReformPolicy(), content, seed=4, max_steps=1)
        assert state.phase != GamePhase.ENDED
        assert "without an ending" in caplog.text

    def test_sim_result(self, content):
        result = simulate_run(ReformPolicy(), content, seed=21)
        assert result.seed == 21
        assert 1 <= result.cycles <= 5
        assert 1 <= result.events_seen <= 5
        assert result.secured_delegates <= result.delegate_count

    def test_simulation_is_reproducible(self, content):
        a = simulate("random", content, runs=5, base_seed=10)
        b = simulate("random", content, runs=5, base_seed=10)
        assert a.results == b.results
        assert [r.seed for r in a.results] == [10, 11, 12, 13, 14]

    def test_stats(self, content):
        stats = simulate("reform", content, runs=6, base_seed=0)
        assert stats.runs == 6
        assert sum(stats.endings.values()) == 6
        assert stats.wins == stats.endings.get("capture", 0)
        summary = stats.to_dict()
        assert summary["policy"] == "reform"
        assert 0.0 <= summary["win_rate"] <= 100.0

    def test_empty_stats(self):
        stats = SimulationStats(policy="random")
        assert stats.win_rate == 0.0
        assert stats.avg_cycles == 0.0
        assert stats.to_dict()["endings"] == {}
