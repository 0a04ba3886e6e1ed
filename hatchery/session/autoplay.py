"""
Autoplay - Drives complete runs with a bot policy.

The loop:
1. While `playing`: ask the policy for an action; None ends the turn
2. Ending the turn draws a weighted event (or advances if none is eligible)
3. While `event`: ask the policy which choice to take
4. At `election`: resolve it

Every run is seeded, so a simulation is reproducible end to end.
Used by the `simulate` CLI command for balance checks.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
import logging

from ..bots.policy import BotPolicy, RandomPolicy, POLICIES
from ..content.schemas import ContentBundle
from ..engine_core.action import Action
from ..engine_core.reducer import Reducer
from ..engine_core.rules import RulesConfig, DEFAULT_RULES
from ..engine_core.state import (
    Ending,
    GamePhase,
    Resources,
    RunState,
    create_initial_state,
    get_total_delegates,
)

logger = logging.getLogger(__name__)

# Safety break for policies that never end their turn
MAX_STEPS = 1000


@dataclass
class SimResult:
    """Outcome of one simulated run."""
    seed: int
    ending: Ending | None
    cycles: int
    federation_count: int
    delegate_count: int
    secured_delegates: int
    resources: Resources
    events_seen: int


@dataclass
class SimulationStats:
    """Aggregate over many simulated runs."""
    policy: str
    results: list[SimResult] = field(default_factory=list)

    @property
    def runs(self) -> int:
        return len(self.results)

    @property
    def endings(self) -> Counter:
        return Counter(r.ending.value if r.ending else "unfinished" for r in self.results)

    @property
    def wins(self) -> int:
        return sum(1 for r in self.results if r.ending == Ending.CAPTURE)

    @property
    def win_rate(self) -> float:
        return self.wins / self.runs * 100 if self.runs else 0.0

    @property
    def avg_cycles(self) -> float:
        return sum(r.cycles for r in self.results) / self.runs if self.runs else 0.0

    @property
    def avg_delegates(self) -> float:
        return sum(r.delegate_count for r in self.results) / self.runs if self.runs else 0.0

    def to_dict(self) -> dict:
        return {
            "policy": self.policy,
            "runs": self.runs,
            "wins": self.wins,
            "win_rate": round(self.win_rate, 1),
            "avg_cycles": round(self.avg_cycles, 2),
            "avg_delegates": round(self.avg_delegates, 2),
            "endings": dict(self.endings),
        }


def _end_turn(reducer: Reducer, state: RunState) -> RunState:
    result = reducer.apply(state, Action.draw_event())
    if result.success:
        return result.new_state
    return reducer.apply(state, Action.advance_cycle()).new_state


def play_run(
    policy: BotPolicy,
    content: ContentBundle,
    seed: int,
    rules: RulesConfig = DEFAULT_RULES,
    max_steps: int = MAX_STEPS,
) -> RunState:
    """Play one run from the menu to its ending and return the final state."""
    reducer = Reducer(content=content, rules=rules)
    state = reducer.apply(
        create_initial_state(seed, rules=rules), Action.start_run(seed)
    ).new_state

    steps = 0
    while state.phase != GamePhase.ENDED and steps < max_steps:
        steps += 1

        if state.phase == GamePhase.PLAYING:
            action = policy.act(state)
            if action is not None:
                result = reducer.apply(state, action)
                if result.success:
                    state = result.new_state
                    continue
            state = _end_turn(reducer, state)

        elif state.phase == GamePhase.EVENT:
            event = content.get_event(state.current_event_id)
            choice_id = policy.choose(state, event)
            state = reducer.apply(state, Action.choose_event(event.id, choice_id)).new_state

        elif state.phase == GamePhase.ELECTION:
            state = reducer.apply(state, Action.resolve_election()).new_state

    if state.phase != GamePhase.ENDED:
        logger.warning("Run %d stopped after %d steps without an ending", seed, steps)
    return state


def simulate_run(
    policy: BotPolicy,
    content: ContentBundle,
    seed: int,
    rules: RulesConfig = DEFAULT_RULES,
    max_steps: int = MAX_STEPS,
) -> SimResult:
    state = play_run(policy, content, seed, rules, max_steps)
    return SimResult(
        seed=seed,
        ending=state.ending,
        cycles=state.cycle,
        federation_count=len(state.federations),
        delegate_count=get_total_delegates(state),
        secured_delegates=state.election.secured_delegates if state.election else 0,
        resources=state.resources,
        events_seen=len(state.event_history),
    )


def make_policy(name: str, seed: int | None = None, rules: RulesConfig = DEFAULT_RULES) -> BotPolicy:
    """Build a policy by name; random policies are seeded."""
    try:
        policy_cls = POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown policy {name!r} (choose from {', '.join(POLICIES)})") from None
    if policy_cls is RandomPolicy:
        return RandomPolicy(seed=seed, rules=rules)
    return policy_cls(rules=rules)


def simulate(
    policy_name: str,
    content: ContentBundle,
    runs: int = 100,
    base_seed: int = 0,
    rules: RulesConfig = DEFAULT_RULES,
) -> SimulationStats:
    """Play `runs` seeded runs (seeds base_seed, base_seed + 1, ...)."""
    stats = SimulationStats(policy=policy_name)
    for i in range(runs):
        seed = base_seed + i
        policy = make_policy(policy_name, seed=seed, rules=rules)
        stats.results.append(simulate_run(policy, content, seed, rules))

    logger.info(
        "Simulated %d runs with %s: win rate %.1f%%",
        stats.runs, policy_name, stats.win_rate,
    )
    return stats
