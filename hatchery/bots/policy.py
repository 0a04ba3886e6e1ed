"""
Bot Policy - Interface for autoplay decision-making.

A BotPolicy looks at a run state and returns a decision:
- During `playing`: the next action, or None to end the turn
- During `event`: which eligible choice to take

Policies never mutate state; the autoplay driver feeds their actions
through the reducer like any other shell would.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
import random

from ..content.gate import get_eligible_choices
from ..engine_core.action import Action
from ..engine_core.rules import ActionCost, RulesConfig, DEFAULT_RULES
from ..engine_core.state import IncubationMode, get_available_unions

if TYPE_CHECKING:
    from ..content.schemas import EventCard, EventChoice
    from ..engine_core.state import RunState, UnionEntity


def _can_afford(state: RunState, cost: ActionCost) -> bool:
    return (
        state.resources.paperwork >= cost.paperwork
        and state.resources.patronage >= cost.patronage
    )


def _unlicensed(state: RunState) -> list[UnionEntity]:
    return [u for u in state.unions.values() if not u.is_licensed and not u.is_cracked]


class BotPolicy(ABC):
    """
    Abstract base class for autoplay policies.

    Implementations range from random play to simple heuristics.
    """

    def __init__(self, rules: RulesConfig = DEFAULT_RULES):
        self.rules = rules

    @abstractmethod
    def act(self, state: RunState) -> Action | None:
        """
        Select the next action during the `playing` phase.

        Returns None to end the turn (the driver then draws an event).
        """
        pass

    @abstractmethod
    def choose(self, state: RunState, event: EventCard) -> str:
        """Return the id of an eligible choice for the active event."""
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - picks among affordable actions uniformly at random.

    Used for:
    - Balance baselines
    - Smoke-testing the reducer with odd action orders

    Seeded, so a simulation with the same seeds is reproducible.
    """

    # Chance of ending the turn instead of acting
    PASS_CHANCE = 0.1

    def __init__(self, seed: int | None = None, rules: RulesConfig = DEFAULT_RULES):
        super().__init__(rules)
        self.rng = random.Random(seed)

    def act(self, state: RunState) -> Action | None:
        if self.rng.random() < self.PASS_CHANCE:
            return None

        rules = self.rules
        candidates: list[Action] = []

        if not state.unions_generated_in_cycle and _can_afford(state, rules.generate_cost):
            candidates.append(Action.generate_unions(rules.default_batch_size))

        unlicensed = _unlicensed(state)
        if unlicensed and _can_afford(state, rules.license_cost):
            candidates.append(Action.license_union(unlicensed[0].id))

        incubatable = [u for u in state.unions.values() if not u.is_incubated and not u.is_cracked]
        if incubatable and _can_afford(state, rules.incubate_cost):
            mode = self.rng.choice(list(IncubationMode))
            candidates.append(Action.incubate_union(incubatable[0].id, mode))

        available = get_available_unions(state)
        if len(available) >= 2 and _can_afford(state, rules.federation_cost):
            candidates.append(Action.create_federation([available[0].id, available[1].id]))

        if not candidates:
            return None
        return self.rng.choice(candidates)

    def choose(self, state: RunState, event: EventCard) -> str:
        choices = get_eligible_choices(event, state)
        if not choices:
            return event.choices[0].id
        return self.rng.choice(choices).id


class ReformPolicy(BotPolicy):
    """
    Heuristic policy that plays to win the election.

    Priorities:
    1. Found a federation as soon as two licensed unions are free
    2. License unions (non-shells first) until two are available
    3. Generate unions when the roster is thin
    Event choices favour lower audit risk, then patronage, then legitimacy.
    """

    def act(self, state: RunState) -> Action | None:
        rules = self.rules
        available = get_available_unions(state)
        unlicensed = _unlicensed(state)

        if len(available) >= 2 and _can_afford(state, rules.federation_cost):
            return Action.create_federation([available[0].id, available[1].id])

        if len(available) < 2 and unlicensed and _can_afford(state, rules.license_cost):
            best = next((u for u in unlicensed if not u.is_shell), unlicensed[0])
            return Action.license_union(best.id)

        can_generate = (
            not state.unions_generated_in_cycle
            and _can_afford(state, rules.generate_cost)
        )
        if can_generate and len(state.unions) < 5:
            return Action.generate_unions(rules.default_batch_size)

        return None

    @staticmethod
    def score_choice(choice: EventChoice) -> int:
        effects = choice.effects
        return effects.audit_risk * -3 + effects.patronage * 2 + effects.legitimacy

    def choose(self, state: RunState, event: EventCard) -> str:
        choices = get_eligible_choices(event, state)
        if not choices:
            return event.choices[0].id
        # max() keeps the first of equal scores
        return max(choices, key=self.score_choice).id


POLICIES: dict[str, type[BotPolicy]] = {
    "random": RandomPolicy,
    "reform": ReformPolicy,
}
