"""
Reducer - Applies actions to run state.

The reducer is the single point of state mutation.
All state changes must go through apply().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying; illegal actions return the input state unchanged
- Randomness only through a SeededRNG built from state.rng_cursor, whose
  advanced cursor is written back into the new state
- Cycle-closing actions run upkeep, crack checks and loss checks in that order
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..content.gate import check_conditions, is_event_eligible, select_event
from ..content.schemas import ChoiceEnding, ContentBundle
from .action import Action, ActionResult, ActionType
from .effects import (
    ResourceEffects,
    UnionStatEffects,
    apply_cycle_end,
    apply_resource_effects,
    apply_union_effects,
)
from .election import resolve_election
from .generator import federation_id_for, generate_federation_name, generate_unions
from .rng import SeededRNG
from .rules import ActionCost, RulesConfig, DEFAULT_RULES
from .state import (
    Ending,
    FederationEntity,
    GamePhase,
    IncubationMode,
    Recognition,
    RunState,
    UnionEntity,
    check_lose_condition,
    create_initial_state,
    find_federation_of,
    get_dissolve_reward,
    get_federated_union_ids,
    get_license_chance,
    get_reassign_reward,
)

logger = logging.getLogger(__name__)


# Which phase each action is legal in (None: any phase)
_ALLOWED_PHASES: dict[ActionType, frozenset[GamePhase] | None] = {
    ActionType.START_RUN: frozenset({GamePhase.MENU}),
    ActionType.RESET_RUN: None,
    ActionType.DISMISS_TIPS: frozenset(
        {GamePhase.MENU, GamePhase.PLAYING, GamePhase.EVENT, GamePhase.ELECTION}
    ),
    ActionType.GENERATE_UNIONS: frozenset({GamePhase.PLAYING}),
    ActionType.LICENSE_UNION: frozenset({GamePhase.PLAYING}),
    ActionType.LICENSE_RESULT: frozenset({GamePhase.PLAYING}),
    ActionType.INCUBATE_UNION: frozenset({GamePhase.PLAYING}),
    ActionType.DISSOLVE_UNION: frozenset({GamePhase.PLAYING}),
    ActionType.REASSIGN_UNION: frozenset({GamePhase.PLAYING}),
    ActionType.CREATE_FEDERATION: frozenset({GamePhase.PLAYING}),
    ActionType.DRAW_EVENT: frozenset({GamePhase.PLAYING}),
    ActionType.CHOOSE_EVENT: frozenset({GamePhase.EVENT}),
    ActionType.ADVANCE_CYCLE: frozenset({GamePhase.PLAYING}),
    ActionType.RESOLVE_ELECTION: frozenset({GamePhase.ELECTION}),
}


def _can_afford(state: RunState, cost: ActionCost) -> bool:
    return (
        state.resources.paperwork >= cost.paperwork
        and state.resources.patronage >= cost.patronage
    )


def _charge(cost: ActionCost, **extra: int) -> ResourceEffects:
    return ResourceEffects(paperwork=-cost.paperwork, patronage=-cost.patronage, **extra)


@dataclass
class Reducer:
    """
    Reducer applies actions to run state.

    Stateless - all state is in RunState.
    Content provides the events and name tables; rules provide the balance.
    """
    content: ContentBundle
    rules: RulesConfig = field(default=DEFAULT_RULES)

    def apply(self, state: RunState, action: Action) -> ActionResult:
        """
        Apply an action to the run state.

        Never raises for an illegal action: the result carries the
        untouched state and the reason.
        """
        validation_error = self._validate_phase(state, action)
        if validation_error:
            return self._reject(state, action, validation_error)

        handler = self._get_handler(action.action_type)
        result = handler(state, action)

        if result.success:
            if result.new_state.phase != state.phase:
                logger.info(
                    "Phase %s -> %s (cycle %d)",
                    state.phase.value,
                    result.new_state.phase.value,
                    result.new_state.cycle,
                )
            if result.new_state.ending and not state.ending:
                logger.info("Run %d ended: %s", state.seed, result.new_state.ending.value)
        else:
            logger.debug(
                "Rejected %s: %s", action.action_type.value, result.error
            )
        return result

    def _reject(
        self,
        state: RunState,
        action: Action,
        error: str,
        error_code: str = "ILLEGAL_ACTION",
    ) -> ActionResult:
        return ActionResult.rejected(state, error, error_code)

    def _validate_phase(self, state: RunState, action: Action) -> str | None:
        allowed = _ALLOWED_PHASES.get(action.action_type)
        if allowed is None or state.phase in allowed:
            return None
        if state.phase == GamePhase.ENDED:
            return "Run is over - only a reset is allowed"
        return f"{action.action_type.value} is not allowed during {state.phase.value}"

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_RUN: self._handle_start_run,
            ActionType.RESET_RUN: self._handle_reset_run,
            ActionType.DISMISS_TIPS: self._handle_dismiss_tips,
            ActionType.GENERATE_UNIONS: self._handle_generate,
            ActionType.LICENSE_UNION: self._handle_license,
            ActionType.LICENSE_RESULT: self._handle_license_result,
            ActionType.INCUBATE_UNION: self._handle_incubate,
            ActionType.DISSOLVE_UNION: self._handle_dissolve,
            ActionType.REASSIGN_UNION: self._handle_reassign,
            ActionType.CREATE_FEDERATION: self._handle_create_federation,
            ActionType.DRAW_EVENT: self._handle_draw_event,
            ActionType.CHOOSE_EVENT: self._handle_choose_event,
            ActionType.ADVANCE_CYCLE: self._handle_advance_cycle,
            ActionType.RESOLVE_ELECTION: self._handle_resolve_election,
        }
        return handlers[action_type]

    # =========================================================================
    # Run management
    # =========================================================================

    def _handle_start_run(self, state: RunState, action: Action) -> ActionResult:
        """Start from the menu. Without a seed, the menu state's seed is kept."""
        seed = action.payload.seed if action.payload.seed is not None else state.seed
        new_state = create_initial_state(
            seed, show_tips=action.payload.show_tips, rules=self.rules
        )._copy_with(phase=GamePhase.PLAYING)
        return ActionResult.success_with_state(new_state, changes=[f"Run started with seed {seed}"])

    def _handle_reset_run(self, state: RunState, action: Action) -> ActionResult:
        """Back to the menu. Without a seed, the next one is drawn from the run's stream."""
        seed = action.payload.seed
        if seed is None:
            seed = SeededRNG(state.rng_cursor).next_int(0, 2147483646)
        new_state = create_initial_state(seed, show_tips=state.show_tips, rules=self.rules)
        return ActionResult.success_with_state(new_state, changes=["Run reset"])

    def _handle_dismiss_tips(self, state: RunState, action: Action) -> ActionResult:
        return ActionResult.success_with_state(state._copy_with(show_tips=False))

    # =========================================================================
    # Union actions
    # =========================================================================

    def _handle_generate(self, state: RunState, action: Action) -> ActionResult:
        """Generate a batch of unions. At most once per cycle."""
        if state.unions_generated_in_cycle:
            return self._reject(state, action, "Unions already generated this cycle")

        count = action.payload.count if action.payload.count is not None else self.rules.default_batch_size
        if not 1 <= count <= self.rules.max_batch_size:
            return self._reject(state, action, f"Batch size must be 1-{self.rules.max_batch_size}")

        cost = self.rules.generate_cost
        if not _can_afford(state, cost):
            return self._reject(state, action, "Not enough paperwork to generate unions")

        rng = SeededRNG(state.rng_cursor)
        new_unions = generate_unions(
            rng, self.content.name_parts, count, state.next_entity_serial
        )

        unions = dict(state.unions)
        for union in new_unions:
            unions[union.id] = union

        new_state = state._copy_with(
            unions=unions,
            rng_cursor=rng.cursor,
            unions_generated_in_cycle=True,
            next_entity_serial=state.next_entity_serial + count,
            resources=apply_resource_effects(state.resources, _charge(cost)),
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Generated {u.name}" for u in new_unions],
            details={"union_ids": [u.id for u in new_unions]},
        )

    def _licensable_union(self, state: RunState, union_id: str | None) -> UnionEntity | str:
        union = state.get_union(union_id) if union_id else None
        if union is None:
            return f"Union {union_id} not found"
        if union.is_licensed:
            return f"Union {union_id} is already licensed"
        if union.is_cracked:
            return f"Union {union_id} has cracked"
        if not _can_afford(state, self.rules.license_cost):
            return "Not enough resources to file a licence"
        return union

    def _license_outcome(
        self,
        state: RunState,
        union: UnionEntity,
        success: bool,
    ) -> RunState:
        cost = self.rules.license_cost
        if success:
            return state.with_union(union._copy_with(is_licensed=True))._copy_with(
                resources=apply_resource_effects(state.resources, _charge(cost)),
            )
        # Rejected file: the cost is still paid and the file looks suspicious
        return state._copy_with(
            resources=apply_resource_effects(
                state.resources,
                _charge(cost, audit_risk=self.rules.failed_license_audit_risk),
            ),
        )

    def _handle_license(self, state: RunState, action: Action) -> ActionResult:
        """Roll against the union's licence chance."""
        union = self._licensable_union(state, action.payload.union_id)
        if isinstance(union, str):
            return self._reject(state, action, union)

        rng = SeededRNG(state.rng_cursor)
        chance = get_license_chance(union)
        roll = rng.roll_d100()
        success = roll <= chance

        new_state = self._license_outcome(state, union, success)._copy_with(rng_cursor=rng.cursor)
        verdict = "granted" if success else "refused"
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Licence {verdict} for {union.name} (rolled {roll} vs {chance}%)"],
            details={"roll": roll, "chance": chance, "licensed": success},
        )

    def _handle_license_result(self, state: RunState, action: Action) -> ActionResult:
        """Apply a licence outcome decided outside the reducer."""
        if action.payload.success is None:
            return self._reject(state, action, "Licence result needs a success flag")
        union = self._licensable_union(state, action.payload.union_id)
        if isinstance(union, str):
            return self._reject(state, action, union)

        new_state = self._license_outcome(state, union, action.payload.success)
        return ActionResult.success_with_state(
            new_state, details={"licensed": action.payload.success}
        )

    def _handle_incubate(self, state: RunState, action: Action) -> ActionResult:
        """One-time stat adjustment in one of two opposite modes."""
        union = state.get_union(action.payload.union_id or "")
        mode = action.payload.mode
        if union is None:
            return self._reject(state, action, f"Union {action.payload.union_id} not found")
        if union.is_incubated:
            return self._reject(state, action, f"Union {union.id} was already incubated")
        if union.is_cracked:
            return self._reject(state, action, f"Union {union.id} has cracked")
        if mode is None:
            return self._reject(state, action, "Incubation needs a mode")

        cost = self.rules.incubate_cost
        if not _can_afford(state, cost):
            return self._reject(state, action, "Not enough patronage to incubate")

        rules = self.rules
        if mode == IncubationMode.PAPERWORK:
            stat_effects = UnionStatEffects(
                plausibility=rules.incubation_primary_gain,
                integrity=rules.incubation_integrity_gain,
                loyalty=-rules.incubation_trade_off,
            )
            # Real workers notice the file being cleaned up
            resource_effects = _charge(cost, street_heat=rules.paperwork_incubation_street_heat)
        else:
            stat_effects = UnionStatEffects(
                loyalty=rules.incubation_primary_gain,
                integrity=rules.incubation_integrity_gain,
                plausibility=-rules.incubation_trade_off,
            )
            resource_effects = _charge(cost)

        incubated = apply_union_effects(union, stat_effects)._copy_with(
            is_incubated=True,
            incubation_mode=mode,
        )
        new_state = state.with_union(incubated)._copy_with(
            resources=apply_resource_effects(state.resources, resource_effects),
        )
        return ActionResult.success_with_state(
            new_state, changes=[f"Incubated {union.name} ({mode.value})"]
        )

    def _removable_union(self, state: RunState, union_id: str | None) -> UnionEntity | str:
        union = state.get_union(union_id) if union_id else None
        if union is None:
            return f"Union {union_id} not found"
        if union.is_cracked:
            return f"Union {union_id} has cracked"
        if find_federation_of(state, union.id) is not None:
            return f"Union {union_id} belongs to a federation"
        return union

    def _handle_dissolve(self, state: RunState, action: Action) -> ActionResult:
        """Remove a union and recover paperwork."""
        union = self._removable_union(state, action.payload.union_id)
        if isinstance(union, str):
            return self._reject(state, action, union)

        reward = get_dissolve_reward(union)
        new_state = state.without_union(union.id)._copy_with(
            resources=apply_resource_effects(state.resources, ResourceEffects(paperwork=reward)),
        )
        return ActionResult.success_with_state(
            new_state, changes=[f"Dissolved {union.name} for {reward} paperwork"]
        )

    def _handle_reassign(self, state: RunState, action: Action) -> ActionResult:
        """Remove a union and recover patronage."""
        union = self._removable_union(state, action.payload.union_id)
        if isinstance(union, str):
            return self._reject(state, action, union)

        reward = get_reassign_reward(union)
        new_state = state.without_union(union.id)._copy_with(
            resources=apply_resource_effects(state.resources, ResourceEffects(patronage=reward)),
        )
        return ActionResult.success_with_state(
            new_state, changes=[f"Reassigned {union.name} for {reward} patronage"]
        )

    # =========================================================================
    # Federation actions
    # =========================================================================

    def _handle_create_federation(self, state: RunState, action: Action) -> ActionResult:
        """Bundle two or more licensed, unfederated unions. Always 2 delegates."""
        union_ids = action.payload.union_ids
        if len(union_ids) < 2:
            return self._reject(state, action, "A federation needs at least two unions")
        if len(set(union_ids)) != len(union_ids):
            return self._reject(state, action, "Duplicate unions in federation request")

        members = [state.get_union(uid) for uid in union_ids]
        if any(m is None for m in members):
            return self._reject(state, action, "Unknown union in federation request")
        if not all(m.is_licensed for m in members):
            return self._reject(state, action, "Every member must be licensed")

        already_federated = get_federated_union_ids(state)
        if any(uid in already_federated for uid in union_ids):
            return self._reject(state, action, "A union can only belong to one federation")

        cost = self.rules.federation_cost
        if not _can_afford(state, cost):
            return self._reject(state, action, "Not enough resources to found a federation")

        rng = SeededRNG(state.rng_cursor)
        federation = FederationEntity(
            id=federation_id_for(state.next_entity_serial),
            name=generate_federation_name(rng, members),
            union_ids=tuple(union_ids),
            recognition=Recognition.RECOGNIZED,
            visibility=self.rules.federation_visibility,
        )

        new_state = state.with_federation(federation)._copy_with(
            rng_cursor=rng.cursor,
            next_entity_serial=state.next_entity_serial + 1,
            resources=apply_resource_effects(
                state.resources,
                _charge(cost, audit_risk=self.rules.federation_audit_risk),
            ),
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Founded {federation.name} ({federation.delegates} delegates)"],
            details={"federation_id": federation.id},
        )

    # =========================================================================
    # Events and cycle progression
    # =========================================================================

    def _handle_draw_event(self, state: RunState, action: Action) -> ActionResult:
        """Show an event. Only records which event is active."""
        event_id = action.payload.event_id
        new_cursor = state.rng_cursor

        if event_id is not None:
            event = self.content.get_event(event_id)
            if event is None:
                return self._reject(state, action, f"Event {event_id} not found")
            if not is_event_eligible(event, state):
                return self._reject(state, action, f"Event {event_id} is not eligible now")
        else:
            rng = SeededRNG(state.rng_cursor)
            event = select_event(self.content.events, state, rng)
            if event is None:
                return self._reject(
                    state, action, "No eligible event", error_code="NO_ELIGIBLE_EVENT"
                )
            new_cursor = rng.cursor

        new_state = state._copy_with(
            phase=GamePhase.EVENT,
            current_event_id=event.id,
            rng_cursor=new_cursor,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[event.headline],
            details={"event_id": event.id},
        )

    def _handle_choose_event(self, state: RunState, action: Action) -> ActionResult:
        """
        Resolve the active event and close the cycle.

        Loss is checked right after the choice's effects and again after upkeep.
        """
        event_id = action.payload.event_id
        if event_id != state.current_event_id:
            return self._reject(state, action, f"Event {event_id} is not the active event")

        event = self.content.get_event(event_id)
        if event is None:
            return self._reject(state, action, f"Event {event_id} not found")

        choice = event.get_choice(action.payload.choice_id or "")
        if choice is None:
            return self._reject(state, action, f"Choice {action.payload.choice_id} not found")
        if not check_conditions(choice.conditions, state):
            return self._reject(state, action, f"Choice {choice.id} is not available")

        effects = ResourceEffects(**choice.effects.model_dump())
        unlocked = state.unlocked_footnotes + tuple(
            fid for fid in dict.fromkeys(choice.unlocks) if fid not in state.unlocked_footnotes
        )

        resolved = state._copy_with(
            resources=apply_resource_effects(state.resources, effects),
            unlocked_footnotes=unlocked,
            event_history=state.event_history + (event.id,),
            current_event_id=None,
        )
        changes = [f"{event.headline}: {choice.label}"]

        if check_lose_condition(resolved):
            return ActionResult.success_with_state(
                resolved._copy_with(phase=GamePhase.ENDED, ending=Ending.COLLAPSE),
                changes=changes,
            )

        if choice.triggers_ending == ChoiceEnding.WHISTLEBLOWER:
            return ActionResult.success_with_state(
                resolved._copy_with(phase=GamePhase.ENDED, ending=Ending.WHISTLEBLOWER),
                changes=changes,
            )

        return self._close_cycle(resolved, changes)

    def _handle_advance_cycle(self, state: RunState, action: Action) -> ActionResult:
        """Close the cycle without an event; only when none can be drawn."""
        if any(is_event_eligible(e, state) for e in self.content.events):
            return self._reject(state, action, "An event must be drawn to end the cycle")
        return self._close_cycle(state, ["Cycle closed without incident"])

    def _close_cycle(self, state: RunState, changes: list[str]) -> ActionResult:
        """Election after the last cycle; otherwise upkeep, cracks, loss check."""
        if state.is_last_cycle:
            return ActionResult.success_with_state(
                state._copy_with(phase=GamePhase.ELECTION),
                changes=changes + ["Election night"],
            )

        closed = apply_cycle_end(state, self.rules)
        cracked = [
            closed.unions[uid].name
            for uid, union in state.unions.items()
            if not union.is_cracked and closed.unions[uid].is_cracked
        ]
        changes = changes + [f"{name} cracked" for name in cracked]

        if check_lose_condition(closed):
            return ActionResult.success_with_state(
                closed._copy_with(phase=GamePhase.ENDED, ending=Ending.COLLAPSE),
                changes=changes,
            )

        return ActionResult.success_with_state(
            closed._copy_with(phase=GamePhase.PLAYING),
            changes=changes + [f"Cycle {closed.cycle} begins"],
        )

    # =========================================================================
    # Election
    # =========================================================================

    def _handle_resolve_election(self, state: RunState, action: Action) -> ActionResult:
        result = resolve_election(state, self.rules)
        new_state = state._copy_with(
            phase=GamePhase.ENDED,
            ending=result.ending,
            election=result,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[
                f"Secured {result.secured_delegates} of {result.expected_delegates} delegates"
            ],
        )


def apply_action(
    content: ContentBundle,
    state: RunState,
    action: Action,
    rules: RulesConfig = DEFAULT_RULES,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    return Reducer(content=content, rules=rules).apply(state, action)


def reduce(
    state: RunState,
    action: Action,
    content: ContentBundle,
    rules: RulesConfig = DEFAULT_RULES,
) -> RunState:
    """The bare (state, action) -> state transition; illegal actions return state."""
    return apply_action(content, state, action, rules).new_state
