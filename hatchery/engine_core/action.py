"""
Action System - Actions, payloads, and results.

Actions represent:
1. Player actions (generate, license, incubate, dissolve, reassign, federate, choose)
2. System actions (start, reset, draw event, advance cycle, resolve election)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import IncubationMode, RunState


class ActionType(str, Enum):
    """Types of actions in the system."""
    # Run management
    START_RUN = "start_run"
    RESET_RUN = "reset_run"
    DISMISS_TIPS = "dismiss_tips"

    # Union actions
    GENERATE_UNIONS = "generate_unions"
    LICENSE_UNION = "license_union"
    LICENSE_RESULT = "license_result"  # Outcome decided by the shell, no roll
    INCUBATE_UNION = "incubate_union"
    DISSOLVE_UNION = "dissolve_union"
    REASSIGN_UNION = "reassign_union"

    # Federation actions
    CREATE_FEDERATION = "create_federation"

    # Cycle / events
    DRAW_EVENT = "draw_event"
    CHOOSE_EVENT = "choose_event"
    ADVANCE_CYCLE = "advance_cycle"  # Fallback when no event can be drawn

    # Finale
    RESOLVE_ELECTION = "resolve_election"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    seed: int | None = None
    show_tips: bool = False

    union_id: str | None = None
    union_ids: tuple[str, ...] = ()
    count: int | None = None
    mode: IncubationMode | None = None
    success: bool | None = None

    event_id: str | None = None
    choice_id: str | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the run state.

    Build actions with the factories below rather than by hand.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def start_run(cls, seed: int | None = None, show_tips: bool = False) -> Action:
        return cls(ActionType.START_RUN, ActionPayload(seed=seed, show_tips=show_tips))

    @classmethod
    def reset_run(cls, seed: int | None = None) -> Action:
        return cls(ActionType.RESET_RUN, ActionPayload(seed=seed))

    @classmethod
    def dismiss_tips(cls) -> Action:
        return cls(ActionType.DISMISS_TIPS)

    @classmethod
    def generate_unions(cls, count: int | None = None) -> Action:
        return cls(ActionType.GENERATE_UNIONS, ActionPayload(count=count))

    @classmethod
    def license_union(cls, union_id: str) -> Action:
        return cls(ActionType.LICENSE_UNION, ActionPayload(union_id=union_id))

    @classmethod
    def license_result(cls, union_id: str, success: bool) -> Action:
        return cls(ActionType.LICENSE_RESULT, ActionPayload(union_id=union_id, success=success))

    @classmethod
    def incubate_union(cls, union_id: str, mode: IncubationMode | str) -> Action:
        return cls(
            ActionType.INCUBATE_UNION,
            ActionPayload(union_id=union_id, mode=IncubationMode(mode)),
        )

    @classmethod
    def dissolve_union(cls, union_id: str) -> Action:
        return cls(ActionType.DISSOLVE_UNION, ActionPayload(union_id=union_id))

    @classmethod
    def reassign_union(cls, union_id: str) -> Action:
        return cls(ActionType.REASSIGN_UNION, ActionPayload(union_id=union_id))

    @classmethod
    def create_federation(cls, union_ids: list[str] | tuple[str, ...]) -> Action:
        return cls(ActionType.CREATE_FEDERATION, ActionPayload(union_ids=tuple(union_ids)))

    @classmethod
    def draw_event(cls, event_id: str | None = None) -> Action:
        """Draw a specific event, or let the reducer pick one by weight."""
        return cls(ActionType.DRAW_EVENT, ActionPayload(event_id=event_id))

    @classmethod
    def choose_event(cls, event_id: str, choice_id: str) -> Action:
        return cls(ActionType.CHOOSE_EVENT, ActionPayload(event_id=event_id, choice_id=choice_id))

    @classmethod
    def advance_cycle(cls) -> Action:
        return cls(ActionType.ADVANCE_CYCLE)

    @classmethod
    def resolve_election(cls) -> Action:
        return cls(ActionType.RESOLVE_ELECTION)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was legal
    - The resulting state (the unchanged input state if it was not)
    - Why it was rejected (for the shell; never raised)
    - Human-readable changes (for UI/logging)
    """
    success: bool
    new_state: RunState
    error: str | None = None
    error_code: str | None = None
    state_changes: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def rejected(
        cls,
        state: RunState,
        error: str,
        error_code: str = "ILLEGAL_ACTION",
    ) -> ActionResult:
        """Illegal action: hand back the original state untouched."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: RunState,
        changes: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> ActionResult:
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            details=details or {},
        )
