"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine actions
2. Manages runs through the SessionManager
3. Projects run state (plus selectors) into response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Methods return either the response model or an ErrorResponse; nothing
here raises for a bad request.
"""

from __future__ import annotations
from dataclasses import dataclass

from .schemas import (
    ActionRequest,
    ActionResponse,
    CreateRunRequest,
    DeleteRunResponse,
    ElectionInfo,
    ErrorCode,
    ErrorResponse,
    EventChoiceInfo,
    EventResponse,
    FederationInfo,
    FootnoteInfo,
    FootnoteListResponse,
    LoadRequest,
    ResourcesInfo,
    RunListResponse,
    RunStateResponse,
    RunSummary,
    SaveRequest,
    SaveResponse,
    UnionInfo,
)
from ..content.gate import check_conditions
from ..engine_core.state import (
    RunState,
    check_lose_condition,
    find_federation_of,
    get_available_unions,
    get_crack_risk,
    get_federation_reliability,
    get_license_chance,
    get_total_delegates,
    get_total_maintenance_cost,
)
from ..session.manager import RunNotFoundError, RunSession, SessionManager


def _not_found(run_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Run {run_id} not found",
        error_code=ErrorCode.RUN_NOT_FOUND,
    )


def state_to_response(run_id: str, state: RunState) -> RunStateResponse:
    """Project a RunState into its API shape."""
    unions = []
    for union in state.unions.values():
        federation = find_federation_of(state, union.id)
        unions.append(UnionInfo(
            id=union.id,
            name=union.name,
            sector=union.sector,
            archetype=union.archetype,
            plausibility=union.plausibility,
            loyalty=union.loyalty,
            integrity=union.integrity,
            maintenance_cost=union.maintenance_cost,
            tags=list(union.tags),
            is_licensed=union.is_licensed,
            is_incubated=union.is_incubated,
            is_cracked=union.is_cracked,
            incubation_mode=union.incubation_mode,
            license_chance=get_license_chance(union),
            crack_risk=get_crack_risk(union),
            federation_id=federation.id if federation else None,
        ))

    federations = [
        FederationInfo(
            id=f.id,
            name=f.name,
            union_ids=list(f.union_ids),
            delegates=f.delegates,
            recognition=f.recognition,
            visibility=f.visibility,
            reliability=get_federation_reliability(f, state.unions),
        )
        for f in state.federations.values()
    ]

    return RunStateResponse(
        run_id=run_id,
        seed=state.seed,
        rng_cursor=state.rng_cursor,
        cycle=state.cycle,
        max_cycles=state.max_cycles,
        phase=state.phase,
        resources=ResourcesInfo.model_validate(state.resources),
        unions=unions,
        federations=federations,
        event_history=list(state.event_history),
        current_event_id=state.current_event_id,
        unlocked_footnotes=list(state.unlocked_footnotes),
        ending=state.ending,
        election=ElectionInfo.model_validate(state.election) if state.election else None,
        unions_generated_in_cycle=state.unions_generated_in_cycle,
        show_tips=state.show_tips,
        total_delegates=get_total_delegates(state),
        available_union_ids=[u.id for u in get_available_unions(state)],
        total_maintenance_cost=get_total_maintenance_cost(state),
        loss_condition=check_lose_condition(state),
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService(session_manager=SessionManager(content))

        run = service.create_run(CreateRunRequest(seed=42))
        result = service.apply_action(run.run_id, ActionRequest(action_type="generate_unions"))
    """
    session_manager: SessionManager

    @property
    def content(self):
        return self.session_manager.content

    def _run_response(self, session: RunSession) -> RunStateResponse:
        return state_to_response(session.run_id, session.state)

    def create_run(self, request: CreateRunRequest) -> RunStateResponse:
        session = self.session_manager.create_run(
            seed=request.seed,
            show_tips=request.show_tips,
            start=request.start,
        )
        return self._run_response(session)

    def get_run(self, run_id: str) -> RunStateResponse | ErrorResponse:
        try:
            session = self.session_manager.get_run(run_id)
        except RunNotFoundError:
            return _not_found(run_id)
        return self._run_response(session)

    def list_runs(self) -> RunListResponse:
        runs = [
            RunSummary(
                run_id=s.run_id,
                seed=s.state.seed,
                cycle=s.state.cycle,
                phase=s.state.phase,
                ending=s.state.ending,
            )
            for s in self.session_manager.list_runs()
        ]
        return RunListResponse(runs=runs, count=len(runs))

    def delete_run(self, run_id: str) -> DeleteRunResponse | ErrorResponse:
        try:
            self.session_manager.delete_run(run_id)
        except RunNotFoundError:
            return _not_found(run_id)
        return DeleteRunResponse(success=True, run_id=run_id)

    def apply_action(self, run_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        """
        Dispatch an action.

        A rejected action is still a normal response (success=false) carrying
        the unchanged state; only an unknown run is an error.
        """
        try:
            result = self.session_manager.apply(run_id, request.to_action())
        except RunNotFoundError:
            return _not_found(run_id)

        return ActionResponse(
            success=result.success,
            error=result.error,
            error_code=result.error_code,
            changes=result.state_changes,
            details=result.details,
            state=state_to_response(run_id, result.new_state),
        )

    def get_current_event(self, run_id: str) -> EventResponse | ErrorResponse:
        try:
            session = self.session_manager.get_run(run_id)
        except RunNotFoundError:
            return _not_found(run_id)

        event = self.session_manager.current_event(run_id)
        if event is None:
            return ErrorResponse(
                error="No event is active",
                error_code=ErrorCode.NO_ELIGIBLE_EVENT,
                details={"phase": session.state.phase.value},
            )

        return EventResponse(
            run_id=run_id,
            id=event.id,
            category=event.category.value,
            headline=event.headline,
            flavor=event.flavor,
            image=event.image,
            choices=[
                EventChoiceInfo(
                    id=c.id,
                    label=c.label,
                    eligible=check_conditions(c.conditions, session.state),
                    outcome=c.outcome,
                )
                for c in event.choices
            ],
        )

    def list_footnotes(self, unlocked_for: str | None = None) -> FootnoteListResponse | ErrorResponse:
        """All footnotes, or only those a run has unlocked."""
        footnotes = self.content.footnotes
        if unlocked_for is not None:
            try:
                unlocked = set(self.session_manager.get_run(unlocked_for).state.unlocked_footnotes)
            except RunNotFoundError:
                return _not_found(unlocked_for)
            footnotes = [f for f in footnotes if f.id in unlocked]

        infos = [FootnoteInfo.model_validate(f, from_attributes=True) for f in footnotes]
        return FootnoteListResponse(footnotes=infos, count=len(infos))

    def save_run(self, run_id: str, request: SaveRequest) -> SaveResponse | ErrorResponse:
        try:
            path = self.session_manager.save_run(run_id, request.slot)
        except RunNotFoundError:
            return _not_found(run_id)
        return SaveResponse(run_id=run_id, slot=request.slot, path=path)

    def load_run(self, request: LoadRequest) -> RunStateResponse:
        """Never fails: an unreadable slot becomes a fresh run."""
        session = self.session_manager.load_run(request.slot, seed=request.seed)
        return self._run_response(session)
