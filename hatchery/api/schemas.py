"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a presentation shell and the
engine. The run state is exposed as a read-only projection plus the
derived selectors the shell needs to render it.

Error Codes:
- RUN_NOT_FOUND: Run does not exist or was cleaned up
- ILLEGAL_ACTION: The reducer rejected the action (state unchanged)
- NO_ELIGIBLE_EVENT: No event can be drawn in the current state
- VALIDATION_ERROR: Request body or save slot name is invalid
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.action import Action, ActionPayload, ActionType
from ..engine_core.state import (
    Archetype,
    Ending,
    GamePhase,
    IncubationMode,
    LossCondition,
    Recognition,
)


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    RUN_NOT_FOUND = "RUN_NOT_FOUND"
    ILLEGAL_ACTION = "ILLEGAL_ACTION"
    NO_ELIGIBLE_EVENT = "NO_ELIGIBLE_EVENT"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ResourcesInfo(BaseModel):
    paperwork: int
    patronage: int
    legitimacy: int
    audit_risk: int
    street_heat: int

    model_config = {"from_attributes": True}


class UnionInfo(BaseModel):
    """Union as the dashboard shows it, with its live odds."""
    id: str
    name: str
    sector: str
    archetype: Archetype
    plausibility: int
    loyalty: int
    integrity: int
    maintenance_cost: int
    tags: list[str] = Field(default_factory=list)
    is_licensed: bool
    is_incubated: bool
    is_cracked: bool
    incubation_mode: Optional[IncubationMode] = None
    license_chance: int = Field(..., description="Licensing success percentage")
    crack_risk: int = Field(..., description="Per-cycle crack percentage once licensed")
    federation_id: Optional[str] = None


class FederationInfo(BaseModel):
    id: str
    name: str
    union_ids: list[str]
    delegates: int
    recognition: Recognition
    visibility: int
    reliability: float = Field(..., description="Expected delegates out of 2")


class DelegateRollInfo(BaseModel):
    federation_id: str
    federation_name: str
    loyalty_percent: float
    expected: int
    secured: int
    rolls: list[bool]

    model_config = {"from_attributes": True}


class ElectionInfo(BaseModel):
    expected_delegates: int
    secured_delegates: int
    threshold: int
    ending: Ending
    rolls: list[DelegateRollInfo] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class RunStateResponse(BaseModel):
    """Full run state projection plus derived selectors."""
    run_id: str
    seed: int
    rng_cursor: int
    cycle: int
    max_cycles: int
    phase: GamePhase
    resources: ResourcesInfo
    unions: list[UnionInfo] = Field(default_factory=list)
    federations: list[FederationInfo] = Field(default_factory=list)
    event_history: list[str] = Field(default_factory=list)
    current_event_id: Optional[str] = None
    unlocked_footnotes: list[str] = Field(default_factory=list)
    ending: Optional[Ending] = None
    election: Optional[ElectionInfo] = None
    unions_generated_in_cycle: bool = False
    show_tips: bool = False

    # Derived selectors
    total_delegates: int = 0
    available_union_ids: list[str] = Field(default_factory=list)
    total_maintenance_cost: int = 0
    loss_condition: Optional[LossCondition] = None

    api_version: str = "v1"


class RunSummary(BaseModel):
    run_id: str
    seed: int
    cycle: int
    phase: GamePhase
    ending: Optional[Ending] = None


# =============================================================================
# Requests
# =============================================================================

class CreateRunRequest(BaseModel):
    seed: Optional[int] = Field(None, ge=0, description="Omit for a random seed")
    show_tips: bool = False
    start: bool = Field(True, description="Move straight from menu to playing")


class ActionRequest(BaseModel):
    """
    A tagged action. Only the fields the action type uses are read.

    Examples:
        {"action_type": "generate_unions", "count": 3}
        {"action_type": "create_federation", "union_ids": ["union_0001", "union_0002"]}
        {"action_type": "choose_event", "event_id": "evt_quiet_week", "choice_id": "file_backlog"}
    """
    action_type: ActionType
    seed: Optional[int] = Field(None, ge=0)
    show_tips: bool = False
    union_id: Optional[str] = None
    union_ids: list[str] = Field(default_factory=list)
    count: Optional[int] = None
    mode: Optional[IncubationMode] = None
    success: Optional[bool] = None
    event_id: Optional[str] = None
    choice_id: Optional[str] = None

    def to_action(self) -> Action:
        return Action(
            action_type=self.action_type,
            payload=ActionPayload(
                seed=self.seed,
                show_tips=self.show_tips,
                union_id=self.union_id,
                union_ids=tuple(self.union_ids),
                count=self.count,
                mode=self.mode,
                success=self.success,
                event_id=self.event_id,
                choice_id=self.choice_id,
            ),
        )


class SaveRequest(BaseModel):
    slot: str = Field("autosave", pattern=r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")


class LoadRequest(BaseModel):
    slot: str = Field("autosave", pattern=r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")
    seed: Optional[int] = Field(None, ge=0, description="Seed for the fallback run")


# =============================================================================
# Responses
# =============================================================================

class ActionResponse(BaseModel):
    """Result of dispatching an action."""
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    changes: list[str] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)
    state: RunStateResponse


class EventChoiceInfo(BaseModel):
    id: str
    label: str
    eligible: bool
    outcome: Optional[str] = None


class EventResponse(BaseModel):
    """The active event card and its choices."""
    run_id: str
    id: str
    category: str
    headline: str
    flavor: str
    image: Optional[str] = None
    choices: list[EventChoiceInfo]


class FootnoteInfo(BaseModel):
    id: str
    title: str
    summary: str
    content: str
    era: str
    date: str
    source: Optional[str] = None

    model_config = {"from_attributes": True}


class FootnoteListResponse(BaseModel):
    footnotes: list[FootnoteInfo]
    count: int


class RunListResponse(BaseModel):
    runs: list[RunSummary]
    count: int


class DeleteRunResponse(BaseModel):
    success: bool
    run_id: str


class SaveResponse(BaseModel):
    run_id: str
    slot: str
    path: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    events_loaded: int = 0
