"""
API Module - Presentation shell interface.

Exposes the engine via REST API. A shell:
1. Creates a run
2. Dispatches actions and renders the returned state
3. Shows the active event and dispatches the chosen option
4. Saves and loads runs through named slots

Live runs are in-memory; only save slots touch disk.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateRunRequest,
    LoadRequest,
    SaveRequest,
    # Responses
    ActionResponse,
    EventResponse,
    FootnoteListResponse,
    RunListResponse,
    RunStateResponse,
    SaveResponse,
    ErrorResponse,
    ErrorCode,
)
from .service import APIService, state_to_response
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateRunRequest",
    "LoadRequest",
    "SaveRequest",
    # Responses
    "ActionResponse",
    "EventResponse",
    "FootnoteListResponse",
    "RunListResponse",
    "RunStateResponse",
    "SaveResponse",
    "ErrorResponse",
    "ErrorCode",
    # Service
    "APIService",
    "state_to_response",
    "create_app",
]
