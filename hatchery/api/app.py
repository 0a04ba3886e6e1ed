"""
FastAPI Application - REST API for a presentation shell.

Endpoints:
    GET    /api/v1/health               Service health
    GET    /api/v1/footnotes            Footnote cards (optionally a run's unlocked set)
    POST   /api/v1/runs                 Create a run
    GET    /api/v1/runs                 List live runs
    GET    /api/v1/runs/{id}            Run state and selectors
    DELETE /api/v1/runs/{id}            Drop a run
    POST   /api/v1/runs/{id}/actions    Dispatch an action through the reducer
    GET    /api/v1/runs/{id}/event      The active event card
    POST   /api/v1/runs/{id}/save       Save a run to a slot
    POST   /api/v1/runs/load            Load a slot into a new run

All request and response bodies are JSON with explicit Pydantic schemas.
A rejected action is a 409 whose body still carries the unchanged state.
"""

from typing import Optional, Union
import logging

from .. import __version__
from ..config import load_settings

logger = logging.getLogger(__name__)

_STATUS_FOR_CODE = {
    "RUN_NOT_FOUND": 404,
    "ILLEGAL_ACTION": 409,
    "NO_ELIGIBLE_EVENT": 409,
    "VALIDATION_ERROR": 422,
}


def create_app(service=None, settings=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body, Query, Request
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        ActionRequest,
        ActionResponse,
        CreateRunRequest,
        DeleteRunResponse,
        ErrorCode,
        ErrorResponse,
        EventResponse,
        FootnoteListResponse,
        HealthResponse,
        LoadRequest,
        RunListResponse,
        RunStateResponse,
        SaveRequest,
        SaveResponse,
    )

    settings = settings or load_settings()

    app = FastAPI(
        title="Hatchery Engine API",
        description="""
Deterministic union-federation simulation engine.

## Flow

1. `POST /runs` to start a run (seeded or random)
2. `POST /runs/{id}/actions` with union/federation actions
3. `POST /runs/{id}/actions` with `draw_event`, then `choose_event` to close the cycle
4. After the last cycle, `resolve_election`

## Error Codes

| Code | Description |
|------|-------------|
| `RUN_NOT_FOUND` | Run does not exist |
| `ILLEGAL_ACTION` | Action rejected, state unchanged |
| `NO_ELIGIBLE_EVENT` | No event can be drawn / none active |
| `VALIDATION_ERROR` | Request body is invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    if service is None:
        from ..content.loader import load_content
        from ..persistence.store import SaveStore
        from ..session.manager import SessionManager

        content = load_content(settings.content_dir, strict=settings.strict_content)
        service = APIService(
            session_manager=SessionManager(content, store=SaveStore(settings.save_dir)),
        )
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        if status_code is None:
            status_code = _STATUS_FOR_CODE.get(error_code.value, 400)
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_from(response: ErrorResponse) -> JSONResponse:
        return make_error_response(response.error_code, response.error, details=response.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
            for err in exc.errors()
        ]
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            details={"errors": errors},
        )

    # =========================================================================
    # Health / content
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
    )
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            service="hatchery",
            version=__version__,
            events_loaded=len(api_service.content.events),
        )

    @app.get(
        "/api/v1/footnotes",
        response_model=FootnoteListResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Content"],
        summary="List footnote cards",
    )
    async def list_footnotes(
        run_id: Optional[str] = Query(None, description="Only footnotes this run unlocked"),
    ) -> Union[FootnoteListResponse, JSONResponse]:
        response = api_service.list_footnotes(unlocked_for=run_id)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    # =========================================================================
    # Run Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/runs",
        response_model=RunStateResponse,
        status_code=201,
        tags=["Runs"],
        summary="Create a new run",
    )
    async def create_run(
        request: Optional[CreateRunRequest] = Body(None),
    ) -> RunStateResponse:
        return api_service.create_run(request or CreateRunRequest())

    @app.get(
        "/api/v1/runs",
        response_model=RunListResponse,
        tags=["Runs"],
        summary="List live runs",
    )
    async def list_runs() -> RunListResponse:
        return api_service.list_runs()

    # Registered before /runs/{run_id} routes so "load" is not taken as an id
    @app.post(
        "/api/v1/runs/load",
        response_model=RunStateResponse,
        status_code=201,
        tags=["Saves"],
        summary="Load a save slot into a new run",
    )
    async def load_run(request: Optional[LoadRequest] = Body(None)) -> RunStateResponse:
        """An empty or unreadable slot yields a fresh run."""
        return api_service.load_run(request or LoadRequest())

    @app.get(
        "/api/v1/runs/{run_id}",
        response_model=RunStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Get run state",
    )
    async def get_run(run_id: str) -> Union[RunStateResponse, JSONResponse]:
        response = api_service.get_run(run_id)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    @app.delete(
        "/api/v1/runs/{run_id}",
        response_model=DeleteRunResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Delete a run",
    )
    async def delete_run(run_id: str) -> Union[DeleteRunResponse, JSONResponse]:
        response = api_service.delete_run(run_id)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    @app.post(
        "/api/v1/runs/{run_id}/actions",
        response_model=ActionResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ActionResponse, "description": "Action rejected, state unchanged"},
        },
        tags=["Game Loop"],
        summary="Dispatch an action",
    )
    async def dispatch_action(
        run_id: str,
        request: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        response = api_service.apply_action(run_id, request)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        if not response.success:
            return JSONResponse(status_code=409, content=response.model_dump(mode="json"))
        return response

    @app.get(
        "/api/v1/runs/{run_id}/event",
        response_model=EventResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Get the active event",
    )
    async def get_event(run_id: str) -> Union[EventResponse, JSONResponse]:
        response = api_service.get_current_event(run_id)
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    @app.post(
        "/api/v1/runs/{run_id}/save",
        response_model=SaveResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Saves"],
        summary="Save a run to a slot",
    )
    async def save_run(
        run_id: str,
        request: Optional[SaveRequest] = Body(None),
    ) -> Union[SaveResponse, JSONResponse]:
        response = api_service.save_run(run_id, request or SaveRequest())
        if isinstance(response, ErrorResponse):
            return error_from(response)
        return response

    return app
