"""
Session Manager - Creates and manages live runs.

LIFECYCLE:
1. Shell creates a run -> fresh RunState, started unless asked otherwise
2. Shell dispatches actions -> reducer validates and replaces the state
3. Shell may save the run to a slot, or load a slot into a new run
4. Shell deletes the run (or it is cleaned up when stale)

PERSISTENCE RULES:
- Live runs are in-memory only
- The only persistence is explicit save slots (SaveStore)
- A run is always reconstructible from its snapshot
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import time
import uuid

from ..content.schemas import ContentBundle, EventCard
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.rules import RulesConfig, DEFAULT_RULES
from ..engine_core.state import GamePhase, RunState, create_initial_state
from ..persistence.store import DEFAULT_SLOT, SaveStore

logger = logging.getLogger(__name__)


@dataclass
class RunSession:
    """
    One live run.

    Holds the single current RunState; every accepted action replaces it.
    """
    run_id: str
    state: RunState
    created_at: float
    updated_at: float = 0.0
    actions_applied: int = 0
    last_changes: list[str] = field(default_factory=list)

    def is_active(self) -> bool:
        """Check if the run has not reached an ending."""
        return self.state.phase != GamePhase.ENDED


class RunNotFoundError(KeyError):
    """No live run with that id."""
    pass


class SessionManager:
    """
    Manages live runs.

    Responsibilities:
    - Create runs
    - Route actions through the reducer
    - Bridge runs to and from save slots
    - Clean up stale runs
    """

    def __init__(
        self,
        content: ContentBundle,
        rules: RulesConfig = DEFAULT_RULES,
        store: SaveStore | None = None,
    ):
        self.content = content
        self.rules = rules
        self.store = store
        self.reducer = Reducer(content=content, rules=rules)
        self._sessions: dict[str, RunSession] = {}

    def _register(self, state: RunState) -> RunSession:
        now = time.time()
        session = RunSession(
            run_id=str(uuid.uuid4()),
            state=state,
            created_at=now,
            updated_at=now,
        )
        self._sessions[session.run_id] = session
        return session

    def create_run(
        self,
        seed: int | None = None,
        show_tips: bool = False,
        start: bool = True,
    ) -> RunSession:
        """
        Create a new run.

        With start=True the run is moved from `menu` to `playing` at once.
        """
        state = create_initial_state(seed, show_tips=show_tips, rules=self.rules)
        if start:
            state = self.reducer.apply(
                state, Action.start_run(state.seed, show_tips=show_tips)
            ).new_state
        session = self._register(state)
        logger.info("Created run %s (seed %d)", session.run_id, state.seed)
        return session

    def get_run(self, run_id: str) -> RunSession:
        try:
            return self._sessions[run_id]
        except KeyError:
            raise RunNotFoundError(run_id) from None

    def list_runs(self) -> list[RunSession]:
        return list(self._sessions.values())

    def delete_run(self, run_id: str):
        if self._sessions.pop(run_id, None) is None:
            raise RunNotFoundError(run_id)

    def apply(self, run_id: str, action: Action) -> ActionResult:
        """Apply an action; the stored state only changes if it was legal."""
        session = self.get_run(run_id)
        result = self.reducer.apply(session.state, action)
        if result.success:
            session.state = result.new_state
            session.actions_applied += 1
            session.updated_at = time.time()
            session.last_changes = list(result.state_changes)
        return result

    def current_event(self, run_id: str) -> EventCard | None:
        state = self.get_run(run_id).state
        if state.current_event_id is None:
            return None
        return self.content.get_event(state.current_event_id)

    # =========================================================================
    # Save slots
    # =========================================================================

    def _require_store(self) -> SaveStore:
        if self.store is None:
            raise RuntimeError("No save store configured")
        return self.store

    def save_run(self, run_id: str, slot: str = DEFAULT_SLOT) -> str:
        """Snapshot a run into a slot; returns the file path."""
        session = self.get_run(run_id)
        path = self._require_store().save(session.state, slot)
        logger.info("Saved run %s to slot %s", run_id, slot)
        return str(path)

    def load_run(self, slot: str = DEFAULT_SLOT, seed: int | None = None) -> RunSession:
        """
        Load a slot into a new live run.

        An empty or unreadable slot yields a fresh run instead of an error.
        """
        state = self._require_store().load_or_new(slot, seed=seed)
        return self._register(state)

    def cleanup_stale_runs(self, max_age_seconds: int = 3600) -> int:
        """
        Drop runs that have not been touched for max_age_seconds.

        Returns the number of runs removed.
        """
        current_time = time.time()
        stale = [
            run_id for run_id, session in self._sessions.items()
            if current_time - session.updated_at > max_age_seconds
        ]
        for run_id in stale:
            del self._sessions[run_id]
        return len(stale)
