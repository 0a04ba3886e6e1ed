"""
Engine Core - Deterministic run state management.

The engine is the runtime that:
1. Holds the RunState (resources, unions, federations, phase)
2. Draws all randomness from a seeded, serializable RNG cursor
3. Applies actions via the reducer
4. Runs upkeep, crack checks and the final election
"""

from .rng import SeededRNG, InvalidArgumentError, create_rng, derive_cursor
from .rules import ActionCost, RulesConfig, DEFAULT_RULES
from .state import (
    Archetype,
    ElectionResult,
    Ending,
    FederationEntity,
    GamePhase,
    IncubationMode,
    LossCondition,
    Recognition,
    Resources,
    RunState,
    UnionEntity,
    check_lose_condition,
    create_initial_state,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action, reduce

__all__ = [
    "SeededRNG",
    "InvalidArgumentError",
    "create_rng",
    "derive_cursor",
    "ActionCost",
    "RulesConfig",
    "DEFAULT_RULES",
    "Archetype",
    "ElectionResult",
    "Ending",
    "FederationEntity",
    "GamePhase",
    "IncubationMode",
    "LossCondition",
    "Recognition",
    "Resources",
    "RunState",
    "UnionEntity",
    "check_lose_condition",
    "create_initial_state",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "reduce",
]
