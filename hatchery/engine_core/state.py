"""
Run State - The complete state of one run.

Design principles:
- Immutable-friendly: transitions return new state, nothing is edited in place
- Serializable: plain dataclasses, enums, tuples and dicts only
- Reproducible: the RNG lives in the state as a single integer cursor

Also hosts the derived selectors the presentation shell reads and the
probability formulas the reducer and election use.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import math
import random

from .rules import RulesConfig, DEFAULT_RULES


class GamePhase(str, Enum):
    """Run phases. `ended` is terminal until a reset."""
    MENU = "menu"
    PLAYING = "playing"
    EVENT = "event"
    ELECTION = "election"
    ENDED = "ended"


class Ending(str, Enum):
    CAPTURE = "capture"
    COLLAPSE = "collapse"
    WHISTLEBLOWER = "whistleblower"


class Archetype(str, Enum):
    """What a union really is underneath its name."""
    SHELL = "shell"
    CAPTURED = "captured"
    AUTHENTIC = "authentic"
    VOLATILE = "volatile"


class IncubationMode(str, Enum):
    PAPERWORK = "paperwork"  # clean the file: +plausibility, -loyalty
    DISCIPLINE = "discipline"  # tighten control: +loyalty, -plausibility


class Recognition(str, Enum):
    RECOGNIZED = "recognized"
    UNRECOGNIZED = "unrecognized"


# Every federation sends exactly this many delegates, whatever its members.
FEDERATION_DELEGATES = 2

# Inclusive ranges for resources and union stats
CLAMPS: dict[str, tuple[int, int]] = {
    # Resources
    "paperwork": (0, 10),
    "patronage": (0, 20),
    "legitimacy": (0, 100),
    "audit_risk": (0, 100),
    "street_heat": (0, 100),
    # Union stats
    "plausibility": (0, 100),
    "loyalty": (0, 100),
    "integrity": (0, 100),
}


def clamp(value: int, min_value: int, max_value: int) -> int:
    return max(min_value, min(max_value, value))


class LossCondition(str, Enum):
    LEGITIMACY = "legitimacy"
    AUDIT = "audit"
    STREET = "street"


@dataclass(frozen=True)
class Resources:
    """
    Run-wide resources.

    Only effects.apply_resource_effects produces new values, so every
    field stays inside its clamp range.
    """
    paperwork: int = 3
    patronage: int = 5
    legitimacy: int = 70
    audit_risk: int = 10
    street_heat: int = 5


@dataclass(frozen=True)
class UnionEntity:
    """
    A procedurally generated union ("egg").

    plausibility: how real it looks (0-100)
    loyalty: how reliably it obeys (0-100)
    integrity: how much real membership it has (0-100)
    """
    id: str
    name: str
    sector: str
    archetype: Archetype
    plausibility: int
    loyalty: int
    integrity: int
    maintenance_cost: int
    tags: tuple[str, ...] = ()
    is_licensed: bool = False
    is_incubated: bool = False
    is_cracked: bool = False
    incubation_mode: IncubationMode | None = None

    @property
    def is_shell(self) -> bool:
        return self.archetype == Archetype.SHELL

    def _copy_with(self, **kwargs) -> UnionEntity:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class FederationEntity:
    """
    A bundle of licensed unions.

    delegates is fixed at creation and never depends on the members.
    """
    id: str
    name: str
    union_ids: tuple[str, ...]
    delegates: int = FEDERATION_DELEGATES
    recognition: Recognition = Recognition.RECOGNIZED
    visibility: int = 50

    @property
    def is_recognized(self) -> bool:
        return self.recognition == Recognition.RECOGNIZED


@dataclass(frozen=True)
class DelegateRoll:
    """Election outcome for a single federation."""
    federation_id: str
    federation_name: str
    loyalty_percent: float
    expected: int
    secured: int
    rolls: tuple[bool, ...]


@dataclass(frozen=True)
class ElectionResult:
    """Final tally: nominal delegates versus the ones that actually showed up."""
    expected_delegates: int
    secured_delegates: int
    threshold: int
    ending: Ending
    rolls: tuple[DelegateRoll, ...] = ()


@dataclass(frozen=True)
class RunState:
    """
    Complete run state at a point in time.

    This is the canonical state the reducer operates on.
    All state changes go through the reducer.
    """
    seed: int
    rng_cursor: int
    cycle: int = 1
    max_cycles: int = 5
    phase: GamePhase = GamePhase.MENU
    resources: Resources = field(default_factory=Resources)

    # Entities keyed by id (dict order is the generation order)
    unions: dict[str, UnionEntity] = field(default_factory=dict)
    federations: dict[str, FederationEntity] = field(default_factory=dict)

    # Events
    event_history: tuple[str, ...] = ()
    current_event_id: str | None = None
    unlocked_footnotes: tuple[str, ...] = ()

    # Outcome
    ending: Ending | None = None
    election: ElectionResult | None = None

    # Per-cycle / bookkeeping
    unions_generated_in_cycle: bool = False
    show_tips: bool = False
    next_entity_serial: int = 1

    def _copy_with(self, **kwargs) -> RunState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def get_union(self, union_id: str) -> UnionEntity | None:
        return self.unions.get(union_id)

    def with_union(self, union: UnionEntity) -> RunState:
        """Return new state with the union inserted or replaced."""
        new_unions = dict(self.unions)
        new_unions[union.id] = union
        return self._copy_with(unions=new_unions)

    def without_union(self, union_id: str) -> RunState:
        new_unions = {uid: u for uid, u in self.unions.items() if uid != union_id}
        return self._copy_with(unions=new_unions)

    def with_federation(self, federation: FederationEntity) -> RunState:
        new_federations = dict(self.federations)
        new_federations[federation.id] = federation
        return self._copy_with(federations=new_federations)

    @property
    def is_last_cycle(self) -> bool:
        return self.cycle >= self.max_cycles


# =============================================================================
# Initial state
# =============================================================================

def create_initial_state(
    seed: int | None = None,
    show_tips: bool = False,
    rules: RulesConfig = DEFAULT_RULES,
) -> RunState:
    """
    Fresh run in the `menu` phase.

    Without a seed one is drawn from the OS; the run is reproducible from
    that point on because the seed is stored on the state.
    """
    if seed is None:
        seed = random.SystemRandom().randrange(0, 2147483647)
    seed = seed & 0xFFFFFFFF

    return RunState(
        seed=seed,
        rng_cursor=seed,
        cycle=1,
        max_cycles=rules.max_cycles,
        phase=GamePhase.MENU,
        resources=Resources(
            paperwork=clamp(rules.starting_paperwork, *CLAMPS["paperwork"]),
            patronage=clamp(rules.starting_patronage, *CLAMPS["patronage"]),
            legitimacy=clamp(rules.starting_legitimacy, *CLAMPS["legitimacy"]),
            audit_risk=clamp(rules.starting_audit_risk, *CLAMPS["audit_risk"]),
            street_heat=clamp(rules.starting_street_heat, *CLAMPS["street_heat"]),
        ),
        show_tips=show_tips,
    )


# =============================================================================
# Selectors
# =============================================================================

def get_total_delegates(state: RunState) -> int:
    """Nominal delegates from all recognized federations."""
    return sum(f.delegates for f in state.federations.values() if f.is_recognized)


def get_federated_union_ids(state: RunState) -> set[str]:
    return {uid for f in state.federations.values() for uid in f.union_ids}


def find_federation_of(state: RunState, union_id: str) -> FederationEntity | None:
    for federation in state.federations.values():
        if union_id in federation.union_ids:
            return federation
    return None


def get_available_unions(state: RunState) -> list[UnionEntity]:
    """Licensed unions not yet bundled into any federation."""
    used = get_federated_union_ids(state)
    return [u for u in state.unions.values() if u.is_licensed and u.id not in used]


def get_total_maintenance_cost(state: RunState) -> int:
    return sum(u.maintenance_cost for u in state.unions.values())


def get_shell_count(state: RunState) -> int:
    return sum(1 for u in state.unions.values() if u.is_shell)


def check_lose_condition(state: RunState) -> LossCondition | None:
    """The active loss condition, if any resource is out of bounds."""
    resources = state.resources
    if resources.legitimacy <= 0:
        return LossCondition.LEGITIMACY
    if resources.audit_risk >= 100:
        return LossCondition.AUDIT
    if resources.street_heat >= 100:
        return LossCondition.STREET
    return None


# =============================================================================
# Probability formulas
# =============================================================================

def get_license_chance(union: UnionEntity) -> int:
    """Licensing success percentage, 30-95, rising with plausibility."""
    return min(95, 30 + math.floor(union.plausibility * 0.6))


def get_crack_risk(union: UnionEntity) -> int:
    """Per-cycle crack percentage, 5-40; shells are fragile."""
    return max(5, 40 - math.floor(union.integrity * 0.35))


def get_delegate_reliability(union: UnionEntity) -> float:
    """Expected delegates (out of 2) a union of this loyalty delivers."""
    return (union.loyalty / 100) * 2


def get_federation_reliability(
    federation: FederationEntity,
    unions: dict[str, UnionEntity],
) -> float:
    """
    Expected delegates (out of 2) for a federation.

    Uses the members' current loyalty, not a value cached at creation.
    """
    members = [unions[uid] for uid in federation.union_ids if uid in unions]
    if not members:
        return 0.0
    avg_loyalty = sum(u.loyalty for u in members) / len(members)
    return (avg_loyalty / 100) * 2


def get_dissolve_reward(union: UnionEntity) -> int:
    """Paperwork recovered by dissolving a union (1-4)."""
    return 1 + union.plausibility // 30


def get_reassign_reward(union: UnionEntity) -> int:
    """Patronage recovered by reassigning a union (1-5)."""
    return 1 + union.loyalty // 25
