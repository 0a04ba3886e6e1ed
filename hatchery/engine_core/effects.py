"""
Effects - Clamped resource/stat changes, upkeep and crack checks.

All resource and union-stat changes go through apply_resource_effects and
apply_union_effects, which clamp into the ranges in state.CLAMPS. The only
other place Resources are built is create_initial_state, which clamps too.

The end of a cycle is:
1. calculate_upkeep (deterministic, from the pre-upkeep state)
2. process_crack_checks (stochastic, consumes the RNG)
3. both sets of deltas applied in one clamped step
"""

from __future__ import annotations
from dataclasses import dataclass, fields

from .rng import SeededRNG
from .rules import RulesConfig, DEFAULT_RULES
from .state import (
    CLAMPS,
    Resources,
    RunState,
    UnionEntity,
    clamp,
    get_crack_risk,
    get_shell_count,
    get_total_delegates,
)


@dataclass(frozen=True)
class ResourceEffects:
    """Signed resource deltas. Missing fields mean no change."""
    paperwork: int = 0
    patronage: int = 0
    legitimacy: int = 0
    audit_risk: int = 0
    street_heat: int = 0

    def __add__(self, other: ResourceEffects) -> ResourceEffects:
        return ResourceEffects(**{
            f.name: getattr(self, f.name) + getattr(other, f.name)
            for f in fields(self)
        })

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in fields(self))


@dataclass(frozen=True)
class UnionStatEffects:
    plausibility: int = 0
    loyalty: int = 0
    integrity: int = 0


def apply_resource_effects(resources: Resources, effects: ResourceEffects) -> Resources:
    """Apply resource deltas with clamping."""
    return Resources(**{
        f.name: clamp(
            getattr(resources, f.name) + getattr(effects, f.name),
            *CLAMPS[f.name],
        )
        for f in fields(Resources)
    })


def apply_union_effects(union: UnionEntity, effects: UnionStatEffects) -> UnionEntity:
    """Apply stat deltas to a union with clamping."""
    return union._copy_with(**{
        f.name: clamp(getattr(union, f.name) + getattr(effects, f.name), *CLAMPS[f.name])
        for f in fields(UnionStatEffects)
    })


# =============================================================================
# Upkeep
# =============================================================================

def calculate_upkeep(state: RunState, rules: RulesConfig = DEFAULT_RULES) -> ResourceEffects:
    """
    End-of-cycle deltas. Pure function of the state.

    - audit risk: +1 per 5 unions, +1 per federation, +1 per shell
    - paperwork: refills to the target (delta-to-target)
    - patronage: base income + income per recognized delegate
    - street heat: decays while positive
    - legitimacy: decays by the number of shells above the threshold
    """
    union_count = len(state.unions)
    federation_count = len(state.federations)
    shell_count = get_shell_count(state)

    audit_increase = (
        union_count // rules.unions_per_audit_point
        + federation_count * rules.audit_risk_per_federation
        + shell_count * rules.audit_risk_per_shell
    )

    paperwork_refill = rules.paperwork_refill_target - state.resources.paperwork

    patronage_income = (
        rules.patronage_base_income
        + get_total_delegates(state) * rules.patronage_per_delegate
    )

    street_heat_decay = -rules.street_heat_decay if state.resources.street_heat > 0 else 0

    excess_shells = shell_count - rules.shell_legitimacy_threshold
    legitimacy_decay = -excess_shells if excess_shells > 0 else 0

    return ResourceEffects(
        paperwork=paperwork_refill,
        patronage=patronage_income,
        legitimacy=legitimacy_decay,
        audit_risk=audit_increase,
        street_heat=street_heat_decay,
    )


# =============================================================================
# Crack checks
# =============================================================================

@dataclass(frozen=True)
class CrackReport:
    """Outcome of one round of crack checks."""
    unions: dict[str, UnionEntity]
    penalties: ResourceEffects
    cracked_ids: tuple[str, ...]
    rng_cursor: int


def process_crack_checks(
    state: RunState,
    rules: RulesConfig = DEFAULT_RULES,
) -> CrackReport:
    """
    Roll every licensed, uncracked union against its crack risk.

    A cracked union loses its license for good. Unions are rolled in
    collection order so the RNG sequence is stable.
    """
    rng = SeededRNG(state.rng_cursor)
    unions = dict(state.unions)
    cracked: list[str] = []

    for union_id, union in state.unions.items():
        if union.is_cracked or not union.is_licensed:
            continue

        roll = rng.roll_d100()
        if roll <= get_crack_risk(union):
            unions[union_id] = union._copy_with(is_cracked=True, is_licensed=False)
            cracked.append(union_id)

    penalties = ResourceEffects(
        legitimacy=-rules.crack_legitimacy_penalty * len(cracked),
        audit_risk=rules.crack_audit_penalty * len(cracked),
    )
    return CrackReport(
        unions=unions,
        penalties=penalties,
        cracked_ids=tuple(cracked),
        rng_cursor=rng.cursor,
    )


def apply_cycle_end(state: RunState, rules: RulesConfig = DEFAULT_RULES) -> RunState:
    """Apply upkeep and crack checks, then open the next cycle."""
    upkeep = calculate_upkeep(state, rules)
    report = process_crack_checks(state, rules)

    return state._copy_with(
        unions=report.unions,
        resources=apply_resource_effects(state.resources, upkeep + report.penalties),
        rng_cursor=report.rng_cursor,
        cycle=state.cycle + 1,
        unions_generated_in_cycle=False,
    )
