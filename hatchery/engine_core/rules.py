"""
Rules Config - Balance constants for a run.

Every number the reducer, upkeep and election use lives here so that
tuning (and tests) can swap values without touching the engine. The
defaults are the shipped balance.
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ActionCost:
    """Resource cost of an action (all non-negative)."""
    paperwork: int = 0
    patronage: int = 0


@dataclass(frozen=True)
class RulesConfig:
    """
    Tunable balance parameters.

    patronage_base_income and patronage_per_delegate drive the delegate
    feedback loop (more federations -> more patronage -> more federations).
    """
    # Run shape
    max_cycles: int = 5
    delegate_threshold: int = 6
    election_cursor_offset: int = 999

    # Starting resources
    starting_paperwork: int = 3
    starting_patronage: int = 5
    starting_legitimacy: int = 70
    starting_audit_risk: int = 10
    starting_street_heat: int = 5

    # Action costs
    generate_cost: ActionCost = field(default_factory=lambda: ActionCost(paperwork=1))
    license_cost: ActionCost = field(default_factory=lambda: ActionCost(paperwork=1))
    incubate_cost: ActionCost = field(default_factory=lambda: ActionCost(patronage=2))
    federation_cost: ActionCost = field(
        default_factory=lambda: ActionCost(paperwork=2, patronage=3)
    )
    default_batch_size: int = 3
    max_batch_size: int = 10

    # Action side effects
    failed_license_audit_risk: int = 3
    federation_audit_risk: int = 5
    federation_visibility: int = 50
    incubation_primary_gain: int = 15
    incubation_integrity_gain: int = 10
    incubation_trade_off: int = 10
    paperwork_incubation_street_heat: int = 2

    # Upkeep
    paperwork_refill_target: int = 6
    patronage_base_income: int = 7
    patronage_per_delegate: int = 1
    unions_per_audit_point: int = 5
    audit_risk_per_federation: int = 1
    audit_risk_per_shell: int = 1
    street_heat_decay: int = 2
    shell_legitimacy_threshold: int = 2

    # Crack penalties (per cracked union)
    crack_legitimacy_penalty: int = 2
    crack_audit_penalty: int = 2


DEFAULT_RULES = RulesConfig()
