"""
Election - Turns nominal delegates into secured ones.

Every recognized federation sends its fixed delegates, but each delegate
only votes the right way with probability equal to the average loyalty of
the federation's current members. The rolls use their own stream, offset
from the run cursor, so they are not correlated with gameplay rolls.
"""

from __future__ import annotations

from .rng import SeededRNG, derive_cursor
from .rules import RulesConfig, DEFAULT_RULES
from .state import (
    DelegateRoll,
    ElectionResult,
    Ending,
    RunState,
    get_federation_reliability,
)


def resolve_election(state: RunState, rules: RulesConfig = DEFAULT_RULES) -> ElectionResult:
    """
    Roll every delegate of every recognized federation.

    Does not touch state.rng_cursor.
    """
    rng = SeededRNG(derive_cursor(state.rng_cursor, rules.election_cursor_offset))
    rolls: list[DelegateRoll] = []

    for federation in state.federations.values():
        if not federation.is_recognized:
            continue

        reliability = get_federation_reliability(federation, state.unions)
        loyalty_percent = (reliability / 2) * 100

        outcomes = tuple(
            rng.roll_d100() <= loyalty_percent
            for _ in range(federation.delegates)
        )
        rolls.append(DelegateRoll(
            federation_id=federation.id,
            federation_name=federation.name,
            loyalty_percent=loyalty_percent,
            expected=federation.delegates,
            secured=sum(outcomes),
            rolls=outcomes,
        ))

    expected = sum(r.expected for r in rolls)
    secured = sum(r.secured for r in rolls)
    ending = Ending.CAPTURE if secured >= rules.delegate_threshold else Ending.COLLAPSE

    return ElectionResult(
        expected_delegates=expected,
        secured_delegates=secured,
        threshold=rules.delegate_threshold,
        ending=ending,
        rolls=tuple(rolls),
    )
