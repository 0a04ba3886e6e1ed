"""
Generator - Procedural unions and federation names.

Unions get an absurd name and stats drawn from their archetype. The
archetype ranges are built so plausibility and integrity pull in opposite
directions: shells look perfect and have nobody in them, authentic unions
have members and look messy.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from .rng import SeededRNG
from .state import Archetype, UnionEntity

if TYPE_CHECKING:
    from ..content.schemas import NameParts


@dataclass(frozen=True)
class ArchetypeProfile:
    """Inclusive stat ranges for one archetype."""
    weight: int
    plausibility: tuple[int, int]
    loyalty: tuple[int, int]
    integrity: tuple[int, int]
    maintenance_cost: tuple[int, int]
    extra_tags: tuple[str, ...] = ()


ARCHETYPE_PROFILES: dict[Archetype, ArchetypeProfile] = {
    # Paper union: looks great, no workers, free to keep
    Archetype.SHELL: ArchetypeProfile(
        weight=40,
        plausibility=(70, 95),
        loyalty=(80, 100),
        integrity=(5, 20),
        maintenance_cost=(0, 0),
        extra_tags=("compliant",),
    ),
    # Real workers, but controlled
    Archetype.CAPTURED: ArchetypeProfile(
        weight=30,
        plausibility=(50, 69),
        loyalty=(60, 79),
        integrity=(30, 50),
        maintenance_cost=(1, 1),
    ),
    # Actual worker representation - dangerous
    Archetype.AUTHENTIC: ArchetypeProfile(
        weight=20,
        plausibility=(30, 49),
        loyalty=(20, 50),
        integrity=(71, 95),
        maintenance_cost=(3, 5),
        extra_tags=("restless",),
    ),
    Archetype.VOLATILE: ArchetypeProfile(
        weight=10,
        plausibility=(20, 80),
        loyalty=(10, 40),
        integrity=(51, 70),
        maintenance_cost=(2, 4),
        extra_tags=("unpredictable",),
    ),
}

FEDERATION_PREFIXES = (
    "General",
    "Central",
    "National",
    "United",
    "Federated",
    "Allied",
    "Combined",
)

FEDERATION_SUFFIXES = (
    "Labor Coalition",
    "Workers' Federation",
    "Trade Council",
    "Syndicate Alliance",
    "Union Bloc",
)


def union_id_for(serial: int) -> str:
    return f"union_{serial:04d}"


def federation_id_for(serial: int) -> str:
    return f"fed_{serial:04d}"


def generate_union_name(rng: SeededRNG, name_parts: NameParts) -> tuple[str, str]:
    """Return (name, sector). An empty modifier leaves the name bare."""
    prefix = rng.pick(name_parts.prefixes)
    sector = rng.pick(name_parts.sectors)
    suffix = rng.pick(name_parts.suffixes)
    modifier = rng.pick(name_parts.modifiers) if name_parts.modifiers else ""

    name = f"{prefix} {sector} {suffix}"
    if modifier:
        name = f"{name} {modifier}"
    return name.strip(), sector


def roll_archetype(rng: SeededRNG) -> Archetype:
    archetypes = list(ARCHETYPE_PROFILES)
    weights = [ARCHETYPE_PROFILES[a].weight for a in archetypes]
    return rng.weighted_pick(archetypes, weights)


def generate_union(
    rng: SeededRNG,
    name_parts: NameParts,
    union_id: str,
) -> UnionEntity:
    """Generate one unlicensed, unincubated union."""
    name, sector = generate_union_name(rng, name_parts)
    archetype = roll_archetype(rng)
    profile = ARCHETYPE_PROFILES[archetype]

    plausibility = rng.next_int(*profile.plausibility)
    loyalty = rng.next_int(*profile.loyalty)
    integrity = rng.next_int(*profile.integrity)
    low_cost, high_cost = profile.maintenance_cost
    maintenance_cost = low_cost if low_cost == high_cost else rng.next_int(low_cost, high_cost)

    return UnionEntity(
        id=union_id,
        name=name,
        sector=sector,
        archetype=archetype,
        plausibility=plausibility,
        loyalty=loyalty,
        integrity=integrity,
        maintenance_cost=maintenance_cost,
        tags=(archetype.value,) + profile.extra_tags,
    )


def generate_unions(
    rng: SeededRNG,
    name_parts: NameParts,
    count: int,
    first_serial: int,
) -> list[UnionEntity]:
    return [
        generate_union(rng, name_parts, union_id_for(first_serial + i))
        for i in range(count)
    ]


def generate_federation_name(rng: SeededRNG, members: Sequence[UnionEntity]) -> str:
    """Prefix + suffix, sometimes with a member's sector spliced in."""
    prefix = rng.pick(FEDERATION_PREFIXES)
    suffix = rng.pick(FEDERATION_SUFFIXES)

    if members and rng.next() > 0.5:
        sector = rng.pick(members).sector
        return f"{prefix} {sector} {suffix}"

    return f"{prefix} {suffix}"
