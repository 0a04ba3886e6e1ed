"""
Content Schemas - Pydantic models for event, footnote and name-table data.

Content is authored as camelCase JSON. At the load boundary it becomes
closed, frozen models (unknown keys are rejected); the engine never sees
raw dictionaries.
"""

from __future__ import annotations
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


_CONTENT_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "extra": "forbid",
    "frozen": True,
}


class EventCategory(str, Enum):
    AUDIT = "audit"
    POLITICAL = "political"
    LABOR = "labor"
    ECONOMIC = "economic"
    MEDIA = "media"
    GENERAL = "general"


class ChoiceEnding(str, Enum):
    """Endings a choice may trigger directly (outside the election math)."""
    WHISTLEBLOWER = "whistleblower"


# =============================================================================
# Events
# =============================================================================

class EventConditions(BaseModel):
    """Inclusive thresholds; every threshold present must hold."""
    paperwork_min: Optional[int] = None
    paperwork_max: Optional[int] = None
    patronage_min: Optional[int] = None
    patronage_max: Optional[int] = None
    legitimacy_min: Optional[int] = None
    legitimacy_max: Optional[int] = None
    audit_risk_min: Optional[int] = None
    audit_risk_max: Optional[int] = None
    street_heat_min: Optional[int] = None
    street_heat_max: Optional[int] = None
    cycle_min: Optional[int] = None
    cycle_max: Optional[int] = None
    federation_count_min: Optional[int] = None
    federation_count_max: Optional[int] = None
    union_count_min: Optional[int] = None
    union_count_max: Optional[int] = None

    model_config = _CONTENT_CONFIG


class EventEffects(BaseModel):
    """Resource deltas applied when a choice is taken."""
    paperwork: int = 0
    patronage: int = 0
    legitimacy: int = 0
    audit_risk: int = 0
    street_heat: int = 0

    model_config = _CONTENT_CONFIG


class EventChoice(BaseModel):
    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    conditions: Optional[EventConditions] = None
    effects: EventEffects = Field(default_factory=EventEffects)
    unlocks: list[str] = Field(default_factory=list)
    outcome: Optional[str] = Field(None, description="Flavor text shown after choosing")
    triggers_ending: Optional[ChoiceEnding] = None

    model_config = _CONTENT_CONFIG


class EventCard(BaseModel):
    id: str = Field(..., min_length=1)
    category: EventCategory
    headline: str = Field(..., min_length=1)
    flavor: str = Field(..., min_length=1)
    image: Optional[str] = None
    weight: float = Field(..., gt=0)
    conditions: Optional[EventConditions] = None
    choices: list[EventChoice] = Field(..., min_length=2, max_length=3)

    model_config = _CONTENT_CONFIG

    def get_choice(self, choice_id: str) -> EventChoice | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


# =============================================================================
# Footnotes
# =============================================================================

class FootnoteCard(BaseModel):
    """A historical footnote unlocked by event choices."""
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    era: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    source: Optional[str] = None

    model_config = _CONTENT_CONFIG


# =============================================================================
# Name tables
# =============================================================================

NamePart = Annotated[str, Field(min_length=1)]


class NameParts(BaseModel):
    """Name tables. An empty modifier means "no modifier"."""
    prefixes: list[NamePart] = Field(..., min_length=1)
    sectors: list[NamePart] = Field(..., min_length=1)
    suffixes: list[NamePart] = Field(..., min_length=1)
    modifiers: list[str] = Field(default_factory=list)

    model_config = _CONTENT_CONFIG


# =============================================================================
# Bundle
# =============================================================================

class ContentBundle(BaseModel):
    """Everything the engine needs besides the run state."""
    events: list[EventCard]
    footnotes: list[FootnoteCard]
    name_parts: NameParts

    model_config = _CONTENT_CONFIG

    def get_event(self, event_id: str) -> EventCard | None:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def get_footnote(self, footnote_id: str) -> FootnoteCard | None:
        for footnote in self.footnotes:
            if footnote.id == footnote_id:
                return footnote
        return None
