"""Content - schemas, validation, loading and event gating for game content."""

from .schemas import (
    ChoiceEnding,
    ContentBundle,
    EventCard,
    EventCategory,
    EventChoice,
    EventConditions,
    EventEffects,
    FootnoteCard,
    NameParts,
)
from .validation import (
    ContentValidationError,
    ValidationResult,
    validate_content,
    run_sanity_checks,
)
from .loader import (
    build_bundle,
    load_content,
    load_content_dir,
    load_default_content,
    read_raw_content,
)
from .gate import (
    check_conditions,
    get_eligible_choices,
    get_eligible_events,
    is_event_eligible,
    select_event,
)

__all__ = [
    "ChoiceEnding",
    "ContentBundle",
    "EventCard",
    "EventCategory",
    "EventChoice",
    "EventConditions",
    "EventEffects",
    "FootnoteCard",
    "NameParts",
    "ContentValidationError",
    "ValidationResult",
    "validate_content",
    "run_sanity_checks",
    "build_bundle",
    "load_content",
    "load_content_dir",
    "load_default_content",
    "read_raw_content",
    "check_conditions",
    "get_eligible_choices",
    "get_eligible_events",
    "is_event_eligible",
    "select_event",
]
