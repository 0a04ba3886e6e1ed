"""
Content Validation - Schema and referential checks for content files.

Validates that:
1. Every record matches its schema (pydantic)
2. Ids are unique (events, choices within an event, footnotes)
3. Unlocks reference existing footnotes

Every violation is collected before reporting, so a content author sees
the whole list at once.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .schemas import ContentBundle, EventCard, FootnoteCard, NameParts


class ContentValidationError(Exception):
    """Raised when content validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        summary = "; ".join(errors[:5])
        if len(errors) > 5:
            summary += f"; ... ({len(errors) - 5} more)"
        super().__init__(
            f"Content validation failed with {len(errors)} error(s): {summary}"
        )


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    bundle: ContentBundle | None = None


_EVENTS_ADAPTER = TypeAdapter(list[EventCard])
_FOOTNOTES_ADAPTER = TypeAdapter(list[FootnoteCard])


def _format_pydantic_errors(source: str, exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        where = f"{source}[{location}]" if location else source
        messages.append(f"{where}: {error['msg']}")
    return messages


def parse_content(
    raw_events: Any,
    raw_footnotes: Any,
    raw_name_parts: Any,
) -> tuple[ContentBundle | None, list[str]]:
    """
    Schema-validate the three raw collections.

    Returns (bundle, errors); bundle is None if any collection failed.
    """
    errors: list[str] = []
    events = footnotes = name_parts = None

    try:
        events = _EVENTS_ADAPTER.validate_python(raw_events)
    except ValidationError as e:
        errors.extend(_format_pydantic_errors("events", e))

    try:
        footnotes = _FOOTNOTES_ADAPTER.validate_python(raw_footnotes)
    except ValidationError as e:
        errors.extend(_format_pydantic_errors("footnotes", e))

    try:
        name_parts = NameParts.model_validate(raw_name_parts)
    except ValidationError as e:
        errors.extend(_format_pydantic_errors("nameParts", e))

    if errors:
        return None, errors

    return ContentBundle(events=events, footnotes=footnotes, name_parts=name_parts), []


def run_sanity_checks(bundle: ContentBundle) -> list[str]:
    """Referential checks beyond the schema."""
    errors: list[str] = []

    event_ids: set[str] = set()
    for event in bundle.events:
        if event.id in event_ids:
            errors.append(f"Duplicate event ID: {event.id}")
        event_ids.add(event.id)

        choice_ids: set[str] = set()
        for choice in event.choices:
            if choice.id in choice_ids:
                errors.append(f"Duplicate choice ID in event {event.id}: {choice.id}")
            choice_ids.add(choice.id)

    footnote_ids: set[str] = set()
    for footnote in bundle.footnotes:
        if footnote.id in footnote_ids:
            errors.append(f"Duplicate footnote ID: {footnote.id}")
        footnote_ids.add(footnote.id)

    for event in bundle.events:
        for choice in event.choices:
            for unlock_id in choice.unlocks:
                if unlock_id not in footnote_ids:
                    errors.append(
                        f"Event {event.id} choice {choice.id} unlocks unknown footnote: {unlock_id}"
                    )

    return errors


def validate_content(
    raw_events: Any,
    raw_footnotes: Any,
    raw_name_parts: Any,
) -> ValidationResult:
    """
    Validate raw content collections.

    Schema failures and referential failures both land in errors.
    Warnings flag content that is legal but probably unintended.
    """
    bundle, errors = parse_content(raw_events, raw_footnotes, raw_name_parts)
    if bundle is None:
        return ValidationResult(valid=False, errors=errors)

    errors = run_sanity_checks(bundle)
    warnings: list[str] = []

    if not bundle.events:
        warnings.append("No events defined - every cycle will need the fallback advance")
    if not any(event.conditions is None for event in bundle.events):
        warnings.append("Every event is conditional - some states may have no eligible event")
    if not bundle.name_parts.modifiers:
        warnings.append("No name modifiers defined")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        bundle=bundle,
    )
