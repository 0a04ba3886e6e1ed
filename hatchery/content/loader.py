"""
Content Loader - Reads and validates the content files.

Content is loaded in full before a run starts:
    events.v1.json, footnotes.v1.json, nameParts.v1.json

Schema failures always abort. Referential failures (duplicate ids, dangling
unlocks) abort in production and are logged as warnings in development.
"""

from __future__ import annotations
from importlib import resources
from pathlib import Path
from typing import Any
import json
import logging

from .schemas import ContentBundle
from .validation import ContentValidationError, validate_content

logger = logging.getLogger(__name__)

EVENTS_FILE = "events.v1.json"
FOOTNOTES_FILE = "footnotes.v1.json"
NAME_PARTS_FILE = "nameParts.v1.json"


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise ContentValidationError([f"Content file not found: {path}"])
    except json.JSONDecodeError as e:
        raise ContentValidationError([f"{path.name}: invalid JSON ({e})"])


def _read_bundled_json(name: str) -> Any:
    data = resources.files("hatchery.content").joinpath("data", name).read_text(encoding="utf-8")
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise ContentValidationError([f"{name}: invalid JSON ({e})"])


def build_bundle(
    raw_events: Any,
    raw_footnotes: Any,
    raw_name_parts: Any,
    strict: bool = True,
) -> ContentBundle:
    """
    Validate raw collections into a ContentBundle.

    Raises ContentValidationError listing every violation found.
    """
    result = validate_content(raw_events, raw_footnotes, raw_name_parts)

    for warning in result.warnings:
        logger.warning("Content warning: %s", warning)

    if result.bundle is None:
        raise ContentValidationError(result.errors)

    if result.errors:
        if strict:
            raise ContentValidationError(result.errors)
        for error in result.errors:
            logger.warning("Content sanity check failed (development mode): %s", error)

    logger.info(
        "Loaded content: %d events, %d footnotes",
        len(result.bundle.events),
        len(result.bundle.footnotes),
    )
    return result.bundle


def load_content_dir(content_dir: str | Path, strict: bool = True) -> ContentBundle:
    """Load content from a directory holding the three v1 files."""
    content_dir = Path(content_dir)
    return build_bundle(
        _read_json(content_dir / EVENTS_FILE),
        _read_json(content_dir / FOOTNOTES_FILE),
        _read_json(content_dir / NAME_PARTS_FILE),
        strict=strict,
    )


def load_default_content(strict: bool = True) -> ContentBundle:
    """Load the content shipped with the package."""
    return build_bundle(
        _read_bundled_json(EVENTS_FILE),
        _read_bundled_json(FOOTNOTES_FILE),
        _read_bundled_json(NAME_PARTS_FILE),
        strict=strict,
    )


def load_content(content_dir: str | Path | None = None, strict: bool = True) -> ContentBundle:
    if content_dir:
        return load_content_dir(content_dir, strict=strict)
    return load_default_content(strict=strict)


def read_raw_content(content_dir: str | Path | None = None) -> tuple[Any, Any, Any]:
    """The three raw collections (events, footnotes, nameParts), unvalidated."""
    if content_dir:
        content_dir = Path(content_dir)
        return (
            _read_json(content_dir / EVENTS_FILE),
            _read_json(content_dir / FOOTNOTES_FILE),
            _read_json(content_dir / NAME_PARTS_FILE),
        )
    return (
        _read_bundled_json(EVENTS_FILE),
        _read_bundled_json(FOOTNOTES_FILE),
        _read_bundled_json(NAME_PARTS_FILE),
    )
