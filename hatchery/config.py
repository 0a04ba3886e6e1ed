"""
Process configuration from environment variables.

    HATCHERY_ENV          production (default) | development
    HATCHERY_CONTENT_DIR  directory with events/footnotes/nameParts JSON
    HATCHERY_SAVE_DIR     save slot directory (default ~/.hatchery/saves)
    ALLOWED_ORIGINS       comma-separated CORS origins for the API
    HATCHERY_LOG_LEVEL    log level for the CLI and API entry points

Gameplay balance is not configured here; see engine_core.rules.RulesConfig.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    env: str = "production"
    content_dir: Path | None = None
    save_dir: Path = field(default_factory=lambda: Path.home() / ".hatchery" / "saves")
    allowed_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def strict_content(self) -> bool:
        """Content sanity failures abort loading outside development."""
        return not self.is_development


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Read settings from the environment (or the given mapping)."""
    if environ is None:
        environ = dict(os.environ)

    env = environ.get("HATCHERY_ENV", "production").strip().lower()
    content_dir = environ.get("HATCHERY_CONTENT_DIR")
    save_dir = environ.get("HATCHERY_SAVE_DIR")
    origins = environ.get("ALLOWED_ORIGINS", "*")

    return Settings(
        env=env,
        content_dir=Path(content_dir).expanduser() if content_dir else None,
        save_dir=Path(save_dir).expanduser() if save_dir else Path.home() / ".hatchery" / "saves",
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        log_level=environ.get("HATCHERY_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
