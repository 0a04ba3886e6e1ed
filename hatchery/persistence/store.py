"""
Save Store - File-backed save slots for runs.

The store:
- Keeps one JSON snapshot per named slot
- Stores on local disk (no database)
- Writes atomically (temp file + rename)
- Never lets a bad save crash the game: load_or_new falls back to a fresh run

Usage:
    store = SaveStore(save_dir="~/.hatchery/saves")
    store.save(state)                       # "autosave" slot
    state = store.load_or_new("autosave")   # fresh run if missing/corrupt
"""

from __future__ import annotations
from pathlib import Path
import logging
import os
import re

from ..engine_core.state import RunState, create_initial_state
from .snapshot import SaveFormatError, dumps_snapshot, loads_snapshot

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "autosave"

_SLOT_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")


class SaveStore:
    """File-based save slots, one `<slot>.json` per slot."""

    def __init__(self, save_dir: str | Path | None = None):
        if save_dir is None:
            save_dir = Path.home() / ".hatchery" / "saves"
        self.save_dir = Path(save_dir).expanduser()

        # Ensure save directory exists
        self.save_dir.mkdir(parents=True, exist_ok=True)

    def save(self, state: RunState, slot: str = DEFAULT_SLOT) -> Path:
        """Write the snapshot for a slot, replacing any previous one."""
        path = self._slot_path(slot)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(dumps_snapshot(state, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)
        return path

    def load(self, slot: str = DEFAULT_SLOT) -> RunState:
        """
        Load a slot.

        Raises FileNotFoundError for an empty slot and SaveFormatError for
        anything unreadable.
        """
        path = self._slot_path(slot)
        try:
            text = path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise SaveFormatError(f"Cannot read save {slot}: {exc}") from exc
        return loads_snapshot(text)

    def load_or_new(
        self,
        slot: str = DEFAULT_SLOT,
        seed: int | None = None,
    ) -> RunState:
        """Load a slot, or start a fresh run if it is missing or unreadable."""
        try:
            return self.load(slot)
        except FileNotFoundError:
            logger.debug("No save in slot %s, starting fresh", slot)
        except (SaveFormatError, ValueError) as exc:
            logger.warning("Discarding unreadable save %s: %s", slot, exc)
        return create_initial_state(seed)

    def exists(self, slot: str = DEFAULT_SLOT) -> bool:
        return self._slot_path(slot).exists()

    def delete(self, slot: str = DEFAULT_SLOT):
        self._slot_path(slot).unlink(missing_ok=True)

    def list_slots(self) -> list[str]:
        if not self.save_dir.exists():
            return []
        return sorted(f.stem for f in self.save_dir.glob("*.json"))

    def _slot_path(self, slot: str) -> Path:
        if not _SLOT_NAME.match(slot):
            raise ValueError(f"Invalid save slot name: {slot!r}")
        return self.save_dir / f"{slot}.json"
