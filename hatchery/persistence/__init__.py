"""Persistence - versioned run snapshots and file-backed save slots."""

from .snapshot import (
    SAVE_VERSION,
    SaveFormatError,
    decode_snapshot,
    dumps_snapshot,
    encode_snapshot,
    loads_snapshot,
    migrate,
)
from .store import DEFAULT_SLOT, SaveStore

__all__ = [
    "SAVE_VERSION",
    "SaveFormatError",
    "decode_snapshot",
    "dumps_snapshot",
    "encode_snapshot",
    "loads_snapshot",
    "migrate",
    "DEFAULT_SLOT",
    "SaveStore",
]
