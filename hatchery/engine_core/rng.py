"""
Seeded RNG - Mulberry32 stream with an explicit cursor.

The generator is the only source of randomness in the engine. Its whole
internal state is a single unsigned 32-bit integer (the cursor), so a run
can be saved, restored and replayed bit-for-bit:

    rng = SeededRNG(state.rng_cursor)
    roll = rng.next_int(1, 100)
    new_state = state._copy_with(rng_cursor=rng.cursor)

Nothing in the engine holds a generator between calls. Every consumer
builds one from the cursor it was given and hands the advanced cursor back.
"""

from __future__ import annotations
from typing import Sequence, TypeVar

T = TypeVar("T")

_MASK = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


class InvalidArgumentError(ValueError):
    """Raised when the RNG is asked for something impossible (empty picks, bad weights)."""


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, low 32 bits."""
    return (a * b) & _MASK


def normalize_seed(seed: int) -> int:
    """Fold any integer into the unsigned 32-bit seed space."""
    return seed & _MASK


def derive_cursor(cursor: int, offset: int) -> int:
    """Cursor for an independent sub-stream, offset from a captured cursor."""
    return (cursor + offset) & _MASK


class SeededRNG:
    """
    Mulberry32 pseudo-random generator.

    All derived operations (ints, picks, shuffles) are built on next()
    so the call sequence alone determines the output.
    """

    def __init__(self, seed: int):
        self._state = normalize_seed(seed)

    @property
    def cursor(self) -> int:
        """Current internal state; SeededRNG(rng.cursor) continues the same stream."""
        return self._state

    def next(self) -> float:
        """Next float in [0, 1)."""
        self._state = (self._state + _INCREMENT) & _MASK
        a = self._state
        t = _imul(a ^ (a >> 15), 1 | a)
        t ^= (t + _imul(t ^ (t >> 7), 61 | t)) & _MASK
        return ((t ^ (t >> 14)) & _MASK) / _TWO_POW_32

    def next_int(self, min_value: int, max_value: int) -> int:
        """Integer in [min_value, max_value] inclusive."""
        if max_value < min_value:
            raise InvalidArgumentError(
                f"Empty integer range [{min_value}, {max_value}]"
            )
        return int(self.next() * (max_value - min_value + 1)) + min_value

    def roll_d100(self) -> int:
        return self.next_int(1, 100)

    def pick(self, items: Sequence[T]) -> T:
        """Uniform pick from a non-empty sequence."""
        if len(items) == 0:
            raise InvalidArgumentError("Cannot pick from an empty sequence")
        return items[self.next_int(0, len(items) - 1)]

    def pick_n(self, items: Sequence[T], n: int) -> list[T]:
        """Pick n distinct items (full shuffle, then take the prefix)."""
        if n > len(items):
            raise InvalidArgumentError(
                f"Cannot pick {n} items from a sequence of length {len(items)}"
            )
        return self.shuffle(items)[:n]

    def weighted_pick(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Cumulative-weight pick.

        Draws r = next() * total and subtracts weights in order until the
        remainder is <= 0. The last item absorbs floating-point leftovers.
        """
        if len(items) != len(weights):
            raise InvalidArgumentError("Items and weights must have the same length")
        if len(items) == 0:
            raise InvalidArgumentError("Cannot pick from an empty sequence")

        total = sum(weights)
        roll = self.next() * total
        for item, weight in zip(items, weights):
            roll -= weight
            if roll <= 0:
                return item
        return items[-1]

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Fisher-Yates shuffle into a new list; the input is left untouched."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i)
            result[i], result[j] = result[j], result[i]
        return result


def create_rng(cursor: int) -> SeededRNG:
    """Build a generator positioned at the given cursor."""
    return SeededRNG(cursor)
