from __future__ import annotations

import logging
from typing import List, MutableSequence, Sequence, Tuple, TypeVar

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SEED_STRING = "wanderer"

_MASK32 = 0xFFFFFFFF
_UINT32_RANGE = 0x100000000


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply, returned as an unsigned value."""
    return (a * b) & _MASK32


def _code_units(text: str) -> List[int]:
    """UTF-16 code units of ``text``; astral characters hash as their surrogate pair."""
    raw = text.encode("utf-16-le", "surrogatepass")
    return [raw[i] | (raw[i + 1] << 8) for i in range(0, len(raw), 2)]


def _xmur3(text: str) -> int:
    """Hash a string into the first 32-bit output of an xmur3 mixer."""
    units = _code_units(text)
    h = (1779033703 ^ len(units)) & _MASK32
    for unit in units:
        h = _imul(h ^ unit, 3432918353)
        h = ((h << 13) | (h >> 19)) & _MASK32
    h = _imul(h ^ (h >> 16), 2246822507)
    h = _imul(h ^ (h >> 13), 3266489909)
    h ^= h >> 16
    return h & _MASK32


def normalize_seed(seed_string: str) -> Tuple[str, int]:
    """Trim the seed string (defaulting when blank) and hash it into a 32-bit state."""
    trimmed = (seed_string or "").strip() or DEFAULT_SEED_STRING
    return trimmed, _xmur3(trimmed)


class SeededRNG:
    """Deterministic mulberry32 stream derived from a seed string.

    Two instances built from the same (normalized) seed string yield identical
    sequences forever. No method consults any state other than the internal
    32-bit counter.
    """

    def __init__(self, seed_string: str) -> None:
        self.seed_string, self.seed = normalize_seed(seed_string)
        self._state = self.seed
        logger.debug("SeededRNG created for %r -> %d", self.seed_string, self.seed)

    def next(self) -> float:
        """Float in [0, 1)."""
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        r = _imul(t ^ (t >> 15), t | 1)
        r ^= (r + _imul(r ^ (r >> 7), r | 61)) & _MASK32
        return ((r ^ (r >> 14)) & _MASK32) / _UINT32_RANGE

    def next_int(self, max_exclusive: int) -> int:
        if max_exclusive <= 0:
            raise InvalidArgumentError(f"max_exclusive must be positive, got {max_exclusive}")
        return int(self.next() * max_exclusive)

    def next_range(self, minimum: float, maximum: float) -> float:
        if maximum <= minimum:
            return minimum
        return minimum + self.next() * (maximum - minimum)

    def pick(self, items: Sequence[T]) -> T:
        if len(items) == 0:
            raise InvalidArgumentError("Cannot pick from an empty sequence")
        return items[int(self.next() * len(items))]

    def shuffle_in_place(self, items: MutableSequence[T]) -> None:
        """Backward Fisher-Yates pass."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]

    def __repr__(self) -> str:
        return f"SeededRNG({self.seed_string!r}, seed={self.seed})"


def rng_from_string(seed_string: str) -> SeededRNG:
    return SeededRNG(seed_string)


__all__ = ["SeededRNG", "normalize_seed", "rng_from_string", "DEFAULT_SEED_STRING"]
