from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

RandomSource = Callable[[], float]

_MASK32 = 0xFFFFFFFF
_TWO_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class SeededRandomSource:
    """Deterministic Mulberry32 stream of floats in [0, 1).

    The output is a pure function of (seed, number of draws). Issued seeds are
    stored with each participant, so the bit pattern of this generator must
    never change.
    """

    INCREMENT = 0x6D2B79F5

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._state = self.seed & _MASK32
        self.draws = 0

    def next_uint32(self) -> int:
        self._state = (self._state + self.INCREMENT) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        self.draws += 1
        return (t ^ (t >> 14)) & _MASK32

    def next(self) -> float:
        return self.next_uint32() / _TWO_32

    __call__ = next

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed}, draws={self.draws})"


def time_seeded_source(now_ms: Optional[int] = None) -> SeededRandomSource:
    """Non-reproducible process stream, seeded from wall-clock milliseconds."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return SeededRandomSource(now_ms)


def shuffle(items: Sequence[T], random: RandomSource) -> List[T]:
    """Fisher-Yates shuffle returning a new list.

    Consumes exactly len(items) - 1 draws, from the last index down to 1.
    """
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(random() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out
