"""Seeded pseudo-random generator (Mulberry32).

Same seed, same sequence. All randomness in a game flows through one
instance owned by the outcome controller.
"""
from typing import List, MutableSequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, low 32 bits only."""
    return (a * b) & _MASK32


class Mulberry32:
    """Deterministic generator with a single unsigned 32-bit state word."""

    def __init__(self, seed: int):
        # Out-of-range seeds wrap into the unsigned 32-bit range
        self.state = int(seed) & _MASK32

    def next(self) -> float:
        """Return a float in [0, 1)."""
        self.state = (self.state + _INCREMENT) & _MASK32
        s = self.state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = (t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    def next_int(self, n: int) -> int:
        """Return an integer in [0, n)."""
        return int(self.next() * n)

    def next_int_range(self, lo: int, hi: int) -> int:
        """Return an integer in [lo, hi] (inclusive)."""
        return lo + self.next_int(hi - lo + 1)

    def shuffle(self, seq: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher-Yates shuffle in place; returns the same sequence."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.next_int(i + 1)
            seq[i], seq[j] = seq[j], seq[i]
        return seq

    def clone(self) -> "Mulberry32":
        """Branch an independent copy sharing the current state."""
        return Mulberry32(self.state)

    def sample(self, count: int) -> List[float]:
        """Draw `count` consecutive values."""
        return [self.next() for _ in range(count)]
