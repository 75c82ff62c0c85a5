"""
Seeded random source for formation generation.

Every generator draws from a Mulberry32 stream created from the caller's
seed, so a given (pattern, seed) pair always yields the same points.
"""

from typing import Sequence, TypeVar

T = TypeVar("T")

_MASK_32 = 0xFFFFFFFF
_GOLDEN_GAMMA = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & _MASK_32


class SeededRandom:
    """
    Mulberry32 generator over a 32-bit state.

    Calling the instance (or ``next()``) returns a float in [0, 1).
    The only state is the internal counter, so two instances built from
    the same seed produce identical sequences.
    """

    __slots__ = ("_seed", "_state")

    def __init__(self, seed: int):
        self._seed = int(seed) & _MASK_32
        self._state = self._seed

    @property
    def seed(self) -> int:
        return self._seed

    def next(self) -> float:
        self._state = (self._state + _GOLDEN_GAMMA) & _MASK_32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK_32
        return ((t ^ (t >> 14)) & _MASK_32) / _TWO_POW_32

    __call__ = next

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[int(self.next() * len(items))]


def create_seeded_random(seed: int) -> SeededRandom:
    """Create a fresh generator for ``seed``."""
    return SeededRandom(seed)


def derive_seed(seed: int, stream_name: str) -> int:
    """Derive a named sub-stream seed by XOR with the name's code-point sum."""
    return (int(seed) ^ sum(ord(ch) for ch in stream_name)) & _MASK_32
