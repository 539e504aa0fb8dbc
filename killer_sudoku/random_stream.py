# random_stream.py

from __future__ import annotations

import random
import string
from typing import List, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
GOLDEN_GAMMA = 0x6D2B79F5


def _to_int32(value: int) -> int:
    value &= MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def hash_seed(seed: str) -> int:
    """
    Fold a seed string into a signed 32-bit integer
    (h = h * 31 + code unit, over UTF-16 code units).
    """
    data = seed.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        h = _to_int32(h * 31 + int.from_bytes(data[i: i + 2], "little"))
    return h


class RandomStream:
    """
    Deterministic mulberry32 stream. The k-th draw for a given seed
    is always the same value.
    """

    def __init__(self, seed: str) -> None:
        self.seed = seed
        self._state = hash_seed(seed) & MASK32

    def random(self) -> float:
        """Next float in [0, 1)."""
        self._state = (self._state + GOLDEN_GAMMA) & MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / 4294967296

    def randint_below(self, n: int) -> int:
        assert n > 0, "Upper bound must be positive"
        return int(self.random() * n)

    def choice(self, seq: Sequence[T]) -> T:
        return seq[self.randint_below(len(seq))]

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        """
        Draw k distinct items (partial Fisher-Yates over a copy).
        """
        pool = list(seq)
        k = min(k, len(pool))
        for i in range(k):
            j = i + self.randint_below(len(pool) - i)
            pool[i], pool[j] = pool[j], pool[i]
        return pool[:k]


def random_seed(length: int = 8) -> str:
    """
    Fresh seed for a new puzzle. Not deterministic; only meant for
    picking seeds, never for generation itself.
    """
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choices(alphabet, k=length))
