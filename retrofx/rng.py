"""Seeded xorshift128 generator used for template randomization.

Every caller owns its own ``XorShiftRandom``; there is no module-level state
besides the counter that keeps time-derived seeds distinct.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

import numpy as np

_LOGGER = logging.getLogger("retrofx.rng")

UINT32_MASK = 0xFFFFFFFF
SEED_Y = 362436069
SEED_Z = 521288629
SEED_W = 88675123
WARMUP_DRAWS = 32

_UINT32_MAX_F32 = np.float32(UINT32_MASK)
_clock_counter = itertools.count(1)

T = TypeVar("T")


def resolve_seed(value: int) -> int:
    """Return the 32-bit seed for ``value``; 0 is replaced by a clock-derived seed."""

    seed = int(value) & UINT32_MASK
    if seed != 0:
        return seed
    mixed = time.time_ns() ^ (next(_clock_counter) * 0x9E3779B9)
    seed = (mixed ^ (mixed >> 32)) & UINT32_MASK
    return seed or 1


@dataclass(slots=True)
class XorShiftRandom:
    seed: int
    x: int
    y: int
    z: int
    w: int

    @classmethod
    def seeded(cls, seed: int = 0) -> "XorShiftRandom":
        resolved = resolve_seed(seed)
        rng = cls(seed=resolved, x=resolved, y=SEED_Y, z=SEED_Z, w=SEED_W)
        for _ in range(WARMUP_DRAWS):
            rng.next_uint32()
        return rng

    def next_uint32(self) -> int:
        t = (self.x ^ (self.x << 11)) & UINT32_MASK
        self.x, self.y, self.z = self.y, self.z, self.w
        self.w = self.w ^ (self.w >> 19) ^ t ^ (t >> 8)
        return (self.w + 0x80000000) & UINT32_MASK

    def next_float(self, lo: float, hi: float) -> float:
        """Uniform draw in ``[lo, hi]``; reversed bounds are swapped.

        The mapping runs in single precision, like the sfxr ports this recipe
        comes from, so template parameters match them value for value.
        """
        if hi < lo:
            lo, hi = hi, lo
        normalized = np.float32(self.next_uint32()) / _UINT32_MAX_F32
        lo32 = np.float32(lo)
        hi32 = np.float32(hi)
        value = float(lo32 + (hi32 - lo32) * normalized)
        # float32 rounding of the bounds can push the result a hair outside them
        return min(max(value, lo), hi)

    def next_bool(self, p_true: float) -> bool:
        return self.next_float(0.0, 1.0) < p_true

    def next_choice(self, items: Sequence[T]) -> T | int:
        count = len(items)
        if count <= 0:
            _LOGGER.debug("next_choice called with an empty sequence; returning 0")
            return 0
        index = int(self.next_float(0.0, float(count)))
        return items[min(index, count - 1)]
