# src/estate_intel/analysis/tiers.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def round_half_up(x: float) -> int:
    """Round to the nearest integer, .5 going up (Python's round() is banker's)."""
    return int(math.floor(x + 0.5))


def clamp_score(x: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, x))


@dataclass(frozen=True)
class TierCurve:
    """
    Piecewise-linear score curve.

    `points` are (breakpoint, score) pairs sorted by breakpoint. Between two
    breakpoints the score is interpolated linearly; at or before the first
    breakpoint it is the first score. Past the last breakpoint the score keeps
    moving by `tail_slope` points per unit (negative = decay, 0 = flat).

    The result is always clamped to [0, 100] and rounded half-up.
    """
    points: tuple[tuple[float, float], ...]
    tail_slope: float = 0.0

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError("TierCurve needs at least two breakpoints")
        xs = [x for x, _ in self.points]
        if xs != sorted(xs) or len(set(xs)) != len(xs):
            raise ValueError("TierCurve breakpoints must be strictly increasing")

    @classmethod
    def from_pairs(cls, pairs: Sequence[tuple[float, float]], tail_slope: float = 0.0) -> "TierCurve":
        return cls(points=tuple((float(x), float(y)) for x, y in pairs), tail_slope=float(tail_slope))

    def raw(self, x: float) -> float:
        first_x, first_y = self.points[0]
        if x <= first_x:
            return first_y

        for (x0, y0), (x1, y1) in zip(self.points, self.points[1:]):
            if x <= x1:
                ratio = (x - x0) / (x1 - x0)
                return y0 + ratio * (y1 - y0)

        last_x, last_y = self.points[-1]
        return last_y + (x - last_x) * self.tail_slope

    def score(self, x: float) -> int:
        return round_half_up(clamp_score(self.raw(x)))


def step_score(x: float, steps: Sequence[tuple[float, int]], otherwise: int, *, ascending: bool = True) -> int:
    """
    Coarse step lookup.

    ascending=True:  first (limit, score) with x <= limit wins.
    ascending=False: first (limit, score) with x >= limit wins.
    """
    for limit, s in steps:
        if (x <= limit) if ascending else (x >= limit):
            return s
    return otherwise
