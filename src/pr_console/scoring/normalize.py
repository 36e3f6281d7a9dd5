"""Saturating scale helpers shared by the scoring dimensions."""

import math


def clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))


def log1p_norm(value: float, cap: float) -> float:
    """Map ``[0, cap]`` onto ``[0, 1]`` logarithmically; values past *cap* saturate."""
    if value <= 0:
        return 0.0
    return math.log1p(min(value, cap)) / math.log1p(cap)


def linear_norm(value: float, cap: float) -> float:
    """Map ``[0, cap]`` onto ``[0, 1]`` linearly; values past *cap* saturate."""
    if value <= 0:
        return 0.0
    return min(value, cap) / cap


def points(fraction: float, max_points: float) -> float:
    """Scale a ``[0, 1]`` fraction into ``[0, max_points]``."""
    return clamp(fraction) * max_points
