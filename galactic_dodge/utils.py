"""
Math helpers and the weighted random selector
"""

from __future__ import annotations
import math
from typing import Hashable, Iterable, Optional, Tuple, TypeVar

import numpy as np

K = TypeVar("K", bound=Hashable)


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def dist(ax: float, ay: float, bx: float, by: float) -> float:
    """Euclidean distance between two points"""
    return math.hypot(ax - bx, ay - by)


def unit_towards(fx: float, fy: float, tx: float, ty: float) -> Tuple[float, float]:
    """Unit vector from (fx, fy) to (tx, ty); coincident points divide by 1"""
    dx = tx - fx
    dy = ty - fy
    l = math.hypot(dx, dy) or 1.0
    return dx / l, dy / l


def normalize(x: float, y: float) -> Tuple[float, float]:
    """Normalize a vector to unit length; the zero vector stays zero"""
    l = math.hypot(x, y) or 1.0
    return x / l, y / l


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the random source shared by the selector and the spawner"""
    return np.random.default_rng(seed)


def weighted_choice(
    candidates: Iterable[Tuple[K, float]],
    rng: np.random.Generator,
    default: K,
) -> K:
    """
    Pick a candidate with probability proportional to its weight.

    Non-positive weights are dropped. If nothing positive remains the
    default is returned. The draw is first-fit: a uniform value in
    [0, total) is reduced by each weight in order until it is <= 0.
    """
    entries = [(k, float(w)) for k, w in candidates if w > 0]
    total = sum(w for _, w in entries)
    if total <= 0:
        return default

    r = rng.random() * total
    for k, w in entries:
        r -= w
        if r <= 0:
            return k
    # float round-off can leave a sliver of r
    return entries[-1][0]
