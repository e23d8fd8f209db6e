"""
Intersection tests between the player, rockets and the hazard pools
"""

from __future__ import annotations

from .entities import Beam
from .utils import dist


def circle_collide(x1, y1, r1, x2, y2, r2) -> bool:
    """Check if two circles overlap (touching does not count)"""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    return (dx * dx + dy * dy) < (rr * rr)


def in_gap(bm: Beam, x: float, y: float) -> bool:
    """Whether a point's cross-axis coordinate sits inside the beam's safe corridor"""
    c = y if bm.vertical else x
    return bm.gap <= c <= bm.gap + bm.gap_size


def beam_hits_circle(bm: Beam, x: float, y: float, r: float) -> bool:
    """
    Circle vs the solid part of a beam.

    The gap is judged by the circle's center only; outside the gap the
    circle hits when its extent on the sweep axis overlaps the beam's
    thickness.
    """
    if in_gap(bm, x, y):
        return False
    if bm.vertical:
        return x + r > bm.x and x - r < bm.x + bm.w
    return y + r > bm.y and y - r < bm.y + bm.h


def within(x1: float, y1: float, x2: float, y2: float, radius: float) -> bool:
    """Blast-radius membership"""
    return dist(x1, y1, x2, y2) < radius


def outside(x: float, y: float, width: float, height: float, margin: float) -> bool:
    return x < -margin or x > width + margin or y < -margin or y > height + margin
