"""
Per-kind movement rules for projectiles and beams.

Every rule takes the throttle `scale` (0.35 while the slow buff runs,
1.0 otherwise) and applies it to position integration for all kinds.
Rules mutate the entity in place and report whether it survives the tick,
plus any children it spawned (splitters).
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Tuple

from .config import BEAM_CONFIG, PROJECTILE_CONFIG
from .collision import outside
from .entities import Beam, Projectile, ProjectileKind
from .utils import unit_towards
from .viewport import Viewport


SPLIT_COLOR = "#ffbf69"


class Advance(NamedTuple):
    alive: bool
    spawned: List[Projectile]


def slow_scale(slow_active: bool) -> float:
    return PROJECTILE_CONFIG["slow_factor"] if slow_active else 1.0


def _bolt(p: Projectile, dt: float, scale: float) -> Advance:
    p.x += p.vx * dt * scale
    p.y += p.vy * dt * scale
    return Advance(True, [])


def _zigzag(p: Projectile, dt: float, scale: float) -> Advance:
    z = p.payload
    z.phase += z.frequency * dt * scale
    s = math.sin(z.phase)
    offset = (s - z.prev_sin) * z.amplitude
    z.prev_sin = s
    p.x += p.vx * dt * scale + z.perp_x * offset
    p.y += p.vy * dt * scale + z.perp_y * offset
    return Advance(True, [])


def _seeker(p: Projectile, dt: float, scale: float, target: Tuple[float, float]) -> Advance:
    s = p.payload
    tx, ty = unit_towards(p.x, p.y, target[0], target[1])
    p.vx += tx * s.accel * dt * scale
    p.vy += ty * s.accel * dt * scale

    sp = math.hypot(p.vx, p.vy) or 1.0
    cap = s.max_speed * scale
    if sp > cap:
        p.vx = p.vx / sp * cap
        p.vy = p.vy / sp * cap

    p.x += p.vx * dt * scale
    p.y += p.vy * dt * scale
    return Advance(True, [])


def _bouncer(p: Projectile, dt: float, scale: float, view: Viewport) -> Advance:
    b = p.payload
    b.ttl -= dt
    if b.ttl <= 0:
        return Advance(False, [])

    p.x += p.vx * dt * scale
    p.y += p.vy * dt * scale

    r = p.radius
    bounced = False
    if p.x - r < 0:
        p.x = r
        p.vx = abs(p.vx)
        bounced = True
    if p.x + r > view.width:
        p.x = view.width - r
        p.vx = -abs(p.vx)
        bounced = True
    if p.y - r < 0:
        p.y = r
        p.vy = abs(p.vy)
        bounced = True
    if p.y + r > view.height:
        p.y = view.height - r
        p.vy = -abs(p.vy)
        bounced = True

    if bounced:
        b.bounces -= 1
        if b.bounces < 0:
            return Advance(False, [])
    return Advance(True, [])


def split_children(p: Projectile, world_scale: float) -> List[Projectile]:
    """Two bolts fanned +/- spread around the splitter's heading"""
    heading = math.atan2(p.vy, p.vx)
    speed = math.hypot(p.vx, p.vy) * PROJECTILE_CONFIG["split_speed_factor"]
    radius = PROJECTILE_CONFIG["radius"] * world_scale
    children = []
    for ang in (heading + p.payload.spread, heading - p.payload.spread):
        children.append(Projectile(
            kind=ProjectileKind.BOLT,
            x=p.x, y=p.y,
            vx=math.cos(ang) * speed,
            vy=math.sin(ang) * speed,
            radius=radius,
            color=SPLIT_COLOR,
        ))
    return children


def _splitter(p: Projectile, dt: float, scale: float, world_scale: float) -> Advance:
    s = p.payload
    s.elapsed += dt
    p.x += p.vx * dt * scale
    p.y += p.vy * dt * scale
    if s.elapsed >= s.split_at:
        return Advance(False, split_children(p, world_scale))
    return Advance(True, [])


def advance_projectile(
    p: Projectile,
    dt: float,
    scale: float,
    target: Tuple[float, float],
    view: Viewport,
) -> Advance:
    """Move one projectile by its kind's rule"""
    p.last_x, p.last_y = p.x, p.y

    if p.kind is ProjectileKind.BOLT:
        return _bolt(p, dt, scale)
    elif p.kind is ProjectileKind.ZIGZAG:
        return _zigzag(p, dt, scale)
    elif p.kind is ProjectileKind.SEEKER:
        return _seeker(p, dt, scale, target)
    elif p.kind is ProjectileKind.BOUNCER:
        return _bouncer(p, dt, scale, view)
    elif p.kind is ProjectileKind.SPLITTER:
        return _splitter(p, dt, scale, view.world_scale)
    raise ValueError(f"Unknown projectile kind: {p.kind!r}")


def projectile_out_of_bounds(p: Projectile, view: Viewport) -> bool:
    """Bouncers never leave; everything else despawns past the margin"""
    if p.kind is ProjectileKind.BOUNCER:
        return False
    m = PROJECTILE_CONFIG["despawn_margin"]
    return outside(p.x, p.y, view.width, view.height, m)


def advance_beam(bm: Beam, dt: float, scale: float) -> None:
    bm.x += bm.vx * dt * scale
    bm.y += bm.vy * dt * scale


def beam_offscreen(bm: Beam, view: Viewport) -> bool:
    off = BEAM_CONFIG["despawn_margin"]
    if bm.vertical:
        return bm.x < -bm.w - off or bm.x > view.width + bm.w + off
    return bm.y < -bm.h - off or bm.y > view.height + bm.h + off
