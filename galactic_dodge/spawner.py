"""
Spawn cadence and entity factories.

`SpawnScheduler` owns the three accumulators (projectile, beam, power-up).
The factories build entities from the shared numpy Generator so a seeded
run is reproducible end to end.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

import numpy as np

from .config import (
    BEAM_CONFIG,
    POWERUP_CONFIG,
    POWERUP_WEIGHTS,
    PROJECTILE_CONFIG,
    STAGE_BURST_CONFIG,
    SURVIVAL_CONFIG,
    SURVIVAL_WEIGHTS,
)
from .entities import (
    Beam,
    BouncerState,
    Player,
    PowerUp,
    PowerUpType,
    Projectile,
    ProjectileKind,
    SeekerState,
    SplitterState,
    ZigzagState,
)
from .utils import clamp, unit_towards, weighted_choice
from .viewport import Viewport

logger = logging.getLogger("galactic_dodge.spawner")

KIND_COLORS = {
    ProjectileKind.BOLT: "#3cff4e",
    ProjectileKind.ZIGZAG: "#00e1ff",
    ProjectileKind.SEEKER: "#ff72e0",
    ProjectileKind.BOUNCER: "#ffd166",
    ProjectileKind.SPLITTER: "#ffa600",
}


# ----------------------------
# Difficulty ramp
# ----------------------------

def difficulty_ratio(elapsed: float) -> float:
    return min(1.0, elapsed / SURVIVAL_CONFIG["ramp_seconds"])


def survival_intervals(d: float) -> Tuple[float, float]:
    """(projectile interval, beam interval) for difficulty ratio d"""
    c = SURVIVAL_CONFIG
    spawn = max(c["spawn_interval_min"], c["spawn_interval_start"] - c["spawn_interval_drop"] * d)
    beam = max(c["beam_interval_min"], c["beam_interval_start"] - c["beam_interval_drop"] * d)
    return spawn, beam


def powerup_interval(elapsed: float) -> float:
    c = POWERUP_CONFIG
    return max(c["interval_min"], c["interval"] - elapsed * c["interval_decay"])


def survival_weights(elapsed: float, d: float) -> List[Tuple[ProjectileKind, float]]:
    """Kinds unlocked by `elapsed`, weighted by difficulty"""
    table = []
    for name, (unlock, base, gain) in SURVIVAL_WEIGHTS.items():
        if name == ProjectileKind.BOLT.value or elapsed > unlock:
            table.append((ProjectileKind(name), base + gain * d))
    return table


def stage_weights(weights: Mapping[str, float]) -> List[Tuple[ProjectileKind, float]]:
    return [(ProjectileKind(k), w) for k, w in weights.items()]


def survival_burst(d: float, rng: np.random.Generator) -> int:
    if d < 0.25:
        return 1
    if d < 0.6:
        return 2 if rng.random() < 0.35 else 1
    if d < 0.85:
        return 2 if rng.random() < 0.55 else 1
    return 3 if rng.random() < 0.35 else 2


def stage_burst(stage_time: float, rng: np.random.Generator) -> int:
    if stage_time < STAGE_BURST_CONFIG["warmup_seconds"]:
        return 1
    return 2 if rng.random() < STAGE_BURST_CONFIG["double_chance"] else 1


# ----------------------------
# Accumulators
# ----------------------------

@dataclass
class SpawnOrders:
    projectile: bool = False
    beam: bool = False
    powerup: bool = False


@dataclass
class SpawnScheduler:
    """Three independent accumulators; each carries its remainder after firing"""
    projectile_timer: float = 0.0
    beam_timer: float = 0.0
    powerup_timer: float = POWERUP_CONFIG["first_spawn_head_start"]
    projectile_interval: float = SURVIVAL_CONFIG["initial_spawn_interval"]
    beam_interval: float = SURVIVAL_CONFIG["initial_beam_interval"]

    def advance(self, dt: float, powerup_every: float) -> SpawnOrders:
        orders = SpawnOrders()

        self.projectile_timer += dt
        if self.projectile_timer >= self.projectile_interval:
            self.projectile_timer -= self.projectile_interval
            orders.projectile = True

        self.beam_timer += dt
        if self.beam_timer >= self.beam_interval:
            self.beam_timer -= self.beam_interval
            orders.beam = True

        self.powerup_timer += dt
        if self.powerup_timer >= powerup_every:
            self.powerup_timer -= powerup_every
            orders.powerup = True

        return orders


# ----------------------------
# Factories
# ----------------------------

def _edge_point(view: Viewport, rng: np.random.Generator) -> Tuple[float, float]:
    """Random point just outside one of the four edges"""
    margin = PROJECTILE_CONFIG["edge_margin"]
    edge = int(rng.integers(4))  # 0 top, 1 right, 2 bottom, 3 left
    if edge == 0:
        return rng.random() * view.width, -margin
    elif edge == 1:
        return view.width + margin, rng.random() * view.height
    elif edge == 2:
        return rng.random() * view.width, view.height + margin
    return -margin, rng.random() * view.height


def make_projectile(
    kind: ProjectileKind,
    player: Player,
    view: Viewport,
    d: float,
    rng: np.random.Generator,
) -> Projectile:
    """Spawn `kind` on a random edge, aimed at the player's current position"""
    ws = view.world_scale
    x, y = _edge_point(view, rng)
    ux, uy = unit_towards(x, y, player.x, player.y)
    base_speed = (100 + 170 * d + rng.random() * 20) * ws
    r = PROJECTILE_CONFIG["radius"] * ws
    color = KIND_COLORS[kind]

    if kind is ProjectileKind.BOLT:
        return Projectile(kind, x, y, ux * base_speed, uy * base_speed, r, color)

    if kind is ProjectileKind.ZIGZAG:
        speed = base_speed * 0.95
        payload = ZigzagState(
            perp_x=-uy, perp_y=ux,
            amplitude=(18 + 22 * d) * ws,
            frequency=3 + 2 * d,
        )
        return Projectile(kind, x, y, ux * speed, uy * speed, r, color, payload)

    if kind is ProjectileKind.SEEKER:
        top = (90 + 110 * d) * ws
        start = top * 0.5
        payload = SeekerState(max_speed=top, accel=(120 + 100 * d) * ws)
        return Projectile(kind, x, y, ux * start, uy * start, r, color, payload)

    if kind is ProjectileKind.BOUNCER:
        speed = base_speed * 0.85
        payload = BouncerState(bounces=2 + int(math.floor(3 * d)), ttl=6 + 3 * d)
        return Projectile(kind, x, y, ux * speed, uy * speed,
                          PROJECTILE_CONFIG["bouncer_radius"] * ws, color, payload)

    if kind is ProjectileKind.SPLITTER:
        speed = base_speed * 0.9
        payload = SplitterState(split_at=0.9 + rng.random() * 0.4, spread=0.38)
        return Projectile(kind, x, y, ux * speed, uy * speed, r, color, payload)

    raise ValueError(f"Unknown projectile kind: {kind!r}")


def make_beam(player: Player, view: Viewport, elapsed: float, rng: np.random.Generator) -> Beam:
    """A full-span beam entering from a random side with a gap near the player"""
    ws = view.world_scale
    edge = BEAM_CONFIG["gap_edge_margin"]
    # on a short playfield the gap hugs the low edge rather than going negative
    vertical = rng.random() < 0.5
    thickness = (10 + rng.random() * 20) * ws
    speed = (160 + min(240.0, elapsed * 5)) * ws
    gap_size = (120 + rng.random() * 80) * ws

    if vertical:
        from_left = rng.random() < 0.5
        gap = max(edge, min(view.height - edge - gap_size, player.y - gap_size / 2))
        return Beam(
            vertical=True,
            x=-thickness if from_left else view.width + thickness,
            y=0.0, w=thickness, h=view.height,
            vx=speed if from_left else -speed, vy=0.0,
            gap=gap, gap_size=gap_size, color="#ff3b3b",
        )

    from_top = rng.random() < 0.5
    gap = max(edge, min(view.width - edge - gap_size, player.x - gap_size / 2))
    return Beam(
        vertical=False,
        x=0.0, y=-thickness if from_top else view.height + thickness,
        w=view.width, h=thickness,
        vx=0.0, vy=speed if from_top else -speed,
        gap=gap, gap_size=gap_size, color="#ff6262",
    )


def pick_powerup_type(rng: np.random.Generator) -> PowerUpType:
    table = [(PowerUpType(k), w) for k, w in POWERUP_WEIGHTS.items()]
    return weighted_choice(table, rng, default=PowerUpType.MAGNET)


def make_powerup(view: Viewport, rng: np.random.Generator) -> PowerUp:
    c = POWERUP_CONFIG
    m = c["spawn_margin"]
    x = clamp(rng.random() * view.width, m, view.width - m)
    y = clamp(rng.random() * view.height, m, view.height - m)
    p = PowerUp(
        x=x, y=y,
        type=pick_powerup_type(rng),
        radius=c["radius"] * view.world_scale,
        ttl=c["ttl"],
        phase=rng.random() * math.pi * 2,
    )
    logger.debug(f"Power-up {p.type.value} at ({x:.0f}, {y:.0f})")
    return p


def kind_counts(projectiles: List[Projectile]) -> Dict[str, int]:
    """Pool composition by kind"""
    counts: Dict[str, int] = {}
    for p in projectiles:
        counts[p.kind.value] = counts.get(p.kind.value, 0) + 1
    return counts
