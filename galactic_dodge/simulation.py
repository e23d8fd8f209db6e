"""
Simulation orchestrator
-----------------------
Owns every entity pool and timer in one `SimulationState` and advances
them once per frame in a fixed order:

    clock -> mode timer -> player input -> spawns -> projectiles -> beams
          -> power-ups -> rockets -> effects -> shield countdown

A lethal hit ends the tick immediately; later pools are left untouched.
Pools are walked back to front so entries can be deleted mid-loop.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .buffs import BuffTimers
from .collision import beam_hits_circle, circle_collide, outside, within
from .config import (
    BOSS_STARTING_AMMO,
    EFFECT_CONFIG,
    ENV_CONFIG,
    PLAYER_CONFIG,
    POWERUP_CONFIG,
    ROCKET_CONFIG,
)
from .controls import InputSnapshot
from .entities import (
    Beam,
    Effect,
    EffectKind,
    Player,
    PowerUp,
    PowerUpType,
    Projectile,
    ProjectileKind,
    Rocket,
)
from .kinematics import (
    advance_beam,
    advance_projectile,
    beam_offscreen,
    projectile_out_of_bounds,
    slow_scale,
)
from .spawner import (
    SpawnScheduler,
    difficulty_ratio,
    make_beam,
    make_powerup,
    make_projectile,
    powerup_interval,
    stage_burst,
    stage_weights,
    survival_burst,
    survival_intervals,
    survival_weights,
)
from .stages import GameState, LevelConfig, Mode, ModeMachine, RunEvent, StageEntry
from .storage import MemoryStore
from .utils import clamp, make_rng, normalize, weighted_choice
from .viewport import Viewport

logger = logging.getLogger("galactic_dodge.simulation")

SPARK_COLOR = "rgba(255,200,150,1)"


def make_player(view: Viewport) -> Player:
    ws = view.world_scale
    return Player(
        x=view.width / 2,
        y=view.height / 2,
        radius=PLAYER_CONFIG["radius"] * ws,
        speed=PLAYER_CONFIG["speed"] * ws,
    )


@dataclass
class SimulationState:
    """Everything a run mutates; `initial` is the only way to get a fresh one"""
    player: Player
    projectiles: List[Projectile] = field(default_factory=list)
    beams: List[Beam] = field(default_factory=list)
    powerups: List[PowerUp] = field(default_factory=list)
    rockets: List[Rocket] = field(default_factory=list)
    effects: List[Effect] = field(default_factory=list)
    scheduler: SpawnScheduler = field(default_factory=SpawnScheduler)
    buffs: BuffTimers = field(default_factory=BuffTimers)
    clock: float = 0.0        # gameplay clock, drives buff expiry
    elapsed: float = 0.0      # survival score
    stage_timer: float = 0.0
    ammo: int = 0
    shield_left: Optional[float] = None

    @classmethod
    def initial(cls, view: Viewport) -> "SimulationState":
        return cls(player=make_player(view))


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of what the renderer and HUD need"""
    state: str
    mode: str
    level: str
    paused: bool
    player: Player
    projectiles: Tuple[Projectile, ...]
    beams: Tuple[Beam, ...]
    powerups: Tuple[PowerUp, ...]
    rockets: Tuple[Rocket, ...]
    effects: Tuple[Effect, ...]
    time_text: str
    best_text: str
    ammo: int
    shield_text: str
    terminal: Optional[RunEvent]


class Simulation:
    """
    Arcade dodge simulation.

    Args:
        viewport: playfield size; sizes and speeds follow its world scale
        store: key-value persistence (best time, unlocked levels)
        rng: random source for every spawn decision
        levels: stage table override
    """

    def __init__(
        self,
        viewport: Viewport,
        store=None,
        rng: Optional[np.random.Generator] = None,
        levels: Optional[List[LevelConfig]] = None,
    ):
        self.view = viewport
        self.store = store if store is not None else MemoryStore()
        self.rng = rng if rng is not None else make_rng()
        self.machine = ModeMachine(self.store, levels)
        self.state = SimulationState.initial(viewport)
        self.terminal: Optional[RunEvent] = None
        self._run_events: List[RunEvent] = []
        # per-tick counters, read by the gym env for reward shaping
        self.tick_stats: Dict[str, float] = {}
        self._clear_stats()

    # ----------------------------
    # Run control
    # ----------------------------

    def reset(self) -> SimulationState:
        self.state = SimulationState.initial(self.view)
        self.terminal = None
        return self.state

    def resize(self, viewport: Viewport) -> None:
        """Rescale the player for a new playfield and keep it inside"""
        self.view = viewport
        ws = viewport.world_scale
        p = self.state.player
        p.radius = PLAYER_CONFIG["radius"] * ws
        p.speed = PLAYER_CONFIG["speed"] * ws
        p.x = clamp(p.x, p.radius, viewport.width - p.radius)
        p.y = clamp(p.y, p.radius, viewport.height - p.radius)

    def start_survival(self) -> None:
        self.machine.begin(Mode.SURVIVAL)
        self.reset()

    def start_stages(self, level_index: int = 0) -> None:
        self.machine.begin(Mode.STAGES, level_index)
        self.reset()
        self._apply_level(self.machine.level)

    def start_game(self) -> None:
        """Restart whichever mode was chosen last"""
        if self.machine.last_mode is Mode.STAGES:
            self.start_stages(self.machine.level_index)
        else:
            self.start_survival()

    def open_stage_select(self) -> List[StageEntry]:
        return self.machine.open_stage_select()

    def retry_level(self) -> None:
        self.start_stages(self.machine.level_index)

    def next_level(self) -> None:
        if self.machine.state is not GameState.LEVEL_CLEAR or not self.machine.has_next:
            raise ValueError("No next level to start")
        self.start_stages(self.machine.level_index + 1)

    def toggle_pause(self) -> bool:
        return self.machine.toggle_pause()

    def _apply_level(self, level: LevelConfig) -> None:
        s = self.state
        s.scheduler.projectile_interval = level.spawn_interval
        s.scheduler.beam_interval = level.beam_interval
        s.stage_timer = 0.0
        if level.boss:
            s.ammo = max(s.ammo, BOSS_STARTING_AMMO)

    # ----------------------------
    # Player actions
    # ----------------------------

    def fire_rocket(self) -> bool:
        """Launch along the facing angle; silently does nothing without ammo"""
        s = self.state
        if s.ammo <= 0:
            return False
        s.ammo -= 1
        ws = self.view.world_scale
        speed = ROCKET_CONFIG["speed"] * ws
        ang = s.player.angle
        s.rockets.append(Rocket(
            x=s.player.x, y=s.player.y,
            vx=math.cos(ang) * speed, vy=math.sin(ang) * speed,
            radius=ROCKET_CONFIG["radius"] * ws,
            ttl=ROCKET_CONFIG["ttl"],
        ))
        return True

    def tick(self, dt: float, inp: Optional[InputSnapshot] = None) -> List[RunEvent]:
        """
        One animation frame: apply discrete triggers, then step.

        Returns the terminal events raised during this frame.
        """
        if not math.isfinite(dt):
            raise ValueError(f"Frame delta must be finite, got {dt!r}")
        dt = clamp(dt, 0.0, ENV_CONFIG["max_dt"])
        inp = inp or InputSnapshot()

        started = False
        if inp.start and self.machine.state in (
            GameState.MENU, GameState.GAME_OVER, GameState.STAGE_FAILED
        ):
            self.start_game()
            started = True
        if inp.pause:
            self.toggle_pause()
        elif inp.fire and not started and self.machine.playing and not self.machine.paused:
            self.fire_rocket()

        return self.step(dt, inp.move_x, inp.move_y)

    # ----------------------------
    # Core step
    # ----------------------------

    def step(self, dt: float, ix: float = 0.0, iy: float = 0.0) -> List[RunEvent]:
        """Advance one tick without the frame clamp; `tick` is the per-frame entry point"""
        if not math.isfinite(dt):
            raise ValueError(f"Step delta must be finite, got {dt!r}")
        self._run_events = []
        self._clear_stats()
        if not self.machine.playing or self.machine.paused:
            return self._run_events

        s = self.state
        s.clock += dt

        if not self._advance_mode_timer(dt):
            return self._run_events
        self._move_player(dt, ix, iy)
        self._spawn(dt)
        if not self._update_projectiles(dt):
            return self._run_events
        if not self._update_beams(dt):
            return self._run_events
        self._update_powerups(dt)
        self._update_rockets(dt)
        self._update_effects(dt)

        if s.buffs.has_shield(s.clock):
            s.shield_left = s.buffs.remaining("shield", s.clock)
        else:
            s.shield_left = None
        return self._run_events

    def _advance_mode_timer(self, dt: float) -> bool:
        s = self.state
        if self.machine.mode is Mode.SURVIVAL:
            s.elapsed += dt
            spawn, beam = survival_intervals(difficulty_ratio(s.elapsed))
            s.scheduler.projectile_interval = spawn
            s.scheduler.beam_interval = beam
            return True

        level = self.machine.level
        s.stage_timer += dt
        s.scheduler.projectile_interval = level.spawn_interval
        s.scheduler.beam_interval = level.beam_interval
        if s.stage_timer >= level.duration:
            self._finish(self.machine.clear())
            return False
        return True

    def _move_player(self, dt: float, ix: float, iy: float) -> None:
        p = self.state.player
        if not (ix or iy):
            return
        ix, iy = normalize(ix, iy)
        p.angle = math.atan2(iy, ix)
        p.x = clamp(p.x + ix * p.speed * dt, p.radius, self.view.width - p.radius)
        p.y = clamp(p.y + iy * p.speed * dt, p.radius, self.view.height - p.radius)

    def _spawn(self, dt: float) -> None:
        s = self.state
        orders = s.scheduler.advance(dt, powerup_interval(s.elapsed))
        d = difficulty_ratio(s.elapsed)
        level = self.machine.level

        if orders.projectile and not (level is not None and level.boss):
            if level is None:
                burst = survival_burst(d, self.rng)
                table = survival_weights(s.elapsed, d)
            else:
                burst = stage_burst(s.stage_timer, self.rng)
                table = stage_weights(level.weights)
            for _ in range(burst):
                kind = weighted_choice(table, self.rng, default=ProjectileKind.BOLT)
                s.projectiles.append(make_projectile(kind, s.player, self.view, d, self.rng))
            self.tick_stats["spawned"] += burst
            logger.debug(f"Spawned {burst} projectile(s), pool={len(s.projectiles)}")

        if orders.beam:
            s.beams.append(make_beam(s.player, self.view, s.elapsed, self.rng))
        if orders.powerup:
            s.powerups.append(make_powerup(self.view, self.rng))

    def _update_projectiles(self, dt: float) -> bool:
        s = self.state
        player = s.player
        k = slow_scale(s.buffs.has_slow(s.clock))
        shielded = s.buffs.has_shield(s.clock)
        pool = s.projectiles

        for i in range(len(pool) - 1, -1, -1):
            b = pool[i]
            alive, spawned = advance_projectile(b, dt, k, (player.x, player.y), self.view)
            if spawned:
                pool.extend(spawned)
                s.effects.append(Effect(
                    EffectKind.BURST, b.x, b.y,
                    ttl=EFFECT_CONFIG["split_burst_ttl"],
                    radius=14 * self.view.world_scale,
                ))
            if not alive or projectile_out_of_bounds(b, self.view):
                del pool[i]
                continue
            if not shielded and circle_collide(b.x, b.y, b.radius, player.x, player.y, player.radius):
                self._end_run()
                return False
        return True

    def _update_beams(self, dt: float) -> bool:
        s = self.state
        player = s.player
        k = slow_scale(s.buffs.has_slow(s.clock))
        shielded = s.buffs.has_shield(s.clock)

        for i in range(len(s.beams) - 1, -1, -1):
            bm = s.beams[i]
            advance_beam(bm, dt, k)
            if beam_offscreen(bm, self.view):
                del s.beams[i]
                continue
            if not shielded and beam_hits_circle(bm, player.x, player.y, player.radius):
                self._end_run()
                return False
        return True

    def _update_powerups(self, dt: float) -> None:
        s = self.state
        player = s.player
        magnet = s.buffs.has_magnet(s.clock)
        bonus = POWERUP_CONFIG["magnet_bonus_radius"] if magnet else 0.0

        for i in range(len(s.powerups) - 1, -1, -1):
            p = s.powerups[i]
            p.phase += dt * POWERUP_CONFIG["phase_speed"]
            p.ttl -= dt
            if p.ttl <= 0:
                del s.powerups[i]
                continue
            if magnet:
                dx = player.x - p.x
                dy = player.y - p.y
                d = math.hypot(dx, dy) or 1.0
                pull = POWERUP_CONFIG["magnet_pull"] * dt / d
                p.x += dx * pull
                p.y += dy * pull
            if circle_collide(p.x, p.y, p.radius + bonus, player.x, player.y, player.radius):
                self.collect_powerup(p)
                del s.powerups[i]

    def collect_powerup(self, p: PowerUp) -> None:
        s = self.state
        if p.type in (PowerUpType.SHIELD, PowerUpType.SLOW, PowerUpType.MAGNET):
            s.buffs.activate(p.type.value, s.clock)
        elif p.type is PowerUpType.BAZOOKA:
            s.ammo += POWERUP_CONFIG["bazooka_ammo"]
        elif p.type is PowerUpType.BOMB:
            s.effects.append(Effect(
                EffectKind.BOOM, s.player.x, s.player.y,
                ttl=EFFECT_CONFIG["bomb_ttl"],
                radius=max(self.view.width, self.view.height),
            ))
            s.projectiles.clear()
            s.beams.clear()
        s.effects.append(Effect(
            EffectKind.BURST, p.x, p.y,
            ttl=EFFECT_CONFIG["pickup_burst_ttl"],
            radius=12 * self.view.world_scale,
        ))
        self.tick_stats["pickups"] += 1
        logger.debug(f"Picked up {p.type.value}")

    def _update_rockets(self, dt: float) -> None:
        s = self.state
        for i in range(len(s.rockets) - 1, -1, -1):
            r = s.rockets[i]
            r.x += r.vx * dt
            r.y += r.vy * dt
            r.ttl -= dt

            if r.ttl <= 0 or outside(r.x, r.y, self.view.width, self.view.height,
                                     ROCKET_CONFIG["despawn_margin"]):
                del s.rockets[i]
                self._blast(r.x, r.y, ROCKET_CONFIG["expire_blast_radius"], sparks=12)
                continue

            hit = False
            for j in range(len(s.beams) - 1, -1, -1):
                if beam_hits_circle(s.beams[j], r.x, r.y, r.radius):
                    del s.beams[j]
                    hit = True
                    break
            if hit:
                del s.rockets[i]
                self.tick_stats["beams_destroyed"] += 1
                self._blast(r.x, r.y, ROCKET_CONFIG["beam_blast_radius"], sparks=18,
                            boom_radius=ROCKET_CONFIG["beam_boom_radius"])

    def _blast(self, x: float, y: float, radius: float, sparks: int,
               boom_radius: Optional[float] = None) -> None:
        """Boom effect plus removal of every projectile inside `radius`"""
        s = self.state
        s.effects.append(Effect(
            EffectKind.BOOM, x, y,
            ttl=EFFECT_CONFIG["boom_ttl"],
            radius=radius if boom_radius is None else boom_radius,
        ))
        self.spawn_sparks(x, y, sparks)
        before = len(s.projectiles)
        for j in range(len(s.projectiles) - 1, -1, -1):
            b = s.projectiles[j]
            if within(b.x, b.y, x, y, radius):
                del s.projectiles[j]
        self.tick_stats["projectiles_cleared"] += before - len(s.projectiles)

    def spawn_sparks(self, x: float, y: float, count: int = 14, color: str = SPARK_COLOR) -> None:
        for _ in range(count):
            a = self.rng.random() * math.pi * 2
            sp = 120 + self.rng.random() * 220
            self.state.effects.append(Effect(
                EffectKind.SPARK, x, y,
                ttl=0.35 + self.rng.random() * 0.15,
                vx=math.cos(a) * sp, vy=math.sin(a) * sp,
                life=0.5, color=color,
            ))

    def _update_effects(self, dt: float) -> None:
        effects = self.state.effects
        drag = EFFECT_CONFIG["spark_drag"]
        for i in range(len(effects) - 1, -1, -1):
            e = effects[i]
            if e.kind is EffectKind.SPARK:
                e.x += e.vx * dt
                e.y += e.vy * dt
                e.vx *= drag
                e.vy *= drag
            e.ttl -= dt
            if e.ttl <= 0:
                del effects[i]

    # ----------------------------
    # Terminal transitions
    # ----------------------------

    def _end_run(self) -> None:
        self._finish(self.machine.fail(self.state.elapsed))

    def _finish(self, event: RunEvent) -> None:
        self.terminal = event
        self._run_events.append(event)

    def _clear_stats(self) -> None:
        self.tick_stats = {"spawned": 0, "pickups": 0, "beams_destroyed": 0, "projectiles_cleared": 0}

    # ----------------------------
    # Read-only view
    # ----------------------------

    def snapshot(self) -> Snapshot:
        s = self.state
        m = self.machine
        timer = s.elapsed if m.mode is Mode.SURVIVAL else s.stage_timer
        return Snapshot(
            state=m.state.value,
            mode=m.mode_label,
            level=m.level_label,
            paused=m.paused,
            player=copy.copy(s.player),
            projectiles=tuple(copy.deepcopy(s.projectiles)),
            beams=tuple(copy.copy(b) for b in s.beams),
            powerups=tuple(copy.copy(p) for p in s.powerups),
            rockets=tuple(copy.copy(r) for r in s.rockets),
            effects=tuple(copy.copy(e) for e in s.effects),
            time_text=f"{timer:.1f}",
            best_text=m.best_label,
            ammo=s.ammo,
            shield_text="-" if s.shield_left is None else f"{s.shield_left:.1f}s",
            terminal=self.terminal,
        )
