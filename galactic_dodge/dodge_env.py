"""
DodgeEnv - Gymnasium wrapper around the Galactic Dodge simulation
-----------------------------------------------------------------
- Gymnasium API over `Simulation`, one `tick` per step
- Survival or a chosen stage per episode (reset options)
- MultiDiscrete action space: [move(9), fire(2)]
- Vector observation: player + buffs + K nearest projectiles
  + nearest beams + M nearest power-ups
- Arcade window for render_mode="human"

Quick test:
    python -m galactic_dodge.dodge_env
"""

from __future__ import annotations

import math
import time
from typing import Any, Dict, List, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .config import BUFF_DURATIONS, ENV_CONFIG, LEVELS, REWARD_CONFIG, STORAGE_KEYS
from .controls import InputSnapshot
from .simulation import Simulation
from .spawner import kind_counts
from .stages import GameOverEvent, LevelClearEvent, Mode, StageFailedEvent
from .storage import MemoryStore
from .utils import clamp
from .viewport import Viewport


class DodgeEnv(gym.Env):
    """Top-down dodge environment driven by the arcade simulation"""

    metadata = {"render_modes": ["human"], "render_fps": 60}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        mode: str = "survival",
        level: int = 0,
        width: int = ENV_CONFIG["width"],
        height: int = ENV_CONFIG["height"],
        dt: float = ENV_CONFIG["dt"],
        max_steps: int = ENV_CONFIG["max_steps"],
        k_projectiles: int = ENV_CONFIG["k_projectiles"],
        n_beams: int = ENV_CONFIG["n_beams"],
        m_powerups: int = ENV_CONFIG["m_powerups"],
        store=None,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.mode = Mode(mode)
        self.level = level

        self.viewport = Viewport(width, height)
        self.dt = dt
        self.max_steps = max_steps

        # Observation config
        self.k_projectiles = k_projectiles
        self.n_beams = n_beams
        self.m_powerups = m_powerups

        # Every stage playable unless a store says otherwise
        self.store = store if store is not None else MemoryStore({STORAGE_KEYS["unlocked"]: len(LEVELS)})

        # move: 0 stay, 1..8 compass directions starting east, clockwise
        # fire: 0/1
        self.action_space = spaces.MultiDiscrete([9, 2])

        # Player: pos(2) facing(2) ammo(1) shield/slow/magnet(3)
        # Each projectile: rel pos(2) vel(2)
        # Each beam: orientation(1) sweep distance(1) gap offset(1) direction(1)
        # Each power-up: rel pos(2) type(1)
        obs_dim = 8 + self.k_projectiles * 4 + self.n_beams * 4 + self.m_powerups * 3
        self.observation_space = spaces.Box(low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32)

        self._move_dirs = [(0.0, 0.0)]
        for i in range(8):
            ang = (math.pi * 2) * (i / 8.0)
            self._move_dirs.append((math.cos(ang), math.sin(ang)))

        self._window = None
        self.sim: Simulation = None  # type: ignore
        self._step_count = 0
        self._last_event = None

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        options = options or {}
        mode = Mode(options.get("mode", self.mode))
        level = int(options.get("level", self.level))

        self._step_count = 0
        self._last_event = None
        self.sim = Simulation(self.viewport, store=self.store, rng=self.np_random)
        if mode is Mode.STAGES:
            self.sim.start_stages(level)
        else:
            self.sim.start_survival()

        return self._get_obs(), self._get_info()

    def step(self, action):
        move, fire = int(action[0]), int(action[1])
        mx, my = self._move_dirs[move % 9]

        events = self.sim.tick(self.dt, InputSnapshot(move_x=mx, move_y=my, fire=bool(fire)))
        stats = self.sim.tick_stats

        reward = REWARD_CONFIG["R_ALIVE"] * self.dt
        reward += REWARD_CONFIG["R_PICKUP"] * stats["pickups"]
        reward += REWARD_CONFIG["R_BEAM_KILL"] * stats["beams_destroyed"]

        terminated = False
        for event in events:
            self._last_event = event
            terminated = True
            if isinstance(event, LevelClearEvent):
                reward += REWARD_CONFIG["R_CLEAR"]
            elif isinstance(event, (GameOverEvent, StageFailedEvent)):
                reward -= REWARD_CONFIG["R_DEATH"]

        self._step_count += 1
        truncated = not terminated and self._step_count >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), float(reward), terminated, truncated, self._get_info()

    # ----------------------------
    # Observation / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        s = self.sim.state
        p = s.player
        w, h = self.viewport.width, self.viewport.height
        speed_norm = max(1e-6, 400.0 * self.viewport.world_scale)

        obs_parts: List[float] = [
            p.x / w * 2 - 1,
            p.y / h * 2 - 1,
            math.cos(p.angle),
            math.sin(p.angle),
            clamp(s.ammo / 5.0, 0.0, 1.0) * 2 - 1,
        ]
        for buff in ("shield", "slow", "magnet"):
            left = s.buffs.remaining(buff, s.clock) / BUFF_DURATIONS[buff]
            obs_parts.append(clamp(left, 0.0, 1.0) * 2 - 1)

        nearest = sorted(s.projectiles, key=lambda b: (b.x - p.x) ** 2 + (b.y - p.y) ** 2)
        for i in range(self.k_projectiles):
            if i < len(nearest):
                b = nearest[i]
                obs_parts += [
                    clamp((b.x - p.x) / w, -1, 1),
                    clamp((b.y - p.y) / h, -1, 1),
                    clamp(b.vx / speed_norm, -1, 1),
                    clamp(b.vy / speed_norm, -1, 1),
                ]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        def sweep_distance(bm):
            return abs(bm.x - p.x) / w if bm.vertical else abs(bm.y - p.y) / h

        beams = sorted(s.beams, key=sweep_distance)
        for i in range(self.n_beams):
            if i < len(beams):
                bm = beams[i]
                if bm.vertical:
                    along = (bm.x + bm.w / 2 - p.x) / w
                    gap = (bm.gap + bm.gap_size / 2 - p.y) / h
                    direction = math.copysign(1.0, bm.vx)
                else:
                    along = (bm.y + bm.h / 2 - p.y) / h
                    gap = (bm.gap + bm.gap_size / 2 - p.x) / w
                    direction = math.copysign(1.0, bm.vy)
                obs_parts += [
                    1.0 if bm.vertical else -1.0,
                    clamp(along, -1, 1),
                    clamp(gap, -1, 1),
                    direction,
                ]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        type_codes = {"shield": -1.0, "bazooka": -0.5, "slow": 0.0, "magnet": 0.5, "bomb": 1.0}
        powerups = sorted(s.powerups, key=lambda u: (u.x - p.x) ** 2 + (u.y - p.y) ** 2)
        for i in range(self.m_powerups):
            if i < len(powerups):
                u = powerups[i]
                obs_parts += [
                    clamp((u.x - p.x) / w, -1, 1),
                    clamp((u.y - p.y) / h, -1, 1),
                    type_codes[u.type.value],
                ]
            else:
                obs_parts += [0.0, 0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _get_info(self) -> Dict[str, Any]:
        s = self.sim.state
        info = {
            "time": s.elapsed if self.sim.machine.mode is Mode.SURVIVAL else s.stage_timer,
            "ammo": s.ammo,
            "num_projectiles": len(s.projectiles),
            "num_beams": len(s.beams),
            "num_powerups": len(s.powerups),
            "kinds": kind_counts(s.projectiles),
            "step": self._step_count,
        }
        info.update(self.sim.machine.summary())
        if self._last_event is not None:
            info["event"] = self._last_event
        return info

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            from .render import DodgeWindow
            self._window = DodgeWindow(int(self.viewport.width), int(self.viewport.height))
        self._window.show(self.sim.snapshot())
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = True, seed: int = 42, mode: str = "survival"):
    """Run a random episode for testing"""
    env = DodgeEnv(render_mode="human" if render else None, mode=mode)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    print("Running episode... close the window to exit early.")
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward
        if render:
            time.sleep(env.dt)

    print(f"Random episode return: {total:.2f}  time: {info['time']:.1f}s  steps: {info['step']}")
    env.close()
    return total, info


if __name__ == "__main__":
    run_random_episode(render=True)
