"""
Evaluation script: play episodes of the dodge env with a scripted policy
and report survival statistics.

Usage:
    python -m galactic_dodge.evaluate --policy dodge --episodes 10
    python -m galactic_dodge.evaluate --mode stages --level 3 --csv logs/eval.csv
"""

import argparse
import csv
import logging
import math
import os
from typing import Callable, Dict, List, Optional

import numpy as np

from .dodge_env import DodgeEnv
from .stages import LevelClearEvent

Policy = Callable[[DodgeEnv, np.random.Generator], np.ndarray]


def random_policy(env: DodgeEnv, rng: np.random.Generator) -> np.ndarray:
    return np.array([rng.integers(9), rng.integers(2)], dtype=np.int64)


def dodge_policy(env: DodgeEnv, rng: np.random.Generator) -> np.ndarray:
    """
    Hand-written baseline: push away from nearby projectiles, slide
    toward the gap of the closest approaching beam, fire at beams when
    armed and facing one.
    """
    s = env.sim.state
    p = s.player
    fx = fy = 0.0

    for b in s.projectiles:
        dx, dy = p.x - b.x, p.y - b.y
        d = math.hypot(dx, dy) or 1.0
        if d < 180:
            fx += dx / d * (180 - d) / 180
            fy += dy / d * (180 - d) / 180

    fire = 0
    if s.beams:
        bm = min(s.beams, key=lambda m: abs(m.x - p.x) if m.vertical else abs(m.y - p.y))
        gap_mid = bm.gap + bm.gap_size / 2
        if bm.vertical:
            fy += max(-1.0, min(1.0, (gap_mid - p.y) / 60))
            facing = (bm.x - p.x) * math.cos(p.angle) > 0
        else:
            fx += max(-1.0, min(1.0, (gap_mid - p.x) / 60))
            facing = (bm.y - p.y) * math.sin(p.angle) > 0
        if s.ammo > 0 and facing:
            fire = 1

    if abs(fx) < 1e-3 and abs(fy) < 1e-3:
        return np.array([0, fire], dtype=np.int64)
    # snap to the nearest of the env's 8 directions
    sector = int(round(math.atan2(fy, fx) / (math.pi / 4))) % 8
    return np.array([sector + 1, fire], dtype=np.int64)


POLICIES: Dict[str, Policy] = {
    "random": random_policy,
    "dodge": dodge_policy,
}


def evaluate_policy(
    policy: str = "dodge",
    mode: str = "survival",
    level: int = 0,
    n_episodes: int = 10,
    seed: Optional[int] = None,
    render: bool = False,
    csv_path: Optional[str] = None,
    max_steps: Optional[int] = None,
) -> List[Dict[str, float]]:
    """
    Run `n_episodes` and collect per-episode results.

    Args:
        policy: key into POLICIES
        mode: 'survival' or 'stages'
        level: stage index for stages mode
        n_episodes: number of episodes
        seed: base seed; episode i uses seed + i
        render: open the arcade window
        csv_path: optional per-episode CSV output
        max_steps: episode step cap, defaults to the env config
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown policy: {policy}")
    act = POLICIES[policy]

    env_kwargs = {} if max_steps is None else {"max_steps": max_steps}
    env = DodgeEnv(render_mode="human" if render else None, mode=mode, level=level, **env_kwargs)
    rng = np.random.default_rng(seed)
    results = []

    for episode in range(n_episodes):
        obs, info = env.reset(seed=None if seed is None else seed + episode)
        terminated = truncated = False
        total_reward = 0.0

        while not (terminated or truncated):
            obs, reward, terminated, truncated, info = env.step(act(env, rng))
            total_reward += reward

        result = {
            "episode": episode + 1,
            "reward": total_reward,
            "time": info["time"],
            "steps": info["step"],
            "cleared": float(isinstance(info.get("event"), LevelClearEvent)),
        }
        results.append(result)
        print(f"Episode {episode + 1}: Reward = {total_reward:.2f}, "
              f"Time = {info['time']:.1f}s, Steps = {info['step']}")

    env.close()

    if csv_path:
        folder = os.path.dirname(csv_path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(results[0].keys()))
            writer.writeheader()
            writer.writerows(results)
        print(f"Saved results to {csv_path}")

    times = [r["time"] for r in results]
    print(f"\n{'='*50}")
    print(f"Evaluation Results ({n_episodes} episodes, policy={policy}, mode={mode})")
    print(f"{'='*50}")
    print(f"Mean Time: {np.mean(times):.2f}s +/- {np.std(times):.2f}")
    print(f"Max Time: {np.max(times):.1f}s")
    if mode == "stages":
        print(f"Clear Rate: {np.mean([r['cleared'] for r in results]):.0%}")
    return results


def main(argv=None):
    parser = argparse.ArgumentParser(description="Evaluate scripted policies on Galactic Dodge")
    parser.add_argument("--policy", type=str, default="dodge", choices=sorted(POLICIES))
    parser.add_argument("--mode", type=str, default="survival", choices=["survival", "stages"])
    parser.add_argument("--level", type=int, default=0, help="Stage index (0-based)")
    parser.add_argument("--episodes", type=int, default=10)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-steps", type=int, default=None, help="Episode step cap")
    parser.add_argument("--render", action="store_true")
    parser.add_argument("--csv", type=str, default=None, help="Write per-episode results here")
    parser.add_argument("--verbose", action="store_true", help="Log run transitions")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    return evaluate_policy(
        policy=args.policy,
        mode=args.mode,
        level=args.level,
        n_episodes=args.episodes,
        seed=args.seed,
        render=args.render,
        csv_path=args.csv,
        max_steps=args.max_steps,
    )


if __name__ == "__main__":
    main()
