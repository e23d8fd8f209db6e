"""Smoke tests for the evaluation CLI helpers."""

from __future__ import annotations

import csv

import numpy as np
import pytest

from galactic_dodge.dodge_env import DodgeEnv
from galactic_dodge.evaluate import dodge_policy, evaluate_policy, main, random_policy


pytestmark = pytest.mark.unit

RESULT_KEYS = {"episode", "reward", "time", "steps", "cleared"}


class TestPolicies:
    @pytest.mark.parametrize("policy", [random_policy, dodge_policy])
    def test_actions_fit_action_space(self, policy):
        env = DodgeEnv(max_steps=50)
        env.reset(seed=0)
        rng = np.random.default_rng(0)
        for _ in range(50):
            action = policy(env, rng)
            assert env.action_space.contains(action)
            env.step(action)
        env.close()


class TestEvaluatePolicy:
    def test_one_episode_with_csv(self, tmp_path, capsys):
        out = tmp_path / "logs" / "eval.csv"
        results = evaluate_policy(policy="dodge", n_episodes=1, seed=7, csv_path=str(out), max_steps=300)

        assert len(results) == 1
        assert set(results[0]) == RESULT_KEYS
        assert results[0]["episode"] == 1
        assert 0 < results[0]["steps"] <= 300

        with open(out, newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 1
        assert set(rows[0]) == RESULT_KEYS
        assert "Evaluation Results" in capsys.readouterr().out

    def test_stage_episode(self):
        results = evaluate_policy(policy="random", mode="stages", level=0, n_episodes=1, seed=1,
                                  max_steps=300)
        assert results[0]["cleared"] in (0.0, 1.0)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            evaluate_policy(policy="nope", n_episodes=1)

    def test_main_parses_args(self, tmp_path):
        out = tmp_path / "eval.csv"
        results = main(["--policy", "random", "--episodes", "1", "--seed", "3",
                        "--max-steps", "200", "--csv", str(out)])
        assert len(results) == 1
        assert out.exists()
