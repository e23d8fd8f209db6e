"""Shared fixtures for the dodge simulation tests."""

from __future__ import annotations

import numpy as np
import pytest

from galactic_dodge.simulation import Simulation
from galactic_dodge.storage import MemoryStore
from galactic_dodge.viewport import Viewport


@pytest.fixture
def view() -> Viewport:
    # 900x900 gives a world scale of exactly 1.0
    return Viewport(900, 900)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sim(view, store, rng) -> Simulation:
    return Simulation(view, store=store, rng=rng)
