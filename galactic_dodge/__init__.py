"""Galactic Dodge - arcade dodge simulation core and Gymnasium environment"""

from .simulation import Simulation, SimulationState, Snapshot
from .viewport import Viewport
from .dodge_env import DodgeEnv, run_random_episode

__all__ = ['Simulation', 'SimulationState', 'Snapshot', 'Viewport', 'DodgeEnv', 'run_random_episode']
