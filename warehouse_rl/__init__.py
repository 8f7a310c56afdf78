"""Warehouse RL - tabular Q-learning in a stochastic warehouse grid.

This package implements a Q-Learning agent that learns to navigate a warehouse
from a start cell to a goal cell, avoiding obstacles and paying for hazards,
while the floor randomly makes the agent slip into a different move.
"""

from .domain.types import (
    Action, ACTION_ORDER, CellCost, CellIndex, Episode, PathResult,
    RLConfig, StepResult, TrainingResult, WarehouseConfig,
)
from .domain.environment import WarehouseEnv
from .domain.qlearning import QLearningAgent
from .domain.training import (
    find_convergence_episode, find_path, play_episode, train,
)
from .utils.rng import SeededRNG

__version__ = "1.0.0"
__author__ = "Warehouse RL"

__all__ = [
    "Action", "ACTION_ORDER", "CellCost", "CellIndex", "Episode", "PathResult",
    "RLConfig", "StepResult", "TrainingResult", "WarehouseConfig",
    "WarehouseEnv", "QLearningAgent", "SeededRNG",
    "find_convergence_episode", "find_path", "play_episode", "train",
]
