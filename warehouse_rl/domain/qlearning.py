"""Q-Learning agent for warehouse navigation."""

from typing import Optional, Sequence

import numpy as np

from .types import ACTION_ORDER, Action
from ..utils.rng import SeededRNG


class QLearningAgent:
    """Tabular Q-Learning agent working on integer state indices.

    The agent knows nothing about the warehouse itself: states are row-major
    cell indices and the valid actions for a state are supplied by the caller.
    """

    def __init__(self, num_states: int, num_actions: int, learning_rate: float,
                 discount_factor: float, epsilon: float, rng: Optional[SeededRNG] = None):
        if num_states <= 0 or num_actions <= 0:
            raise ValueError(f"Q-table dimensions must be positive, got {num_states}x{num_actions}")
        for name, value in (("learning_rate", learning_rate),
                            ("discount_factor", discount_factor),
                            ("epsilon", epsilon)):
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")

        self.learning_rate = learning_rate
        self.discount_factor = discount_factor
        self.epsilon = epsilon
        self.rng = rng if rng is not None else SeededRNG()
        self._q_table = np.zeros((num_states, num_actions), dtype=float)

    @property
    def num_states(self) -> int:
        return self._q_table.shape[0]

    @property
    def num_actions(self) -> int:
        return self._q_table.shape[1]

    @property
    def q_table(self) -> np.ndarray:
        """Snapshot of the full Q-table."""
        return self._q_table.copy()

    def reset(self):
        """Zero every Q-value. Hyperparameters are left untouched."""
        self._q_table.fill(0.0)

    def _check_state(self, state: int):
        if not (0 <= state < self.num_states):
            raise IndexError(f"State {state} out of range [0, {self.num_states})")

    def get_q_value(self, state: int, action: Action) -> float:
        """Get Q-value for state-action pair."""
        self._check_state(state)
        return float(self._q_table[state, action.index])

    def set_q_value(self, state: int, action: Action, value: float):
        """Set Q-value for state-action pair."""
        self._check_state(state)
        self._q_table[state, action.index] = value

    def decay_epsilon(self, decay_rate: float, min_epsilon: float = 0.05):
        """
        Decay the exploration rate. Called once per episode.

        Args:
            decay_rate: Multiplier applied to epsilon, in [0, 1]
            min_epsilon: Floor that keeps some exploration alive
        """
        if not (0.0 <= decay_rate <= 1.0):
            raise ValueError(f"Decay rate must be in [0.0, 1.0], got {decay_rate}")
        self.epsilon = max(min_epsilon, self.epsilon * decay_rate)

    def best_action(self, state: int, valid_actions: Sequence[Action]) -> Action:
        """Valid action with the highest Q-value; ties go to the earliest in ACTION_ORDER."""
        candidates = _ordered(valid_actions)
        if not candidates:
            raise ValueError(f"No valid actions to choose from in state {state}")
        # max() keeps the first maximal element
        return max(candidates, key=lambda action: self.get_q_value(state, action))

    def select_action(self, state: int, valid_actions: Sequence[Action]) -> Action:
        """Select an action with an epsilon-greedy policy."""
        candidates = _ordered(valid_actions)
        if not candidates:
            raise ValueError(f"No valid actions to choose from in state {state}")

        if self.rng.random() < self.epsilon:
            # Explore
            return self.rng.choice(candidates)
        # Exploit
        return self.best_action(state, candidates)

    def update_q_value(self, prior_state: int, action_taken: Action, reward: float,
                       new_state: int, new_state_valid_actions: Sequence[Action], done: bool):
        """
        Apply the Q-learning update rule in place.

        Args:
            prior_state: State the agent was in when it acted
            action_taken: Action the agent took
            reward: Reward of the state-action pair
            new_state: State the agent ended up in
            new_state_valid_actions: Actions available from ``new_state``
            done: Whether ``new_state`` is terminal
        """
        current_q = self.get_q_value(prior_state, action_taken)

        if done:
            target = reward
        else:
            best_next = self.best_action(new_state, new_state_valid_actions)
            target = reward + self.discount_factor * self.get_q_value(new_state, best_next)

        new_q = (1.0 - self.learning_rate) * current_q + self.learning_rate * target
        self.set_q_value(prior_state, action_taken, new_q)


def _ordered(actions: Sequence[Action]):
    """Filter ``actions`` into ACTION_ORDER, dropping duplicates."""
    allowed = set(actions)
    return [action for action in ACTION_ORDER if action in allowed]
