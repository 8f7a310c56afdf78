"""Episode runner, training loop and convergence detection."""

import logging
from typing import List, Optional, Sequence, Tuple

from .environment import WarehouseEnv
from .qlearning import QLearningAgent
from .types import (
    ACTION_ORDER, Action, CellIndex, Episode, PathResult, RLConfig,
    TrainingResult, WarehouseConfig,
)
from ..utils.rng import SeededRNG

logger = logging.getLogger(__name__)

# Action recorded with the final position once an episode ends. Playback
# consumers rely on every episode holding one step more than its moves.
TERMINAL_PLACEHOLDER = Action.UP


def play_episode(episode_id: int, agent: QLearningAgent, env: WarehouseEnv,
                 max_steps: Optional[int] = None) -> Episode:
    """
    Run a single episode of training from the environment's current state.

    Args:
        episode_id: Identifier stored in the episode record
        agent: Agent learning to navigate ``env``
        env: Warehouse, usually freshly reset
        max_steps: Optional cap on moves; None runs until the goal is reached

    Returns:
        Episode with the agent's epsilon, the steps taken and the total cost
    """
    steps: List[Tuple[CellIndex, Action]] = []
    total_cost = 0.0
    done = False

    while not done:
        if max_steps is not None and len(steps) >= max_steps:
            break

        agent_state = env.agent_state
        valid_actions = env.get_valid_actions(agent_state)
        prior_index = env.grid_to_linear_index(agent_state)

        action = agent.select_action(prior_index, valid_actions)
        next_state, outcome, done = env.agent_step(action)

        agent.update_q_value(
            prior_index,
            action,
            outcome.cost,
            env.grid_to_linear_index(next_state),
            env.get_valid_actions(next_state),
            done,
        )

        steps.append((agent_state, action))
        if not done:
            # The goal bonus is not a cost
            total_cost += outcome.cost

    steps.append((env.agent_state, TERMINAL_PLACEHOLDER))

    episode = Episode(
        id=episode_id,
        epsilon=agent.epsilon,
        steps=steps,
        total_cost=total_cost,
        reached_goal=done,
    )
    logger.debug("Episode %d: %d moves, cost %.1f, epsilon %.3f%s",
                 episode_id, episode.num_moves, total_cost, agent.epsilon,
                 "" if done else " (step cap reached)")
    return episode


def train(warehouse_config: WarehouseConfig, rl_config: Optional[RLConfig] = None,
          rng: Optional[SeededRNG] = None) -> TrainingResult:
    """
    Train an agent in a warehouse.

    Args:
        warehouse_config: Layout and slippage of the warehouse
        rl_config: Learning hyperparameters and episode count
        rng: Random source shared by agent and environment; built from
            ``rl_config.seed`` when omitted

    Returns:
        TrainingResult with the trained agent, the environment and the history
    """
    if rl_config is None:
        rl_config = RLConfig()
    if rl_config.episodes <= 0:
        raise ValueError(f"Episode count must be positive, got {rl_config.episodes}")
    if rng is None:
        rng = SeededRNG(rl_config.seed)

    env = WarehouseEnv.from_config(warehouse_config, rng=rng)
    agent = QLearningAgent(
        num_states=env.num_states,
        num_actions=len(ACTION_ORDER),
        learning_rate=rl_config.learning_rate,
        discount_factor=rl_config.discount_factor,
        epsilon=rl_config.epsilon,
        rng=rng,
    )

    logger.info("Training %d episodes in a %dx%d warehouse (alpha=%s, gamma=%s, slippage=%s)",
                rl_config.episodes, env.width, env.height, rl_config.learning_rate,
                rl_config.discount_factor, env.slippage_rate)

    history: List[Episode] = []
    for episode_id in range(rl_config.episodes):
        env.reset()
        history.append(play_episode(episode_id, agent, env, rl_config.max_steps_per_episode))
        agent.decay_epsilon(rl_config.epsilon_decay, rl_config.epsilon_min)

        if rl_config.log_interval > 0 and (episode_id + 1) % rl_config.log_interval == 0:
            recent = history[-rl_config.log_interval:]
            avg_moves = sum(ep.num_moves for ep in recent) / len(recent)
            avg_cost = sum(ep.total_cost for ep in recent) / len(recent)
            logger.info("Episode %d: avg moves %.1f, avg cost %.1f, epsilon %.3f",
                        episode_id + 1, avg_moves, avg_cost, agent.epsilon)

    if rl_config.max_steps_per_episode is not None:
        capped = sum(1 for ep in history if not ep.reached_goal)
        if capped:
            logger.warning("%d of %d episodes hit the %d step cap",
                           capped, len(history), rl_config.max_steps_per_episode)

    logger.info("Training finished after %d episodes, final epsilon %.3f",
                len(history), agent.epsilon)
    return TrainingResult(agent=agent, env=env, history=history)


def find_convergence_episode(history: Sequence[Episode], optimal_steps: int,
                             tolerance: int, window: int) -> Optional[int]:
    """
    Find the episode at which the agent settled on the optimal route.

    Args:
        history: Training history in episode order
        optimal_steps: Step count of the optimal solution, placeholder step included
        tolerance: Max difference from ``optimal_steps`` to count as optimal
        window: Number of consecutive optimal episodes required

    Returns:
        Id of the last episode of the first qualifying window, or None
    """
    if window <= 0:
        raise ValueError(f"Window must be positive, got {window}")

    for i in range(window - 1, len(history)):
        window_episodes = history[i - window + 1:i + 1]
        if all(abs(ep.num_steps - optimal_steps) <= tolerance for ep in window_episodes):
            logger.debug("Converged at episode %d (window %d)", history[i].id, window)
            return history[i].id
    return None


def find_path(agent: QLearningAgent, env: WarehouseEnv, max_steps: int = 100) -> PathResult:
    """Follow the greedy policy from the start cell without learning."""
    state = env.reset()
    path = [state]
    total_cost = 0.0

    for _ in range(max_steps):
        valid_actions = env.get_valid_actions(state)
        action = agent.best_action(env.grid_to_linear_index(state), valid_actions)
        state, outcome, done = env.agent_step(action)
        path.append(state)
        if done:
            return PathResult(path=path, total_cost=total_cost, found=True)
        total_cost += outcome.cost

    return PathResult(path=path, total_cost=total_cost, found=False)
