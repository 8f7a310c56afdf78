"""Bucketed statistics over a training history, as consumed by charts."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..domain.types import Episode


@dataclass
class HistoryBucket:
    """Summary of one group of consecutive episodes."""
    label: int  # index one past the bucket's last episode
    average: float
    minimum: float
    maximum: float


def bucket_history(history: Sequence[Episode], bucket_size: int,
                   metric: Callable[[Episode], float]) -> List[HistoryBucket]:
    """
    Group episodes into fixed-size buckets and summarise a metric per bucket.

    Args:
        history: Training history in episode order
        bucket_size: Episodes per bucket (must be > 0)
        metric: Maps an episode to the value being summarised

    Returns:
        One HistoryBucket per full bucket; a trailing partial bucket is dropped

    Raises:
        ValueError: If bucket_size <= 0
    """
    if bucket_size <= 0:
        raise ValueError(f"Bucket size must be positive, got {bucket_size}")

    buckets = []
    for bucket in range(len(history) // bucket_size):
        start = bucket * bucket_size
        end = start + bucket_size
        values = np.array([metric(ep) for ep in history[start:end]], dtype=float)
        buckets.append(HistoryBucket(
            label=end,
            average=float(values.mean()),
            minimum=float(values.min()),
            maximum=float(values.max()),
        ))
    return buckets


def convergence_bucket(convergence_episode: Optional[int], bucket_size: int) -> Optional[int]:
    """Index of the bucket holding the convergence episode, if any."""
    if convergence_episode is None:
        return None
    if bucket_size <= 0:
        raise ValueError(f"Bucket size must be positive, got {bucket_size}")
    return max(0, (convergence_episode - 1) // bucket_size)


def incurred_cost(episode: Episode) -> float:
    """Positive cost of an episode, the usual chart metric."""
    return -episode.total_cost


def exploration_rate(episode: Episode) -> float:
    return episode.epsilon
