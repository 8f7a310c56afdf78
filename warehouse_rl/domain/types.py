"""Core type definitions for warehouse Q-learning."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .environment import WarehouseEnv
    from .qlearning import QLearningAgent


class CellIndex(NamedTuple):
    """Grid position as (row, col)."""
    row: int
    col: int


class Action(Enum):
    """Moves the agent can request, each carrying (row delta, col delta)."""
    DOWN = (1, 0)
    UP = (-1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)

    @property
    def dy(self) -> int:
        return self.value[0]

    @property
    def dx(self) -> int:
        return self.value[1]

    @property
    def index(self) -> int:
        """Column of this action in the Q-table."""
        return _ACTION_INDEX[self]

    def apply(self, cell: CellIndex) -> CellIndex:
        """Cell reached by moving from ``cell`` in this direction."""
        return CellIndex(cell.row + self.dy, cell.col + self.dx)


# Iteration and tie-breaking order for actions
ACTION_ORDER: Tuple[Action, ...] = (Action.DOWN, Action.UP, Action.LEFT, Action.RIGHT)
_ACTION_INDEX: Dict[Action, int] = {action: i for i, action in enumerate(ACTION_ORDER)}


class CellCost(Enum):
    """Classification of a move outcome, carrying its reward."""
    EMPTY = ("empty", -1.0)
    HAZARD = ("hazard", -5.0)
    ILLEGAL_MOVE = ("illegal_move", -5.0)
    OBSTACLE = ("obstacle", float("nan"))  # never occupied
    GOAL = ("goal", 100.0)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def cost(self) -> float:
        return self.value[1]


class StepResult(NamedTuple):
    """Outcome of a single environment step."""
    state: CellIndex
    outcome: CellCost
    done: bool

    @property
    def reward(self) -> float:
        return self.outcome.cost


@dataclass
class Episode:
    """Record of one training episode.

    ``steps`` holds every (state, action) pair the agent took, followed by one
    terminal placeholder pairing the final position with ``Action.UP``.
    """
    id: int
    epsilon: float
    steps: List[Tuple[CellIndex, Action]]
    total_cost: float
    reached_goal: bool = True

    @property
    def num_steps(self) -> int:
        return len(self.steps)

    @property
    def num_moves(self) -> int:
        """Moves actually taken, excluding the terminal placeholder."""
        return max(0, len(self.steps) - 1)


@dataclass
class WarehouseConfig:
    """Static layout of a warehouse plus its slippage rate."""
    width: int
    height: int
    start: CellIndex
    goal: CellIndex
    obstacles: List[CellIndex] = field(default_factory=list)
    hazards: List[CellIndex] = field(default_factory=list)
    slippage_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert layout to a JSON-friendly dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "start": list(self.start),
            "goal": list(self.goal),
            "obstacles": [list(cell) for cell in self.obstacles],
            "hazards": [list(cell) for cell in self.hazards],
            "slippage_rate": self.slippage_rate,
            "version": "1.0",
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WarehouseConfig":
        """Create a layout from a dictionary produced by ``to_dict``."""
        missing = [key for key in ("width", "height", "start", "goal") if key not in data]
        if missing:
            raise ValueError(f"Warehouse layout is missing keys: {', '.join(missing)}")

        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            start=CellIndex(*data["start"]),
            goal=CellIndex(*data["goal"]),
            obstacles=[CellIndex(*cell) for cell in data.get("obstacles", [])],
            hazards=[CellIndex(*cell) for cell in data.get("hazards", [])],
            slippage_rate=float(data.get("slippage_rate", 0.0)),
        )


@dataclass
class RLConfig:
    """Configuration for the Q-learning agent and training loop."""
    learning_rate: float = 0.1
    discount_factor: float = 0.99
    epsilon: float = 1.0  # start fully exploratory
    epsilon_decay: float = 0.995
    epsilon_min: float = 0.1
    episodes: int = 500
    # None leaves episodes unbounded; an unreachable goal then never terminates
    max_steps_per_episode: Optional[int] = None
    seed: Optional[int] = None
    log_interval: int = 100


@dataclass
class TrainingResult:
    """Result of a training run."""
    agent: "QLearningAgent"
    env: "WarehouseEnv"
    history: List[Episode]

    @property
    def final_epsilon(self) -> float:
        return self.agent.epsilon

    @property
    def total_episodes(self) -> int:
        return len(self.history)


@dataclass
class PathResult:
    """Result of following the learned greedy policy."""
    path: List[CellIndex]
    total_cost: float = 0.0
    found: bool = False

    @property
    def path_length(self) -> int:
        return len(self.path)
