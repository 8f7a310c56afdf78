"""Stochastic warehouse grid environment."""

from typing import FrozenSet, Iterable, List, Optional

import numpy as np

from .types import ACTION_ORDER, Action, CellCost, CellIndex, StepResult, WarehouseConfig
from ..utils.rng import SeededRNG


class WarehouseEnv:
    """2D warehouse the agent moves through.

    States are grid cells (row, col) and actions are the four moves in
    ``ACTION_ORDER``. With a non-zero slippage rate the requested move is
    sometimes replaced by one of the other three.
    """

    def __init__(self, width: int, height: int, start: CellIndex, goal: CellIndex,
                 obstacles: Iterable[CellIndex] = (), hazards: Iterable[CellIndex] = (),
                 slippage_rate: float = 0.0, rng: Optional[SeededRNG] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Warehouse dimensions must be positive, got {width}x{height}")
        if not (0.0 <= slippage_rate <= 1.0):
            raise ValueError(f"Slippage rate must be between 0.0 and 1.0, got {slippage_rate}")

        self.width = width
        self.height = height
        self.start = CellIndex(*start)
        self.goal = CellIndex(*goal)
        self.obstacles: FrozenSet[CellIndex] = frozenset(CellIndex(*c) for c in obstacles)
        self.hazards: FrozenSet[CellIndex] = frozenset(CellIndex(*c) for c in hazards)
        self.slippage_rate = slippage_rate
        self.rng = rng if rng is not None else SeededRNG()

        self._validate_layout()

        # Build the warehouse floor
        self._grid = np.full((height, width), CellCost.EMPTY, dtype=object)
        for cell in self.obstacles:
            self._grid[cell.row, cell.col] = CellCost.OBSTACLE
        for cell in self.hazards:
            self._grid[cell.row, cell.col] = CellCost.HAZARD
        self._grid[self.goal.row, self.goal.col] = CellCost.GOAL

        self._agent_state = self.start

    @classmethod
    def from_config(cls, config: WarehouseConfig,
                    rng: Optional[SeededRNG] = None) -> "WarehouseEnv":
        """Build an environment from a layout configuration."""
        return cls(
            width=config.width,
            height=config.height,
            start=config.start,
            goal=config.goal,
            obstacles=config.obstacles,
            hazards=config.hazards,
            slippage_rate=config.slippage_rate,
            rng=rng,
        )

    def to_config(self) -> WarehouseConfig:
        """Static layout of this environment, e.g. for renderers."""
        return WarehouseConfig(
            width=self.width,
            height=self.height,
            start=self.start,
            goal=self.goal,
            obstacles=sorted(self.obstacles),
            hazards=sorted(self.hazards),
            slippage_rate=self.slippage_rate,
        )

    def _validate_layout(self):
        for name, cells in (("Start", [self.start]), ("Goal", [self.goal]),
                            ("Obstacle", self.obstacles), ("Hazard", self.hazards)):
            for cell in cells:
                if not self.in_bounds(cell):
                    raise ValueError(f"{name} cell {tuple(cell)} is outside the "
                                     f"{self.width}x{self.height} warehouse")

        if self.start in self.obstacles or self.start in self.hazards or self.start == self.goal:
            raise ValueError("Start cell cannot overlap with obstacles, hazards, or goal")
        if self.goal in self.obstacles or self.goal in self.hazards:
            raise ValueError("Goal cell cannot overlap with obstacles or hazards")

        overlap = self.obstacles & self.hazards
        if overlap:
            raise ValueError(f"Cells cannot be both obstacle and hazard: {sorted(overlap)}")

    @property
    def agent_state(self) -> CellIndex:
        """Current position of the agent."""
        return self._agent_state

    @property
    def num_states(self) -> int:
        return self.width * self.height

    @property
    def is_stochastic(self) -> bool:
        return self.slippage_rate > 0.0

    def in_bounds(self, cell: CellIndex) -> bool:
        """Check if a cell is within the warehouse."""
        row, col = cell
        return 0 <= row < self.height and 0 <= col < self.width

    def _require_in_bounds(self, cell: CellIndex):
        if not self.in_bounds(cell):
            raise ValueError(f"Cell {tuple(cell)} is outside the {self.width}x{self.height} warehouse")

    def linear_to_grid_index(self, index: int) -> CellIndex:
        """Convert a Q-table state index to a cell (row-major)."""
        if not (0 <= index < self.num_states):
            raise ValueError(f"State index {index} out of range [0, {self.num_states})")
        return CellIndex(row=index // self.width, col=index % self.width)

    def grid_to_linear_index(self, cell: CellIndex) -> int:
        """Convert a cell to its Q-table state index (row-major)."""
        self._require_in_bounds(cell)
        return self.width * cell[0] + cell[1]

    def get_cell(self, cell: CellIndex) -> CellCost:
        """Get the classification of a cell."""
        self._require_in_bounds(cell)
        return self._grid[cell[0], cell[1]]

    def is_valid_state(self, cell: CellIndex) -> bool:
        """A valid state is inside the warehouse and not an obstacle."""
        if not self.in_bounds(cell):
            return False
        return self._grid[cell[0], cell[1]] is not CellCost.OBSTACLE

    def get_valid_actions(self, state: CellIndex) -> List[Action]:
        """Actions from ``state`` that land inside the warehouse and off obstacles."""
        self._require_in_bounds(state)
        state = CellIndex(*state)
        return [action for action in ACTION_ORDER if self.is_valid_state(action.apply(state))]

    def agent_step(self, action: Action) -> StepResult:
        """
        Take an action and transition to the next state.

        With probability ``slippage_rate`` the agent slips and one of the other
        three actions is executed instead.

        Args:
            action: The requested move

        Returns:
            StepResult of (next state, outcome classification, done)
        """
        actual_action = action
        if self.rng.random() < self.slippage_rate:
            actual_action = self.rng.choice([a for a in ACTION_ORDER if a is not action])

        next_state = actual_action.apply(self._agent_state)
        if not self.is_valid_state(next_state):
            # Bumped into a shelf or the wall; stay in place
            return StepResult(self._agent_state, CellCost.ILLEGAL_MOVE, False)

        self._agent_state = next_state
        return StepResult(next_state, self.get_cell(next_state), next_state == self.goal)

    def reset(self) -> CellIndex:
        """Return the agent to its starting cell."""
        self._agent_state = self.start
        return self._agent_state
