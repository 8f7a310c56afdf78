"""Preset warehouse layouts."""

from typing import Optional

from ..domain.environment import WarehouseEnv
from ..domain.types import CellIndex, WarehouseConfig
from .rng import SeededRNG


def simple_warehouse_config() -> WarehouseConfig:
    """3x3 deterministic world with one shelf and one hazard."""
    return WarehouseConfig(
        width=3,
        height=3,
        start=CellIndex(0, 0),
        goal=CellIndex(2, 2),
        obstacles=[CellIndex(1, 1)],
        hazards=[CellIndex(1, 0)],
        slippage_rate=0.0,
    )


def full_warehouse_config(slippage_rate: float = 0.0) -> WarehouseConfig:
    """
    Full 9x6 warehouse: four shelving columns with hazardous aisles between them.

    Args:
        slippage_rate: Probability that a requested move is swapped for another

    Returns:
        WarehouseConfig for the full warehouse
    """
    # Shelves in the odd columns, rows 1-4
    obstacles = [CellIndex(row, shelf) for shelf in range(1, 8, 2) for row in range(1, 5)]

    # Busy aisles in columns 2 and 4, plus two loose spills
    hazards = [CellIndex(row, aisle) for aisle in range(2, 5, 2) for row in range(1, 5)]
    hazards.append(CellIndex(0, 1))
    hazards.append(CellIndex(2, 6))

    return WarehouseConfig(
        width=9,
        height=6,
        start=CellIndex(5, 4),
        goal=CellIndex(0, 4),
        obstacles=obstacles,
        hazards=hazards,
        slippage_rate=slippage_rate,
    )


def create_warehouse_env(simple: bool, slippage_rate: float = 0.0,
                         rng: Optional[SeededRNG] = None) -> WarehouseEnv:
    """
    Create a preset warehouse environment.

    The simple world is always deterministic; ``slippage_rate`` only applies to
    the full warehouse.
    """
    config = simple_warehouse_config() if simple else full_warehouse_config(slippage_rate)
    return WarehouseEnv.from_config(config, rng=rng)
