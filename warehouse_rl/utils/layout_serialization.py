"""
Warehouse layout serialization for saving and loading configurations.
Only the static layout is stored; Q-tables are never written to disk.
"""

import json
from pathlib import Path
from typing import Union

from ..domain.types import WarehouseConfig

PathLike = Union[str, Path]


def save_warehouse_config(config: WarehouseConfig, filepath: PathLike) -> Path:
    """Save a warehouse layout to a JSON file, creating parent directories."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
    return path


def load_warehouse_config(filepath: PathLike) -> WarehouseConfig:
    """Load a warehouse layout from a JSON file."""
    with open(filepath, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Warehouse layout in {filepath} must be a JSON object")
    return WarehouseConfig.from_dict(data)
