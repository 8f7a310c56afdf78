import json

import pytest

from warehouse_rl.domain.environment import WarehouseEnv
from warehouse_rl.domain.types import Action, CellCost, CellIndex, Episode, WarehouseConfig
from warehouse_rl.utils.history_stats import (
    bucket_history, convergence_bucket, exploration_rate, incurred_cost,
)
from warehouse_rl.utils.layout_serialization import load_warehouse_config, save_warehouse_config
from warehouse_rl.utils.warehouse_factory import (
    create_warehouse_env, full_warehouse_config, simple_warehouse_config,
)


def episode(episode_id, cost, epsilon=1.0):
    return Episode(id=episode_id, epsilon=epsilon,
                   steps=[(CellIndex(0, 0), Action.UP)], total_cost=cost)


# --- Warehouse factory ---

def test_simple_warehouse():
    env = create_warehouse_env(simple=True, slippage_rate=0.7)
    assert (env.width, env.height) == (3, 3)
    assert env.get_cell(CellIndex(1, 1)) == CellCost.OBSTACLE
    assert env.get_cell(CellIndex(1, 0)) == CellCost.HAZARD
    assert env.goal == CellIndex(2, 2)
    assert not env.is_stochastic


def test_full_warehouse_layout():
    config = full_warehouse_config(0.3)
    env = WarehouseEnv.from_config(config)

    assert (env.width, env.height) == (9, 6)
    assert env.start == CellIndex(5, 4)
    assert env.goal == CellIndex(0, 4)
    assert len(env.obstacles) == 16
    assert len(env.hazards) == 10
    assert env.get_cell(CellIndex(0, 1)) == CellCost.HAZARD
    assert env.get_cell(CellIndex(2, 6)) == CellCost.HAZARD
    assert env.get_cell(CellIndex(3, 7)) == CellCost.OBSTACLE
    assert env.is_stochastic


def test_full_warehouse_start_can_only_go_sideways_or_up():
    env = create_warehouse_env(simple=False)
    assert env.get_valid_actions(env.start) == [Action.UP, Action.LEFT, Action.RIGHT]


# --- Layout serialization ---

def test_save_and_load_round_trip(tmp_path):
    config = full_warehouse_config(0.25)
    path = save_warehouse_config(config, tmp_path / "layouts" / "full.json")

    assert path.exists()
    assert load_warehouse_config(path) == config


def test_saved_layout_format(tmp_path):
    path = save_warehouse_config(simple_warehouse_config(), tmp_path / "simple.json")
    with open(path) as f:
        data = json.load(f)
    assert data["start"] == [0, 0]
    assert data["obstacles"] == [[1, 1]]
    assert data["version"] == "1.0"


def test_load_rejects_incomplete_layout(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"width": 3, "height": 3}))
    with pytest.raises(ValueError):
        load_warehouse_config(path)


def test_from_dict_defaults():
    config = WarehouseConfig.from_dict({"width": 2, "height": 1, "start": [0, 0], "goal": [0, 1]})
    assert config.obstacles == []
    assert config.hazards == []
    assert config.slippage_rate == 0.0


# --- History statistics ---

def test_bucket_history_drops_partial_bucket():
    history = [episode(i, cost) for i, cost in enumerate([-10, -20, -30, -40, -5])]
    buckets = bucket_history(history, 2, incurred_cost)

    assert [b.label for b in buckets] == [2, 4]
    assert buckets[0].average == pytest.approx(15.0)
    assert buckets[0].minimum == 10.0
    assert buckets[0].maximum == 20.0
    assert buckets[1].average == pytest.approx(35.0)


def test_bucket_history_with_epsilon_metric():
    history = [episode(i, -1.0, epsilon=e) for i, e in enumerate([1.0, 0.5, 0.25])]
    buckets = bucket_history(history, 3, exploration_rate)
    assert len(buckets) == 1
    assert buckets[0].minimum == 0.25
    assert buckets[0].maximum == 1.0


def test_bucket_history_rejects_bad_size():
    with pytest.raises(ValueError):
        bucket_history([], 0, incurred_cost)


def test_convergence_bucket():
    assert convergence_bucket(None, 10) is None
    assert convergence_bucket(25, 10) == 2
    assert convergence_bucket(10, 10) == 0
    assert convergence_bucket(0, 10) == 0
