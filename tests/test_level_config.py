import json
import os
import random

import pytest

from sweetmatch.engine import get_snapshot, start_attempt
from sweetmatch.errors import InvalidConfigError
from sweetmatch.levels import (
    CollectColorsObjective,
    DropIngredientsObjective,
    JellyObjective,
    ScoreObjective,
    level_config_from_dict,
    load_level_config,
    objective_from_dict,
)
from sweetmatch.main import main

from tests.helpers import make_config

LEVELS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'levels')


def _level(**overrides):
    data = {
        "id": 9,
        "name": "Test",
        "gridSize": {"rows": 5, "cols": 6},
        "moveLimit": 12,
        "objective": {"type": "score", "target": 800},
        "stars": [400, 800, 1600],
        "candyColors": 4,
        "boardShape": None,
    }
    data.update(overrides)
    return data


def test_level_dict_is_parsed():
    config = level_config_from_dict(_level())
    assert (config.rows, config.cols, config.move_limit, config.color_pool_size) == (5, 6, 12, 4)
    assert config.objective == ScoreObjective(target=800)
    assert config.star_thresholds == (400, 800, 1600)
    assert config.mask is None and config.jelly == frozenset()
    assert config.name == "Test" and config.level_id == 9


@pytest.mark.parametrize("data, expected", [
    ({"type": "jelly", "target": 3}, JellyObjective(3)),
    ({"type": "ingredient", "target": 2}, DropIngredientsObjective(2)),
    ({"type": "order", "target": {"ruby": 5, "emerald": 2}}, CollectColorsObjective({0: 5, 2: 2})),
    ({"type": "collect_colors", "target": {"1": 4}}, CollectColorsObjective({1: 4})),
])
def test_objective_types(data, expected):
    assert objective_from_dict(data) == expected


def test_board_shape_and_jelly_are_read():
    shape = [[1] * 6 for _ in range(5)]
    shape[0][0] = 0
    config = level_config_from_dict(_level(
        boardShape=shape,
        jellyPositions=[[1, 1], [2, 2]],
        objective={"type": "jelly", "target": 2},
    ))
    assert config.is_active(0, 1) and not config.is_active(0, 0)
    assert config.jelly == frozenset({(1, 1), (2, 2)})


@pytest.mark.parametrize("overrides", [
    {"gridSize": {"rows": 0, "cols": 6}},
    {"moveLimit": 0},
    {"candyColors": 0},
    {"stars": [400, 400, 1600]},
    {"stars": [400, 800]},
    {"objective": {"type": "score", "target": 0}},
    {"objective": {"type": "laser", "target": 1}},
    {"objective": {"type": "order", "target": {"amber": 3}}},
    {"objective": {"type": "order", "target": {"licorice": 3}}},
    {"objective": {"type": "jelly", "target": 3}, "jellyPositions": [[0, 0]]},
    {"boardShape": [[1, 1], [1, 1]]},
    {"boardShape": [[0] * 6 for _ in range(5)]},
    {"jellyPositions": [[7, 7]]},
    {"moveLimit": "many"},
    {"candyColors": None},
    {"candyColors": "five"},
    {"jellyPositions": [[1]]},
    {"boardShape": 5},
    {"boardShape": [5, 5]},
])
def test_invalid_levels_are_rejected(overrides):
    with pytest.raises(InvalidConfigError):
        level_config_from_dict(_level(**overrides))


def test_missing_field_is_reported():
    data = _level()
    del data["moveLimit"]
    with pytest.raises(InvalidConfigError, match="moveLimit"):
        level_config_from_dict(data)


def test_jelly_on_a_masked_cell_is_rejected():
    mask = tuple(tuple(c != 0 for c in range(6)) for r in range(6))
    config = make_config(mask=mask, jelly={(3, 0)})
    with pytest.raises(InvalidConfigError):
        config.validate()


def test_start_attempt_rejects_invalid_config():
    with pytest.raises(InvalidConfigError):
        start_attempt(make_config(rows=-1), rng=random.Random(1))
    with pytest.raises(ValueError):
        start_attempt(make_config(colors=0))


def test_invalid_json_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidConfigError):
        load_level_config(path)


def test_level_file_round_trip(tmp_path):
    path = tmp_path / "level.json"
    path.write_text(json.dumps(_level()), encoding="utf-8")
    assert load_level_config(path) == level_config_from_dict(_level())


@pytest.mark.parametrize("name", sorted(os.listdir(LEVELS_DIR)))
def test_bundled_levels_load_and_start(name):
    config = load_level_config(os.path.join(LEVELS_DIR, name))
    attempt = start_attempt(config, rng=random.Random(3))
    view = get_snapshot(attempt)
    assert (view.rows, view.cols) == (config.rows, config.cols)
    assert view.moves_remaining == config.move_limit
    for row in view.cells:
        for cell in row:
            assert cell.active == config.is_active(*cell.position)
            assert (cell.color is not None) == cell.active


def test_cli_rejects_a_malformed_level(tmp_path):
    path = tmp_path / "level.json"
    path.write_text(json.dumps(_level(candyColors="five")), encoding="utf-8")
    assert main([str(path)]) == 2
