"""Read level definitions from the JSON level format."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

from sweetmatch.constants import COLOR_NAMES, DEFAULT_COLOR_POOL_SIZE
from sweetmatch.errors import InvalidConfigError
from sweetmatch.levels.config import (
    CollectColorsObjective,
    DropIngredientsObjective,
    JellyObjective,
    LevelConfig,
    Objective,
    ScoreObjective,
)

logger = logging.getLogger(__name__)

_OBJECTIVE_TYPES = {
    "score": ScoreObjective,
    "jelly": JellyObjective,
    "ingredient": DropIngredientsObjective,
    "drop_ingredients": DropIngredientsObjective,
    "order": CollectColorsObjective,
    "collect_colors": CollectColorsObjective,
}


def _color_id(key: Any) -> int:
    if isinstance(key, int):
        return key
    text = str(key).strip().lower()
    if text.isdigit():
        return int(text)
    try:
        return COLOR_NAMES.index(text)
    except ValueError as exc:
        raise InvalidConfigError(f"Unknown candy color '{key}'") from exc


def objective_from_dict(data: Mapping[str, Any]) -> Objective:
    try:
        kind = str(data["type"]).lower()
        target = data["target"]
    except KeyError as exc:
        raise InvalidConfigError(f"Objective is missing '{exc.args[0]}'") from exc
    objective_cls = _OBJECTIVE_TYPES.get(kind)
    if objective_cls is None:
        raise InvalidConfigError(f"Unknown objective type '{kind}'")
    if objective_cls is CollectColorsObjective:
        if not isinstance(target, Mapping):
            raise InvalidConfigError("Collect-colors target must map colors to counts")
        return CollectColorsObjective(target={_color_id(k): int(v) for k, v in target.items()})
    return objective_cls(target=int(target))


def level_config_from_dict(data: Mapping[str, Any]) -> LevelConfig:
    """Build and validate a ``LevelConfig`` from a decoded level definition."""
    try:
        grid = data["gridSize"]
        rows, cols = int(grid["rows"]), int(grid["cols"])
        move_limit = int(data["moveLimit"])
        objective = objective_from_dict(data["objective"])
        stars = tuple(int(value) for value in data["stars"])
        color_pool_size = int(data.get("candyColors", DEFAULT_COLOR_POOL_SIZE))
        shape = data.get("boardShape")
        mask = None
        if shape is not None:
            mask = tuple(tuple(bool(cell) for cell in row) for row in shape)
        jelly = frozenset((int(r), int(c)) for r, c in data.get("jellyPositions") or [])
    except InvalidConfigError:
        raise
    except KeyError as exc:
        raise InvalidConfigError(f"Level definition is missing '{exc.args[0]}'") from exc
    except (TypeError, ValueError) as exc:
        raise InvalidConfigError(f"Malformed level definition: {exc}") from exc

    config = LevelConfig(
        rows=rows,
        cols=cols,
        move_limit=move_limit,
        objective=objective,
        star_thresholds=stars,  # type: ignore[arg-type]
        color_pool_size=color_pool_size,
        mask=mask,
        jelly=jelly,
        name=str(data.get("name", "")),
        level_id=data.get("id"),
    )
    config.validate()
    return config


def load_level_config(path: str | Path) -> LevelConfig:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        try:
            payload: Dict[str, Any] = json.load(handle)
        except json.JSONDecodeError as exc:
            raise InvalidConfigError(f"Level file {path} is not valid JSON: {exc}") from exc
    logger.debug("Loaded level definition from %s", path)
    return level_config_from_dict(payload)
