from sweetmatch.levels.config import (
    CollectColorsObjective,
    DropIngredientsObjective,
    JellyObjective,
    LevelConfig,
    Objective,
    ScoreObjective,
)
from sweetmatch.levels.loader import level_config_from_dict, load_level_config, objective_from_dict

__all__ = [
    "CollectColorsObjective",
    "DropIngredientsObjective",
    "JellyObjective",
    "LevelConfig",
    "Objective",
    "ScoreObjective",
    "level_config_from_dict",
    "load_level_config",
    "objective_from_dict",
]
