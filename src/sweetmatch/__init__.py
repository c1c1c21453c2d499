"""Tile-matching puzzle engine: board simulation, special candies, cascades and objectives."""
from sweetmatch.components.candy import Candy, SpecialKind
from sweetmatch.components.game_state import GamePhase
from sweetmatch.components.run_state import RunState
from sweetmatch.engine import (
    BoardView,
    CellView,
    LevelAttempt,
    SwapResult,
    abandon,
    attempt_swap,
    get_snapshot,
    record_ingredients_dropped,
    select_cell,
    settle,
    start_attempt,
)
from sweetmatch.errors import InvalidConfigError, OutOfBoundsCoordinateError, SweetMatchError
from sweetmatch.events.recorder import Event
from sweetmatch.levels import (
    CollectColorsObjective,
    DropIngredientsObjective,
    JellyObjective,
    LevelConfig,
    ScoreObjective,
    load_level_config,
)

__all__ = [
    "BoardView",
    "Candy",
    "CellView",
    "CollectColorsObjective",
    "DropIngredientsObjective",
    "Event",
    "GamePhase",
    "InvalidConfigError",
    "JellyObjective",
    "LevelAttempt",
    "LevelConfig",
    "OutOfBoundsCoordinateError",
    "RunState",
    "ScoreObjective",
    "SpecialKind",
    "SwapResult",
    "SweetMatchError",
    "abandon",
    "attempt_swap",
    "get_snapshot",
    "load_level_config",
    "record_ingredients_dropped",
    "select_cell",
    "settle",
    "start_attempt",
]
