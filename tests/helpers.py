from __future__ import annotations

import random
from typing import List, Mapping, Optional, Tuple, Union

from esper import World

from sweetmatch.components.candy import Candy
from sweetmatch.engine import LevelAttempt, start_attempt
from sweetmatch.events.recorder import Event
from sweetmatch.levels.config import LevelConfig, Objective, ScoreObjective
from sweetmatch.systems.board_ops import candy_at, get_board, set_candy

Position = Tuple[int, int]
CellSpec = Union[int, Candy]


def make_config(
    rows: int = 6,
    cols: int = 6,
    *,
    move_limit: int = 10,
    objective: Optional[Objective] = None,
    stars: Tuple[int, int, int] = (100, 500, 1000),
    colors: int = 5,
    mask=None,
    jelly=(),
) -> LevelConfig:
    return LevelConfig(
        rows=rows,
        cols=cols,
        move_limit=move_limit,
        objective=objective or ScoreObjective(target=100_000),
        star_thresholds=stars,
        color_pool_size=colors,
        mask=mask,
        jelly=frozenset(jelly),
        name="test level",
    )


def background_color(row: int, col: int, colors: int = 5) -> int:
    """Color of the default test pattern; no two neighbours share a color."""
    return (row * 2 + col) % colors


def paint_board(world: World, cells: Optional[Mapping[Position, CellSpec]] = None, colors: int = 5) -> None:
    """Overwrite every playable cell with the background pattern, then apply ``cells``."""
    board = get_board(world)
    for row in range(board.rows):
        for col in range(board.cols):
            if board.is_active(row, col):
                set_candy(world, row, col, Candy(color=background_color(row, col, colors)))
    for (row, col), spec in (cells or {}).items():
        candy = spec if isinstance(spec, Candy) else Candy(color=spec)
        set_candy(world, row, col, Candy(color=candy.color, special=candy.special))


def start_painted(
    config: Optional[LevelConfig] = None,
    cells: Optional[Mapping[Position, CellSpec]] = None,
    seed: int = 1,
) -> LevelAttempt:
    config = config or make_config()
    attempt = start_attempt(config, rng=random.Random(seed))
    paint_board(attempt.world, cells, config.color_pool_size)
    return attempt


def color_grid(world: World) -> List[List[Optional[int]]]:
    board = get_board(world)
    grid: List[List[Optional[int]]] = []
    for row in range(board.rows):
        line = []
        for col in range(board.cols):
            candy = candy_at(world, row, col)
            line.append(candy.color if candy is not None else None)
        grid.append(line)
    return grid


def events_of(events: List[Event], kind: str) -> List[Event]:
    return [event for event in events if event.type == kind]


def first_step(events: List[Event], kind: str) -> Event:
    """The first event of ``kind`` emitted at cascade depth 0."""
    for event in events:
        if event.type == kind and event.payload.get('depth', 0) == 0:
            return event
    raise AssertionError(f"No depth-0 {kind!r} event in {[e.type for e in events]}")

