"""Caller-facing operations for one level attempt.

A presentation layer drives the engine only through these functions and the
``Event`` records they return; it never needs to touch the world directly.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from esper import World

from sweetmatch.components.board_position import BoardPosition
from sweetmatch.components.game_state import GamePhase
from sweetmatch.components.run_state import RunState
from sweetmatch.events.bus import (
    EventBus,
    EVENT_BOARD_CHANGED,
    EVENT_INGREDIENTS_DROPPED,
    EVENT_SWAP,
    EVENT_TILE_CLICK,
    EVENT_TILE_SWAP_REQUEST,
)
from sweetmatch.events.recorder import Event, EventRecorder
from sweetmatch.levels.config import LevelConfig
from sweetmatch.systems.board import BoardSystem
from sweetmatch.systems.board_ops import candy_at, get_board, jelly_positions
from sweetmatch.systems.match import MatchSystem
from sweetmatch.systems.match_resolution import MatchResolutionSystem
from sweetmatch.systems.objective_system import (
    ObjectiveProgress,
    ObjectiveSystem,
    calculate_stars,
    objective_progress,
)
from sweetmatch.utils.game_state import get_game_state, get_run_state, set_phase
from sweetmatch.world import create_world

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class CellView:
    position: Position
    active: bool
    color: Optional[int] = None
    special: str = "none"
    jelly: bool = False

    @property
    def is_empty(self) -> bool:
        return self.color is None


@dataclass(frozen=True)
class BoardView:
    """Read-only projection of an attempt, for rendering."""

    rows: int
    cols: int
    cells: Tuple[Tuple[CellView, ...], ...]
    score: int
    moves_remaining: int
    moves_made: int
    phase: GamePhase
    objective: ObjectiveProgress
    stars: int
    selected: Optional[Position]
    colors_captured: Mapping[int, int]
    jellies_cleared: int
    ingredients_dropped: int
    outcome: Optional[str]

    def cell(self, row: int, col: int) -> CellView:
        return self.cells[row][col]

    def colors(self) -> List[List[Optional[int]]]:
        return [[cell.color for cell in row] for row in self.cells]


@dataclass(frozen=True)
class SwapResult:
    accepted: bool
    events: List[Event]


class LevelAttempt:
    """Everything owned by one attempt: world, bus, systems and event recorder.

    Attempts share nothing, so several can run side by side.
    """

    def __init__(self, config: LevelConfig, rng: random.Random | None = None):
        self.config = config
        self.event_bus = EventBus()
        self.world: World = create_world(config, rng=rng)
        # Board first: it must drop the selection before resolution starts.
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.match_system = MatchSystem(self.world, self.event_bus)
        self.resolution_system = MatchResolutionSystem(self.world, self.event_bus)
        self.objective_system = ObjectiveSystem(self.world, self.event_bus)
        self.recorder = EventRecorder(self.event_bus)

    @property
    def run(self) -> RunState:
        return get_run_state(self.world)

    @property
    def phase(self) -> GamePhase:
        return get_game_state(self.world).phase

    @property
    def is_over(self) -> bool:
        return self.phase.is_terminal


def start_attempt(config: LevelConfig, rng: random.Random | None = None) -> LevelAttempt:
    """Validate ``config`` and deal a matchless board.

    Raises ``InvalidConfigError`` if the level cannot be played.
    """
    attempt = LevelAttempt(config, rng=rng)
    logger.info(
        "Started attempt on %s: %dx%d, %d moves, objective %s",
        config.name or "level", config.rows, config.cols, config.move_limit, config.objective.kind,
    )
    return attempt


def attempt_swap(attempt: LevelAttempt, a: Position, b: Position) -> SwapResult:
    """Try to swap two cells.

    Returns whether the move was accepted, plus every public event it caused.
    Input while a cycle is resolving, or after the attempt ended, yields no
    events at all.
    """
    with attempt.recorder.capture() as events:
        attempt.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=a, dst=b)
    accepted = any(event.type == EVENT_SWAP and event.payload.get('valid') for event in events)
    return SwapResult(accepted=accepted, events=list(events))


def select_cell(attempt: LevelAttempt, pos: Position) -> List[Event]:
    """Click-style input: select, reselect, deselect, or commit a swap."""
    row, col = pos
    with attempt.recorder.capture() as events:
        attempt.event_bus.emit(EVENT_TILE_CLICK, row=row, col=col)
    return list(events)


def settle(attempt: LevelAttempt) -> List[Event]:
    """Run one more clear/refill/rematch pass; a settled board yields no events."""
    with attempt.recorder.capture() as events:
        attempt.event_bus.emit(EVENT_BOARD_CHANGED, reason='settle')
    return list(events)


def record_ingredients_dropped(attempt: LevelAttempt, count: int) -> List[Event]:
    """Report ingredients that reached the exit; may complete the level."""
    with attempt.recorder.capture() as events:
        attempt.event_bus.emit(EVENT_INGREDIENTS_DROPPED, count=count)
    return list(events)


def abandon(attempt: LevelAttempt) -> None:
    """End the attempt between cycles. Later input is ignored."""
    state = get_game_state(attempt.world)
    if not state.phase.is_terminal:
        attempt.run.outcome = "abandoned"
        state.selected = None
        set_phase(attempt.world, attempt.event_bus, GamePhase.ABANDONED)
        logger.info("Attempt abandoned with score %d", attempt.run.score)
    attempt.event_bus.clear()


def get_snapshot(attempt: LevelAttempt) -> BoardView:
    world = attempt.world
    board = get_board(world)
    jelly = set(jelly_positions(world))
    grid: List[List[Optional[CellView]]] = [[None] * board.cols for _ in range(board.rows)]
    for _, position in world.get_component(BoardPosition):
        pos = (position.row, position.col)
        if not board.is_active(*pos):
            grid[position.row][position.col] = CellView(position=pos, active=False)
            continue
        candy = candy_at(world, *pos)
        grid[position.row][position.col] = CellView(
            position=pos,
            active=True,
            color=candy.color if candy is not None else None,
            special=candy.special.value if candy is not None else "none",
            jelly=pos in jelly,
        )
    run = attempt.run
    state = get_game_state(world)
    captured: Dict[int, int] = dict(run.colors_captured)
    return BoardView(
        rows=board.rows,
        cols=board.cols,
        cells=tuple(tuple(row) for row in grid),
        score=run.score,
        moves_remaining=run.moves_remaining,
        moves_made=run.moves_made,
        phase=state.phase,
        objective=objective_progress(attempt.config, run),
        stars=calculate_stars(attempt.config, run.score),
        selected=state.selected,
        colors_captured=captured,
        jellies_cleared=run.jellies_cleared,
        ingredients_dropped=run.ingredients_dropped,
        outcome=run.outcome,
    )
