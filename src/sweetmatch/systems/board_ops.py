from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from esper import World

from sweetmatch.components.active_switch import ActiveSwitch
from sweetmatch.components.board import Board
from sweetmatch.components.board_position import BoardPosition
from sweetmatch.components.candy import Candy, SpecialKind
from sweetmatch.components.inactive import Inactive
from sweetmatch.components.jelly import Jelly
from sweetmatch.errors import OutOfBoundsCoordinateError

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
CandyMap = Dict[Position, Candy]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    color: int
    special: SpecialKind


@dataclass(slots=True)
class ClearedCandy:
    position: Position
    color: int
    special: SpecialKind


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board component not found")


def board_dimensions(world: World) -> Tuple[int, int] | None:
    for _, board in world.get_component(Board):
        return board.rows, board.cols
    return None


def get_entity_at(world: World, row: int, col: int) -> int | None:
    board = get_board(world)
    return board.index.get((row, col))


def populate_board(world: World, grid: Sequence[Sequence[Optional[Candy]]], jelly: Iterable[Position] = ()) -> None:
    """Create one tile entity per coordinate from a generated grid.

    ``None`` entries are inactive (masked-out) coordinates.
    """
    board = get_board(world)
    jelly_set = set(jelly)
    for row in range(board.rows):
        for col in range(board.cols):
            cell = grid[row][col]
            entity = world.create_entity(BoardPosition(row=row, col=col))
            board.index[(row, col)] = entity
            if not board.is_active(row, col):
                world.add_component(entity, Inactive())
                world.add_component(entity, ActiveSwitch(active=False))
                continue
            if cell is None:
                world.add_component(entity, Candy(color=0))
                world.add_component(entity, ActiveSwitch(active=False))
            else:
                world.add_component(entity, Candy(color=cell.color, special=cell.special))
                world.add_component(entity, ActiveSwitch(active=True))
            if (row, col) in jelly_set:
                world.add_component(entity, Jelly())


def _is_coordinate(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_playable(world: World, pos: Position) -> bool:
    try:
        require_playable(world, pos)
    except OutOfBoundsCoordinateError:
        return False
    return True


def require_playable(world: World, pos: Position) -> None:
    """Raise ``OutOfBoundsCoordinateError`` unless pos is an in-grid, unmasked cell."""
    board = get_board(world)
    try:
        row, col = pos
    except (TypeError, ValueError) as exc:
        raise OutOfBoundsCoordinateError(pos, reason="malformed") from exc
    if not (_is_coordinate(row) and _is_coordinate(col)):
        raise OutOfBoundsCoordinateError(pos, reason="malformed")
    if not board.in_bounds(row, col):
        raise OutOfBoundsCoordinateError(pos)
    if not board.is_active(row, col):
        raise OutOfBoundsCoordinateError(pos, reason="masked")


def candy_at(world: World, row: int, col: int) -> Candy | None:
    """Return the candy occupying (row, col), or None for empty/inactive cells."""
    entity = get_entity_at(world, row, col)
    if entity is None or world.has_component(entity, Inactive):
        return None
    switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
    if not switch.active:
        return None
    return world.component_for_entity(entity, Candy)


def set_candy(world: World, row: int, col: int, candy: Candy) -> None:
    """Place a candy on a playable cell, overwriting whatever was there."""
    require_playable(world, (row, col))
    entity = get_entity_at(world, row, col)
    if entity is None:
        raise RuntimeError(f"No tile entity at {(row, col)}")
    current: Candy = world.component_for_entity(entity, Candy)
    current.color = candy.color
    current.special = candy.special
    world.component_for_entity(entity, ActiveSwitch).active = True


def active_candy_map(world: World) -> CandyMap:
    """Return a snapshot mapping of occupied positions to copies of their candies."""
    mapping: CandyMap = {}
    for entity, (position, switch, candy) in world.get_components(BoardPosition, ActiveSwitch, Candy):
        if not switch.active:
            continue
        mapping[(position.row, position.col)] = Candy(color=candy.color, special=candy.special)
    return mapping


def swap_candies(world: World, src: Position, dst: Position) -> bool:
    """Swap the candies held by two occupied tiles."""
    src_entity = get_entity_at(world, src[0], src[1])
    dst_entity = get_entity_at(world, dst[0], dst[1])
    if src_entity is None or dst_entity is None:
        return False
    try:
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
        if not (src_switch.active and dst_switch.active):
            return False
        src_candy: Candy = world.component_for_entity(src_entity, Candy)
        dst_candy: Candy = world.component_for_entity(dst_entity, Candy)
    except KeyError:
        return False
    src_candy.color, dst_candy.color = dst_candy.color, src_candy.color
    src_candy.special, dst_candy.special = dst_candy.special, src_candy.special
    return True


def clear_cells(world: World, positions: Iterable[Position]) -> Tuple[List[ClearedCandy], List[Position]]:
    """Empty the given cells.

    Returns the candies removed and the coordinates whose jelly was cleared.
    Empty and inactive cells are skipped.
    """
    cleared: List[ClearedCandy] = []
    jellies: List[Position] = []
    for row, col in sorted(set(positions)):
        entity = get_entity_at(world, row, col)
        if entity is None or world.has_component(entity, Inactive):
            continue
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            continue
        candy: Candy = world.component_for_entity(entity, Candy)
        cleared.append(ClearedCandy(position=(row, col), color=candy.color, special=candy.special))
        candy.special = SpecialKind.NONE
        switch.active = False
        if world.has_component(entity, Jelly):
            world.remove_component(entity, Jelly)
            jellies.append((row, col))
    return cleared, jellies


def _column_slots(board: Board, col: int) -> List[int]:
    return [row for row in range(board.rows) if board.is_active(row, col)]


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Plan how candies fall: within each column, occupied playable cells
    compact toward the bottom (highest row) keeping their order. Candies pass
    over masked-out gaps; masked cells are never targets."""
    board = get_board(world)
    moves: List[GravityMove] = []
    for col in range(board.cols):
        slots = _column_slots(board, col)
        filled = [(row, candy_at(world, row, col)) for row in slots]
        filled = [(row, candy) for row, candy in filled if candy is not None]
        targets = slots[len(slots) - len(filled):]
        for (source_row, candy), target_row in zip(reversed(filled), reversed(targets)):
            if source_row == target_row:
                continue
            moves.append(GravityMove(
                source=(source_row, col),
                target=(target_row, col),
                color=candy.color,
                special=candy.special,
            ))
    return moves


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    # Moves are planned bottom-up per column, so a target is always vacated before it is written.
    for move in moves:
        src_entity = get_entity_at(world, *move.source)
        dst_entity = get_entity_at(world, *move.target)
        if src_entity is None or dst_entity is None:
            continue
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
        if not src_switch.active:
            continue
        dst_candy: Candy = world.component_for_entity(dst_entity, Candy)
        dst_candy.color = move.color
        dst_candy.special = move.special
        dst_switch.active = True
        src_switch.active = False
        world.component_for_entity(src_entity, Candy).special = SpecialKind.NONE


def refill_empty_tiles(world: World, color_pool_size: int, rng: random.Random | None = None) -> List[Tuple[Position, int]]:
    """Fill every empty playable cell with a fresh plain candy."""
    rng = rng or getattr(world, "random", None) or random.Random()
    spawned: List[Tuple[Position, int]] = []
    board = get_board(world)
    for row in range(board.rows):
        for col in range(board.cols):
            if not board.is_active(row, col):
                continue
            entity = board.index[(row, col)]
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if switch.active:
                continue
            candy: Candy = world.component_for_entity(entity, Candy)
            candy.color = rng.randrange(color_pool_size)
            candy.special = SpecialKind.NONE
            switch.active = True
            spawned.append(((row, col), candy.color))
    return spawned


def collapse_and_refill(world: World, color_pool_size: int, rng: random.Random | None = None):
    """Apply gravity then top up the board; returns (moves, new_tiles)."""
    moves = compute_gravity_moves(world)
    if moves:
        apply_gravity_moves(world, moves)
    new_tiles = refill_empty_tiles(world, color_pool_size, rng)
    logger.debug("Gravity moved %d candies, refilled %d cells", len(moves), len(new_tiles))
    return moves, new_tiles


def jelly_positions(world: World) -> List[Position]:
    positions: List[Position] = []
    for _, (position, _jelly) in world.get_components(BoardPosition, Jelly):
        positions.append((position.row, position.col))
    return sorted(positions)


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)
