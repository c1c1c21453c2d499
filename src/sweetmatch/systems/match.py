from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Set, Tuple

from esper import World

from sweetmatch.components.candy import Candy
from sweetmatch.constants import HORIZONTAL, MIN_MATCH_LENGTH, VERTICAL
from sweetmatch.errors import OutOfBoundsCoordinateError
from sweetmatch.events.bus import (
    EventBus,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from sweetmatch.systems.board_ops import (
    active_candy_map,
    board_dimensions,
    is_adjacent,
    require_playable,
)
from sweetmatch.utils.game_state import get_game_state

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class MatchRegion:
    """A maximal straight run of at least three same-colored candies.

    positions are ordered along the run; direction is the scan axis.
    """
    positions: Tuple[Position, ...]
    color: int
    direction: str

    def __len__(self) -> int:
        return len(self.positions)


@dataclass(frozen=True, slots=True)
class MatchShape:
    """Overlapping regions (an L, T or plus) resolved together.

    direction is taken from the first region found, the primary seed.
    """
    positions: Tuple[Position, ...]
    color: int
    direction: str
    regions: Tuple[MatchRegion, ...]


def _scan_line(candies: Mapping[Position, Candy], line: List[Position], direction: str) -> List[MatchRegion]:
    regions: List[MatchRegion] = []
    run: List[Position] = []
    last_color = None
    for pos in line:
        candy = candies.get(pos)
        color = candy.color if candy is not None else None
        if color is not None and color == last_color:
            run.append(pos)
            continue
        if len(run) >= MIN_MATCH_LENGTH:
            regions.append(MatchRegion(positions=tuple(run), color=last_color, direction=direction))
        run = [pos] if color is not None else []
        last_color = color
    if len(run) >= MIN_MATCH_LENGTH:
        regions.append(MatchRegion(positions=tuple(run), color=last_color, direction=direction))
    return regions


def find_match_regions(candies: Mapping[Position, Candy], rows: int, cols: int) -> List[MatchRegion]:
    """Scan every row, then every column, for runs of three or more.

    ``candies`` holds only occupied playable cells, so empty and masked-out
    cells break runs. A cell in both a horizontal and a vertical run appears in
    both regions.
    """
    regions: List[MatchRegion] = []
    for r in range(rows):
        regions.extend(_scan_line(candies, [(r, c) for c in range(cols)], HORIZONTAL))
    for c in range(cols):
        regions.extend(_scan_line(candies, [(r, c) for r in range(rows)], VERTICAL))
    return regions


def group_match_regions(regions: List[MatchRegion]) -> List[MatchShape]:
    """Merge regions that share a coordinate into shapes, keeping detection order."""
    groups: List[List[MatchRegion]] = []
    group_cells: List[Set[Position]] = []
    for region in regions:
        cells = set(region.positions)
        touching = [idx for idx, existing in enumerate(group_cells) if existing & cells]
        if not touching:
            groups.append([region])
            group_cells.append(cells)
            continue
        first = touching[0]
        groups[first].append(region)
        group_cells[first] |= cells
        # A region can bridge two groups found earlier.
        for idx in reversed(touching[1:]):
            groups[first].extend(groups.pop(idx))
            group_cells[first] |= group_cells.pop(idx)
    shapes: List[MatchShape] = []
    for group in groups:
        ordered: List[Position] = []
        seen: Set[Position] = set()
        for region in group:
            for pos in region.positions:
                if pos not in seen:
                    seen.add(pos)
                    ordered.append(pos)
        primary = group[0]
        shapes.append(MatchShape(
            positions=tuple(ordered),
            color=primary.color,
            direction=primary.direction,
            regions=tuple(group),
        ))
    return shapes


def find_all_matches(world: World) -> List[MatchRegion]:
    """Detect all match regions on the live board."""
    dims = board_dimensions(world)
    if not dims:
        return []
    rows, cols = dims
    return find_match_regions(active_candy_map(world), rows, cols)


def _has_line_match(candies: Mapping[Position, Candy], pos: Position) -> bool:
    """Return True if there is a horizontal or vertical run of three through pos."""
    row, col = pos
    candy = candies.get(pos)
    if candy is None:
        return False
    color = candy.color

    def same(p: Position) -> bool:
        other = candies.get(p)
        return other is not None and other.color == color

    # Horizontal sweep
    h_run = 1
    c_left = col - 1
    while same((row, c_left)):
        h_run += 1
        c_left -= 1
    c_right = col + 1
    while same((row, c_right)):
        h_run += 1
        c_right += 1
    if h_run >= MIN_MATCH_LENGTH:
        return True
    # Vertical sweep
    v_run = 1
    r_up = row - 1
    while same((r_up, col)):
        v_run += 1
        r_up -= 1
    r_down = row + 1
    while same((r_down, col)):
        v_run += 1
        r_down += 1
    return v_run >= MIN_MATCH_LENGTH


def predict_swap_creates_match(candies: Mapping[Position, Candy], src: Position, dst: Position) -> bool:
    """Return True if swapping src/dst would create a new match."""
    if src not in candies or dst not in candies:
        return False
    swapped: Dict[Position, Candy] = dict(candies)
    swapped[src], swapped[dst] = swapped[dst], swapped[src]
    return _has_line_match(swapped, src) or _has_line_match(swapped, dst)


def is_valid_swap(candies: Mapping[Position, Candy], src: Position, dst: Position) -> bool:
    """A swap is valid if it forms a match or moves a special candy."""
    if src not in candies or dst not in candies or not is_adjacent(src, dst):
        return False
    if candies[src].is_special or candies[dst].is_special:
        return True
    return predict_swap_creates_match(candies, src, dst)


def find_valid_swaps(world: World) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would be accepted."""
    dims = board_dimensions(world)
    if not dims:
        return []
    rows, cols = dims
    candies = active_candy_map(world)
    swaps: List[Tuple[Position, Position]] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            if pos not in candies:
                continue
            for other in ((row, col + 1), (row + 1, col)):
                if is_valid_swap(candies, pos, other):
                    swaps.append((pos, other))
    return swaps


class MatchSystem:
    """Gatekeeper for swap requests.

    Requests arriving while a cycle is resolving, or after the attempt ended,
    are dropped without any event. Everything else is answered with either
    EVENT_TILE_SWAP_VALID or EVENT_TILE_SWAP_INVALID.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if src is None or dst is None:
            return
        state = get_game_state(self.world)
        if state.processing or not state.phase.accepts_input:
            logger.debug("Ignoring swap %s<->%s during %s", src, dst, state.phase.name)
            return
        try:
            require_playable(self.world, src)
            require_playable(self.world, dst)
        except OutOfBoundsCoordinateError as exc:
            logger.debug("Rejecting swap %s<->%s: %s", src, dst, exc)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=exc.reason)
            return
        src, dst = tuple(src), tuple(dst)
        if not is_adjacent(src, dst):
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason="not_adjacent")
            return
        candies = active_candy_map(self.world)
        if is_valid_swap(candies, src, dst):
            self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
        else:
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason="no_match")
