"""Special candy rules: what a match creates and what a special clears.

All area functions work on a candy map (occupied playable cells only), so
every returned coordinate is an active, non-empty cell.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from sweetmatch.components.candy import Candy, SpecialKind
from sweetmatch.constants import (
    COLOR_BOMB_MATCH_LENGTH,
    HORIZONTAL,
    STRIPED_MATCH_LENGTH,
    STRIPED_WRAPPED_BAND,
    WRAPPED_COMBO_RADIUS,
    WRAPPED_RADIUS,
)

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
CandyMap = Mapping[Position, Candy]


@dataclass(frozen=True, slots=True)
class SpecialCreation:
    kind: SpecialKind
    position: Optional[Position]


@dataclass(frozen=True, slots=True)
class Detonation:
    """One special candy going off and the cells it hits."""
    kind: SpecialKind
    position: Position
    affected: Tuple[Position, ...]
    source: str

    def as_payload(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "position": self.position,
            "affected": list(self.affected),
            "source": self.source,
        }


NO_SPECIAL = SpecialCreation(kind=SpecialKind.NONE, position=None)


# ----------------------------------------------------------------------------
# Creation
# ----------------------------------------------------------------------------

def _longest_line(positions: Sequence[Position]) -> List[Position]:
    """Longest contiguous straight run contained in positions."""
    best: List[Position] = []
    by_row: Dict[int, List[int]] = {}
    by_col: Dict[int, List[int]] = {}
    for row, col in positions:
        by_row.setdefault(row, []).append(col)
        by_col.setdefault(col, []).append(row)
    for row, cols in by_row.items():
        for run in _contiguous_runs(sorted(set(cols))):
            if len(run) > len(best):
                best = [(row, c) for c in run]
    for col, rows in by_col.items():
        for run in _contiguous_runs(sorted(set(rows))):
            if len(run) > len(best):
                best = [(r, col) for r in run]
    return best


def _contiguous_runs(values: List[int]) -> List[List[int]]:
    runs: List[List[int]] = []
    for value in values:
        if runs and value == runs[-1][-1] + 1:
            runs[-1].append(value)
        else:
            runs.append([value])
    return runs


def _overlap_cell(positions: Sequence[Position]) -> Position:
    for pos in positions:
        same_row = sum(1 for p in positions if p[0] == pos[0])
        same_col = sum(1 for p in positions if p[1] == pos[1])
        if same_row >= 2 and same_col >= 2:
            return pos
    return positions[len(positions) // 2]


def classify(matched_positions: Sequence[Position], direction: str) -> SpecialCreation:
    """Decide which special candy (if any) a resolved match creates, and where.

    - a straight run of five or more: color bomb at the run's middle index
    - a shape spanning two or more rows and columns (L/T): wrapped candy at the
      cell where the runs cross
    - four in a line: striped candy at the second index, clearing the axis
      perpendicular to the run
    - three: nothing
    """
    positions = list(matched_positions)
    count = len(positions)
    if count < 3:
        return NO_SPECIAL
    line = _longest_line(positions)
    if len(line) >= COLOR_BOMB_MATCH_LENGTH:
        if len(line) == count:
            # Keep the caller's ordering for a plain straight run.
            return SpecialCreation(SpecialKind.COLOR_BOMB, positions[count // 2])
        return SpecialCreation(SpecialKind.COLOR_BOMB, line[len(line) // 2])
    rows = {row for row, _ in positions}
    cols = {col for _, col in positions}
    if len(rows) >= 2 and len(cols) >= 2:
        return SpecialCreation(SpecialKind.WRAPPED, _overlap_cell(positions))
    if count == STRIPED_MATCH_LENGTH:
        kind = SpecialKind.STRIPED_COL if direction == HORIZONTAL else SpecialKind.STRIPED_ROW
        return SpecialCreation(kind, positions[1])
    return NO_SPECIAL


# ----------------------------------------------------------------------------
# Activation
# ----------------------------------------------------------------------------

def _row_cells(candies: CandyMap, row: int) -> Set[Position]:
    return {pos for pos in candies if pos[0] == row}


def _col_cells(candies: CandyMap, col: int) -> Set[Position]:
    return {pos for pos in candies if pos[1] == col}


def _block_cells(candies: CandyMap, row: int, col: int, radius: int) -> Set[Position]:
    affected: Set[Position] = set()
    for dr in range(-radius, radius + 1):
        for dc in range(-radius, radius + 1):
            pos = (row + dr, col + dc)
            if pos in candies:
                affected.add(pos)
    return affected


def _color_cells(candies: CandyMap, color: Optional[int]) -> Set[Position]:
    if color is None:
        return set()
    return {pos for pos, candy in candies.items() if candy.color == color}


def effect_area(
    kind: SpecialKind,
    row: int,
    col: int,
    candies: CandyMap,
    token_color: Optional[int] = None,
) -> List[Position]:
    """Cells cleared when a single special candy at (row, col) goes off."""
    if kind is SpecialKind.STRIPED_ROW:
        affected = _row_cells(candies, row)
    elif kind is SpecialKind.STRIPED_COL:
        affected = _col_cells(candies, col)
    elif kind is SpecialKind.WRAPPED:
        affected = _block_cells(candies, row, col, WRAPPED_RADIUS)
    elif kind is SpecialKind.COLOR_BOMB:
        affected = _color_cells(candies, token_color)
    else:
        affected = set()
    return sorted(affected)


def _target_color(candies: CandyMap, bomb_pos: Position, other_pos: Position) -> Optional[int]:
    other = candies.get(other_pos)
    if other is not None:
        return other.color
    bomb = candies.get(bomb_pos)
    return bomb.color if bomb is not None else None


def combined_effect(
    kind_a: SpecialKind,
    kind_b: SpecialKind,
    pos_a: Position,
    pos_b: Position,
    candies: CandyMap,
) -> List[Position]:
    """Cells cleared when two special candies are swapped into each other."""
    affected: Set[Position] = set()
    center_r = (pos_a[0] + pos_b[0]) // 2
    center_c = (pos_a[1] + pos_b[1]) // 2
    kinds = {kind_a, kind_b}

    if SpecialKind.COLOR_BOMB in kinds:
        if kind_a is SpecialKind.COLOR_BOMB and kind_b is SpecialKind.COLOR_BOMB:
            affected = set(candies)
        else:
            if kind_a is SpecialKind.COLOR_BOMB:
                bomb_pos, other_pos, other_kind = pos_a, pos_b, kind_b
            else:
                bomb_pos, other_pos, other_kind = pos_b, pos_a, kind_a
            targets = _color_cells(candies, _target_color(candies, bomb_pos, other_pos))
            for row, col in targets:
                if other_kind.is_striped:
                    affected |= _row_cells(candies, row)
                    affected |= _col_cells(candies, col)
                elif other_kind is SpecialKind.WRAPPED:
                    affected |= _block_cells(candies, row, col, WRAPPED_RADIUS)
                else:
                    affected.add((row, col))
    elif kind_a.is_striped and kind_b.is_striped:
        affected |= _row_cells(candies, center_r)
        affected |= _col_cells(candies, center_c)
    elif (kind_a.is_striped and kind_b is SpecialKind.WRAPPED) or (
        kind_b.is_striped and kind_a is SpecialKind.WRAPPED
    ):
        for offset in range(-STRIPED_WRAPPED_BAND, STRIPED_WRAPPED_BAND + 1):
            affected |= _row_cells(candies, center_r + offset)
            affected |= _col_cells(candies, center_c + offset)
    elif kind_a is SpecialKind.WRAPPED and kind_b is SpecialKind.WRAPPED:
        affected = _block_cells(candies, center_r, center_c, WRAPPED_COMBO_RADIUS)
    return sorted(affected)


def swap_trigger_area(candies: CandyMap, src: Position, dst: Position) -> Tuple[List[Position], List[Detonation]]:
    """Cells a committed swap blows up directly, given the board after the swap.

    Two specials combine; a color bomb with a plain candy takes that candy's
    color; a lone striped or wrapped candy goes off where it landed. The two
    swapped cells are always part of the result.
    """
    a, b = candies.get(src), candies.get(dst)
    if a is None or b is None or not (a.is_special or b.is_special):
        return [], []
    detonations: List[Detonation] = []
    if a.is_special and b.is_special:
        area = set(combined_effect(a.special, b.special, src, dst, candies))
        detonations.append(Detonation(a.special, src, tuple(sorted(area)), "combo"))
        detonations.append(Detonation(b.special, dst, tuple(sorted(area)), "combo"))
    else:
        special_pos, special, other = (src, a, b) if a.is_special else (dst, b, a)
        color = other.color if special.special is SpecialKind.COLOR_BOMB else special.color
        area = set(effect_area(special.special, special_pos[0], special_pos[1], candies, token_color=color))
        detonations.append(Detonation(special.special, special_pos, tuple(sorted(area)), "swap"))
    area |= {src, dst}
    return sorted(area), detonations


def expand_detonations(
    candies: CandyMap,
    to_clear: Iterable[Position],
    already_fired: Iterable[Position] = (),
) -> Tuple[Set[Position], List[Detonation]]:
    """Grow a clear set by setting off every special candy caught in it.

    Chains run until no unfired special remains in the set. A color bomb set
    off this way targets its own color.
    """
    cleared: Set[Position] = set(to_clear)
    fired: Set[Position] = set(already_fired)
    detonations: List[Detonation] = []
    queue = sorted(pos for pos in cleared if pos in candies and candies[pos].is_special and pos not in fired)
    while queue:
        pos = queue.pop(0)
        if pos in fired:
            continue
        fired.add(pos)
        candy = candies[pos]
        area = effect_area(candy.special, pos[0], pos[1], candies, token_color=candy.color)
        detonations.append(Detonation(candy.special, pos, tuple(area), "chain"))
        logger.debug("Chain detonation %s at %s hits %d cells", candy.special.value, pos, len(area))
        fresh = []
        for hit in area:
            if hit not in cleared:
                cleared.add(hit)
            if candies[hit].is_special and hit not in fired and hit not in queue:
                fresh.append(hit)
        queue.extend(sorted(fresh))
    return cleared, detonations
