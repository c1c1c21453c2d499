"""Initial board generation."""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from sweetmatch.components.candy import Candy
from sweetmatch.errors import InvalidConfigError

logger = logging.getLogger(__name__)

Grid = List[List[Optional[Candy]]]


def _mask_allows(mask: Optional[Sequence[Sequence[bool]]], row: int, col: int) -> bool:
    if row < 0 or col < 0:
        return False
    if mask is None:
        return True
    return bool(mask[row][col])


def generate_grid(
    rows: int,
    cols: int,
    mask: Optional[Sequence[Sequence[bool]]],
    color_pool_size: int,
    rng: random.Random | None = None,
    *,
    avoid_matches: bool = True,
) -> Grid:
    """Deal a board with no pre-existing run of three.

    Cells are filled in row-major order. A color is excluded when the two
    playable cells directly to the left, or directly above, already share it;
    masked-out cells break those pairs. This is a single greedy pass. If every
    color is excluded (only possible with a pool of one or two colors) the
    constraint is relaxed for that cell instead of failing.

    Inactive coordinates come back as ``None``.
    """
    if color_pool_size < 1:
        raise InvalidConfigError("Color pool must contain at least one color")
    rng = rng or random.Random()
    palette = list(range(color_pool_size))
    grid: Grid = [[None] * cols for _ in range(rows)]
    relaxed = 0
    for r in range(rows):
        for c in range(cols):
            if not _mask_allows(mask, r, c):
                continue
            available = palette
            if avoid_matches:
                forbidden = set()
                if _mask_allows(mask, r, c - 1) and _mask_allows(mask, r, c - 2):
                    left1, left2 = grid[r][c - 1], grid[r][c - 2]
                    if left1 is not None and left2 is not None and left1.color == left2.color:
                        forbidden.add(left1.color)
                if _mask_allows(mask, r - 1, c) and _mask_allows(mask, r - 2, c):
                    up1, up2 = grid[r - 1][c], grid[r - 2][c]
                    if up1 is not None and up2 is not None and up1.color == up2.color:
                        forbidden.add(up1.color)
                if forbidden:
                    available = [color for color in palette if color not in forbidden]
                if not available:
                    relaxed += 1
                    available = palette
            grid[r][c] = Candy(color=rng.choice(available))
    if relaxed:
        logger.warning(
            "Relaxed the no-match constraint on %d cell(s); a pool of %d colors cannot avoid every run",
            relaxed,
            color_pool_size,
        )
    return grid
