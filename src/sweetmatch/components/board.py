from dataclasses import dataclass, field
from typing import Dict, Tuple

Position = Tuple[int, int]


@dataclass(slots=True)
class Board:
    rows: int
    cols: int
    # Shape mask: mask[r][c] is True where the cell is playable. Fixed for the attempt.
    mask: Tuple[Tuple[bool, ...], ...] = ()
    # (row, col) -> tile entity, filled when the board is populated.
    index: Dict[Position, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.mask:
            self.mask = tuple(tuple(True for _ in range(self.cols)) for _ in range(self.rows))

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_active(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and self.mask[row][col]
