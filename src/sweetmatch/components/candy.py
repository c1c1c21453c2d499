from dataclasses import dataclass
from enum import Enum


class SpecialKind(Enum):
    NONE = "none"
    STRIPED_ROW = "striped_row"    # clears its whole row
    STRIPED_COL = "striped_col"    # clears its whole column
    WRAPPED = "wrapped"            # 3x3 blast
    COLOR_BOMB = "color_bomb"      # clears every candy of one color

    @property
    def is_striped(self) -> bool:
        return self in (SpecialKind.STRIPED_ROW, SpecialKind.STRIPED_COL)


@dataclass(slots=True)
class Candy:
    """Token held by an occupied tile: a color id plus an optional special kind."""
    color: int
    special: SpecialKind = SpecialKind.NONE

    @property
    def is_special(self) -> bool:
        return self.special is not SpecialKind.NONE
