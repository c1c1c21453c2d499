"""Level configuration consumed by the engine.

A ``LevelConfig`` is an input: the engine validates it when an attempt starts
and never mutates it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional, Tuple, Union

from sweetmatch.constants import DEFAULT_COLOR_POOL_SIZE, STAR_COUNT
from sweetmatch.errors import InvalidConfigError

Position = Tuple[int, int]
Mask = Tuple[Tuple[bool, ...], ...]


@dataclass(frozen=True)
class ScoreObjective:
    target: int
    kind = "score"


@dataclass(frozen=True)
class JellyObjective:
    target: int
    kind = "jelly"


@dataclass(frozen=True)
class CollectColorsObjective:
    """Collect at least ``target[color]`` candies of each listed color id."""
    target: Mapping[int, int]
    kind = "collect_colors"


@dataclass(frozen=True)
class DropIngredientsObjective:
    target: int
    kind = "drop_ingredients"


Objective = Union[ScoreObjective, JellyObjective, CollectColorsObjective, DropIngredientsObjective]


@dataclass(frozen=True)
class LevelConfig:
    rows: int
    cols: int
    move_limit: int
    objective: Objective
    star_thresholds: Tuple[int, int, int]
    color_pool_size: int = DEFAULT_COLOR_POOL_SIZE
    mask: Optional[Mask] = None
    jelly: FrozenSet[Position] = field(default_factory=frozenset)
    name: str = ""
    level_id: Optional[int] = None

    def is_active(self, row: int, col: int) -> bool:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            return False
        if self.mask is None:
            return True
        return bool(self.mask[row][col])

    def resolved_mask(self) -> Mask:
        return tuple(
            tuple(self.is_active(r, c) for c in range(self.cols))
            for r in range(self.rows)
        )

    def validate(self) -> None:
        """Raise ``InvalidConfigError`` if the level cannot be played."""
        if not isinstance(self.rows, int) or not isinstance(self.cols, int):
            raise InvalidConfigError("Grid dimensions must be integers")
        if self.rows <= 0 or self.cols <= 0:
            raise InvalidConfigError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        if self.move_limit <= 0:
            raise InvalidConfigError(f"Move limit must be positive, got {self.move_limit}")
        if self.color_pool_size < 1:
            raise InvalidConfigError("Color pool must contain at least one color")
        self._validate_mask()
        self._validate_objective()
        self._validate_stars()
        self._validate_jelly()

    def _validate_mask(self) -> None:
        if self.mask is None:
            return
        if len(self.mask) != self.rows or any(len(row) != self.cols for row in self.mask):
            raise InvalidConfigError(
                f"Shape mask does not match the {self.rows}x{self.cols} grid"
            )
        if not any(any(row) for row in self.mask):
            raise InvalidConfigError("Shape mask has no playable cells")

    def _validate_objective(self) -> None:
        objective = self.objective
        if isinstance(objective, CollectColorsObjective):
            if not objective.target:
                raise InvalidConfigError("Collect-colors objective lists no colors")
            for color, count in objective.target.items():
                if not 0 <= color < self.color_pool_size:
                    raise InvalidConfigError(
                        f"Collect-colors target uses color {color} outside a pool of {self.color_pool_size}"
                    )
                if count <= 0:
                    raise InvalidConfigError(f"Collect-colors target for color {color} must be positive")
            return
        if not isinstance(objective, (ScoreObjective, JellyObjective, DropIngredientsObjective)):
            raise InvalidConfigError(f"Unknown objective {objective!r}")
        if objective.target <= 0:
            raise InvalidConfigError(f"Objective target must be positive, got {objective.target}")
        if isinstance(objective, JellyObjective) and objective.target > len(self.jelly):
            raise InvalidConfigError(
                f"Jelly objective needs {objective.target} jellies but the level has {len(self.jelly)}"
            )

    def _validate_stars(self) -> None:
        thresholds = tuple(self.star_thresholds)
        if len(thresholds) != STAR_COUNT:
            raise InvalidConfigError(f"Expected {STAR_COUNT} star thresholds, got {len(thresholds)}")
        if any(value < 0 for value in thresholds):
            raise InvalidConfigError("Star thresholds must be non-negative")
        if any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise InvalidConfigError(f"Star thresholds must be strictly ascending, got {thresholds}")

    def _validate_jelly(self) -> None:
        for row, col in self.jelly:
            if not self.is_active(row, col):
                raise InvalidConfigError(f"Jelly at {(row, col)} is not on a playable cell")
