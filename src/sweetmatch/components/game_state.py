"""Game state resource describing the selection/resolution phase of an attempt."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class GamePhase(Enum):
    """Phases of one level attempt."""
    IDLE = auto()
    AWAITING_FIRST_SELECTION = auto()
    AWAITING_SECOND_SELECTION = auto()
    RESOLVING = auto()
    COMPLETE = auto()
    FAILED = auto()
    ABANDONED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.COMPLETE, GamePhase.FAILED, GamePhase.ABANDONED)

    @property
    def accepts_input(self) -> bool:
        return self in (
            GamePhase.IDLE,
            GamePhase.AWAITING_FIRST_SELECTION,
            GamePhase.AWAITING_SECOND_SELECTION,
        )


@dataclass
class GameState:
    """Singleton component storing the phase, the current selection and the input guard."""
    phase: GamePhase = GamePhase.IDLE
    selected: Optional[Tuple[int, int]] = None
    # Set for the whole swap/resolve cycle; input arriving meanwhile is dropped.
    processing: bool = False
