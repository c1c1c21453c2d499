from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(slots=True)
class RunState:
    """Mutable per-attempt progress.

    Only the cascade engine and the objective tracker write to it. It is thrown
    away with the attempt; nothing here is persisted.
    """

    moves_remaining: int
    score: int = 0
    cascade_depth: int = 0
    colors_captured: Dict[int, int] = field(default_factory=dict)
    jellies_cleared: int = 0
    ingredients_dropped: int = 0
    moves_made: int = 0
    outcome: Optional[str] = None

    def capture(self, color: int, amount: int = 1) -> None:
        if amount <= 0:
            return
        self.colors_captured[color] = self.colors_captured.get(color, 0) + amount
