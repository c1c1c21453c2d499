from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from sweetmatch.components.candy import Candy
from sweetmatch.engine import LevelAttempt, attempt_swap
from sweetmatch.events.recorder import Event
from sweetmatch.systems.board_ops import active_candy_map, board_dimensions
from sweetmatch.systems.match import find_match_regions, find_valid_swaps
from sweetmatch.systems.specials import expand_detonations, swap_trigger_area

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Swap = Tuple[Position, Position]


def predicted_clear_size(candies: Dict[Position, Candy], rows: int, cols: int, swap: Swap) -> int:
    """Cells the first resolution step of ``swap`` would clear, ignoring cascades."""
    src, dst = swap
    swapped = dict(candies)
    swapped[src], swapped[dst] = swapped[dst], swapped[src]
    trigger, _ = swap_trigger_area(swapped, src, dst)
    matched = {pos for region in find_match_regions(swapped, rows, cols) for pos in region.positions}
    fired = {src, dst} if trigger else set()
    cleared, _ = expand_detonations(swapped, matched | set(trigger), already_fired=fired)
    return len(cleared)


class RandomAgent:
    """Plays a uniformly random valid swap."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.random = rng or random.Random()

    def choose(self, attempt: LevelAttempt) -> Optional[Swap]:
        swaps = find_valid_swaps(attempt.world)
        if not swaps:
            return None
        return self.random.choice(swaps)


class GreedyAgent:
    """Plays the valid swap that clears the most cells right away.

    Ties are broken with the agent's own random source.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.random = rng or random.Random()

    def choose(self, attempt: LevelAttempt) -> Optional[Swap]:
        swaps = find_valid_swaps(attempt.world)
        if not swaps:
            return None
        rows, cols = board_dimensions(attempt.world)
        candies = active_candy_map(attempt.world)
        best: List[Swap] = []
        best_size = -1
        for swap in swaps:
            size = predicted_clear_size(candies, rows, cols, swap)
            if size > best_size:
                best, best_size = [swap], size
            elif size == best_size:
                best.append(swap)
        return self.random.choice(best)


AGENTS = {
    "random": RandomAgent,
    "greedy": GreedyAgent,
}


def create_agent(name: str, rng: Optional[random.Random] = None):
    try:
        factory = AGENTS[name]
    except KeyError:
        raise ValueError(f"Unknown agent {name!r}; choose from {sorted(AGENTS)}") from None
    return factory(rng)


def available_agents() -> List[str]:
    return sorted(AGENTS)


def play_out(attempt: LevelAttempt, agent) -> List[Event]:
    """Let ``agent`` play until the attempt ends or the board has no valid swap."""
    events: List[Event] = []
    while not attempt.is_over:
        swap = agent.choose(attempt)
        if swap is None:
            logger.info("No valid swap left after %d moves", attempt.run.moves_made)
            break
        result = attempt_swap(attempt, *swap)
        events.extend(result.events)
    return events
