import logging
from dataclasses import dataclass
from typing import Iterable

from esper import World

from sweetmatch.components.candy import SpecialKind
from sweetmatch.components.game_state import GamePhase
from sweetmatch.components.run_state import RunState
from sweetmatch.constants import (
    BASE_POINTS_PER_CANDY,
    CASCADE_MULTIPLIER_STEP,
    COLOR_BOMB_CREATION_BONUS,
    STRIPED_CREATION_BONUS,
    WRAPPED_CREATION_BONUS,
)
from sweetmatch.events.bus import (
    EventBus,
    EVENT_CASCADE_COMPLETE,
    EVENT_CLEAR,
    EVENT_INGREDIENTS_DROPPED,
    EVENT_LEVEL_COMPLETE,
    EVENT_LEVEL_FAILED,
    EVENT_SCORE_CHANGED,
)
from sweetmatch.levels.config import (
    CollectColorsObjective,
    DropIngredientsObjective,
    JellyObjective,
    LevelConfig,
    ScoreObjective,
)
from sweetmatch.utils.game_state import get_game_state, get_level_config, get_run_state, set_phase

logger = logging.getLogger(__name__)

_CREATION_BONUS = {
    SpecialKind.STRIPED_ROW: STRIPED_CREATION_BONUS,
    SpecialKind.STRIPED_COL: STRIPED_CREATION_BONUS,
    SpecialKind.WRAPPED: WRAPPED_CREATION_BONUS,
    SpecialKind.COLOR_BOMB: COLOR_BOMB_CREATION_BONUS,
}


@dataclass(frozen=True, slots=True)
class ObjectiveProgress:
    kind: str
    current: int
    target: int
    complete: bool


def step_points(cleared_count: int, depth: int) -> int:
    """Points for one resolution step: 60 per candy, scaled by cascade depth."""
    return int(round(cleared_count * BASE_POINTS_PER_CANDY * (1 + CASCADE_MULTIPLIER_STEP * depth)))


def creation_bonus(kinds: Iterable[SpecialKind]) -> int:
    return sum(_CREATION_BONUS.get(kind, 0) for kind in kinds)


def is_objective_complete(config: LevelConfig, run: RunState) -> bool:
    objective = config.objective
    if isinstance(objective, ScoreObjective):
        return run.score >= objective.target
    if isinstance(objective, JellyObjective):
        return run.jellies_cleared >= objective.target
    if isinstance(objective, CollectColorsObjective):
        return all(run.colors_captured.get(color, 0) >= count for color, count in objective.target.items())
    if isinstance(objective, DropIngredientsObjective):
        return run.ingredients_dropped >= objective.target
    return False


def calculate_stars(config: LevelConfig, score: int) -> int:
    """Number of star thresholds the score has reached (0 to 3)."""
    return sum(1 for threshold in config.star_thresholds if score >= threshold)


def objective_progress(config: LevelConfig, run: RunState) -> ObjectiveProgress:
    objective = config.objective
    if isinstance(objective, CollectColorsObjective):
        # Overshooting one color does not make up for another.
        current = sum(min(run.colors_captured.get(color, 0), count) for color, count in objective.target.items())
        target = sum(objective.target.values())
    else:
        target = objective.target
        if isinstance(objective, ScoreObjective):
            current = run.score
        elif isinstance(objective, JellyObjective):
            current = run.jellies_cleared
        else:
            current = run.ingredients_dropped
    return ObjectiveProgress(
        kind=objective.kind,
        current=current,
        target=target,
        complete=is_objective_complete(config, run),
    )


class ObjectiveSystem:
    """Scores clears, keeps the objective counters and decides the outcome.

    Success is checked before move exhaustion, so a last move that meets the
    objective always completes the level.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_CLEAR, self.on_clear)
        self.event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_cascade_complete)
        self.event_bus.subscribe(EVENT_INGREDIENTS_DROPPED, self.on_ingredients_dropped)

    def on_clear(self, sender, **kwargs):
        candies = kwargs.get('candies') or []
        jellies = kwargs.get('jellies') or []
        created = kwargs.get('created') or []
        depth = kwargs.get('depth', 0)
        run = get_run_state(self.world)
        for candy in candies:
            run.capture(candy['color'])
        run.jellies_cleared += len(jellies)
        delta = step_points(len(candies), depth) + creation_bonus(SpecialKind(kind) for kind in created)
        if delta <= 0:
            return
        run.score += delta
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=run.score, delta=delta, depth=depth)

    def on_cascade_complete(self, sender, **kwargs):
        self.evaluate()

    def on_ingredients_dropped(self, sender, **kwargs):
        count = kwargs.get('count', 0)
        if count <= 0:
            return
        state = get_game_state(self.world)
        if state.phase.is_terminal:
            return
        run = get_run_state(self.world)
        run.ingredients_dropped += count
        # Mid-cycle reports are picked up when the cascade completes.
        if not state.processing:
            self.evaluate()

    def evaluate(self) -> None:
        state = get_game_state(self.world)
        if state.phase.is_terminal:
            return
        config = get_level_config(self.world)
        run = get_run_state(self.world)
        stars = calculate_stars(config, run.score)
        if is_objective_complete(config, run):
            run.outcome = "complete"
            set_phase(self.world, self.event_bus, GamePhase.COMPLETE)
            logger.info("Level complete: score=%d stars=%d moves_left=%d", run.score, stars, run.moves_remaining)
            self.event_bus.emit(
                EVENT_LEVEL_COMPLETE,
                score=run.score,
                stars=stars,
                moves_remaining=run.moves_remaining,
            )
        elif run.moves_remaining <= 0:
            run.outcome = "failed"
            set_phase(self.world, self.event_bus, GamePhase.FAILED)
            logger.info("Level failed: score=%d stars=%d", run.score, stars)
            self.event_bus.emit(EVENT_LEVEL_FAILED, score=run.score, stars=stars, reason="out_of_moves")
