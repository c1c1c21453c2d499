import logging
from typing import Iterable, List, Set, Tuple

from esper import World

from sweetmatch.components.candy import Candy, SpecialKind
from sweetmatch.components.game_state import GamePhase
from sweetmatch.constants import MAX_CASCADE_STEPS
from sweetmatch.events.bus import (
    EventBus,
    EVENT_BOARD_CHANGED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_CLEAR,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL,
    EVENT_SPECIAL_ACTIVATED,
    EVENT_SPECIAL_CREATED,
    EVENT_SWAP,
    EVENT_TILE_SWAP_DO,
    EVENT_TILE_SWAP_FINALIZE,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_VALID,
)
from sweetmatch.systems.board_ops import (
    active_candy_map,
    board_dimensions,
    clear_cells,
    collapse_and_refill,
    set_candy,
)
from sweetmatch.systems.match import find_match_regions, group_match_regions
from sweetmatch.systems.specials import Detonation, classify, expand_detonations, swap_trigger_area
from sweetmatch.utils.game_state import get_game_state, get_level_config, get_run_state, set_phase

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class MatchResolutionSystem:
    """Runs the swap -> clear -> gravity -> refill -> rematch loop.

    Every step is synchronous; the whole chain of a committed swap finishes
    inside the handler for EVENT_TILE_SWAP_FINALIZE. Step N+1 only starts
    after step N has refilled the board.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        self.event_bus.subscribe(EVENT_TILE_SWAP_INVALID, self.on_swap_invalid)
        self.event_bus.subscribe(EVENT_TILE_SWAP_FINALIZE, self.on_swap_finalize)
        self.event_bus.subscribe(EVENT_BOARD_CHANGED, self.on_board_changed)

    def on_swap_valid(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        state = get_game_state(self.world)
        state.processing = True
        set_phase(self.world, self.event_bus, GamePhase.RESOLVING)
        run = get_run_state(self.world)
        run.moves_remaining -= 1
        run.moves_made += 1
        logger.debug("Swap %s<->%s accepted, %d moves left", src, dst, run.moves_remaining)
        self.event_bus.emit(EVENT_TILE_SWAP_DO, src=src, dst=dst)

    def on_swap_invalid(self, sender, **kwargs):
        # Rejected swaps never touch the board, so there is nothing to revert.
        self.event_bus.emit(
            EVENT_SWAP,
            src=kwargs.get('src'),
            dst=kwargs.get('dst'),
            valid=False,
            reason=kwargs.get('reason'),
        )

    def on_swap_finalize(self, sender, **kwargs):
        src = tuple(kwargs.get('src'))
        dst = tuple(kwargs.get('dst'))
        self.event_bus.emit(EVENT_SWAP, src=src, dst=dst, valid=True, reason=None)
        trigger, detonations = swap_trigger_area(active_candy_map(self.world), src, dst)
        fired = {src, dst} if trigger else set()
        try:
            steps = self.resolve(trigger=trigger, detonations=detonations, fired=fired)
            self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=steps)
        finally:
            self._finish()

    def on_board_changed(self, sender, **kwargs):
        """Settle the board after an outside change, if it holds any match."""
        state = get_game_state(self.world)
        if state.processing or state.phase.is_terminal:
            return
        dims = board_dimensions(self.world)
        if not dims or not find_match_regions(active_candy_map(self.world), *dims):
            return
        reason = kwargs.get('reason', 'board_changed')
        logger.debug("Settling board after %s", reason)
        state.processing = True
        previous = state.phase
        set_phase(self.world, self.event_bus, GamePhase.RESOLVING)
        try:
            steps = self.resolve()
            self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=steps)
        finally:
            self._finish(previous)

    def _finish(self, resume: GamePhase = GamePhase.IDLE):
        state = get_game_state(self.world)
        state.processing = False
        if not state.phase.is_terminal:
            set_phase(self.world, self.event_bus, resume)

    def resolve(
        self,
        trigger: Iterable[Position] = (),
        detonations: Iterable[Detonation] = (),
        fired: Iterable[Position] = (),
    ) -> int:
        """Clear, refill and rematch until the board settles; returns the step count.

        ``trigger`` holds the cells a committed swap blows up directly. It is
        applied once, together with the first round of matches.
        """
        config = get_level_config(self.world)
        run = get_run_state(self.world)
        rows, cols = board_dimensions(self.world)
        rng = getattr(self.world, 'random', None)
        pending_trigger: Set[Position] = set(trigger)
        pending_detonations: List[Detonation] = list(detonations)
        fired_set: Set[Position] = set(fired)
        depth = 0
        while True:
            candies = active_candy_map(self.world)
            regions = find_match_regions(candies, rows, cols)
            if not regions and not pending_trigger:
                break
            if depth >= MAX_CASCADE_STEPS:
                logger.warning("Stopping cascade after %d steps with matches still on the board", depth)
                break
            run.cascade_depth = depth
            shapes = group_match_regions(regions)
            creations = []
            for shape in shapes:
                creation = classify(shape.positions, shape.direction)
                if creation.kind is not SpecialKind.NONE:
                    creations.append((creation, shape.color))
            matched = sorted({pos for region in regions for pos in region.positions})
            to_clear, chain = expand_detonations(candies, set(matched) | pending_trigger, already_fired=fired_set)
            all_detonations = pending_detonations + chain
            protected = {creation.position for creation, _ in creations}
            positions = sorted(to_clear - protected)

            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions, regions=len(regions))
            if matched:
                self.event_bus.emit(EVENT_MATCH_FOUND, positions=matched, size=len(matched), depth=depth)
            for detonation in all_detonations:
                self.event_bus.emit(EVENT_SPECIAL_ACTIVATED, **detonation.as_payload())

            cleared, jellies = clear_cells(self.world, positions)
            for creation, color in creations:
                row, col = creation.position
                set_candy(self.world, row, col, Candy(color=color, special=creation.kind))
            logger.debug(
                "Step %d cleared %d cells, created %d specials, %d detonations",
                depth, len(cleared), len(creations), len(all_detonations),
            )
            self.event_bus.emit(
                EVENT_CLEAR,
                depth=depth,
                positions=[c.position for c in cleared],
                candies=[
                    {'position': c.position, 'color': c.color, 'special': c.special.value}
                    for c in cleared
                ],
                jellies=jellies,
                detonations=[d.as_payload() for d in all_detonations],
                created=[creation.kind.value for creation, _ in creations],
            )
            for creation, color in creations:
                self.event_bus.emit(
                    EVENT_SPECIAL_CREATED,
                    kind=creation.kind.value,
                    position=creation.position,
                    color=color,
                    depth=depth,
                )

            moves, new_tiles = collapse_and_refill(self.world, config.color_pool_size, rng)
            move_payload = [{'from': move.source, 'to': move.target} for move in moves]
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=move_payload)
            self.event_bus.emit(
                EVENT_REFILL,
                depth=depth,
                moves=move_payload,
                new_tiles=[{'position': pos, 'color': color} for pos, color in new_tiles],
            )
            pending_trigger = set()
            pending_detonations = []
            # Specials that already went off are gone, so positions can be reused.
            fired_set = set()
            depth += 1
        run.cascade_depth = 0
        return depth
