import logging
from typing import Tuple

from esper import World

from sweetmatch.components.game_state import GamePhase
from sweetmatch.events.bus import (
    EventBus,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_DO,
    EVENT_TILE_SWAP_FINALIZE,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from sweetmatch.systems.board_ops import is_adjacent, is_playable, swap_candies
from sweetmatch.utils.game_state import get_game_state, set_phase

logger = logging.getLogger(__name__)


class BoardSystem:
    """Turns tile clicks into swap requests and applies committed swaps."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_TILE_SWAP_DO, self.on_swap_do)
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_answered)
        self.event_bus.subscribe(EVENT_TILE_SWAP_INVALID, self.on_swap_answered)

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        state = get_game_state(self.world)
        if state.processing or not state.phase.accepts_input:
            return
        pos = (row, col)
        if not is_playable(self.world, pos):
            return
        if state.selected is None:
            self._select(pos)
            return
        if state.selected == pos:
            self._deselect(reason='same_cell')
            return
        if is_adjacent(state.selected, pos):
            src = state.selected
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=pos)
            return
        # Non-adjacent second click moves the selection.
        self._select(pos)

    def _select(self, pos: Tuple[int, int]):
        state = get_game_state(self.world)
        state.selected = pos
        set_phase(self.world, self.event_bus, GamePhase.AWAITING_SECOND_SELECTION)
        self.event_bus.emit(EVENT_TILE_SELECTED, row=pos[0], col=pos[1])

    def _deselect(self, reason: str):
        state = get_game_state(self.world)
        prev = state.selected
        if prev is None:
            return
        state.selected = None
        if state.phase == GamePhase.AWAITING_SECOND_SELECTION:
            set_phase(self.world, self.event_bus, GamePhase.AWAITING_FIRST_SELECTION)
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])

    def on_swap_answered(self, sender, **kwargs):
        # Any answered request consumes the pending selection.
        self._deselect(reason='swap')

    def on_swap_do(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        if not swap_candies(self.world, src, dst):
            logger.warning("Swap %s<->%s could not be applied", src, dst)
            return
        self.event_bus.emit(EVENT_TILE_SWAP_FINALIZE, src=src, dst=dst)
