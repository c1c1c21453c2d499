from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)

    def clear(self):
        """Drop every subscription; later emits become no-ops."""
        self._signals.clear()


# ============================================================================
# PUBLIC EVENT STREAM
# These are the events a presentation layer subscribes to. Each one is also
# returned to callers of the engine facade as an ``Event`` record.
# ============================================================================
EVENT_SWAP = "swap"                        # payload: src=(r,c), dst=(r,c), valid=bool, reason=str|None
EVENT_CLEAR = "clear"                      # payload: depth=int, positions=[(r,c),...], candies=[dict], jellies=[(r,c),...], detonations=[dict], created=[str]
EVENT_SPECIAL_CREATED = "special_created"  # payload: kind=str, position=(r,c), color=int, depth=int
EVENT_REFILL = "refill"                    # payload: depth=int, moves=[{'from','to'}], new_tiles=[{'position','color'}]
EVENT_CASCADE_STEP = "cascade_step"        # payload: depth=int, positions=[(r,c),...], regions=int
EVENT_LEVEL_COMPLETE = "level_complete"    # payload: score=int, stars=int, moves_remaining=int
EVENT_LEVEL_FAILED = "level_failed"        # payload: score=int, stars=int, reason=str

PUBLIC_EVENTS = (
    EVENT_SWAP,
    EVENT_CLEAR,
    EVENT_SPECIAL_CREATED,
    EVENT_REFILL,
    EVENT_CASCADE_STEP,
    EVENT_LEVEL_COMPLETE,
    EVENT_LEVEL_FAILED,
)


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"            # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"      # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"  # payload: reason=str, prev_row, prev_col


# ============================================================================
# SWAP PIPELINE
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_TILE_SWAP_DO = "tile_swap_do"                # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_FINALIZE = "tile_swap_finalize"    # payload: src=(r,c), dst=(r,c)


# ============================================================================
# RESOLUTION
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, depth=int
EVENT_SPECIAL_ACTIVATED = "special_activated"      # payload: kind=str, position=(r,c), affected=[(r,c),...], source=str
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[{'from','to'}]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_BOARD_CHANGED = "board_changed"              # payload: reason=str


# ============================================================================
# SCORING & FLOW
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int, depth=int
EVENT_INGREDIENTS_DROPPED = "ingredients_dropped"  # payload: count=int
EVENT_PHASE_CHANGED = "phase_changed"              # payload: previous_phase=GamePhase|None, new_phase=GamePhase
