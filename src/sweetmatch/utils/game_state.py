from __future__ import annotations

from esper import World

from sweetmatch.components.game_state import GamePhase, GameState
from sweetmatch.components.run_state import RunState
from sweetmatch.events.bus import EVENT_PHASE_CHANGED, EventBus
from sweetmatch.levels.config import LevelConfig


def get_game_state(world: World) -> GameState:
    """Return the shared GameState component, creating it if absent."""
    existing = list(world.get_component(GameState))
    if existing:
        return existing[0][1]
    world.create_entity(GameState())
    return list(world.get_component(GameState))[0][1]


def get_run_state(world: World) -> RunState:
    for _, run in world.get_component(RunState):
        return run
    raise RuntimeError("RunState not found; was the attempt started?")


def get_level_config(world: World) -> LevelConfig:
    for _, config in world.get_component(LevelConfig):
        return config
    raise RuntimeError("LevelConfig not found; was the attempt started?")


def set_phase(world: World, event_bus: EventBus, phase: GamePhase) -> None:
    """Update the attempt phase and emit a change event when it differs."""
    state = get_game_state(world)
    previous = state.phase
    if previous == phase:
        return
    state.phase = phase
    event_bus.emit(EVENT_PHASE_CHANGED, previous_phase=previous, new_phase=phase)
