import logging
import random

from esper import World

from sweetmatch.components.board import Board
from sweetmatch.components.game_state import GamePhase, GameState
from sweetmatch.components.run_state import RunState
from sweetmatch.levels.config import LevelConfig
from sweetmatch.systems.board_ops import populate_board
from sweetmatch.systems.generator import generate_grid

logger = logging.getLogger(__name__)


def create_world(
    config: LevelConfig,
    *,
    rng: random.Random | None = None,
) -> World:
    """Build the world for one level attempt: a dealt board plus the state entity."""
    config.validate()
    world = World()
    setattr(world, "random", rng or random.Random())

    mask = config.resolved_mask()
    world.create_entity(Board(rows=config.rows, cols=config.cols, mask=mask))
    grid = generate_grid(config.rows, config.cols, mask, config.color_pool_size, world.random)
    populate_board(world, grid, jelly=config.jelly)

    # Single state entity shared by every system.
    state_entity = world.create_entity()
    world.add_component(state_entity, GameState(phase=GamePhase.AWAITING_FIRST_SELECTION))
    world.add_component(state_entity, RunState(moves_remaining=config.move_limit))
    world.add_component(state_entity, config)
    logger.debug("World ready: %dx%d board, %d colors", config.rows, config.cols, config.color_pool_size)
    return world
