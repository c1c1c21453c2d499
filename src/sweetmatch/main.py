"""Headless entry point: play one level with an autoplay agent.

Run with: ``sweetmatch data/levels/sweet_start.json --agent greedy --seed 7``
"""
from __future__ import annotations

import argparse
import logging
import random
from collections import Counter
from typing import List, Optional, Sequence

from sweetmatch.ai.agents import available_agents, create_agent, play_out
from sweetmatch.engine import BoardView, get_snapshot, start_attempt
from sweetmatch.errors import InvalidConfigError
from sweetmatch.levels.loader import load_level_config

logger = logging.getLogger(__name__)

SPECIAL_GLYPHS = {
    "none": "",
    "striped_row": "-",
    "striped_col": "|",
    "wrapped": "*",
    "color_bomb": "@",
}


def render_board(view: BoardView) -> str:
    lines: List[str] = []
    for row in view.cells:
        parts = []
        for cell in row:
            if not cell.active:
                parts.append(" # ")
            elif cell.is_empty:
                parts.append(" . ")
            else:
                parts.append(f"{cell.color}{SPECIAL_GLYPHS.get(cell.special, '?')}".center(3))
        lines.append("".join(parts))
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sweetmatch", description=__doc__.splitlines()[0])
    parser.add_argument("level", help="path to a level JSON file")
    parser.add_argument("--agent", choices=available_agents(), default="greedy")
    parser.add_argument("--seed", type=int, default=None, help="seed for the board and the agent")
    parser.add_argument("--show-board", action="store_true", help="print the final board")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_level_config(args.level)
    except (InvalidConfigError, OSError) as exc:
        logger.error("Cannot load %s: %s", args.level, exc)
        return 2

    board_rng = random.Random(args.seed)
    agent_rng = random.Random(None if args.seed is None else args.seed + 1)
    attempt = start_attempt(config, rng=board_rng)
    events = play_out(attempt, create_agent(args.agent, agent_rng))
    view = get_snapshot(attempt)

    counts = Counter(event.type for event in events)
    print(f"Level: {config.name or args.level}")
    print(f"Outcome: {view.outcome or 'unfinished'}  score={view.score}  stars={view.stars}")
    print(f"Moves: {view.moves_made} made, {view.moves_remaining} left")
    print(
        f"Objective: {view.objective.kind} {view.objective.current}/{view.objective.target}"
    )
    print("Events: " + ", ".join(f"{name}={count}" for name, count in sorted(counts.items())))
    if args.show_board:
        print(render_board(view))
    return 0 if view.outcome == "complete" else 1


if __name__ == "__main__":
    raise SystemExit(main())
