"""Level difficulty explorer.

Plays a level many times with an autoplay agent and summarises how it went:
win rate, score spread and how often each star rating is earned. With
``--plot`` a score histogram is saved with the level's star thresholds drawn in.

Run with: ``python level_tuning_tool.py data/levels/jelly_jungle.json --runs 200 --plot``
"""
from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

# Ensure src/ is on the import path when run from a checkout.
SRC_PATH = Path(__file__).parent / "src"
if SRC_PATH.exists() and str(SRC_PATH) not in sys.path:
    sys.path.append(str(SRC_PATH))

from sweetmatch.ai.agents import available_agents, create_agent, play_out  # noqa: E402
from sweetmatch.engine import get_snapshot, start_attempt  # noqa: E402
from sweetmatch.levels.config import LevelConfig  # noqa: E402
from sweetmatch.levels.loader import load_level_config  # noqa: E402


@dataclass(slots=True)
class RunRecord:
    score: int
    stars: int
    won: bool
    moves_made: int


@dataclass(slots=True)
class TuningSummary:
    runs: int
    win_rate: float
    mean_score: float
    median_score: float
    p10_score: float
    p90_score: float
    mean_moves: float
    star_counts: Dict[int, int]


def simulate(config: LevelConfig, runs: int, agent_name: str = "greedy", seed: int = 0) -> List[RunRecord]:
    records: List[RunRecord] = []
    for index in range(runs):
        attempt = start_attempt(config, rng=random.Random(seed + index))
        play_out(attempt, create_agent(agent_name, random.Random(seed + index + 100_000)))
        view = get_snapshot(attempt)
        records.append(RunRecord(
            score=view.score,
            stars=view.stars,
            won=view.outcome == "complete",
            moves_made=view.moves_made,
        ))
    return records


def summarise(records: List[RunRecord]) -> TuningSummary:
    if not records:
        raise ValueError("No runs to summarise")
    scores = np.array([record.score for record in records], dtype=float)
    stars = np.array([record.stars for record in records], dtype=int)
    wins = np.array([record.won for record in records], dtype=bool)
    moves = np.array([record.moves_made for record in records], dtype=float)
    star_counts = {value: int(np.count_nonzero(stars == value)) for value in range(4)}
    return TuningSummary(
        runs=len(records),
        win_rate=float(wins.mean()),
        mean_score=float(scores.mean()),
        median_score=float(np.median(scores)),
        p10_score=float(np.percentile(scores, 10)),
        p90_score=float(np.percentile(scores, 90)),
        mean_moves=float(moves.mean()),
        star_counts=star_counts,
    )


def plot_scores(records: List[RunRecord], config: LevelConfig, output: Path) -> Path:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    scores = np.array([record.score for record in records], dtype=float)
    plt.figure(figsize=(7, 4))
    plt.hist(scores, bins=min(30, max(5, len(records) // 5)), color="tab:pink", alpha=0.8, label="Final score")
    for stars, threshold in enumerate(config.star_thresholds, start=1):
        plt.axvline(threshold, color="gray", linestyle="--", label=f"{stars} star(s) at {threshold}")
    plt.xlabel("Score")
    plt.ylabel("Attempts")
    plt.title(f"Score distribution: {config.name or 'level'}")
    plt.legend()
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(output)
    plt.close()
    return output


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Autoplay a level and summarise its difficulty")
    parser.add_argument("level", help="path to a level JSON file")
    parser.add_argument("--runs", type=int, default=50)
    parser.add_argument("--agent", choices=available_agents(), default="greedy")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--plot", type=Path, nargs="?", const=Path("score_histogram.png"), default=None)
    args = parser.parse_args(argv)

    config = load_level_config(args.level)
    records = simulate(config, args.runs, agent_name=args.agent, seed=args.seed)
    summary = summarise(records)
    print(f"{config.name or args.level}: {summary.runs} runs with the {args.agent} agent")
    print(f"  win rate     {summary.win_rate:.1%}")
    print(f"  score        mean {summary.mean_score:.0f}  median {summary.median_score:.0f}"
          f"  p10 {summary.p10_score:.0f}  p90 {summary.p90_score:.0f}")
    print(f"  moves used   {summary.mean_moves:.1f}")
    print("  stars        " + "  ".join(f"{k}:{v}" for k, v in summary.star_counts.items()))
    if args.plot is not None:
        path = plot_scores(records, config, args.plot)
        print(f"  histogram    {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
