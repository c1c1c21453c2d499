import os
import random

import pytest

import level_tuning_tool
from sweetmatch.ai.agents import GreedyAgent, RandomAgent, create_agent, play_out, predicted_clear_size
from sweetmatch.engine import attempt_swap, get_snapshot, start_attempt
from sweetmatch.events.bus import EVENT_CLEAR, EVENT_REFILL
from sweetmatch.levels import load_level_config
from sweetmatch.main import main
from sweetmatch.systems.board_ops import active_candy_map
from sweetmatch.systems.match import find_all_matches, find_valid_swaps

from tests.helpers import events_of, make_config, start_painted

LEVELS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'levels')
HILLS = os.path.join(LEVELS_DIR, 'chocolate_hills.json')
SWEET_START = os.path.join(LEVELS_DIR, 'sweet_start.json')


def test_valid_swaps_are_all_accepted():
    attempt = start_painted(cells={(2, 1): 4, (3, 2): 4})
    swaps = find_valid_swaps(attempt.world)
    assert ((2, 2), (3, 2)) in swaps
    assert ((0, 0), (0, 1)) not in swaps


def test_greedy_agent_picks_a_biggest_clear():
    # Swapping (2,2)<->(3,2) lines up four candies of color 4.
    attempt = start_painted(cells={(2, 1): 4, (2, 3): 4, (3, 2): 4})
    candies = active_candy_map(attempt.world)
    sizes = {swap: predicted_clear_size(candies, 6, 6, swap) for swap in find_valid_swaps(attempt.world)}
    assert sizes[((2, 2), (3, 2))] == 4
    choice = GreedyAgent(random.Random(0)).choose(attempt)
    assert sizes[choice] == max(sizes.values())


def test_random_agent_is_reproducible():
    attempt = start_attempt(make_config(), rng=random.Random(11))
    first = RandomAgent(random.Random(5)).choose(attempt)
    second = RandomAgent(random.Random(5)).choose(attempt)
    assert first == second
    assert first in find_valid_swaps(attempt.world)


def test_unknown_agent_name():
    with pytest.raises(ValueError):
        create_agent("oracle")


@pytest.mark.parametrize("seed", range(4))
def test_autoplay_respects_the_mask_and_keeps_score_monotonic(seed):
    config = load_level_config(HILLS)
    attempt = start_attempt(config, rng=random.Random(seed))
    agent = create_agent("random", random.Random(seed))
    scores = [0]
    while not attempt.is_over:
        swap = agent.choose(attempt)
        if swap is None:
            break
        result = attempt_swap(attempt, *swap)
        assert result.accepted
        scores.append(attempt.run.score)
        for clear in events_of(result.events, EVENT_CLEAR):
            assert all(config.is_active(*pos) for pos in clear.payload['positions'])
        for refill in events_of(result.events, EVENT_REFILL):
            assert all(config.is_active(*tile['position']) for tile in refill.payload['new_tiles'])
            for move in refill.payload['moves']:
                assert config.is_active(*move['from']) and config.is_active(*move['to'])
        assert find_all_matches(attempt.world) == []
    assert scores == sorted(scores)
    view = get_snapshot(attempt)
    assert all(cell.color is None for row in view.cells for cell in row if not cell.active)


def test_same_seeds_replay_identically():
    config = load_level_config(SWEET_START)

    def replay():
        attempt = start_attempt(config, rng=random.Random(21))
        return play_out(attempt, create_agent("greedy", random.Random(22))), get_snapshot(attempt)

    events_a, view_a = replay()
    events_b, view_b = replay()
    assert events_a == events_b
    assert view_a == view_b


def test_cli_plays_a_level(capsys):
    code = main([SWEET_START, "--agent", "greedy", "--seed", "3", "--show-board"])
    out = capsys.readouterr().out
    assert code in (0, 1)
    assert "Outcome:" in out and "Sweet Start" in out
    assert len(out.strip().splitlines()) >= 5 + 7


def test_cli_reports_a_bad_level(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[]", encoding="utf-8")
    assert main([str(path)]) == 2
    assert main([str(tmp_path / "missing.json")]) == 2


def test_tuning_summary():
    config = load_level_config(SWEET_START)
    records = level_tuning_tool.simulate(config, runs=3, agent_name="greedy", seed=1)
    summary = level_tuning_tool.summarise(records)
    assert summary.runs == 3
    assert 0.0 <= summary.win_rate <= 1.0
    assert sum(summary.star_counts.values()) == 3
    assert summary.p10_score <= summary.median_score <= summary.p90_score


def test_tuning_summary_needs_runs():
    with pytest.raises(ValueError):
        level_tuning_tool.summarise([])
