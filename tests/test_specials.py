import pytest

from sweetmatch.components.candy import Candy, SpecialKind
from sweetmatch.constants import HORIZONTAL, VERTICAL
from sweetmatch.systems.specials import (
    classify,
    combined_effect,
    effect_area,
    expand_detonations,
    swap_trigger_area,
)


def full_board(rows=7, cols=7, colors=5, holes=()):
    return {
        (r, c): Candy(color=(r * 2 + c) % colors)
        for r in range(rows)
        for c in range(cols)
        if (r, c) not in holes
    }


# --- classify --------------------------------------------------------------

def test_run_of_four_horizontal_creates_column_striped_at_second_index():
    run = [(3, 1), (3, 2), (3, 3), (3, 4)]
    creation = classify(run, HORIZONTAL)
    assert creation.kind is SpecialKind.STRIPED_COL
    assert creation.position == (3, 2)


def test_run_of_four_vertical_creates_row_striped():
    run = [(0, 5), (1, 5), (2, 5), (3, 5)]
    creation = classify(run, VERTICAL)
    assert creation.kind is SpecialKind.STRIPED_ROW
    assert creation.position == (1, 5)


def test_run_of_five_creates_color_bomb_in_the_middle():
    run = [(2, 0), (2, 1), (2, 2), (2, 3), (2, 4)]
    creation = classify(run, HORIZONTAL)
    assert creation.kind is SpecialKind.COLOR_BOMB
    assert creation.position == (2, 2)


def test_l_shape_creates_wrapped_at_the_corner():
    shape = [(4, 2), (4, 3), (4, 4), (2, 2), (3, 2)]
    creation = classify(shape, HORIZONTAL)
    assert creation.kind is SpecialKind.WRAPPED
    assert creation.position == (4, 2)


def test_t_shape_creates_wrapped_at_the_crossing():
    shape = [(1, 0), (1, 1), (1, 2), (2, 1), (3, 1)]
    creation = classify(shape, HORIZONTAL)
    assert creation.kind is SpecialKind.WRAPPED
    assert creation.position == (1, 1)


def test_long_line_with_a_branch_is_still_a_color_bomb():
    shape = [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (1, 2), (2, 2)]
    creation = classify(shape, HORIZONTAL)
    assert creation.kind is SpecialKind.COLOR_BOMB
    assert creation.position == (0, 2)


def test_run_of_three_creates_nothing():
    creation = classify([(0, 0), (0, 1), (0, 2)], HORIZONTAL)
    assert creation.kind is SpecialKind.NONE
    assert creation.position is None


# --- effect_area -------------------------------------------------------------

def test_striped_effects_clear_one_line():
    board = full_board(holes={(2, 5)})
    assert effect_area(SpecialKind.STRIPED_ROW, 2, 3, board) == [(2, c) for c in range(7) if c != 5]
    assert effect_area(SpecialKind.STRIPED_COL, 2, 3, board) == [(r, 3) for r in range(7)]


def test_wrapped_effect_is_clipped_to_the_board():
    board = full_board()
    assert effect_area(SpecialKind.WRAPPED, 0, 0, board) == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert len(effect_area(SpecialKind.WRAPPED, 3, 3, board)) == 9


def test_color_bomb_effect_hits_every_cell_of_the_color():
    board = full_board()
    area = effect_area(SpecialKind.COLOR_BOMB, 0, 0, board, token_color=3)
    assert area == sorted(pos for pos, candy in board.items() if candy.color == 3)
    assert effect_area(SpecialKind.COLOR_BOMB, 0, 0, board) == []


def test_plain_candy_has_no_effect():
    assert effect_area(SpecialKind.NONE, 1, 1, full_board()) == []


# --- combined_effect ---------------------------------------------------------

def test_two_color_bombs_clear_the_whole_board():
    board = full_board(holes={(0, 0), (6, 6)})
    area = combined_effect(SpecialKind.COLOR_BOMB, SpecialKind.COLOR_BOMB, (3, 3), (3, 4), board)
    assert area == sorted(board)


def test_striped_pair_clears_a_cross_through_the_midpoint():
    board = full_board()
    area = combined_effect(SpecialKind.STRIPED_ROW, SpecialKind.STRIPED_COL, (2, 2), (2, 3), board)
    expected = {(2, c) for c in range(7)} | {(r, 2) for r in range(7)}
    assert set(area) == expected


def test_striped_and_wrapped_clear_three_rows_and_columns():
    board = full_board()
    area = combined_effect(SpecialKind.WRAPPED, SpecialKind.STRIPED_ROW, (3, 3), (4, 3), board)
    expected = {(r, c) for r in range(7) for c in range(7) if r in (2, 3, 4) or c in (2, 3, 4)}
    assert set(area) == expected


def test_wrapped_pair_clears_a_five_by_five_block():
    board = full_board()
    area = combined_effect(SpecialKind.WRAPPED, SpecialKind.WRAPPED, (3, 3), (3, 4), board)
    assert set(area) == {(r, c) for r in range(1, 6) for c in range(1, 6)}


def test_bomb_with_striped_clears_row_and_column_of_each_target():
    board = full_board(rows=5, cols=5)
    board[(0, 0)] = Candy(color=4, special=SpecialKind.COLOR_BOMB)
    board[(0, 1)] = Candy(color=1, special=SpecialKind.STRIPED_ROW)
    area = set(combined_effect(SpecialKind.COLOR_BOMB, SpecialKind.STRIPED_ROW, (0, 0), (0, 1), board))
    targets = [pos for pos, candy in board.items() if candy.color == 1]
    expected = set()
    for r, c in targets:
        expected |= {(r, cc) for cc in range(5)} | {(rr, c) for rr in range(5)}
    assert area == expected


def test_bomb_with_wrapped_blasts_around_each_target():
    board = {(0, c): Candy(color=0) for c in range(5)}
    board[(0, 0)] = Candy(color=0, special=SpecialKind.COLOR_BOMB)
    board[(0, 1)] = Candy(color=2, special=SpecialKind.WRAPPED)
    board[(0, 4)] = Candy(color=2)
    area = combined_effect(SpecialKind.WRAPPED, SpecialKind.COLOR_BOMB, (0, 1), (0, 0), board)
    assert area == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)]


# --- triggers and chains ----------------------------------------------------

def test_striped_swapped_with_plain_goes_off_where_it_lands():
    board = full_board()
    board[(2, 3)] = Candy(color=0, special=SpecialKind.STRIPED_ROW)
    area, detonations = swap_trigger_area(board, (2, 3), (3, 3))
    assert area == [(2, c) for c in range(7)] + [(3, 3)]
    assert [d.source for d in detonations] == ["swap"]


def test_color_bomb_swapped_with_plain_takes_the_plain_color():
    board = full_board()
    board[(0, 0)] = Candy(color=4, special=SpecialKind.COLOR_BOMB)
    area, _ = swap_trigger_area(board, (0, 0), (0, 1))
    plain_color = board[(0, 1)].color
    expected = {pos for pos, candy in board.items() if candy.color == plain_color} | {(0, 0)}
    assert set(area) == expected


def test_plain_swap_has_no_trigger():
    assert swap_trigger_area(full_board(), (0, 0), (0, 1)) == ([], [])


def test_specials_caught_in_a_clear_go_off_in_a_chain():
    board = full_board()
    board[(1, 1)] = Candy(color=3, special=SpecialKind.STRIPED_COL)
    board[(5, 1)] = Candy(color=0, special=SpecialKind.STRIPED_ROW)
    cleared, detonations = expand_detonations(board, {(1, 0), (1, 1), (1, 2)})
    expected = {(1, 0), (1, 2)} | {(r, 1) for r in range(7)} | {(5, c) for c in range(7)}
    assert cleared == expected
    assert [d.position for d in detonations] == [(1, 1), (5, 1)]
    assert all(d.source == "chain" for d in detonations)


def test_bomb_hit_by_a_blast_targets_its_own_color():
    board = full_board()
    board[(0, 0)] = Candy(color=2, special=SpecialKind.COLOR_BOMB)
    cleared, _ = expand_detonations(board, {(0, 0)})
    assert cleared == {pos for pos, candy in board.items() if candy.color == 2}


def test_already_fired_specials_do_not_go_off_again():
    board = full_board()
    board[(0, 0)] = Candy(color=0, special=SpecialKind.STRIPED_ROW)
    cleared, detonations = expand_detonations(board, {(0, 0)}, already_fired={(0, 0)})
    assert cleared == {(0, 0)}
    assert detonations == []


@pytest.mark.parametrize("kind", [SpecialKind.STRIPED_ROW, SpecialKind.WRAPPED, SpecialKind.COLOR_BOMB])
def test_effects_never_include_empty_cells(kind):
    holes = {(3, 2), (3, 4), (2, 3), (4, 3)}
    board = full_board(holes=holes)
    area = effect_area(kind, 3, 3, board, token_color=board[(3, 3)].color)
    assert not holes & set(area)
