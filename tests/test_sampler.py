"""Tests for the randomized solution sampler."""

import random

import pytest

from src.engine.model import MOON, SUN, Family, empty_grid
from src.engine.rules import is_valid_solution
from src.engine.sampler import sample_solution


def _has_run_of_three(line):
    return any(line[i] == line[i + 1] == line[i + 2] for i in range(len(line) - 2))


@pytest.mark.parametrize("seed", range(8))
def test_binary_solution_is_balanced_without_runs(seed):
    grid = sample_solution(6, random.Random(seed))

    for index in range(6):
        row = grid[index]
        column = [grid[r][index] for r in range(6)]
        for line in (row, column):
            assert line.count(SUN) == 3
            assert line.count(MOON) == 3
            assert not _has_run_of_three(line)


@pytest.mark.parametrize("seed", [0, 1])
def test_sudoku_solution_is_latin_in_rows_columns_and_boxes(seed):
    grid = sample_solution(9, random.Random(seed))
    digits = set(range(1, 10))

    for index in range(9):
        assert set(grid[index]) == digits
        assert {grid[r][index] for r in range(9)} == digits
    for box_row in range(0, 9, 3):
        for box_col in range(0, 9, 3):
            box = {grid[r][c] for r in range(box_row, box_row + 3) for c in range(box_col, box_col + 3)}
            assert box == digits


def test_same_seed_gives_same_solution():
    assert sample_solution(6, random.Random(42)) == sample_solution(6, random.Random(42))


def test_different_seeds_give_diverse_solutions():
    solutions = {tuple(map(tuple, sample_solution(6, random.Random(seed)))) for seed in range(10)}
    assert len(solutions) > 1


def test_starting_grid_is_kept_and_not_mutated():
    start = empty_grid(6)
    start[0][0] = MOON
    start[3][4] = SUN

    grid = sample_solution(6, random.Random(3), grid=start)

    assert grid[0][0] == MOON
    assert grid[3][4] == SUN
    assert is_valid_solution(grid)
    assert sum(cell is not None for row in start for cell in row) == 2


def test_inconsistent_starting_grid_is_rejected():
    start = empty_grid(6)
    start[1][0] = start[1][1] = start[1][2] = SUN
    with pytest.raises(ValueError):
        sample_solution(6, random.Random(0), grid=start)


def test_unsupported_size_is_rejected():
    with pytest.raises(ValueError):
        sample_solution(5, random.Random(0))
    with pytest.raises(ValueError):
        sample_solution(6, random.Random(0), family=Family.SUDOKU)
