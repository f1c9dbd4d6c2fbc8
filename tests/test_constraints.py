"""Tests for constraint derivation and clue selection."""

import random

import pytest

from src.engine.clues import random_positions, select_clues
from src.engine.constraints import CENTER_WEIGHT, EQUAL_BONUS, derive_all
from src.engine.model import MOON, SUN, DifficultyParams, Relation

SOLUTION_ROWS = [
    "001011",
    "010101",
    "101100",
    "110010",
    "010101",
    "101010",
]


class _NoJitter(random.Random):
    def random(self):
        return 0.0


def _solution_grid():
    return [[SUN if ch == "0" else MOON for ch in row] for row in SOLUTION_ROWS]


def test_derive_all_covers_every_adjacent_pair():
    solution = _solution_grid()
    scored = derive_all(solution, random.Random(0))

    assert len(scored) == 2 * 6 * 5
    pairs = {(item.constraint.first, item.constraint.second) for item in scored}
    assert len(pairs) == len(scored)
    for item in scored:
        (r1, c1), (r2, c2) = item.constraint.first, item.constraint.second
        expected = Relation.EQUAL if solution[r1][c1] == solution[r2][c2] else Relation.NOT_EQUAL
        assert item.constraint.relation is expected


def test_derive_all_sorted_by_priority():
    priorities = [item.priority for item in derive_all(_solution_grid(), random.Random(5))]
    assert priorities == sorted(priorities, reverse=True)


def test_without_jitter_central_equal_pairs_rank_first():
    scored = derive_all(_solution_grid(), _NoJitter())
    top = scored[0]
    assert top.constraint.relation is Relation.EQUAL
    assert top.priority == pytest.approx(EQUAL_BONUS + CENTER_WEIGHT / 1.5)
    # Corner pairs sit furthest from the centre.
    assert scored[-1].priority < top.priority


def test_sudoku_has_no_constraints():
    solution = [[(r * 3 + r // 3 + c) % 9 + 1 for c in range(9)] for r in range(9)]
    assert derive_all(solution, random.Random(0)) == []


def test_select_clues_respects_params_and_solution():
    solution = _solution_grid()
    rng = random.Random(11)
    scored = derive_all(solution, rng)
    params = DifficultyParams(4, 6, 5, 7)

    predefined, constraints = select_clues(solution, params, scored, rng)

    assert 4 <= len(predefined) <= 6
    assert 5 <= len(constraints) <= 7
    assert len({given.cell for given in predefined}) == len(predefined)
    for given in predefined:
        assert given.value == solution[given.row][given.col]
    assert list(constraints) == [item.constraint for item in scored[: len(constraints)]]
    assert [given.cell for given in predefined] == sorted(given.cell for given in predefined)


def test_select_clues_clips_constraints_to_catalog():
    solution = [[(r * 3 + r // 3 + c) % 9 + 1 for c in range(9)] for r in range(9)]
    predefined, constraints = select_clues(solution, DifficultyParams(30, 30, 2, 4), [], random.Random(0))
    assert len(predefined) == 30
    assert constraints == ()


def test_random_positions_are_distinct():
    cells = random_positions(6, 36, random.Random(1))
    assert sorted(cells) == [(r, c) for r in range(6) for c in range(6)]
    with pytest.raises(ValueError):
        random_positions(6, 37, random.Random(1))
