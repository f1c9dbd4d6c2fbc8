"""Tests for the generate-verify-retry loop."""

import random
from types import SimpleNamespace

import pytest

from src.engine import generator
from src.engine.constraints import derive_all
from src.engine.generator import (
    GenerationError,
    GeneratorConfig,
    build_candidate,
    first_accepted,
    generate_puzzle,
    iter_attempts,
)
from src.engine.model import (
    MOON,
    SUN,
    Difficulty,
    Family,
    PredefinedCell,
    difficulty_params,
    empty_grid,
)
from src.engine.rules import is_valid_solution
from src.engine.sampler import sample_solution
from src.engine.solver_core import count_solutions

SOLUTION_ROWS = [
    "001011",
    "010101",
    "101100",
    "110010",
    "010101",
    "101010",
]


def _solution_grid():
    return [[SUN if ch == "0" else MOON for ch in row] for row in SOLUTION_ROWS]


def _assert_well_formed(puzzle):
    solution = puzzle.solution_grid()
    assert is_valid_solution(solution, puzzle.constraints, puzzle.family)
    for given in puzzle.predefined_cells:
        assert given.value == solution[given.row][given.col]
    assert count_solutions(puzzle.partial_grid(), puzzle.constraints, cap=2) == 1


@pytest.mark.parametrize("difficulty", ["easy", "medium"])
def test_generated_binary_puzzle_is_unique(difficulty):
    puzzle = generate_puzzle(6, difficulty, rng=3)
    assert puzzle.family is Family.BINARY
    assert puzzle.difficulty is Difficulty.parse(difficulty)
    _assert_well_formed(puzzle)


def test_generated_sudoku_is_unique():
    puzzle = generate_puzzle(9, Difficulty.EASY, rng=random.Random(1))
    assert puzzle.family is Family.SUDOKU
    assert puzzle.constraints == ()
    assert 44 <= len(puzzle.predefined_cells) <= 52
    _assert_well_formed(puzzle)


def test_same_seed_gives_same_puzzle():
    first = generate_puzzle(6, "medium", rng=random.Random(7))
    second = generate_puzzle(6, "medium", rng=random.Random(7))
    assert first == second
    assert first.solution == second.solution
    assert first.predefined_cells == second.predefined_cells
    assert first.constraints == second.constraints


def test_seeded_pipeline_reproduces_the_accepted_clue_set():
    seed = 21
    puzzle = generate_puzzle(6, "easy", rng=random.Random(seed))

    accepted = next(a for a in iter_attempts(6, "easy", random.Random(seed)) if a.accepted)
    assert accepted.puzzle == puzzle
    assert first_accepted(6, "easy", rng=random.Random(seed)) == accepted

    assert accepted.number == 1
    replay = build_candidate(6, Difficulty.EASY, random.Random(seed), Family.BINARY)
    assert replay == puzzle


@pytest.mark.parametrize("seed", [2, 10, 11, 13, 21])
def test_six_givens_and_six_top_relations_are_unique(seed):
    rng = random.Random(seed)
    solution = sample_solution(6, rng)
    top = [item.constraint for item in derive_all(solution, rng)[:6]]

    grid = empty_grid(6)
    for r, c in [(0, 0), (0, 1), (0, 2), (3, 3), (4, 2), (5, 5)]:
        grid[r][c] = solution[r][c]

    assert len(top) == 6
    assert count_solutions(grid, top, cap=2) == 1


def test_full_relation_catalog_with_few_givens_is_unique():
    solution = _solution_grid()
    cells = [(0, 0), (0, 1), (0, 2), (3, 3), (4, 2), (5, 5)]
    givens = [PredefinedCell(r, c, solution[r][c]) for r, c in cells]
    constraints = [item.constraint for item in derive_all(solution, random.Random(0))]

    grid = empty_grid(6)
    for given in givens:
        grid[given.row][given.col] = given.value

    assert count_solutions(grid, constraints, cap=2) == 1
    assert count_solutions(grid, [], cap=2) == 2


@pytest.mark.parametrize("seed", range(3))
def test_clue_density_decreases_with_difficulty(seed):
    counts = [
        len(generate_puzzle(6, difficulty, rng=seed).predefined_cells)
        for difficulty in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)
    ]
    assert counts[0] >= counts[1] >= counts[2]


def test_escalation_and_exhaustion(monkeypatch):
    monkeypatch.setattr(generator, "count_solutions", lambda *args, **kwargs: 2)
    config = GeneratorConfig(max_attempts=5, escalate_after=2)

    attempts = list(iter_attempts(6, "hard", random.Random(0), config))
    assert [a.number for a in attempts] == [1, 2, 3, 4, 5]
    assert [a.escalated for a in attempts] == [False, False, True, True, True]
    assert not any(a.accepted for a in attempts)

    escalated = difficulty_params(Family.BINARY, 6, Difficulty.HARD, escalated=True)
    with pytest.raises(GenerationError) as excinfo:
        generate_puzzle(6, "hard", rng=0, config=config)
    assert excinfo.value.attempts == 5
    assert excinfo.value.difficulty is Difficulty.HARD
    assert escalated.min_cells > difficulty_params(Family.BINARY, 6, Difficulty.HARD).min_cells


def test_time_budget_stops_the_loop(monkeypatch):
    ticks = iter([0.0, 10.0, 20.0])
    monkeypatch.setattr(generator, "time", SimpleNamespace(monotonic=lambda: next(ticks)))

    with pytest.raises(GenerationError) as excinfo:
        generate_puzzle(6, "easy", rng=0, config=GeneratorConfig(time_budget=5.0))
    assert excinfo.value.attempts == 0
    assert "time budget" in excinfo.value.reason


def test_config_validation_and_env():
    with pytest.raises(ValueError):
        GeneratorConfig(max_attempts=0)
    with pytest.raises(ValueError):
        GeneratorConfig(cap=1)

    env = {"LOGIQ_MAX_ATTEMPTS": "7", "LOGIQ_ESCALATE_AFTER": "3", "LOGIQ_TIME_BUDGET": ""}
    config = GeneratorConfig.from_env(env)
    assert config.max_attempts == 7
    assert config.escalate_after == 3
    assert config.time_budget is None

    assert GeneratorConfig.from_env(env, max_attempts=9, time_budget=None).max_attempts == 9

    with pytest.raises(ValueError):
        GeneratorConfig.from_env({"LOGIQ_MAX_ATTEMPTS": "many"})


def test_unknown_difficulty_and_size():
    with pytest.raises(ValueError):
        generate_puzzle(6, "impossible")
    with pytest.raises(ValueError):
        generate_puzzle(7, "easy")


def test_scaled_tables_for_other_sizes():
    params = difficulty_params(Family.BINARY, 8, Difficulty.EASY)
    assert params.min_cells > difficulty_params(Family.BINARY, 6, Difficulty.EASY).min_cells
    assert params.min_cells <= params.max_cells
