"""Pick the predefined cells and constraints shown to the player."""

import random
from typing import List, Sequence, Tuple

from .constraints import ScoredConstraint
from .model import Cell, Constraint, DifficultyParams, PredefinedCell, Symbol
from src.utils.trace import get_tracer


def random_positions(size: int, count: int, rng: random.Random) -> List[Cell]:
    """`count` distinct coordinates drawn uniformly from a size x size grid."""
    if count > size * size:
        raise ValueError(f"Cannot pick {count} distinct cells from a {size}x{size} grid")
    indices = rng.sample(range(size * size), count)
    return [divmod(index, size) for index in indices]


def select_clues(
    solution: Sequence[Sequence[Symbol]],
    params: DifficultyParams,
    scored: Sequence[ScoredConstraint],
    rng: random.Random,
) -> Tuple[Tuple[PredefinedCell, ...], Tuple[Constraint, ...]]:
    """
    Draw a clue set sized by `params`: random predefined cells, and the top of
    the priority-sorted constraint catalog. Sufficiency is not checked here.
    """
    size = len(solution)
    cell_count = rng.randint(params.min_cells, params.max_cells)
    constraint_count = min(rng.randint(params.min_constraints, params.max_constraints), len(scored))

    predefined = tuple(
        PredefinedCell(row, col, solution[row][col])
        for row, col in sorted(random_positions(size, cell_count, rng))
    )
    constraints = tuple(item.constraint for item in scored[:constraint_count])

    get_tracer().log_select(len(predefined), len(constraints))
    return predefined, constraints
