"""Randomized backtracking that fills a grid into one complete solution."""

import random
from typing import Optional

from .model import Family, Grid, copy_grid, empty_grid
from .rules import is_legal_placement, prefilled_is_consistent
from src.utils.trace import Tracer, get_tracer


def sample_solution(
    size: int,
    rng: random.Random,
    family: Optional[Family] = None,
    grid: Optional[Grid] = None,
    tracer: Optional[Tracer] = None,
) -> Grid:
    """
    Fill a grid row by row, trying the alphabet in an order shuffled by `rng`
    at each empty cell. Returns a new grid; a `grid` passed in is cloned first
    and its filled cells are kept.
    """
    tracer = tracer or get_tracer()
    family = Family.for_size(size) if family is None else Family(family)
    family.check_size(size)

    work = empty_grid(size) if grid is None else copy_grid(grid)
    if len(work) != size or any(len(row) != size for row in work):
        raise ValueError(f"Starting grid must be {size}x{size}")
    if not prefilled_is_consistent(work, family=family):
        raise ValueError("Starting grid breaks the placement rules")

    alphabet = list(family.alphabet(size))
    stats = {"placements": 0, "backtracks": 0}

    def _fill(index: int) -> bool:
        if index == size * size:
            return True
        row, col = divmod(index, size)
        if work[row][col] is not None:
            return _fill(index + 1)

        symbols = list(alphabet)
        rng.shuffle(symbols)
        for symbol in symbols:
            if not is_legal_placement(work, row, col, symbol, family):
                continue
            work[row][col] = symbol
            stats["placements"] += 1
            if _fill(index + 1):
                return True
            work[row][col] = None
            stats["backtracks"] += 1
        return False

    if not _fill(0):
        tracer.log_sample(stats["placements"], stats["backtracks"], reason="No completion")
        raise ValueError("Starting grid admits no complete solution")

    tracer.log_sample(stats["placements"], stats["backtracks"])
    return work
