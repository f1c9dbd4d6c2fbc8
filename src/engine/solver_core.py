"""Backtracking solution counter with MRV cell ordering and an early exit at `cap`."""

from typing import Dict, Iterable, List, Optional, Tuple

from .model import Cell, Constraint, Family, Grid, Symbol, copy_grid
from .rules import constraints_by_cell, legal_symbols, prefilled_is_consistent, resolve_family
from src.utils.trace import Tracer, get_tracer

ConstraintIndex = Dict[Cell, List[Constraint]]


def count_solutions(
    grid: Grid,
    constraints: Iterable[Constraint] = (),
    cap: int = 2,
    family: Optional[Family] = None,
    tracer: Optional[Tracer] = None,
) -> int:
    """
    Count completions of a partially filled grid under the placement rules and
    `constraints`, stopping as soon as `cap` completions have been seen.
    Returns a value in [0, cap]; the caller's grid is left untouched.
    """
    tracer = tracer or get_tracer()
    if cap < 1:
        raise ValueError(f"cap must be at least 1, got {cap}")
    size = len(grid)
    if size == 0 or any(len(row) != size for row in grid):
        raise ValueError("Grid must be square")
    family = resolve_family(grid, family)

    work = copy_grid(grid)
    constraints = list(constraints)
    if not prefilled_is_consistent(work, constraints, family):
        tracer.log_count(0, cap)
        return 0

    by_cell = constraints_by_cell(constraints)
    empties = [(r, c) for r in range(size) for c in range(size) if work[r][c] is None]
    found = _backtrack(work, empties, family, by_cell, cap, 0)
    tracer.log_count(found, cap)
    return found


def has_unique_solution(
    grid: Grid, constraints: Iterable[Constraint] = (), family: Optional[Family] = None
) -> bool:
    return count_solutions(grid, constraints, cap=2, family=family) == 1


def _backtrack(
    grid: Grid,
    empties: List[Cell],
    family: Family,
    by_cell: ConstraintIndex,
    cap: int,
    found: int,
) -> int:
    selection = _select_unassigned_cell(grid, empties, family, by_cell)
    if selection is None:
        return found + 1

    (row, col), candidates = selection
    for symbol in candidates:
        grid[row][col] = symbol
        found = _backtrack(grid, empties, family, by_cell, cap, found)
        grid[row][col] = None
        if found >= cap:
            break
    return found


def _select_unassigned_cell(
    grid: Grid, empties: List[Cell], family: Family, by_cell: ConstraintIndex
) -> Optional[Tuple[Cell, List[Symbol]]]:
    # Minimum Remaining Values (MRV) heuristic; ties go to the first cell in row-major order.
    best: Optional[Tuple[Cell, List[Symbol]]] = None
    for row, col in empties:
        if grid[row][col] is not None:
            continue
        candidates = legal_symbols(grid, row, col, family, by_cell)
        if not candidates:
            return (row, col), candidates
        if best is None or len(candidates) < len(best[1]):
            best = ((row, col), candidates)
    return best
