"""Placement rules shared by the solution sampler and the solution counter.

`is_legal_placement` is the single legality oracle: generation and
verification must agree on what a legal grid is, so both go through here.
"""

import math
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .model import MOON, SUN, Cell, Constraint, Family, Grid, Relation, Symbol

SYMBOL_NAMES = {SUN: "suns", MOON: "moons"}


def resolve_family(grid: Sequence[Sequence[Optional[Symbol]]], family: Optional[Family] = None) -> Family:
    if family is None:
        return Family.for_size(len(grid))
    return Family(family)


def is_legal_placement(
    grid: Grid, row: int, col: int, symbol: Symbol, family: Optional[Family] = None
) -> bool:
    """
    Return True when `symbol` may stand at (row, col) given the other filled cells.
    Whatever the cell currently holds is ignored. Pure: `grid` is never modified.
    """
    family = resolve_family(grid, family)
    size = len(grid)
    if symbol not in family.alphabet(size):
        return False
    if family is Family.BINARY:
        return _binary_legal(grid, row, col, symbol)
    return _sudoku_legal(grid, row, col, symbol)


def _binary_legal(grid: Grid, row: int, col: int, symbol: Symbol) -> bool:
    half = len(grid) // 2
    row_values, col_values = _lines_with(grid, row, col, symbol)
    if row_values.count(symbol) > half or col_values.count(symbol) > half:
        return False
    return not (_makes_run(row_values, col, symbol) or _makes_run(col_values, row, symbol))


def _lines_with(grid: Grid, row: int, col: int, symbol: Symbol) -> Tuple[List[Optional[Symbol]], ...]:
    """The row and column through (row, col) with `symbol` standing in the cell."""
    row_values = [symbol if c == col else v for c, v in enumerate(grid[row])]
    col_values = [symbol if r == row else grid[r][col] for r in range(len(grid))]
    return row_values, col_values


def _makes_run(values: List[Optional[Symbol]], index: int, symbol: Symbol) -> bool:
    # Every window of three that contains `index`.
    for start in range(index - 2, index + 1):
        if start < 0 or start + 2 >= len(values):
            continue
        if values[start] == values[start + 1] == values[start + 2] == symbol:
            return True
    return False


def _sudoku_legal(grid: Grid, row: int, col: int, symbol: Symbol) -> bool:
    return not any(symbol in peers for _, peers in _sudoku_units(grid, row, col))


def _sudoku_units(grid: Grid, row: int, col: int) -> Iterator[Tuple[str, List[Optional[Symbol]]]]:
    """Yield (unit name, values of the other cells) for the row, column and box of (row, col)."""
    size = len(grid)
    yield "row", [grid[row][c] for c in range(size) if c != col]
    yield "column", [grid[r][col] for r in range(size) if r != row]

    box = math.isqrt(size)
    box_row, box_col = box * (row // box), box * (col // box)
    yield "box", [
        grid[r][c]
        for r in range(box_row, box_row + box)
        for c in range(box_col, box_col + box)
        if (r, c) != (row, col)
    ]


def placement_errors(
    grid: Grid,
    row: int,
    col: int,
    symbol: Symbol,
    constraints: Iterable[Constraint] = (),
    family: Optional[Family] = None,
) -> List[str]:
    """
    Explain why `symbol` may not stand at (row, col).

    Runs the same checks as `is_legal_placement` and `satisfies_constraints`
    but collects a message for each broken rule. An empty list means the
    placement is legal.
    """
    family = resolve_family(grid, family)
    size = len(grid)
    if symbol not in family.alphabet(size):
        return [f"{symbol!r} is not a valid symbol for a {size}x{size} {family.value} grid"]

    errors = []
    if family is Family.BINARY:
        half = size // 2
        row_values, col_values = _lines_with(grid, row, col, symbol)
        for line, values in (("row", row_values), ("column", col_values)):
            for candidate in family.alphabet(size):
                if values.count(candidate) > half:
                    errors.append(f"Too many {SYMBOL_NAMES[candidate]} in this {line}")
        if _makes_run(row_values, col, symbol) or _makes_run(col_values, row, symbol):
            errors.append("Three consecutive identical symbols not allowed")
    else:
        for unit, peers in _sudoku_units(grid, row, col):
            if symbol in peers:
                errors.append(f"{symbol} already appears in this {unit}")

    cell = (row, col)
    for constraint in constraints:
        if not constraint.involves(cell):
            continue
        other_row, other_col = constraint.other(cell)
        other = grid[other_row][other_col]
        if other is None or constraint.relation.holds(symbol, other):
            continue
        if constraint.relation is Relation.EQUAL:
            errors.append("Connected cells must have the same symbol")
        else:
            errors.append("Connected cells must have different symbols")
    return errors


def constraints_by_cell(constraints: Iterable[Constraint]) -> Dict[Cell, List[Constraint]]:
    """Map each cell to the constraints that mention it."""
    index: Dict[Cell, List[Constraint]] = {}
    for constraint in constraints:
        index.setdefault(constraint.first, []).append(constraint)
        index.setdefault(constraint.second, []).append(constraint)
    return index


def satisfies_constraints(
    grid: Grid, row: int, col: int, symbol: Symbol, constraints: Iterable[Constraint]
) -> bool:
    """Check every constraint touching (row, col) whose other endpoint is filled."""
    cell = (row, col)
    for constraint in constraints:
        if not constraint.involves(cell):
            continue
        other_row, other_col = constraint.other(cell)
        other = grid[other_row][other_col]
        if other is not None and not constraint.relation.holds(symbol, other):
            return False
    return True


def legal_symbols(
    grid: Grid,
    row: int,
    col: int,
    family: Family,
    by_cell: Optional[Dict[Cell, List[Constraint]]] = None,
) -> List[Symbol]:
    touching = (by_cell or {}).get((row, col), [])
    return [
        symbol
        for symbol in family.alphabet(len(grid))
        if is_legal_placement(grid, row, col, symbol, family)
        and satisfies_constraints(grid, row, col, symbol, touching)
    ]


def is_complete(grid: Grid) -> bool:
    return all(cell is not None for row in grid for cell in row)


def is_valid_solution(
    grid: Grid, constraints: Iterable[Constraint] = (), family: Optional[Family] = None
) -> bool:
    """Full check of a finished grid against the structural rules and every constraint."""
    if not is_complete(grid):
        return False
    family = resolve_family(grid, family)
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            if not is_legal_placement(grid, r, c, value, family):
                return False
    return all(constraint.is_satisfied(grid) for constraint in constraints)


def prefilled_is_consistent(
    grid: Grid, constraints: Iterable[Constraint] = (), family: Optional[Family] = None
) -> bool:
    """True when every filled cell is legal against the others and no constraint is already broken."""
    family = resolve_family(grid, family)
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            if value is not None and not is_legal_placement(grid, r, c, value, family):
                return False
    return all(constraint.is_satisfied(grid) for constraint in constraints)
