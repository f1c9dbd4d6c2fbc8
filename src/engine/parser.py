"""Puzzle records: convert between flat text records and `Puzzle` objects.

Record fields:
- `solution` / `givens`: rows joined by "/"; binary cells "0" (sun) and "1"
  (moon), Sudoku cells as base-36 digits; "." marks an empty given.
- `constraints`: "r1,c1=r2,c2" (equal) or "r1,c1xr2,c2" (different), joined by ";".
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

from .model import (
    MOON,
    SUN,
    Constraint,
    Difficulty,
    Family,
    Grid,
    PredefinedCell,
    Puzzle,
    Relation,
    Symbol,
    freeze_grid,
)

EMPTY = "."
_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_BINARY_CODES = {SUN: "0", MOON: "1"}
_BINARY_SYMBOLS = {code: symbol for symbol, code in _BINARY_CODES.items()}
_CONSTRAINT_RE = re.compile(r"^\s*(\d+)\s*,\s*(\d+)\s*([=xX×])\s*(\d+)\s*,\s*(\d+)\s*$")


def _is_nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def encode_symbol(symbol: Optional[Symbol], family: Family) -> str:
    if symbol is None:
        return EMPTY
    if family is Family.BINARY:
        return _BINARY_CODES[symbol]
    return _DIGITS[int(symbol)]


def decode_symbol(char: str, family: Family, size: int) -> Optional[Symbol]:
    if char == EMPTY:
        return None
    if family is Family.BINARY:
        if char not in _BINARY_SYMBOLS:
            raise ValueError(f"Unknown binary cell {char!r}")
        return _BINARY_SYMBOLS[char]
    value = int(char, 36)
    if not 1 <= value <= size:
        raise ValueError(f"Sudoku cell {char!r} outside 1..{size}")
    return value


def encode_grid(grid: Sequence[Sequence[Optional[Symbol]]], family: Family) -> str:
    return "/".join("".join(encode_symbol(cell, family) for cell in row) for row in grid)


def decode_grid(text: str, family: Family, size: int) -> Grid:
    rows = [row.strip() for row in text.strip().split("/")]
    if len(rows) != size or any(len(row) != size for row in rows):
        raise ValueError(f"Expected {size} rows of {size} cells, got {text!r}")
    return [[decode_symbol(char.upper(), family, size) for char in row] for row in rows]


def encode_constraints(constraints: Sequence[Constraint]) -> str:
    parts = []
    for constraint in constraints:
        (r1, c1), (r2, c2) = constraint.first, constraint.second
        parts.append(f"{r1},{c1}{constraint.relation.value}{r2},{c2}")
    return ";".join(parts)


def decode_constraints(text: str, size: int) -> List[Constraint]:
    constraints: List[Constraint] = []
    for part in text.split(";"):
        if not part.strip():
            continue
        match = _CONSTRAINT_RE.match(part)
        if not match:
            raise ValueError(f"Malformed constraint {part!r}")
        r1, c1, op, r2, c2 = match.groups()
        cells = [(int(r1), int(c1)), (int(r2), int(c2))]
        if any(not (0 <= r < size and 0 <= c < size) for r, c in cells):
            raise ValueError(f"Constraint {part!r} leaves the {size}x{size} grid")
        relation = Relation.EQUAL if op == "=" else Relation.NOT_EQUAL
        constraints.append(Constraint(cells[0], cells[1], relation))
    return constraints


def puzzle_to_record(
    puzzle: Puzzle, puzzle_id: Optional[str] = None, seed: Optional[Any] = None
) -> Dict[str, Any]:
    givens = puzzle.partial_grid()
    record: Dict[str, Any] = {
        "id": puzzle_id or "unknown",
        "family": puzzle.family.value,
        "size": puzzle.size,
        "difficulty": puzzle.difficulty.value,
        "seed": "" if seed is None else str(seed),
        "solution": encode_grid(puzzle.solution, puzzle.family),
        "givens": encode_grid(givens, puzzle.family),
        "constraints": encode_constraints(puzzle.constraints),
    }
    return record


def _parse_size(record: Dict[str, Any], solution_text: str) -> int:
    raw = record.get("size")
    if raw is not None and str(raw).strip():
        try:
            return int(float(str(raw).strip()))
        except ValueError:
            match = re.match(r"^\s*(\d+)\s*[x*]\s*\d+\s*$", str(raw))
            if match:
                return int(match.group(1))
            raise ValueError(f"Unreadable size {raw!r}") from None
    return len(solution_text.strip().split("/"))


def parse_puzzle(record: Dict[str, Any]) -> Puzzle:
    solution_text = record.get("solution")
    if not _is_nonempty_str(solution_text):
        raise ValueError(f"Record {record.get('id', 'unknown')!r} has no solution")

    size = _parse_size(record, solution_text)
    family_raw = record.get("family")
    family = Family(family_raw.strip().lower()) if _is_nonempty_str(family_raw) else Family.for_size(size)
    family.check_size(size)

    difficulty_raw = record.get("difficulty")
    difficulty = Difficulty.parse(difficulty_raw) if _is_nonempty_str(difficulty_raw) else Difficulty.MEDIUM

    solution = decode_grid(solution_text, family, size)
    if any(cell is None for row in solution for cell in row):
        raise ValueError("Solution grid must be complete")

    givens_text = record.get("givens")
    predefined: List[PredefinedCell] = []
    if _is_nonempty_str(givens_text):
        givens = decode_grid(givens_text, family, size)
        for r in range(size):
            for c in range(size):
                value = givens[r][c]
                if value is None:
                    continue
                if value != solution[r][c]:
                    raise ValueError(f"Given at ({r}, {c}) disagrees with the solution")
                predefined.append(PredefinedCell(r, c, value))

    constraints_text = record.get("constraints")
    constraints = decode_constraints(constraints_text, size) if _is_nonempty_str(constraints_text) else []
    if constraints and family is Family.SUDOKU:
        raise ValueError("Sudoku records cannot carry adjacency constraints")

    return Puzzle(
        family=family,
        size=size,
        difficulty=difficulty,
        solution=freeze_grid(solution),
        predefined_cells=tuple(predefined),
        constraints=tuple(constraints),
    )
