"""Puzzle data structures: grids, clues, difficulty tables."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

Symbol = Hashable
Cell = Tuple[int, int]
Grid = List[List[Optional[Symbol]]]
FrozenGrid = Tuple[Tuple[Symbol, ...], ...]

SUN = "☀️"
MOON = "🌑"


class Family(str, Enum):
    BINARY = "binary"
    SUDOKU = "sudoku"

    @classmethod
    def for_size(cls, size: int) -> "Family":
        """Pick the family a bare grid size implies (9, 16, ... are Sudoku)."""
        root = math.isqrt(size)
        if size >= 9 and root * root == size:
            return cls.SUDOKU
        if size >= 2 and size % 2 == 0:
            return cls.BINARY
        raise ValueError(f"No puzzle family supports a {size}x{size} grid")

    @property
    def standard_size(self) -> int:
        return 6 if self is Family.BINARY else 9

    def alphabet(self, size: int) -> Tuple[Symbol, ...]:
        if self is Family.BINARY:
            return (SUN, MOON)
        return tuple(range(1, size + 1))

    def check_size(self, size: int) -> None:
        if self is Family.BINARY:
            if size < 2 or size % 2:
                raise ValueError(f"Binary puzzles need an even size, got {size}")
        else:
            root = math.isqrt(size)
            if size < 1 or root * root != size:
                raise ValueError(f"Sudoku needs a square size, got {size}")


class Relation(str, Enum):
    EQUAL = "="
    NOT_EQUAL = "x"

    def holds(self, a: Symbol, b: Symbol) -> bool:
        if self is Relation.EQUAL:
            return a == b
        return a != b


@dataclass(frozen=True)
class Constraint:
    """Relation between two grid-adjacent cells."""

    first: Cell
    second: Cell
    relation: Relation

    def __post_init__(self) -> None:
        (r1, c1), (r2, c2) = self.first, self.second
        if abs(r1 - r2) + abs(c1 - c2) != 1:
            raise ValueError(f"Constraint cells must be adjacent: {self.first} {self.second}")

    @classmethod
    def equal(cls, first: Cell, second: Cell) -> "Constraint":
        return cls(first=tuple(first), second=tuple(second), relation=Relation.EQUAL)

    @classmethod
    def not_equal(cls, first: Cell, second: Cell) -> "Constraint":
        return cls(first=tuple(first), second=tuple(second), relation=Relation.NOT_EQUAL)

    def involves(self, cell: Cell) -> bool:
        return cell == self.first or cell == self.second

    def other(self, cell: Cell) -> Cell:
        return self.second if cell == self.first else self.first

    def is_satisfied(self, grid: Grid) -> bool:
        """Partial grids pass; only two filled endpoints can break the relation."""
        a = grid[self.first[0]][self.first[1]]
        b = grid[self.second[0]][self.second[1]]
        if a is None or b is None:
            return True
        return self.relation.holds(a, b)


@dataclass(frozen=True)
class PredefinedCell:
    row: int
    col: int
    value: Symbol

    @property
    def cell(self) -> Cell:
        return (self.row, self.col)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Any) -> "Difficulty":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty {value!r}; expected one of {names}") from None


@dataclass(frozen=True)
class DifficultyParams:
    min_cells: int
    max_cells: int
    min_constraints: int = 0
    max_constraints: int = 0

    def scaled(self, factor: float, cell_count: int) -> "DifficultyParams":
        """Rescale the ranges for a grid with a different number of cells."""
        if factor == 1:
            return self

        def _scale(value: int) -> int:
            return max(0, min(cell_count, round(value * factor)))

        return DifficultyParams(
            min_cells=_scale(self.min_cells),
            max_cells=max(_scale(self.min_cells), _scale(self.max_cells)),
            min_constraints=_scale(self.min_constraints),
            max_constraints=max(_scale(self.min_constraints), _scale(self.max_constraints)),
        )


# Ranges are given for the family's standard size and scaled for others.
DIFFICULTY_TABLES: Dict[Family, Dict[Difficulty, DifficultyParams]] = {
    Family.BINARY: {
        Difficulty.EASY: DifficultyParams(11, 12, 8, 10),
        Difficulty.MEDIUM: DifficultyParams(8, 9, 7, 9),
        Difficulty.HARD: DifficultyParams(4, 6, 6, 8),
    },
    Family.SUDOKU: {
        Difficulty.EASY: DifficultyParams(44, 48),
        Difficulty.MEDIUM: DifficultyParams(35, 39),
        Difficulty.HARD: DifficultyParams(30, 34),
    },
}

ESCALATED_TABLES: Dict[Family, Dict[Difficulty, DifficultyParams]] = {
    Family.BINARY: {
        Difficulty.EASY: DifficultyParams(12, 14, 10, 12),
        Difficulty.MEDIUM: DifficultyParams(9, 10, 9, 11),
        Difficulty.HARD: DifficultyParams(6, 7, 8, 10),
    },
    Family.SUDOKU: {
        Difficulty.EASY: DifficultyParams(48, 52),
        Difficulty.MEDIUM: DifficultyParams(40, 44),
        Difficulty.HARD: DifficultyParams(34, 38),
    },
}


def difficulty_params(
    family: Family, size: int, difficulty: Difficulty, escalated: bool = False
) -> DifficultyParams:
    tables = ESCALATED_TABLES if escalated else DIFFICULTY_TABLES
    params = tables[family][Difficulty.parse(difficulty)]
    base = family.standard_size
    return params.scaled((size * size) / (base * base), size * size)


def empty_grid(size: int) -> Grid:
    return [[None] * size for _ in range(size)]


def copy_grid(grid: Sequence[Sequence[Optional[Symbol]]]) -> Grid:
    return [list(row) for row in grid]


def freeze_grid(grid: Sequence[Sequence[Optional[Symbol]]]) -> FrozenGrid:
    return tuple(tuple(row) for row in grid)


@dataclass(frozen=True)
class Puzzle:
    family: Family
    size: int
    difficulty: Difficulty
    solution: FrozenGrid
    predefined_cells: Tuple[PredefinedCell, ...] = field(default_factory=tuple)
    constraints: Tuple[Constraint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.solution) != self.size or any(len(row) != self.size for row in self.solution):
            raise ValueError(f"Solution must be a {self.size}x{self.size} grid")

    def partial_grid(self) -> Grid:
        """Fresh mutable grid holding only the predefined cells."""
        grid = empty_grid(self.size)
        for given in self.predefined_cells:
            grid[given.row][given.col] = given.value
        return grid

    def solution_grid(self) -> Grid:
        return copy_grid(self.solution)
