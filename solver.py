"""Top-level uniqueness check.

Expose `count_puzzle_solutions(puzzle)` that accepts either a `Puzzle` or a raw
record dictionary compatible with `src.engine.parser.parse_puzzle`.
"""

from typing import Any

from src.engine import solver_core
from src.engine.model import Puzzle
from src.engine.parser import parse_puzzle


def count_puzzle_solutions(puzzle: Any, cap: int = 2) -> int:
    """
    Count completions of a puzzle's clues, up to `cap`. A well-formed puzzle returns 1.
    Accepts:
      - Puzzle instances (used directly)
      - Raw record dictionaries (parsed via `parse_puzzle`)
    """
    if isinstance(puzzle, Puzzle):
        parsed = puzzle
    elif isinstance(puzzle, dict):
        parsed = parse_puzzle(puzzle)
    else:
        raise TypeError("count_puzzle_solutions expects a Puzzle instance or record dictionary")

    return solver_core.count_solutions(
        parsed.partial_grid(), parsed.constraints, cap=cap, family=parsed.family
    )


__all__ = ["count_puzzle_solutions"]
