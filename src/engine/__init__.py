"""Puzzle models, placement rules, solution counting, and the generate-verify-retry loop."""

from .model import Constraint, Difficulty, Family, PredefinedCell, Puzzle, Relation
from .rules import is_legal_placement, placement_errors
from .solver_core import count_solutions
from .generator import GenerationError, GeneratorConfig, first_accepted, generate_puzzle
from .parser import parse_puzzle

__all__ = [
    "Constraint",
    "Difficulty",
    "Family",
    "PredefinedCell",
    "Puzzle",
    "Relation",
    "is_legal_placement",
    "placement_errors",
    "count_solutions",
    "GenerationError",
    "GeneratorConfig",
    "first_accepted",
    "generate_puzzle",
    "parse_puzzle",
]
