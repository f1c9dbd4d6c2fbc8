"""Derive the catalog of adjacency constraints a solution satisfies, with priorities."""

import random
from typing import List, NamedTuple, Optional, Sequence

from .model import Constraint, Family, Relation, Symbol
from src.utils.trace import Tracer, get_tracer

# Equal pairs restrict more than unequal ones; central pairs prune more branches.
EQUAL_BONUS = 0.5
CENTER_WEIGHT = 1.0


class ScoredConstraint(NamedTuple):
    constraint: Constraint
    priority: float


def derive_all(
    solution: Sequence[Sequence[Symbol]],
    rng: random.Random,
    family: Optional[Family] = None,
    tracer: Optional[Tracer] = None,
) -> List[ScoredConstraint]:
    """Every horizontal and vertical neighbour pair of `solution`, highest priority first."""
    tracer = tracer or get_tracer()
    size = len(solution)
    family = Family.for_size(size) if family is None else Family(family)
    if family is Family.SUDOKU:
        # Row, column and box rules stand in for explicit constraints.
        tracer.log_derive(0)
        return []

    center = (size - 1) / 2
    scored: List[ScoredConstraint] = []
    for row in range(size):
        for col in range(size):
            for other in ((row, col + 1), (row + 1, col)):
                r2, c2 = other
                if r2 >= size or c2 >= size:
                    continue
                same = solution[row][col] == solution[r2][c2]
                relation = Relation.EQUAL if same else Relation.NOT_EQUAL
                mid_row, mid_col = (row + r2) / 2, (col + c2) / 2
                distance = abs(mid_row - center) + abs(mid_col - center)
                priority = rng.random() + CENTER_WEIGHT / (1 + distance)
                if same:
                    priority += EQUAL_BONUS
                scored.append(ScoredConstraint(Constraint((row, col), other, relation), priority))

    scored.sort(key=lambda item: item.priority, reverse=True)
    tracer.log_derive(len(scored))
    return scored
