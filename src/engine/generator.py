"""Puzzle assembly: sample, derive clues, verify uniqueness, retry with a bounded budget."""

import os
import random
import time
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional, Union

from .clues import select_clues
from .constraints import derive_all
from .model import Difficulty, Family, Puzzle, difficulty_params, freeze_grid
from .sampler import sample_solution
from .solver_core import count_solutions
from src.utils.trace import Tracer, get_tracer

RandomSource = Union[random.Random, int, str, None]


class GenerationError(RuntimeError):
    """No uniquely solvable puzzle was found within the attempt or time budget."""

    def __init__(self, attempts: int, difficulty: Difficulty, reason: str):
        self.attempts = attempts
        self.difficulty = difficulty
        self.reason = reason
        super().__init__(
            f"Could not generate a unique {difficulty.value} puzzle after {attempts} attempts: {reason}"
        )


@dataclass
class GeneratorConfig:
    max_attempts: int = 500
    escalate_after: int = 50
    cap: int = 2
    time_budget: Optional[float] = None  # seconds

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.escalate_after < 1:
            raise ValueError("escalate_after must be at least 1")
        if self.cap < 2:
            raise ValueError("cap must be at least 2 to tell unique puzzles apart")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ValueError("time_budget must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "GeneratorConfig":
        """Read LOGIQ_MAX_ATTEMPTS, LOGIQ_ESCALATE_AFTER and LOGIQ_TIME_BUDGET; explicit overrides win."""
        environ = os.environ if environ is None else environ
        values: dict = {}
        parsers = {
            "max_attempts": ("LOGIQ_MAX_ATTEMPTS", int),
            "escalate_after": ("LOGIQ_ESCALATE_AFTER", int),
            "time_budget": ("LOGIQ_TIME_BUDGET", float),
        }
        for name, (key, convert) in parsers.items():
            raw = environ.get(key)
            if raw is None or not raw.strip():
                continue
            try:
                values[name] = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from None
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class Attempt:
    number: int
    escalated: bool
    solutions: int
    puzzle: Optional[Puzzle] = None

    @property
    def accepted(self) -> bool:
        return self.puzzle is not None


def make_rng(rng: RandomSource = None) -> random.Random:
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)


def build_candidate(
    size: int,
    difficulty: Difficulty,
    rng: random.Random,
    family: Family,
    escalated: bool = False,
    tracer: Optional[Tracer] = None,
) -> Puzzle:
    """One pass of sample -> derive -> select, without any uniqueness check."""
    solution = sample_solution(size, rng, family=family, tracer=tracer)
    scored = derive_all(solution, rng, family=family, tracer=tracer)
    params = difficulty_params(family, size, difficulty, escalated)
    predefined, constraints = select_clues(solution, params, scored, rng)
    return Puzzle(
        family=family,
        size=size,
        difficulty=difficulty,
        solution=freeze_grid(solution),
        predefined_cells=predefined,
        constraints=constraints,
    )


def iter_attempts(
    size: int,
    difficulty: Any,
    rng: RandomSource = None,
    config: Optional[GeneratorConfig] = None,
    family: Optional[Family] = None,
) -> Iterator[Attempt]:
    """
    Yield one `Attempt` per candidate puzzle, accepted or not.

    After `config.escalate_after` consecutive rejections the denser clue table
    is used for the rest of the run. The iterator ends after
    `config.max_attempts` candidates or once `config.time_budget` has elapsed.
    """
    tracer = get_tracer()
    difficulty = Difficulty.parse(difficulty)
    family = Family.for_size(size) if family is None else Family(family)
    family.check_size(size)
    rng = make_rng(rng)
    config = config or GeneratorConfig()

    deadline = time.monotonic() + config.time_budget if config.time_budget else None
    escalated = False
    failures = 0
    for number in range(1, config.max_attempts + 1):
        if deadline is not None and time.monotonic() >= deadline:
            return

        candidate = build_candidate(size, difficulty, rng, family, escalated, tracer)
        solutions = count_solutions(
            candidate.partial_grid(), candidate.constraints, cap=config.cap, family=family
        )
        if solutions == 1:
            failures = 0
            tracer.log_accept(
                number, difficulty.value, len(candidate.predefined_cells), len(candidate.constraints)
            )
            yield Attempt(number, escalated, solutions, candidate)
            continue

        failures += 1
        tracer.log_attempt_failed(number, solutions, difficulty.value)
        yield Attempt(number, escalated, solutions)
        if not escalated and failures >= config.escalate_after:
            escalated = True
            tracer.log_escalate(number, difficulty.value)


def first_accepted(
    size: int = 6,
    difficulty: Any = Difficulty.MEDIUM,
    rng: RandomSource = None,
    config: Optional[GeneratorConfig] = None,
    family: Optional[Family] = None,
) -> Attempt:
    """
    Return the first accepted `Attempt`, so callers can see how many tries it took.
    Raises GenerationError when the attempt or time budget runs out first.
    """
    difficulty = Difficulty.parse(difficulty)
    config = config or GeneratorConfig()
    attempts = 0
    for attempt in iter_attempts(size, difficulty, rng, config, family):
        attempts = attempt.number
        if attempt.accepted:
            return attempt

    if attempts < config.max_attempts:
        reason = f"time budget of {config.time_budget}s exceeded"
    else:
        reason = "attempt budget exhausted"
    get_tracer().log_exhausted(attempts, difficulty.value, reason)
    raise GenerationError(attempts, difficulty, reason)


def generate_puzzle(
    size: int = 6,
    difficulty: Any = Difficulty.MEDIUM,
    rng: RandomSource = None,
    config: Optional[GeneratorConfig] = None,
    family: Optional[Family] = None,
) -> Puzzle:
    """Return the first uniquely solvable puzzle for `size` and `difficulty`."""
    return first_accepted(size, difficulty, rng, config, family).puzzle
