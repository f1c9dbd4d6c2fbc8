"""Daily puzzle: the same puzzle for every caller on a given calendar day."""

import random
from datetime import date
from typing import Optional, Union

from .generator import GeneratorConfig, generate_puzzle
from .model import Difficulty, Puzzle

DAILY_DIFFICULTY = Difficulty.MEDIUM


def today_string(today: Optional[Union[date, str]] = None) -> str:
    if isinstance(today, str):
        return date.fromisoformat(today).isoformat()
    return (today or date.today()).strftime("%Y-%m-%d")


def daily_seed(date_string: str) -> int:
    """32-bit `hash = hash * 31 + char` string hash, made non-negative."""
    value = 0
    for char in date_string:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 1 << 31:
        value -= 1 << 32
    return abs(value)


def generate_daily_puzzle(
    size: int = 6,
    today: Optional[Union[date, str]] = None,
    config: Optional[GeneratorConfig] = None,
) -> Puzzle:
    seed = daily_seed(today_string(today))
    return generate_puzzle(size, DAILY_DIFFICULTY, rng=random.Random(seed), config=config)
