"""CLI entrypoint: generate puzzles, verify puzzle files, and show the daily puzzle."""

import argparse
import csv
import json
import random
from pathlib import Path
from typing import Any

from tqdm import tqdm

from solver import count_puzzle_solutions
from src.engine.daily import generate_daily_puzzle, today_string
from src.engine.generator import GenerationError, GeneratorConfig, first_accepted
from src.engine.loader import load_puzzles
from src.engine.model import Difficulty, Family, Puzzle
from src.engine.parser import puzzle_to_record, parse_puzzle
from src.engine.rules import is_valid_solution
from src.utils.io import save_json, save_jsonl
from src.utils.trace import Tracer, enable_tracing, get_tracer, reset_tracer

RECORD_FIELDS = ["id", "family", "size", "difficulty", "seed", "solution", "givens", "constraints", "attempts"]
VERIFY_FIELDS = ["id", "solutions", "unique", "valid_solution"]
INPUT_SUFFIXES = [".json", ".jsonl", ".parquet", ".csv"]


def parse_args():
    parser = argparse.ArgumentParser(description="Generate and verify uniquely solvable logic puzzles")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate puzzles")
    generate.add_argument("--size", type=int, default=6, help="Grid size (6 for sun/moon, 9 for Sudoku)")
    generate.add_argument(
        "--difficulty", default=Difficulty.MEDIUM.value, choices=[d.value for d in Difficulty]
    )
    generate.add_argument(
        "--family",
        default=None,
        choices=[f.value for f in Family],
        help="Puzzle family; inferred from --size when omitted.",
    )
    generate.add_argument("--count", type=int, default=1, help="Number of puzzles to generate")
    generate.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed; puzzle i uses seed + i. Random seeds are recorded when omitted.",
    )
    generate.add_argument("--max-attempts", type=int, default=None, help="Overrides LOGIQ_MAX_ATTEMPTS")
    generate.add_argument("--escalate-after", type=int, default=None, help="Overrides LOGIQ_ESCALATE_AFTER")
    generate.add_argument("--time-budget", type=float, default=None, help="Seconds per puzzle; overrides LOGIQ_TIME_BUDGET")
    generate.add_argument("--output", type=Path, default=None, help="Optional .csv, .json or .jsonl output path")
    generate.add_argument("--trace", type=Path, default=None, help="Optional path to write the generation trace CSV")
    generate.add_argument("--progress", action="store_true", help="Show a progress bar")

    verify = subparsers.add_parser("verify", help="Count solutions of stored puzzles")
    verify.add_argument("input", type=Path, help="Path to a puzzle file or directory of puzzle files")
    verify.add_argument("--output", type=Path, default=None, help="Optional path to write the results CSV")

    daily = subparsers.add_parser("daily", help="Show the puzzle of the day")
    daily.add_argument("--date", default=None, help="YYYY-MM-DD; defaults to today")
    daily.add_argument("--size", type=int, default=6)

    return parser.parse_args()


def render_grid(puzzle: Puzzle) -> str:
    """Plain-text board with the predefined cells filled in."""
    lines = []
    for row in puzzle.partial_grid():
        lines.append(" ".join("." if cell is None else str(cell) for cell in row))
    for constraint in puzzle.constraints:
        lines.append(f"{constraint.first} {constraint.relation.value} {constraint.second}")
    return "\n".join(lines)


def write_records(records: list[dict], output_path: Path, fieldnames: list[str]) -> None:
    if output_path.suffix == ".jsonl":
        save_jsonl(output_path, records)
        return
    if output_path.suffix == ".json":
        save_json(output_path, records)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for record in records:
            writer.writerow(record)


def _failed_record(puzzle_id: str, family: Family, size: int, difficulty: str, seed: Any, attempts: int) -> dict:
    return {
        "id": puzzle_id,
        "family": family.value,
        "size": size,
        "difficulty": difficulty,
        "seed": str(seed),
        "solution": "",
        "givens": "",
        "constraints": "",
        "attempts": attempts,
    }


def run_generate(args) -> list[dict]:
    family = Family(args.family) if args.family else Family.for_size(args.size)
    family.check_size(args.size)
    config = GeneratorConfig.from_env(
        max_attempts=args.max_attempts,
        escalate_after=args.escalate_after,
        time_budget=args.time_budget,
    )
    seeds = random.SystemRandom()

    records = []
    trace_steps = []
    for index in tqdm(range(args.count), desc="puzzles", disable=not args.progress):
        reset_tracer()
        enable_tracing(args.trace is not None)
        tracer = get_tracer()
        seed = args.seed + index if args.seed is not None else seeds.randrange(2**32)
        puzzle_id = f"{family.value}-{args.difficulty}-{index}"

        try:
            attempt = first_accepted(args.size, args.difficulty, rng=seed, config=config, family=family)
            record = puzzle_to_record(attempt.puzzle, puzzle_id=puzzle_id, seed=seed)
            record["attempts"] = attempt.number
        except GenerationError as e:
            print(f"ERROR: Failed to generate puzzle {puzzle_id}: {e}")
            record = _failed_record(puzzle_id, family, args.size, args.difficulty, seed, e.attempts)

        records.append(record)
        trace_steps.extend(tracer.steps)
    reset_tracer()

    if args.trace:
        combined = Tracer()
        combined.steps = trace_steps
        combined.to_csv(args.trace)

    if args.output:
        write_records(records, args.output, RECORD_FIELDS)
    else:
        for record in records:
            print(json.dumps(record, ensure_ascii=False))
    return records


def verify_records(records: list[dict]) -> list[dict]:
    results = []
    for record in records:
        puzzle_id = record.get("id", "unknown")
        try:
            puzzle = parse_puzzle(record)
            solutions = count_puzzle_solutions(puzzle)
            valid = is_valid_solution(puzzle.solution_grid(), puzzle.constraints, puzzle.family)
            results.append({
                "id": puzzle_id,
                "solutions": solutions,
                "unique": solutions == 1,
                "valid_solution": valid,
            })
        except ValueError as e:
            print(f"ERROR: Failed to verify puzzle {puzzle_id}: {e}")
            results.append({
                "id": puzzle_id,
                "solutions": -1,
                "unique": False,
                "valid_solution": False,
            })
    return results


def run_verify(args) -> list[dict]:
    records = []
    if args.input.is_file():
        records = load_puzzles(str(args.input))
    elif args.input.is_dir():
        for file_path in sorted(args.input.iterdir()):
            if file_path.suffix in INPUT_SUFFIXES:
                records.extend(load_puzzles(str(file_path)))
    else:
        raise ValueError(f"Input path {args.input} is neither file nor directory")

    results = verify_records(records)
    if args.output:
        write_records(results, args.output, VERIFY_FIELDS)
    else:
        print(results)
    return results


def run_daily(args) -> dict:
    day = today_string(args.date)
    puzzle = generate_daily_puzzle(args.size, today=day, config=GeneratorConfig.from_env())
    record = puzzle_to_record(puzzle, puzzle_id=f"daily-{day}")
    print(json.dumps(record, ensure_ascii=False))
    print(render_grid(puzzle))
    return record


def main():
    args = parse_args()
    if args.command == "generate":
        return run_generate(args)
    if args.command == "verify":
        return run_verify(args)
    return run_daily(args)


if __name__ == "__main__":
    main()
