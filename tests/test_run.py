import sys
import json
import csv
import tempfile
from pathlib import Path

from run import main, render_grid, verify_records, write_records, RECORD_FIELDS
from src.engine.generator import first_accepted, generate_puzzle
from src.engine.parser import puzzle_to_record
from src.utils.trace import get_tracer

SOLUTION_TEXT = "001011/010101/101100/110010/010101/101010"


def test_render_grid_shows_givens_and_constraints():
    puzzle = generate_puzzle(6, "easy", rng=2)
    text = render_grid(puzzle).splitlines()
    assert len(text) == 6 + len(puzzle.constraints)
    dots = sum(line.count(".") for line in text[:6])
    assert dots == 36 - len(puzzle.predefined_cells)


def test_verify_records_reports_unique_ambiguous_and_broken():
    puzzle = generate_puzzle(6, "easy", rng=5)
    records = [
        puzzle_to_record(puzzle, puzzle_id="good"),
        {"id": "loose", "solution": SOLUTION_TEXT},
        {"id": "broken", "solution": "not-a-grid"},
    ]
    results = {r["id"]: r for r in verify_records(records)}
    assert results["good"] == {"id": "good", "solutions": 1, "unique": True, "valid_solution": True}
    assert results["loose"]["solutions"] == 2
    assert not results["loose"]["unique"]
    assert results["broken"]["solutions"] == -1


def test_generate_then_verify_csv(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        output_path = Path(tmpdir) / "puzzles.csv"
        trace_path = Path(tmpdir) / "trace.csv"
        sys.argv = [
            "run.py", "generate", "--size", "6", "--difficulty", "easy",
            "--count", "2", "--seed", "10", "--output", str(output_path), "--trace", str(trace_path),
        ]
        main()

        with open(output_path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [row["id"] for row in rows] == ["binary-easy-0", "binary-easy-1"]
        assert [row["seed"] for row in rows] == ["10", "11"]
        assert list(rows[0].keys()) == RECORD_FIELDS
        assert int(rows[0]["attempts"]) >= 1
        assert "action_type" in trace_path.read_text()

        results_path = Path(tmpdir) / "results.csv"
        sys.argv = ["run.py", "verify", str(output_path), "--output", str(results_path)]
        results = main()
        assert all(r["unique"] for r in results)
        assert "id,solutions,unique,valid_solution" in results_path.read_text()


def test_generate_prints_records_without_output(capsys):
    sys.argv = ["run.py", "generate", "--count", "1", "--seed", "3", "--difficulty", "medium"]
    records = main()
    printed = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert printed["id"] == records[0]["id"]
    assert printed["seed"] == "3"


def test_attempts_column_is_filled_without_tracing():
    sys.argv = ["run.py", "generate", "--count", "2", "--seed", "4", "--difficulty", "hard"]
    records = main()

    expected = [first_accepted(6, "hard", rng=seed).number for seed in (4, 5)]
    assert [r["attempts"] for r in records] == expected
    assert all(n >= 1 for n in expected)
    assert get_tracer().steps == []


def test_verify_directory_input():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)
        for i in range(2):
            puzzle = generate_puzzle(6, "easy", rng=i)
            write_records([puzzle_to_record(puzzle, puzzle_id=f"p{i}")], tmpdir_path / f"p{i}.jsonl", RECORD_FIELDS)
        (tmpdir_path / "notes.txt").write_text("ignored")

        sys.argv = ["run.py", "verify", str(tmpdir_path)]
        results = main()
        assert [r["id"] for r in results] == ["p0", "p1"]
        assert all(r["solutions"] == 1 for r in results)


def test_daily_command(capsys):
    sys.argv = ["run.py", "daily", "--date", "2024-03-01"]
    record = main()
    assert record["id"] == "daily-2024-03-01"
    assert record["difficulty"] == "medium"
    assert "daily-2024-03-01" in capsys.readouterr().out
