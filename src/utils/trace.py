"""Tracing module: logs puzzle generation steps and writes to CSV."""

import csv
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class TraceStep:
    """A single step in the generation process."""

    timestamp: float
    step_number: int
    action_type: str  # 'sample', 'derive', 'select', 'count', 'attempt_failed', 'escalate', 'accept', 'exhausted'
    attempt: Optional[int] = None
    difficulty: Optional[str] = None
    placements: Optional[int] = None
    backtracks: Optional[int] = None
    predefined_cells: Optional[int] = None
    constraints: Optional[int] = None
    solutions: Optional[int] = None
    reason: Optional[str] = None


class Tracer:
    """Records generator steps for logging and analysis."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.steps: List[TraceStep] = []
        self.start_time = datetime.now().timestamp()
        self.step_counter = 0

    def _get_timestamp(self) -> float:
        """Get elapsed time in seconds since tracer creation."""
        return datetime.now().timestamp() - self.start_time

    def _record(self, action_type: str, **fields: Any) -> None:
        if not self.enabled:
            return
        self.step_counter += 1
        self.steps.append(TraceStep(
            timestamp=self._get_timestamp(),
            step_number=self.step_counter,
            action_type=action_type,
            **fields,
        ))

    def log_sample(self, placements: int, backtracks: int, reason: str = ""):
        """Log a sampled solution grid and how much search it took."""
        self._record('sample', placements=placements, backtracks=backtracks, reason=reason or None)

    def log_derive(self, constraints: int):
        """Log the size of the derived constraint catalog."""
        self._record('derive', constraints=constraints)

    def log_select(self, predefined_cells: int, constraints: int):
        """Log the clue set chosen for a candidate puzzle."""
        self._record('select', predefined_cells=predefined_cells, constraints=constraints)

    def log_count(self, solutions: int, cap: int):
        """Log the result of a solution count."""
        self._record('count', solutions=solutions, reason=f"cap={cap}")

    def log_attempt_failed(self, attempt: int, solutions: int, difficulty: str):
        """Log a candidate rejected because it is not uniquely solvable."""
        self._record('attempt_failed', attempt=attempt, solutions=solutions, difficulty=difficulty)

    def log_escalate(self, attempt: int, difficulty: str):
        """Log the switch to the denser clue table."""
        self._record(
            'escalate',
            attempt=attempt,
            difficulty=difficulty,
            reason="Switched to escalated clue density",
        )

    def log_accept(self, attempt: int, difficulty: str, predefined_cells: int, constraints: int):
        """Log when a uniquely solvable puzzle is accepted."""
        self._record(
            'accept',
            attempt=attempt,
            difficulty=difficulty,
            predefined_cells=predefined_cells,
            constraints=constraints,
            solutions=1,
        )

    def log_exhausted(self, attempts: int, difficulty: str, reason: str):
        """Log when the retry loop gives up."""
        self._record('exhausted', attempt=attempts, difficulty=difficulty, reason=reason)

    def to_csv(self, filepath: Path) -> None:
        """Write trace to CSV file."""
        if not self.steps:
            print("No trace steps to write")
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fieldnames = [
            'timestamp', 'step_number', 'action_type', 'attempt', 'difficulty',
            'placements', 'backtracks', 'predefined_cells', 'constraints', 'solutions', 'reason'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for step in self.steps:
                writer.writerow(asdict(step))

        print(f"Trace written to {filepath} ({len(self.steps)} steps)")

    def summary(self) -> Dict[str, Any]:
        """Get a summary of the trace."""
        action_counts = {}
        for step in self.steps:
            action_counts[step.action_type] = action_counts.get(step.action_type, 0) + 1

        return {
            'total_steps': len(self.steps),
            'elapsed_time_seconds': self._get_timestamp(),
            'action_counts': action_counts,
            'num_attempts': sum(1 for s in self.steps if s.action_type in ('attempt_failed', 'accept')),
            'num_accepted': action_counts.get('accept', 0),
            'num_escalations': action_counts.get('escalate', 0),
            'num_backtracks': sum(s.backtracks or 0 for s in self.steps if s.action_type == 'sample'),
        }


# Global tracer instance, off until enable_tracing() is called
_global_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the global tracer (disabled by default)."""
    global _global_tracer
    if _global_tracer is None:
        _global_tracer = Tracer(enabled=False)
    return _global_tracer


def reset_tracer() -> None:
    """Reset the global tracer. The fresh tracer starts disabled."""
    global _global_tracer
    _global_tracer = None


def enable_tracing(enabled: bool = True) -> None:
    """Enable or disable tracing."""
    get_tracer().enabled = enabled
