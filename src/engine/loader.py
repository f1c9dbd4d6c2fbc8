import json
import os
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from src.utils.io import load_json


def load_puzzles(file_path: str) -> List[Dict[str, Any]]:
    """
    Reads puzzle records from a file. Handles .parquet, .csv, .json and .jsonl formats.
    Returns a list of raw record dictionaries (see `parser.parse_puzzle`).
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    stem = os.path.splitext(os.path.basename(file_path))[0]

    def _is_missing(value: Any) -> bool:
        if value is None:
            return True
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    def _normalize_record(record: Dict[str, Any], index: int) -> Dict[str, Any]:
        normalized: Dict[str, Any] = {}
        for key, value in record.items():
            if _is_missing(value):
                continue
            if hasattr(value, "item"):
                # numpy scalars from parquet/csv frames
                value = value.item()
            if isinstance(value, str):
                value = value.strip()
            normalized[str(key)] = value

        if not normalized.get("id"):
            normalized["id"] = f"{stem}-{index}"
        else:
            normalized["id"] = str(normalized["id"])
        return normalized

    # Case 1: Parquet File (Binary)
    if file_path.endswith('.parquet'):
        try:
            df = pd.read_parquet(file_path)
        except (OSError, ValueError, ImportError) as e:
            print(f"Error reading parquet: {e}")
            return []
        records = df.to_dict(orient="records")
        return [_normalize_record(r, i) for i, r in enumerate(records)]

    # Case 2: CSV File (as written by `run.py generate`)
    if file_path.endswith('.csv'):
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
        records = df.to_dict(orient="records")
        return [_normalize_record(r, i) for i, r in enumerate(records)]

    # Case 3: JSON File (Text; array or object)
    if file_path.endswith(".json"):
        try:
            payload = load_json(Path(file_path))
            if isinstance(payload, list):
                return [_normalize_record(p, i) for i, p in enumerate(payload) if isinstance(p, dict)]
            if isinstance(payload, dict):
                return [_normalize_record(payload, 0)]
            return []
        except json.JSONDecodeError:
            # Some sources use ".json" but actually store JSONL; fall back to line-delimited parsing.
            pass

    # Case 4: JSONL File (Text)
    data = []
    with open(file_path, 'r', encoding='utf-8') as f:
        for line in f:
            if line.strip():
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(obj, dict):
                    data.append(_normalize_record(obj, len(data)))
    return data
