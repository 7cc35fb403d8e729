"""
File helpers used by the artifacts registry, one pair per format.
"""

import json
from pathlib import Path
from typing import Any

import joblib


def load_json(file_path: Path) -> Any:
    with open(file_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: Any, file_path: Path) -> None:
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=4)


def load_joblib(file_path: Path) -> Any:
    return joblib.load(file_path)


def save_joblib(data: Any, file_path: Path) -> None:
    joblib.dump(data, file_path)
