"""Shared test fixtures for error-triage tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml


NULL_POINTER = "null_pointer"
TIMEOUT = "timeout"
PERMISSION = "permission"

LABELLED_REPORTS = [
    (1, "TypeError: cannot read property of null", "at render (app.js:10)\nat main (app.js:3)", NULL_POINTER),
    (2, "Request timeout after 30000ms", "at fetch (net.js:88)\nat poll (sync.js:12)", TIMEOUT),
    (3, "EACCES: permission denied, open config", "at open (fs.js:5)\nat load (config.js:40)", PERMISSION),
    (4, "TypeError: null is not an object", "at render (app.js:11)\nat main (app.js:3)", NULL_POINTER),
    (5, "Gateway timeout while waiting for upstream", "at fetch (net.js:90)\nat poll (sync.js:12)", TIMEOUT),
    (6, "permission denied for user on resource", "at open (fs.js:7)\nat save (config.js:52)", PERMISSION),
    (7, "cannot read property length of null", "at render (list.js:21)\nat main (app.js:3)", NULL_POINTER),
    (8, "socket timeout reading response", "at read (net.js:120)\nat poll (sync.js:14)", TIMEOUT),
    (9, "EPERM: operation not permitted, permission denied", "at unlink (fs.js:9)\nat clean (config.js:60)", PERMISSION),
]


def make_record(record_id: int, text: str, callstack: str, category: str) -> dict:
    return {"id": record_id, "text": text, "callstack": callstack, "category": category}


def write_ndjson(path: Path, rows) -> Path:
    """Write dicts (or raw strings) one per line."""
    with open(path, "w", encoding="utf-8") as f:
        for row in rows:
            f.write(row if isinstance(row, str) else json.dumps(row))
            f.write("\n")
    return path


@pytest.fixture
def records() -> list[dict]:
    return [make_record(*report) for report in LABELLED_REPORTS]


@pytest.fixture
def corpus_path(tmp_path: Path, records: list[dict]) -> Path:
    """Corpus file with one unlabelled record mixed in."""
    rows = list(records)
    rows.insert(2, make_record(99, "unlabelled crash", "at nowhere", ""))
    return write_ndjson(tmp_path / "training.ndjson", rows)


@pytest.fixture
def registry_config(tmp_path: Path) -> dict:
    return {
        "base_path": str(tmp_path / "artifacts"),
        "base_version": "v1",
        "artifact_types": {
            "vectorizer": {"format": "json", "required": True},
            "categories": {"format": "json", "required": True},
            "model": {
                "format": "joblib",
                "required": True,
                "dependencies": ["vectorizer", "categories"],
            },
            "metadata": {"format": "json", "required": True, "dependencies": ["model"]},
        },
    }


@pytest.fixture
def fast_model_params() -> dict:
    """Small network that fits the fixture corpus quickly and reproducibly."""
    return {
        "hidden_layer_sizes": [32],
        "batch_size": 4,
        "max_iter": 300,
        "early_stopping": False,
        "learning_rate_init": 0.01,
        "random_state": 0,
    }


@pytest.fixture
def training_config(corpus_path: Path, fast_model_params: dict) -> dict:
    return {
        "corpus": {"input_path": str(corpus_path), "max_data": None, "fit_on_callstack": True},
        "vectorizer": {"type": "tfidf", "params": {}},
        "features": {"max_len": 64, "pad": True},
        "model": {"params": fast_model_params},
    }


@pytest.fixture
def config_dir(tmp_path: Path, registry_config: dict, training_config: dict) -> Path:
    directory = tmp_path / "configs"
    directory.mkdir()
    (directory / "registry_config.yaml").write_text(yaml.safe_dump(registry_config))
    (directory / "training_config.yaml").write_text(yaml.safe_dump(training_config))
    return directory
