import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import pandas as pd
from pydantic import ValidationError

from error_triage.exceptions import CorpusValidationError
from .records import TrainingRecord

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    @abstractmethod
    def iter_records(self) -> Iterator[TrainingRecord]:
        pass

    def load(self) -> pd.DataFrame:
        rows = [record.model_dump() for record in self.iter_records()]
        return pd.DataFrame(rows, columns=list(TrainingRecord.model_fields))


def parse_record(line: str, line_number: int) -> TrainingRecord:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as e:
        raise CorpusValidationError(line_number, f"malformed JSON ({e.msg})") from e

    try:
        return TrainingRecord.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise CorpusValidationError(line_number, problems) from e


def iter_records(path, limit: Optional[int] = None) -> Iterator[TrainingRecord]:
    """
    Stream qualifying records from a newline-delimited JSON file.

    Records with an empty category are skipped and do not count toward
    `limit`. The first invalid line aborts the whole read.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")
    if limit is not None and limit <= 0:
        return

    yielded = 0
    with open(path, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip():
                continue

            record = parse_record(line, line_number)
            if not record.category:
                logger.debug("Skipping line %d: empty category", line_number)
                continue

            yield record
            yielded += 1

            if limit is not None and yielded >= limit:
                break


class NdjsonLoader(BaseLoader):
    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}
        self.filepath: str = self.config.get("filepath", "")
        self.limit: Optional[int] = self.config.get("limit", None)

    def iter_records(self) -> Iterator[TrainingRecord]:
        return iter_records(self.filepath, self.limit)


def create_loader(loader_type: str, **kwargs) -> BaseLoader:
    if loader_type in ("ndjson", "jsonl"):
        return NdjsonLoader(kwargs)
    else:
        raise ValueError(f"Unsupported loader type: {loader_type}")
