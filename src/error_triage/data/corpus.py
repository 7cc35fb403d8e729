"""
Single-pass corpus scan.

Every record is fanned out to independent subscribers, so collecting fit
documents and building the category set do not depend on each other.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence

from error_triage.exceptions import UnknownCategoryError
from error_triage.features.vocabulary import Document
from .records import TrainingRecord

logger = logging.getLogger(__name__)


class RecordSubscriber:
    def consume(self, record: TrainingRecord) -> None:
        raise NotImplementedError


class CategoryIndex(RecordSubscriber):
    """Distinct categories in first-occurrence order; label = position."""

    def __init__(self, categories: Iterable[str] = ()):
        self._categories: List[str] = []
        self._positions = {}
        for category in categories:
            self.add(category)

    def add(self, category: str) -> int:
        if category not in self._positions:
            self._positions[category] = len(self._categories)
            self._categories.append(category)
        return self._positions[category]

    def consume(self, record: TrainingRecord) -> None:
        self.add(record.category)

    def index_of(self, category: str) -> int:
        try:
            return self._positions[category]
        except KeyError:
            raise UnknownCategoryError(category) from None

    @property
    def categories(self) -> List[str]:
        return list(self._categories)

    def __len__(self):
        return len(self._categories)

    def __iter__(self) -> Iterator[str]:
        return iter(self._categories)

    def __contains__(self, category: str) -> bool:
        return category in self._positions


class DocumentCollector(RecordSubscriber):
    """
    Collects fit documents. The callstack is only added as a second
    document when `include_callstack` is set.
    """

    def __init__(self, include_callstack: bool = False):
        self.include_callstack = include_callstack
        self.documents: List[Document] = []

    def consume(self, record: TrainingRecord) -> None:
        self.documents.append(Document(record.id, record.text))
        if self.include_callstack:
            self.documents.append(Document(record.id, record.callstack))


@dataclass
class CorpusScan:
    documents: List[Document] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    total: int = 0


def stream_records(
    records: Iterable[TrainingRecord], subscribers: Sequence[RecordSubscriber]
) -> int:
    """Feed each record to every subscriber in order. Returns the count."""
    total = 0
    for record in records:
        for subscriber in subscribers:
            subscriber.consume(record)
        total += 1
    return total


def scan_corpus(
    records: Iterable[TrainingRecord], include_callstack: bool = False
) -> CorpusScan:
    collector = DocumentCollector(include_callstack=include_callstack)
    category_index = CategoryIndex()

    total = stream_records(records, [collector, category_index])
    logger.info(
        "Scanned %d records: %d documents, %d categories",
        total, len(collector.documents), len(category_index),
    )

    return CorpusScan(
        documents=collector.documents,
        categories=category_index.categories,
        total=total,
    )
