"""
Feature assembly: one row per error report, message slice followed by
callstack slice.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np

from error_triage.exceptions import RaggedFeaturesError, UnknownCategoryError
from .vectorizer import Vectorizer

logger = logging.getLogger(__name__)


@dataclass
class FeatureSet:
    rows: List[List[float]] = field(default_factory=list)
    labels: List[int] = field(default_factory=list)

    def __len__(self):
        return len(self.rows)

    @property
    def widths(self) -> List[int]:
        return sorted({len(row) for row in self.rows})

    def to_matrix(self) -> np.ndarray:
        """Rows as a 2-D array. Raises RaggedFeaturesError on mixed widths."""
        widths = self.widths
        if len(widths) > 1:
            raise RaggedFeaturesError(
                f"Feature rows have mixed widths {widths}; enable padding or "
                f"lower max_len below the vocabulary size"
            )
        if not self.rows:
            return np.zeros((0, 0))
        return np.asarray(self.rows, dtype=float)

    def label_array(self) -> np.ndarray:
        return np.asarray(self.labels, dtype=int)


class FeatureAssembler:
    """
    Builds feature rows from a fitted vectorizer.

    Each field vector is cut to `max_len` entries. With `pad=False` a
    shorter vector is kept as-is, so rows are narrower than 2 * max_len
    whenever the vocabulary has fewer than max_len terms. With `pad=True`
    short slices are right-padded with zeros.
    """

    def __init__(
        self,
        vectorizer: Vectorizer,
        categories: Sequence[str],
        max_len: int = 50,
        pad: bool = False,
    ):
        if max_len <= 0:
            raise ValueError(f"max_len must be positive, got {max_len}")
        self.vectorizer = vectorizer
        self.categories = list(categories)
        self.max_len = max_len
        self.pad = pad
        self._category_index = {name: idx for idx, name in enumerate(self.categories)}

    @property
    def row_width(self) -> int:
        """Width of a row; smaller than 2 * max_len only when unpadded."""
        if self.pad:
            return 2 * self.max_len
        return 2 * min(self.max_len, len(self.vectorizer.vocabulary))

    def _slice(self, text: str) -> List[float]:
        vector = self.vectorizer.get(text)[:self.max_len]
        if self.pad and len(vector) < self.max_len:
            vector.extend([0.0] * (self.max_len - len(vector)))
        return vector

    def feature_row(self, text: str, callstack: str) -> List[float]:
        return self._slice(text) + self._slice(callstack)

    def label_for(self, category: str) -> int:
        try:
            return self._category_index[category]
        except KeyError:
            raise UnknownCategoryError(category) from None

    def assemble(self, records: Iterable) -> FeatureSet:
        """Rows and labels in record order."""
        features = FeatureSet()
        for record in records:
            features.rows.append(self.feature_row(record.text, record.callstack))
            features.labels.append(self.label_for(record.category))

        if not self.pad and len(self.vectorizer.vocabulary) < self.max_len:
            logger.warning(
                "Vocabulary size %d is below max_len %d; rows are %d wide instead of %d",
                len(self.vectorizer.vocabulary), self.max_len,
                self.row_width, 2 * self.max_len,
            )
        logger.info("Assembled %d feature rows", len(features))
        return features
