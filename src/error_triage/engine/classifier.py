import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np

from error_triage.exceptions import ClassifierNotReadyError
from error_triage.features.assembly import FeatureAssembler
from error_triage.features.vectorizer import Vectorizer
from .model import predict_distribution

logger = logging.getLogger(__name__)


@dataclass
class CategoryScore:
    category: str
    confidence: float


@dataclass
class Prediction:
    category: str
    confidence: float
    all_predictions: List[CategoryScore] = field(default_factory=list)


@dataclass
class EvaluationResult:
    successes: int = 0
    failures: int = 0

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def accuracy(self) -> float:
        return self.successes / self.total if self.total else 0.0


class ErrorClassifier:
    def __init__(
        self,
        model,
        vectorizer: Vectorizer,
        categories: Sequence[str],
        max_len: int = 50,
        pad: bool = False,
    ):
        """Initialize the error classifier.

        Pre:
        - model: trained classifier exposing predict_proba / classes_,
        - vectorizer: the fitted vectorizer the model was trained with,
        - categories: category set in label order,
        - max_len / pad: the feature-assembly settings used at training.
        """
        self.model = model
        self.vectorizer = vectorizer
        self.categories = list(categories)
        self.assembler = FeatureAssembler(vectorizer, self.categories, max_len=max_len, pad=pad)

    def _check_ready(self):
        if self.model is None or self.vectorizer is None or not self.categories:
            raise ClassifierNotReadyError("Model, vectorizer, or categories not loaded")

    def predict(self, text: str, callstack: str = "") -> Prediction:
        """Predict the category for a single error report."""
        self._check_ready()

        row = np.asarray([self.assembler.feature_row(text, callstack)], dtype=float)
        distribution = predict_distribution(self.model, row, len(self.categories))[0]

        best = int(np.argmax(distribution))
        ranked = sorted(
            (
                CategoryScore(category, float(distribution[idx]))
                for idx, category in enumerate(self.categories)
            ),
            key=lambda score: score.confidence,
            reverse=True,
        )

        return Prediction(
            category=self.categories[best],
            confidence=float(distribution[best]),
            all_predictions=ranked,
        )

    def evaluate(self, records: Iterable) -> EvaluationResult:
        """Count records whose predicted category matches their label."""
        result = EvaluationResult()
        for record in records:
            if self.predict(record.text, record.callstack).category == record.category:
                result.successes += 1
            else:
                result.failures += 1

        logger.info(
            "%d successes and %d failures (accuracy %.4f)",
            result.successes, result.failures, result.accuracy,
        )
        return result


def load_classifier(registry) -> ErrorClassifier:
    """
    Rebuild a classifier from the registry's active version.

    The registry must already be inside a version context.
    """
    metadata = registry.get_artifact("metadata", "metadata")
    vectorizer = Vectorizer.from_dict(registry.get_artifact("vectorizer", "vectorizer"))
    categories = registry.get_artifact("categories", "categories")
    model = registry.get_artifact("model", "model")

    return ErrorClassifier(
        model=model,
        vectorizer=vectorizer,
        categories=categories,
        max_len=metadata.get("max_len", 50),
        pad=metadata.get("pad", False),
    )
