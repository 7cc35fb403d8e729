"""
Dense feed-forward classifier used on top of the TF-IDF features.

The network is a scikit-learn MLPClassifier: ReLU hidden layers, softmax
output, Adam with mini-batches and early stopping on a held-out split.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
from sklearn.neural_network import MLPClassifier

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PARAMS: Dict[str, Any] = {
    'hidden_layer_sizes': (64, 128, 64, 32, 16),
    'activation': 'relu',
    'solver': 'adam',
    'batch_size': 8,
    'max_iter': 50,
    'early_stopping': True,
    'validation_fraction': 0.2,
    'n_iter_no_change': 5,
    'random_state': None,
}


@dataclass
class TrainingReport:
    epochs: int
    final_loss: float
    best_validation_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'epochs': self.epochs,
            'final_loss': self.final_loss,
            'best_validation_score': self.best_validation_score,
        }


def create_model(**kwargs) -> MLPClassifier:
    """Build an untrained classifier; keyword arguments override defaults."""
    params = {**DEFAULT_MODEL_PARAMS, **kwargs}
    params['hidden_layer_sizes'] = tuple(params['hidden_layer_sizes'])
    return MLPClassifier(**params)


def _can_hold_out(model: MLPClassifier, labels: np.ndarray) -> bool:
    # the held-out split is stratified: every class needs two samples, the
    # split needs one sample per class and scikit-learn wants at least two
    if len(labels) == 0:
        return False
    _, counts = np.unique(labels, return_counts=True)
    held_out = math.ceil(model.validation_fraction * len(labels))
    return counts.min() >= 2 and held_out >= max(2, len(counts)) and len(labels) - held_out >= len(counts)


def train_model(model: MLPClassifier, features: np.ndarray, labels: np.ndarray) -> TrainingReport:
    """
    Fit `model` in place and summarize the run.

    Early stopping is switched off, with a warning, when the labels are
    too sparse for a stratified validation split.
    """
    if len(features) == 0:
        raise ValueError("Cannot train on an empty feature matrix")

    if model.early_stopping and not _can_hold_out(model, labels):
        logger.warning(
            "Too few samples per category for a %.0f%% validation split; "
            "training without early stopping",
            model.validation_fraction * 100,
        )
        model.set_params(early_stopping=False)

    logger.info(
        "Training on %d rows x %d features, %d categories",
        features.shape[0], features.shape[1], len(np.unique(labels)),
    )
    model.fit(features, labels)

    validation_score = getattr(model, 'best_validation_score_', None)
    report = TrainingReport(
        epochs=int(model.n_iter_),
        final_loss=float(model.loss_curve_[-1]),
        best_validation_score=float(validation_score) if validation_score is not None else None,
    )
    logger.info(
        "Training completed after %d epochs, loss %.4f",
        report.epochs, report.final_loss,
    )
    return report


def predict_distribution(model: MLPClassifier, features: np.ndarray, num_categories: int) -> np.ndarray:
    """
    Class probabilities for each row, laid out over the full category set.

    Categories that never appeared in training get probability 0. A model
    trained on a single category puts all mass on it.
    """
    classes = model.classes_.astype(int)
    distribution = np.zeros((len(features), num_categories))
    if len(classes) == 1:
        distribution[:, classes[0]] = 1.0
        return distribution

    distribution[:, classes] = model.predict_proba(features)
    return distribution
