"""
Engine module - the trainable network and the prediction API.
"""

from .model import TrainingReport, create_model, predict_distribution, train_model
from .classifier import CategoryScore, ErrorClassifier, EvaluationResult, Prediction, load_classifier

__all__ = [
    'TrainingReport',
    'create_model',
    'predict_distribution',
    'train_model',
    'CategoryScore',
    'ErrorClassifier',
    'EvaluationResult',
    'Prediction',
    'load_classifier'
]
