"""
Orchestration module for the training pipeline with versioned artifacts.
"""

from .orchestrator import Orchestrator, create_orchestrator
from .steps import (
    OrchestrationStep,
    LoadCorpusStep,
    FitVectorizerStep,
    AssembleFeaturesStep,
    TrainModelStep
)

__all__ = [
    'Orchestrator',
    'create_orchestrator',
    'OrchestrationStep',
    'LoadCorpusStep',
    'FitVectorizerStep',
    'AssembleFeaturesStep',
    'TrainModelStep'
]
