"""
Orchestration steps for the training workflow.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from error_triage.data.corpus import CorpusScan, scan_corpus
from error_triage.data.loaders import iter_records
from error_triage.engine.model import create_model, train_model
from error_triage.features.assembly import FeatureAssembler
from error_triage.features.vectorizer import Vectorizer, create_vectorizer

logger = logging.getLogger(__name__)


class OrchestrationStep(ABC):
    """Abstract base class for orchestration steps."""

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        self.name = name
        self.config = config or {}

    @abstractmethod
    def execute(self, data: Any, context: Dict[str, Any]) -> Any:
        """
        Execute the step.

        Args:
            data: Input data for this step
            context: Shared context with registry, metadata, etc.

        Returns:
            Output data to pass to next step
        """
        pass


class LoadCorpusStep(OrchestrationStep):
    """Scan the corpus once for fit documents and the category set."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("Load Corpus", config)

    def execute(self, input_path: Optional[str], context: Dict[str, Any]) -> CorpusScan:
        path = input_path or self.config.get("input_path")
        if not path:
            raise ValueError("No input path provided")

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")

        max_data = self.config.get("max_data")
        logger.info("Loading corpus from %s (max_data=%s)", path, max_data)

        scan = scan_corpus(
            iter_records(path, max_data),
            include_callstack=self.config.get("fit_on_callstack", False),
        )
        if scan.total == 0:
            raise ValueError(f"No labelled records found in {path}")

        context["input_path"] = str(path)
        context["max_data"] = max_data
        context["num_records"] = scan.total
        context["categories"] = scan.categories

        return scan


class FitVectorizerStep(OrchestrationStep):
    """Fit the vectorizer on the scanned documents and register it."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("Fit Vectorizer", config)

    def execute(self, scan: CorpusScan, context: Dict[str, Any]) -> Vectorizer:
        vectorizer_type = self.config.get("type", "tfidf")
        vectorizer_params = self.config.get("params", {})

        vectorizer = create_vectorizer(vectorizer_type, **vectorizer_params)
        logger.info("Fitting %s vectorizer on %d documents", vectorizer_type, len(scan.documents))
        vectorizer.fit(scan.documents)

        vocab_size = len(vectorizer.vocabulary)
        logger.info("Fitted vectorizer with vocabulary size: %d", vocab_size)

        registry = context["registry"]
        registry.register_artifact(
            artifact_type="vectorizer",
            artifact_name="vectorizer",
            artifact_data=vectorizer.to_dict(),
            metadata={"type": vectorizer_type, "vocabulary_size": vocab_size},
        )
        registry.register_artifact(
            artifact_type="categories",
            artifact_name="categories",
            artifact_data=scan.categories,
            metadata={"count": len(scan.categories)},
        )

        context["vectorizer"] = vectorizer
        context["vectorizer_type"] = vectorizer_type

        return vectorizer


class AssembleFeaturesStep(OrchestrationStep):
    """Re-stream the corpus and build the feature matrix and labels."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("Assemble Features", config)

    def execute(self, vectorizer: Vectorizer, context: Dict[str, Any]):
        max_len = self.config.get("max_len", 50)
        pad = self.config.get("pad", False)

        assembler = FeatureAssembler(vectorizer, context["categories"], max_len=max_len, pad=pad)
        features = assembler.assemble(
            iter_records(context["input_path"], context["max_data"])
        )

        matrix = features.to_matrix()
        labels = features.label_array()
        logger.info("Feature matrix: %s", matrix.shape)

        context["max_len"] = max_len
        context["pad"] = pad
        context["feature_shape"] = list(matrix.shape)

        return matrix, labels


class TrainModelStep(OrchestrationStep):
    """Train the network and register the model with run metadata."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__("Train Model", config)

    def execute(self, features, context: Dict[str, Any]):
        matrix, labels = features
        model = create_model(**self.config.get("params", {}))
        report = train_model(model, matrix, labels)

        registry = context["registry"]
        registry.register_artifact(
            artifact_type="model",
            artifact_name="model",
            artifact_data=model,
            metadata=report.to_dict(),
        )

        metadata = {
            "input_path": context["input_path"],
            "num_records": context["num_records"],
            "vectorizer_type": context["vectorizer_type"],
            "categories": context["categories"],
            "max_len": context["max_len"],
            "pad": context["pad"],
            "feature_shape": context["feature_shape"],
            "training": report.to_dict(),
            "label_distribution": np.bincount(labels, minlength=len(context["categories"])).tolist(),
        }
        registry.register_artifact(
            artifact_type="metadata",
            artifact_name="metadata",
            artifact_data=metadata,
        )

        context["model"] = model
        context["training_report"] = report

        return model
