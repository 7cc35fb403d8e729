"""
Main orchestrator for the training workflow.
Runs the steps in order inside a new registry version.
"""

import logging
from typing import Any, Dict, List, Optional

from error_triage.utils.artifacts_registry import ArtifactsRegistry
from .steps import OrchestrationStep

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Executes pipeline steps with a shared context and commits their
    artifacts as one registry version.
    """

    def __init__(
        self,
        steps: List[OrchestrationStep],
        registry: ArtifactsRegistry,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.steps = steps
        self.config = config or {}

        self.registry = registry
        self.context: Dict[str, Any] = {}

    def run(self, input_data: Any = None) -> str:
        """
        Execute every step in a new version. Nothing is written if a step
        fails. Returns the committed version ID.
        """
        logger.info("Starting pipeline with %d steps", len(self.steps))

        with self.registry(mode='create') as reg:
            self.context['registry'] = reg
            self.context['version_id'] = reg.active_version

            data = input_data
            for i, step in enumerate(self.steps, 1):
                logger.info("Step %d/%d: %s", i, len(self.steps), step.name)
                data = step.execute(data, self.context)

            version_id = reg.active_version

        logger.info("Changes committed. Version: %s", version_id)
        return version_id


def create_orchestrator(
    config: Optional[Dict[str, Any]] = None, registry: Optional[ArtifactsRegistry] = None
) -> Orchestrator:
    """
    Build the training orchestrator from the `training` config section.
    """
    from .steps import (
        LoadCorpusStep,
        FitVectorizerStep,
        AssembleFeaturesStep,
        TrainModelStep,
    )

    if registry is None:
        raise ValueError("An artifacts registry is required")

    config = config or {}

    steps = [
        LoadCorpusStep(config.get("corpus", {})),
        FitVectorizerStep(config.get("vectorizer", {})),
        AssembleFeaturesStep(config.get("features", {})),
        TrainModelStep(config.get("model", {})),
    ]

    return Orchestrator(steps=steps, config=config, registry=registry)
