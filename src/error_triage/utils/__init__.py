"""
Utilities - YAML configuration and the versioned artifacts registry.
"""

from .config_loader import ConfigLoader
from .artifacts_registry import ArtifactsRegistry

__all__ = ['ConfigLoader', 'ArtifactsRegistry']
