import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .load_save import load_joblib, load_json, save_joblib, save_json

logger = logging.getLogger(__name__)

VERSION_METADATA_FILE = "version_metadata.json"

# suffix -> (loader, saver)
FILE_FORMATS: Dict[str, Tuple[Callable[[Path], Any], Callable[[Any, Path], None]]] = {
    ".json": (load_json, save_json),
    ".joblib": (load_joblib, save_joblib),
}


@dataclass
class ArtifactMetadata:
    name: str
    path: Path
    created_at: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "created_at": self.created_at,
            "metadata": self.metadata,
        }


@dataclass
class ArtifactVersion:
    version_id: str
    timestamp: str
    artifacts: Dict[str, Dict[str, ArtifactMetadata]] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ArtifactVersion":
        artifacts = {
            artifact_type: {
                name: ArtifactMetadata(
                    name=meta["name"],
                    path=Path(meta["path"]),
                    created_at=meta["created_at"],
                    metadata=meta.get("metadata", {}),
                )
                for name, meta in type_dict.items()
            }
            for artifact_type, type_dict in data.get("artifacts", {}).items()
        }
        return ArtifactVersion(
            version_id=data.get("version_id"),
            timestamp=data.get("timestamp"),
            artifacts=artifacts,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version_id": self.version_id,
            "timestamp": self.timestamp,
            "artifacts": {
                artifact_type: {name: meta.to_dict() for name, meta in artifacts.items()}
                for artifact_type, artifacts in self.artifacts.items()
            },
        }


class VersionContext:
    def __init__(
        self,
        registry: "ArtifactsRegistry",
        mode: str = "load",
        version_id: Optional[str] = None,
    ):
        self.registry = registry
        self.mode = mode
        self.version_id = version_id
        self.previous_version = registry.active_version

    def __enter__(self):
        if self.mode == "create":
            self.registry.create_version()
        elif self.mode == "load":
            if self.version_id:
                self.registry.load_version(self.version_id)
            else:
                self.registry.load_latest()
        else:
            raise ValueError(f"Unknown mode: {self.mode}")
        return self.registry

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None and self.mode == "create":
            self.registry.commit()
        else:
            self.registry.discard_pending()
            self.registry.active_version = self.previous_version

        return False  # Do not suppress exceptions


@dataclass
class ArtifactConfig:
    format: str
    required: bool = True
    dependencies: List[str] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ArtifactConfig":
        artifact_format = data.get("format")
        if f".{artifact_format}" not in FILE_FORMATS:
            raise ValueError(f"Unsupported artifact format: '{artifact_format}'")
        return ArtifactConfig(
            format=artifact_format,
            required=data.get("required", True),
            dependencies=data.get("dependencies", []),
        )


class ArtifactsRegistry:
    """
    Versioned store for training artifacts (vectorizer, categories, model,
    metadata).

    ArtifactsRegistry(
        {base_path, base_version, artifact_types: {str -> ArtifactConfig}}
    )

    Layout: <base_path>/<base_version>.<timestamp>/<type>/<name>.<format>
    plus one version_metadata.json per version.

    Usage:
    with registry(mode='create') as reg:
        reg.register_artifact('vectorizer', 'vectorizer', data)
    """

    def __init__(self, config: Dict[str, Any]):
        self.base_path = Path(config.get("base_path", "artifacts"))
        self.base_version = config.get("base_version", "v1")
        self.artifacts_config = {
            artifact_type: ArtifactConfig.from_dict(cfg)
            for artifact_type, cfg in config.get("artifact_types", {}).items()
        }

        self.base_path.mkdir(parents=True, exist_ok=True)

        self.versions: Dict[str, ArtifactVersion] = {}
        self.active_version: Optional[str] = None
        self.pending_artifacts: Dict[Tuple[str, str, str], Any] = {}

    def load_latest(self) -> None:
        """Load the newest version and make it active."""
        candidates = self._find_version_candidates()

        if not candidates:
            raise FileNotFoundError("No versions found in the registry.")

        self.load_version(max(candidates))

    def load_version(self, version_id: str) -> None:
        """
        Load a specific version. Raises FileNotFoundError if it does not
        exist.
        """
        version_data = self._load_version_metadata(version_id)
        self.versions[version_id] = ArtifactVersion.from_dict(version_data)
        self.active_version = version_id

    def list_versions(self) -> List[str]:
        """Version IDs, newest first."""
        return sorted(self._find_version_candidates(), reverse=True)

    def _find_version_candidates(self) -> List[str]:
        pattern = re.compile(rf"^{re.escape(self.base_version)}\.(\d{{8}}_\d{{6}}_\d{{6}})$")
        return [
            entry.name
            for entry in self.base_path.iterdir()
            if entry.is_dir() and pattern.match(entry.name)
        ]

    def _load_version_metadata(self, version: str) -> dict:
        version_file = self.base_path / version / VERSION_METADATA_FILE
        if not version_file.exists():
            raise FileNotFoundError(
                f"Version metadata file not found for version '{version}'."
            )
        return load_json(version_file)

    def create_version(self) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        version_id = f"{self.base_version}.{timestamp}"

        self.versions[version_id] = ArtifactVersion(
            version_id=version_id, timestamp=timestamp, artifacts={}
        )
        self.active_version = version_id
        return version_id

    def register_artifact(
        self,
        artifact_type: str,
        artifact_name: str,
        artifact_data: Any,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ArtifactsRegistry":
        if self.active_version is None:
            raise RuntimeError("No active version set.")

        if artifact_type not in self.artifacts_config:
            raise ValueError(f"Unknown artifact type: '{artifact_type}'.")

        self._validate_dependencies(artifact_type)

        version = self.versions[self.active_version]
        format_cfg = self.artifacts_config[artifact_type]
        artifact_file = (
            self.base_path / self.active_version / artifact_type
            / f"{artifact_name}.{format_cfg.format}"
        )

        version.artifacts.setdefault(artifact_type, {})[artifact_name] = ArtifactMetadata(
            name=artifact_name,
            path=artifact_file,
            created_at=datetime.now().isoformat(),
            metadata=metadata or {},
        )
        self.pending_artifacts[(version.version_id, artifact_type, artifact_name)] = (
            artifact_data
        )
        logger.debug("Registered %s/%s in %s", artifact_type, artifact_name, version.version_id)

        return self

    def get_artifact(self, artifact_type: str, artifact_name: str) -> Any:
        if self.active_version is None:
            raise RuntimeError("No active version set.")

        version = self.versions[self.active_version]
        self._check_artifact_exists(version, artifact_type, artifact_name)

        artifact_meta = version.artifacts[artifact_type][artifact_name]
        art_key = (self.active_version, artifact_type, artifact_name)

        if art_key in self.pending_artifacts:
            return self.pending_artifacts[art_key]

        if not artifact_meta.path.exists():
            raise FileNotFoundError(f"Artifact file not found: {artifact_meta.path}")

        loader, _ = self._file_format(artifact_meta.path)
        data = loader(artifact_meta.path)
        self.pending_artifacts[art_key] = data
        return data

    def _check_artifact_exists(
        self, version: ArtifactVersion, artifact_type: str, artifact_name: str
    ) -> None:
        if artifact_type not in version.artifacts:
            raise KeyError(
                f"Artifact type '{artifact_type}' not found in "
                f"version '{version.version_id}'."
            )

        if artifact_name not in version.artifacts[artifact_type]:
            raise KeyError(
                f"Artifact '{artifact_name}' of type '{artifact_type}' "
                f"not found in version '{version.version_id}'."
            )

    @staticmethod
    def _file_format(file_path: Path):
        suffix = file_path.suffix.lower()
        if suffix not in FILE_FORMATS:
            raise ValueError(f"Unsupported file format: {suffix}")
        return FILE_FORMATS[suffix]

    def commit(self) -> None:
        if self.active_version is None:
            raise RuntimeError("No active version set.")

        version = self.versions[self.active_version]
        self._validate_required_artifacts(version)

        for (version_id, artifact_type, artifact_name), data in self.pending_artifacts.items():
            if version_id != self.active_version:
                continue

            path = version.artifacts[artifact_type][artifact_name].path
            path.parent.mkdir(parents=True, exist_ok=True)
            _, saver = self._file_format(path)
            saver(data, path)

        version_path = self.base_path / version.version_id
        version_path.mkdir(parents=True, exist_ok=True)
        save_json(version.to_dict(), version_path / VERSION_METADATA_FILE)
        logger.info("Committed version %s", version.version_id)

        self.discard_pending()

    def discard_pending(self) -> None:
        """Drop cached/pending artifacts of the active version."""
        self.pending_artifacts = {
            k: v
            for k, v in self.pending_artifacts.items()
            if k[0] != self.active_version
        }

    def _validate_dependencies(self, artifact_type: str) -> None:
        version = self.versions[self.active_version]
        missing_deps = [
            dep_type
            for dep_type in self.artifacts_config[artifact_type].dependencies
            if not version.artifacts.get(dep_type)
        ]

        if missing_deps:
            raise ValueError(
                f"Cannot register '{artifact_type}': missing required "
                f"dependencies {missing_deps}"
            )

    def _validate_required_artifacts(self, version: ArtifactVersion) -> None:
        missing_required = [
            artifact_type
            for artifact_type, config in self.artifacts_config.items()
            if config.required and not version.artifacts.get(artifact_type)
        ]

        if missing_required:
            raise ValueError(
                f"Missing required artifacts in version "
                f"'{version.version_id}': {missing_required}"
            )

    def __call__(self, mode: str = "load", version_id: Optional[str] = None) -> VersionContext:
        return VersionContext(self, mode, version_id)
