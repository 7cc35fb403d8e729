import copy
from pathlib import Path
from typing import Any, Dict

import yaml


class ConfigLoader:
    """
    Loads YAML files from a config directory.

    Each `<name>_config.yaml` becomes section `<name>`; `get` resolves
    dotted keys such as "training.features.max_len".
    """

    def __init__(self, config_dir: str = "configs"):
        self.config_dir = Path(config_dir)
        self.configs: Dict[str, Any] = {}

    def load_all(self) -> Dict[str, Any]:
        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Config directory not found: {self.config_dir}")

        for config_file in sorted(self.config_dir.glob("*.yaml")):
            config_name = config_file.stem.replace("_config", "")
            self.configs[config_name] = self.load_yaml(config_file) or {}

        return self.configs

    def get(self, key: str, default: Any = None) -> Any:
        keys = key.split(".")
        value = self.configs

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        # callers resolve paths in place; keep the loaded tree untouched
        return copy.deepcopy(value)

    def load_yaml(self, file_path: Path) -> Dict[str, Any]:
        with open(file_path, 'r') as f:
            return yaml.safe_load(f)
