"""
Configuration Manager for the veracity model-selection pipeline

Loads every YAML file of the configuration directory into one nested
SimpleNamespace. Files in subdirectories are nested under the directory name,
so ``models/regularized_linear.yaml`` becomes ``config.models.regularized_linear``.
"""

import os
import logging
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Any

from veracity_ml.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from .base_config_manager import BaseConfigManager

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV_VAR = 'VERACITY_CONFIG_DIR'


class ConfigManager(BaseConfigManager):
    def __init__(self, config_dir: Path = None, app_file_handler: BaseAppFileHandler = None):
        self.app_file_handler = app_file_handler
        self.config_dir = self._get_default_config_dir() if config_dir is None else Path(config_dir)
        self._load_configurations()

    def _get_default_config_dir(self) -> Path:
        """
        Use the directory named by VERACITY_CONFIG_DIR, falling back to the
        configs shipped with the package.
        """
        env_dir = os.environ.get(CONFIG_DIR_ENV_VAR)
        if env_dir:
            return Path(env_dir)
        return Path(__file__).parent.parent.parent / 'configs'

    def get_config(self) -> SimpleNamespace:
        return self

    def _load_configurations(self) -> None:
        """
        Load the main configuration files and those in nested directories.
        """
        logger.debug(f"Loading configuration files from: {self.config_dir}")
        config_dict = self.app_file_handler.load_yaml_files_in_directory(
            self.config_dir,
            required_files=['app_config.yaml']
        )

        nested_configs = self._load_nested_configurations()
        config_dict = self._deep_merge(config_dict, nested_configs)

        config_obj = self._dict_to_namespace(config_dict)
        for key, value in vars(config_obj).items():
            setattr(self, key, value)

    def _load_nested_configurations(self) -> Dict[str, Any]:
        """
        Recursively load configurations from nested directories.
        Returns a dictionary with nested configuration data.
        """
        nested_configs = {}

        for item in sorted(self.config_dir.rglob('*.yaml')):
            if item.parent == self.config_dir:
                continue

            current_level = nested_configs
            relative_path = item.relative_to(self.config_dir)
            for part in relative_path.parts[:-1]:
                current_level = current_level.setdefault(part, {})

            current_level[item.stem] = self.app_file_handler.read_yaml(item)
            logger.debug(f"Loaded nested configuration from: {item}")

        return nested_configs

    def _deep_merge(self, dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively merge two dictionaries, preserving nested structures.
        """
        result = dict1.copy()

        for key, value in dict2.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _dict_to_namespace(self, d: Dict[str, Any]) -> Any:
        """
        Recursively convert a dictionary to SimpleNamespace.
        Handles path resolution for string values.
        """
        if isinstance(d, str):
            return self.app_file_handler.resolve_project_root_path(d)
        if isinstance(d, list):
            return [self._dict_to_namespace(v) for v in d]
        if not isinstance(d, dict):
            return d
        return SimpleNamespace(**{k: self._dict_to_namespace(v) for k, v in d.items()})
