from abc import ABC, abstractmethod
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Any


class BaseConfigManager(ABC):
    @abstractmethod
    def __init__(self, config_dir: Path = None, app_file_handler=None):
        """
        Initialize the config manager with an optional config directory and file handler

        Args:
            config_dir (Path, optional): Directory containing configuration files
            app_file_handler: File handler for loading configuration files
        """
        pass

    @abstractmethod
    def get_config(self) -> SimpleNamespace:
        """Get the complete configuration object"""
        pass

    @abstractmethod
    def _load_configurations(self) -> None:
        """Load all configuration files and set up the configuration object"""
        pass

    @abstractmethod
    def _dict_to_namespace(self, d: Dict[str, Any]) -> Any:
        """
        Convert a dictionary to SimpleNamespace recursively

        Args:
            d (Dict[str, Any]): Dictionary to convert

        Returns:
            Any: Converted SimpleNamespace or original value
        """
        pass
