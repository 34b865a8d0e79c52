from pathlib import Path
from typing import Dict, Any, Union, List, Optional
import json
import yaml
import joblib
import pandas as pd

from .base_app_file_handler import BaseAppFileHandler


class LocalAppFileHandler(BaseAppFileHandler):
    def read_yaml(self, path: Union[str, Path]) -> Dict[str, Any]:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"YAML file not found: {path}")
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}

    def write_json(self, data: Dict[str, Any], path: Union[str, Path]) -> None:
        path = Path(path)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    def read_csv(self, path: Union[str, Path]) -> pd.DataFrame:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"CSV file not found: {path}")
        return pd.read_csv(path)

    def write_csv(self, df: pd.DataFrame, path: Union[str, Path], index: bool = False) -> None:
        path = Path(path)
        df.to_csv(path, index=index)

    def write_joblib(self, obj: Any, path: Union[str, Path]) -> None:
        joblib.dump(obj, Path(path))

    def ensure_directory(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

    def resolve_project_root_path(self, path: str) -> str:
        """Resolves paths that contain ${PROJECT_ROOT} against the working directory"""
        if "${PROJECT_ROOT}" in path:
            return path.replace("${PROJECT_ROOT}", str(Path.cwd()))
        return path

    def load_yaml_files_in_directory(self, directory: Path,
                                     required_files: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Load and merge all YAML files in a directory
        Args:
            directory: Directory containing YAML files
            required_files: List of filenames that must exist
        Raises:
            FileNotFoundError: If any required files are missing
        """
        config_dict = {}

        if required_files:
            missing_files = [
                required_file for required_file in required_files
                if not (directory / required_file).exists()
            ]
            if missing_files:
                raise FileNotFoundError(f"Required config files not found: {', '.join(missing_files)}")

        for config_file in sorted(directory.glob('*.yaml')):
            config_dict.update(self.read_yaml(config_file))
        return config_dict
