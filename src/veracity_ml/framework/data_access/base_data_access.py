from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union
import pandas as pd

from veracity_ml.framework.data_classes import ModelRunResult


class BaseDataAccess(ABC):
    @abstractmethod
    def load_feature_table(self, path: Union[str, Path]) -> pd.DataFrame:
        pass

    @abstractmethod
    def save_comparison_table(self, table: pd.DataFrame, output_dir: Union[str, Path]) -> Path:
        pass

    @abstractmethod
    def save_model_artifacts(self, result: ModelRunResult, output_dir: Union[str, Path]) -> None:
        pass
