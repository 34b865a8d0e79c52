from abc import ABC, abstractmethod
from typing import Optional, Sequence
import pandas as pd

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset


class BaseDataValidator(ABC):
    @abstractmethod
    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        pass

    @abstractmethod
    def validate(self, df: pd.DataFrame, label_column: str,
                 feature_columns: Optional[Sequence[str]] = None) -> FeatureDataset:
        pass
