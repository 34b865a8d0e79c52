import logging
from typing import Iterable, Mapping, Optional, Tuple, Union
import pandas as pd

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import MetricsReport

DISPLAY_COLUMNS = ['accuracy', 'f1', 'auc']


class ResultsAggregator:
    """Collects per-model MetricsReports into one comparison table."""

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

    def aggregate(self, named_reports: Union[Mapping[str, MetricsReport],
                                             Iterable[Tuple[str, MetricsReport]]]) -> pd.DataFrame:
        """
        One row per model, indexed by model name in insertion order, with every
        MetricsReport field at full precision.
        """
        items = list(named_reports.items() if isinstance(named_reports, Mapping) else named_reports)
        names = [name for name, _ in items]
        if len(set(names)) != len(names):
            raise self.error_handler.create_error_handler(
                'configuration',
                "Model names in the comparison must be unique",
                model_names=names
            )

        table = pd.DataFrame(
            [report.to_dict() for _, report in items],
            index=pd.Index(names, name='model'),
            columns=list(MetricsReport().to_dict())
        )

        self.app_logger.structured_log(logging.INFO, "Results aggregated", models=names)
        return table

    def format_for_display(self, table: pd.DataFrame, decimals: Optional[int] = None) -> pd.DataFrame:
        """Model name, accuracy, F1 and AUC rounded for display."""
        if decimals is None:
            decimals = getattr(self.config.model_selection, 'display_decimals', 3)
        return table[DISPLAY_COLUMNS].round(decimals).reset_index()
