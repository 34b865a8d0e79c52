"""
csv_data_access.py

Concrete implementation of BaseDataAccess for reading the feature table from CSV
and persisting the comparison table and per-model artifacts.

This keeps file formats out of the model-selection code, so the inputs and
outputs can move to another store without touching the pipeline.
"""

import logging
from pathlib import Path
from typing import Union
import pandas as pd

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import ModelRunResult
from .base_data_access import BaseDataAccess

COMPARISON_FILE_NAME = 'model_comparison.csv'


class CSVDataAccess(BaseDataAccess):
    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger,
                 app_file_handler: BaseAppFileHandler, error_handler: ErrorHandlerFactory):
        """
        Initialize the data access object.

        Args:
            config: The configuration object.
            app_logger: The application logger.
            app_file_handler: The file handler.
            error_handler: Factory for pipeline errors.
        """
        self.config = config
        self.app_logger = app_logger
        self.app_file_handler = app_file_handler
        self.error_handler = error_handler

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def load_feature_table(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Load the flat feature table.

        Raises:
            DataStorageError: If the file cannot be read.
        """
        try:
            df = self.app_file_handler.read_csv(path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                "Error loading feature table",
                error_message=str(e),
                path=str(path)
            )

        self.app_logger.structured_log(logging.INFO, "Feature table loaded",
                                       path=str(path), shape=df.shape)
        return df

    @log_performance
    def save_comparison_table(self, table: pd.DataFrame, output_dir: Union[str, Path]) -> Path:
        """Write the full-precision comparison table, one row per model."""
        save_path = Path(output_dir) / COMPARISON_FILE_NAME
        try:
            self.app_file_handler.ensure_directory(output_dir)
            self.app_file_handler.write_csv(table, save_path, index=True)
        except OSError as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                "Error saving comparison table",
                error_message=str(e),
                path=str(save_path)
            )

        self.app_logger.structured_log(logging.INFO, "Comparison table saved", path=str(save_path))
        return save_path

    @log_performance
    def save_model_artifacts(self, result: ModelRunResult, output_dir: Union[str, Path]) -> None:
        """
        Persist the selection details, ROC curve, CV results and fitted model of one run.
        """
        output_dir = Path(output_dir)
        name = result.model_name
        selection = {
            'model_name': name,
            'best_hyperparameters': result.search_result.best_params,
            'best_mean_cv_auc': result.search_result.best_mean_score,
            'threshold': result.threshold,
            'confusion_matrix': {
                'true_positives': result.confusion_matrix.true_positives,
                'false_positives': result.confusion_matrix.false_positives,
                'true_negatives': result.confusion_matrix.true_negatives,
                'false_negatives': result.confusion_matrix.false_negatives
            },
            'metrics': result.metrics.to_dict()
        }

        try:
            self.app_file_handler.ensure_directory(output_dir)
            self.app_file_handler.write_json(selection, output_dir / f"{name}_selection.json")
            self.app_file_handler.write_csv(result.roc_curve.to_frame(), output_dir / f"{name}_roc_curve.csv")
            self.app_file_handler.write_csv(result.search_result.to_frame(), output_dir / f"{name}_cv_results.csv")
            self.app_file_handler.write_joblib(result.trained_model, output_dir / f"{name}_model.joblib")
        except OSError as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                "Error saving model artifacts",
                error_message=str(e),
                model_name=name,
                output_dir=str(output_dir)
            )

        self.app_logger.structured_log(logging.INFO, "Model artifacts saved",
                                       model_name=name, output_dir=str(output_dir))
