import logging
from typing import List, Optional, Sequence
import pandas as pd

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset
from .base_data_validator import BaseDataValidator

_TEXT_LABELS = {'true': True, 'false': False}


class FeatureTableValidator(BaseDataValidator):
    """Checks the flat feature table and turns it into a FeatureDataset."""

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def validate(self, df: pd.DataFrame, label_column: str,
                 feature_columns: Optional[Sequence[str]] = None) -> FeatureDataset:
        """
        Validate the feature table and split it into features and labels.

        Args:
            df: Flat table, one row per example
            label_column: Name of the boolean label column
            feature_columns: Predictor columns to use; all other columns when empty

        Returns:
            FeatureDataset with float features and boolean labels

        Raises:
            DataValidationError: If the table violates the expected schema
        """
        self.app_logger.structured_log(logging.INFO, "Validating feature table",
                                       input_shape=df.shape, label_column=label_column)

        if label_column not in df.columns:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Label column not found in feature table",
                label_column=label_column,
                available_columns=list(df.columns)
            )

        columns = self._select_feature_columns(df, label_column, feature_columns)
        features = df[columns]

        missing = features.columns[features.isna().any()].tolist()
        if missing or df[label_column].isna().any():
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Feature table contains missing values",
                feature_columns_with_missing=missing,
                label_has_missing=bool(df[label_column].isna().any())
            )

        non_numeric = [col for col in columns if not pd.api.types.is_numeric_dtype(features[col])]
        if non_numeric:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Feature columns must be numeric",
                non_numeric_columns=non_numeric
            )

        labels = self._coerce_labels(df[label_column])
        dataset = FeatureDataset(features=features.astype(float), labels=labels)

        self.app_logger.structured_log(logging.INFO, "Feature table validated",
                                       n_records=len(dataset),
                                       n_features=len(dataset.schema),
                                       class_counts=dataset.class_counts())
        return dataset

    def _select_feature_columns(self, df: pd.DataFrame, label_column: str,
                                feature_columns: Optional[Sequence[str]]) -> List[str]:
        if not feature_columns:
            columns = [col for col in df.columns if col != label_column]
        else:
            columns = list(feature_columns)
            unknown = [col for col in columns if col not in df.columns]
            if unknown or label_column in columns:
                raise self.error_handler.create_error_handler(
                    'data_validation',
                    "Invalid feature column selection",
                    unknown_columns=unknown,
                    label_selected_as_feature=label_column in columns
                )

        if not columns:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Feature table has no feature columns",
                label_column=label_column
            )
        return columns

    def _coerce_labels(self, labels: pd.Series) -> pd.Series:
        """Map boolean, 0/1 or TRUE/FALSE labels onto a boolean series."""
        if pd.api.types.is_bool_dtype(labels):
            return labels.astype(bool)

        if pd.api.types.is_numeric_dtype(labels):
            if set(labels.unique()) <= {0, 1}:
                return labels.astype(bool)
        else:
            lowered = labels.astype(str).str.strip().str.lower()
            if set(lowered.unique()) <= set(_TEXT_LABELS):
                return lowered.map(_TEXT_LABELS).astype(bool)

        raise self.error_handler.create_error_handler(
            'data_validation',
            "Label column must hold boolean values",
            label_column=labels.name,
            observed_values=[str(v) for v in labels.unique()[:10]]
        )
