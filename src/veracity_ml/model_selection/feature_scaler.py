import logging
import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset, ScalingParameters


class FeatureScaler:
    """
    Per-feature standardization.

    fit() only ever sees the partition it is given; the caller decides that
    this is the training partition. apply() reuses those parameters on any
    partition with the same schema.
    """

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

    def fit(self, train: FeatureDataset) -> ScalingParameters:
        """
        Compute mean and population standard deviation per feature.

        Raises:
            DegenerateFeatureError: a feature is constant over the training records,
                or its variance is lost in floating-point error
        """
        values = train.features.to_numpy(dtype=float)
        scaler = StandardScaler().fit(values)
        # StandardScaler leaves scale_ at 1.0 for numerically constant features
        constant = (np.ptp(values, axis=0) == 0) | (scaler.scale_ != np.sqrt(scaler.var_))
        if constant.any():
            names = [name for name, flag in zip(train.schema, constant) if flag]
            raise self.error_handler.create_error_handler(
                'degenerate_feature',
                f"Feature '{names[0]}' has zero or numerically negligible variance in the training data",
                feature=names[0],
                degenerate_features=names,
                n_records=len(train)
            )

        means = pd.Series(scaler.mean_, index=list(train.schema))
        stds = pd.Series(scaler.scale_, index=list(train.schema))

        self.app_logger.structured_log(logging.DEBUG, "Scaling parameters fit",
                                       n_records=len(train), n_features=len(train.schema))
        return ScalingParameters(means=means, stds=stds)

    def apply(self, dataset: FeatureDataset, params: ScalingParameters) -> FeatureDataset:
        """Return a new dataset with every feature mapped to (x - mean) / std."""
        if tuple(dataset.schema) != params.feature_names:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Dataset schema does not match the scaling parameters",
                dataset_schema=list(dataset.schema),
                scaling_schema=list(params.feature_names)
            )
        scaled = (dataset.features - params.means) / params.stds
        return dataset.with_features(scaled)
