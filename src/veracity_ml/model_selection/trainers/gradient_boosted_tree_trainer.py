import logging
from typing import Any, Mapping
import numpy as np
import xgboost as xgb

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset
from .base_trainer import BaseTrainer

# Grid keys passed straight through to the booster
BOOSTER_PARAMS = (
    'max_depth',
    'learning_rate',
    'gamma',
    'colsample_bytree',
    'subsample',
    'min_child_weight',
)


class GradientBoostedTreeTrainer(BaseTrainer):
    """
    XGBoost ensemble of sequentially fit trees.

    n_estimators sets the number of boosting rounds; the keys in BOOSTER_PARAMS
    go to the booster unchanged.
    """

    name = 'gradient_boosted_trees'

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        """Initialize XGBoost trainer with configuration."""
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.nthread = int(self.get_model_config_value('nthread', 1))

        self.app_logger.structured_log(logging.INFO, "GradientBoostedTreeTrainer initialized successfully",
                                       trainer_type=type(self).__name__,
                                       nthread=self.nthread)

    def _booster_params(self, hyperparams: Mapping[str, Any], seed: int) -> dict:
        unknown = sorted(set(hyperparams) - set(BOOSTER_PARAMS) - {'n_estimators'})
        if unknown:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Unknown gradient-boosting hyperparameters",
                unknown_hyperparameters=unknown
            )

        params = {
            'objective': 'binary:logistic',
            'eval_metric': 'auc',
            'seed': seed,
            'nthread': self.nthread,
            'verbosity': 0,
        }
        params.update({key: hyperparams[key] for key in BOOSTER_PARAMS if key in hyperparams})
        return params

    def fit(self, train: FeatureDataset, hyperparams: Mapping[str, Any], seed: int) -> xgb.Booster:
        params = self._booster_params(hyperparams, seed)
        num_boost_round = int(hyperparams.get('n_estimators', 100))

        try:
            dtrain = xgb.DMatrix(
                train.features.to_numpy(dtype=float),
                label=train.label_array(),
                feature_names=list(train.schema)
            )
            return xgb.train(params=params, dtrain=dtrain, num_boost_round=num_boost_round)
        except (xgb.core.XGBoostError, ValueError) as e:
            raise self.error_handler.create_error_handler(
                'model_training',
                "Error in XGBoost training",
                original_error=str(e),
                model_name=self.name,
                hyperparameters=dict(hyperparams),
                n_records=len(train)
            )

    def predict_probability(self, fitted_state: xgb.Booster, data: FeatureDataset) -> np.ndarray:
        dmatrix = xgb.DMatrix(data.features.to_numpy(dtype=float), feature_names=list(data.schema))
        return fitted_state.predict(dmatrix)
