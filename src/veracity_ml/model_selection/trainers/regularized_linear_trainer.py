import logging
from typing import Any, Mapping
import numpy as np
from sklearn.linear_model import LogisticRegression

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset
from .base_trainer import BaseTrainer


class RegularizedLinearTrainer(BaseTrainer):
    """
    Elastic-net logistic regression.

    Hyperparameters:
        mixing: 0 is a pure L2 penalty, 1 a pure L1 penalty
        penalty_strength: lambda of the mean log-loss objective; 0 fits unpenalized
    """

    name = 'regularized_linear'

    def __init__(self,
                 config: BaseConfigManager,
                 app_logger: BaseAppLogger,
                 error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.max_iter = int(self.get_model_config_value('max_iter', 1000))
        self.tol = float(self.get_model_config_value('tol', 1e-4))

        self.app_logger.structured_log(
            logging.INFO,
            "RegularizedLinearTrainer initialized successfully",
            trainer_type=type(self).__name__,
            max_iter=self.max_iter,
            tol=self.tol
        )

    def _initialize_model(self, hyperparams: Mapping[str, Any], n_records: int, seed: int) -> LogisticRegression:
        try:
            mixing = float(hyperparams['mixing'])
            penalty_strength = float(hyperparams['penalty_strength'])
        except (KeyError, TypeError, ValueError) as e:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Linear model needs numeric 'mixing' and 'penalty_strength' hyperparameters",
                hyperparameters=dict(hyperparams),
                error_message=str(e)
            )

        if not 0.0 <= mixing <= 1.0 or penalty_strength < 0.0:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Linear model hyperparameters out of range",
                mixing=mixing,
                penalty_strength=penalty_strength
            )

        # scikit-learn minimises C * sum(logloss) + penalty, i.e. C = 1 / (n * lambda)
        C = np.inf if penalty_strength == 0.0 else 1.0 / (n_records * penalty_strength)
        return LogisticRegression(
            penalty='elasticnet',
            solver='saga',
            l1_ratio=mixing,
            C=C,
            max_iter=self.max_iter,
            tol=self.tol,
            random_state=seed
        )

    def fit(self, train: FeatureDataset, hyperparams: Mapping[str, Any], seed: int) -> LogisticRegression:
        model = self._initialize_model(hyperparams, len(train), seed)

        try:
            model.fit(train.features.to_numpy(dtype=float), train.label_array())
        except ValueError as e:
            raise self.error_handler.create_error_handler(
                'model_training',
                "Error fitting linear model",
                error_message=str(e),
                model_name=self.name,
                hyperparameters=dict(hyperparams),
                n_records=len(train)
            )

        n_iter = int(np.max(model.n_iter_))
        if n_iter >= self.max_iter:
            raise self.error_handler.create_error_handler(
                'convergence',
                "Linear model did not converge within its iteration budget",
                model_name=self.name,
                hyperparameters=dict(hyperparams),
                max_iter=self.max_iter
            )
        return model

    def predict_probability(self, fitted_state: LogisticRegression, data: FeatureDataset) -> np.ndarray:
        probabilities = fitted_state.predict_proba(data.features.to_numpy(dtype=float))
        positive_column = list(fitted_state.classes_).index(1)
        return probabilities[:, positive_column]
