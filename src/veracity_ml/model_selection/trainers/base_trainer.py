from abc import ABC, abstractmethod
from typing import Any, Mapping
import numpy as np

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset, HyperparameterGrid


class BaseTrainer(ABC):
    """
    Fitting strategy for one classifier family.

    Implementations must be stateless between calls: the hyperparameter search
    runs fit() concurrently for different candidates on the same instance.
    """

    name: str = ''

    @abstractmethod
    def __init__(self,
                 config: BaseConfigManager,
                 app_logger: BaseAppLogger,
                 error_handler: ErrorHandlerFactory):
        """
        Initialize trainer with configuration and dependencies.

        Args:
            config: Configuration manager
            app_logger: Application logger for structured logging
            error_handler: Error handler for standardized error management
        """
        pass

    @abstractmethod
    def fit(self, train: FeatureDataset, hyperparams: Mapping[str, Any], seed: int) -> Any:
        """
        Fit a model on already scaled training data.

        Args:
            train: Scaled training records
            hyperparams: One grid-point
            seed: Seed for any stochastic step inside the fit

        Returns:
            Fitted model state understood by predict_probability

        Raises:
            ConvergenceError: The optimizer exhausted its iteration budget
            ModelTrainingError: The fitting library failed
            ConfigurationError: The hyperparameters are invalid
        """
        pass

    @abstractmethod
    def predict_probability(self, fitted_state: Any, data: FeatureDataset) -> np.ndarray:
        """
        Positive-class probabilities in [0, 1], one per record of data.
        """
        pass

    def get_model_config(self) -> Any:
        """Model-specific configuration section, or None."""
        models = getattr(self.config, 'models', None)
        return getattr(models, self.name, None)

    def get_model_config_value(self, key: str, default: Any) -> Any:
        model_config = self.get_model_config()
        if model_config is not None and hasattr(model_config, key):
            return getattr(model_config, key)
        return default

    def default_grid(self) -> HyperparameterGrid:
        """The hyperparameter grid configured for this model."""
        spec = self.get_model_config_value('hyperparameter_grid', None)
        if spec is None:
            raise self.error_handler.create_error_handler(
                'configuration',
                "No hyperparameter grid configured for model",
                model_name=self.name
            )
        try:
            return HyperparameterGrid.from_spec(spec)
        except (TypeError, ValueError, KeyError) as e:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Invalid hyperparameter grid",
                model_name=self.name,
                error_message=str(e)
            )
