from enum import Enum
from typing import Dict, Iterable, Optional, Type

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from .base_trainer import BaseTrainer
from .regularized_linear_trainer import RegularizedLinearTrainer
from .gradient_boosted_tree_trainer import GradientBoostedTreeTrainer


class TrainerType(Enum):
    REGULARIZED_LINEAR = "regularized_linear"
    GRADIENT_BOOSTED_TREES = "gradient_boosted_trees"


class TrainerFactory:
    _trainer_map: Dict[TrainerType, Type[BaseTrainer]] = {
        TrainerType.REGULARIZED_LINEAR: RegularizedLinearTrainer,
        TrainerType.GRADIENT_BOOSTED_TREES: GradientBoostedTreeTrainer,
    }

    @classmethod
    def create_trainer(cls, model_name: str, config: BaseConfigManager,
                       app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory) -> BaseTrainer:
        """Create the trainer registered under model_name."""
        try:
            trainer_type = TrainerType(model_name)
        except ValueError:
            raise error_handler.create_error_handler(
                'configuration',
                f"Unsupported model type: {model_name}",
                supported_models=[t.value for t in TrainerType]
            )
        return cls._trainer_map[trainer_type](config, app_logger, error_handler)

    @classmethod
    def create_trainers(cls, config: BaseConfigManager, app_logger: BaseAppLogger,
                        error_handler: ErrorHandlerFactory,
                        model_names: Optional[Iterable[str]] = None) -> Dict[str, BaseTrainer]:
        """Creates trainers for the given names, or for the models enabled in configuration."""
        if model_names is None:
            model_names = config.model_selection.models
        return {
            name: cls.create_trainer(name, config, app_logger, error_handler)
            for name in model_names
        }
