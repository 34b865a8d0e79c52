from .base_trainer import BaseTrainer
from .regularized_linear_trainer import RegularizedLinearTrainer
from .gradient_boosted_tree_trainer import GradientBoostedTreeTrainer
from .trainer_factory import TrainerFactory, TrainerType

__all__ = [
    'BaseTrainer',
    'RegularizedLinearTrainer',
    'GradientBoostedTreeTrainer',
    'TrainerFactory',
    'TrainerType'
]
