import logging
from typing import List
import numpy as np
from sklearn.model_selection import StratifiedKFold

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset, FoldPlan
from .seeding import derive_seed


class FoldAssigner:
    """Repeated stratified k-fold assignment of the training partition."""

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

    def assign(self, train: FeatureDataset, k: int, repeats: int, seed: int) -> List[FoldPlan]:
        """
        Build one FoldPlan per repetition, each an independent stratified shuffle.

        Repetition r shuffles with derive_seed(seed, r), so fold membership is a
        pure function of the inputs.

        Raises:
            InsufficientDataError: k < 2 or k larger than the smallest class
            ConfigurationError: repeats < 1
        """
        class_counts = train.class_counts()
        smallest_class = min(class_counts.values())
        if k < 2 or k > smallest_class:
            raise self.error_handler.create_error_handler(
                'insufficient_data',
                "Fold count must be at least 2 and at most the smallest class size",
                n_folds=k,
                class_counts=class_counts
            )
        if repeats < 1:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Repeat count must be at least 1",
                n_repeats=repeats
            )

        labels = train.label_array()
        placeholder = np.zeros((len(labels), 1))
        plans = []
        for repetition in range(repeats):
            splitter = StratifiedKFold(n_splits=k, shuffle=True,
                                       random_state=derive_seed(seed, repetition))
            fold_ids = np.empty(len(labels), dtype=int)
            for fold, (_, held_out) in enumerate(splitter.split(placeholder, labels)):
                fold_ids[held_out] = fold
            plans.append(FoldPlan(repetition=repetition, n_folds=k, fold_ids=fold_ids))

        self.app_logger.structured_log(logging.INFO, "Folds assigned",
                                       n_folds=k, n_repeats=repeats, n_records=len(labels))
        return plans
