import logging
import math
import numpy as np

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset, Split


class DatasetSplitter:
    """Stratified train/test partition of a FeatureDataset."""

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

    def split(self, dataset: FeatureDataset, train_fraction: float, seed: int) -> Split:
        """
        Partition the dataset so each label class contributes floor(n_c * train_fraction)
        of its members to train and the rest to test.

        The train count of a class is clamped to [1, n_c - 1] so both partitions
        see both classes.

        Raises:
            InvalidFractionError: train_fraction outside (0, 1)
            EmptyClassError: a label class has fewer than two members
        """
        if not 0.0 < train_fraction < 1.0:
            raise self.error_handler.create_error_handler(
                'invalid_fraction',
                "Train fraction must lie strictly between 0 and 1",
                train_fraction=train_fraction
            )

        labels = dataset.labels.to_numpy(dtype=bool)
        rng = np.random.default_rng(seed)
        train_positions = []
        test_positions = []

        for label in (False, True):
            members = np.flatnonzero(labels == label)
            if len(members) < 2:
                raise self.error_handler.create_error_handler(
                    'empty_class',
                    "Label class has too few members to split",
                    label=label,
                    n_members=len(members)
                )
            shuffled = rng.permutation(members)
            n_train = min(max(math.floor(len(members) * train_fraction), 1), len(members) - 1)
            train_positions.append(shuffled[:n_train])
            test_positions.append(shuffled[n_train:])

        train = dataset.take(np.sort(np.concatenate(train_positions)))
        test = dataset.take(np.sort(np.concatenate(test_positions)))

        self.app_logger.structured_log(logging.INFO, "Dataset split",
                                       train_fraction=train_fraction,
                                       train_class_counts=train.class_counts(),
                                       test_class_counts=test.class_counts())
        return Split(train=train, test=test)
