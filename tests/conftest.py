"""
Common test fixtures for veracity_ml tests.
"""
import contextlib
import logging
from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import FeatureDataset


class RecordingLogger(BaseAppLogger):
    """Logger that keeps every structured record in memory."""

    def __init__(self, config=None):
        self.config = config
        self.records = []

    def setup(self, log_file: str) -> logging.Logger:
        return logging.getLogger(__name__)

    def structured_log(self, level: int, message: str, **kwargs) -> None:
        self.records.append((level, message, kwargs))

    def log_performance(self, func):
        return func

    def log_context(self, **kwargs):
        return contextlib.nullcontext()

    def errors_of_type(self, error_type: str):
        return [record for record in self.records if record[2].get('error_type') == error_type]


def build_config(**model_selection_overrides) -> SimpleNamespace:
    model_selection = dict(
        train_fraction=0.7,
        n_folds=5,
        n_repeats=1,
        random_state=42,
        n_jobs=1,
        display_decimals=3,
        save_artifacts=False,
        models=['regularized_linear', 'gradient_boosted_trees'],
    )
    model_selection.update(model_selection_overrides)
    return SimpleNamespace(
        app_logging=SimpleNamespace(log_level='INFO'),
        data=SimpleNamespace(label_column='truth_label', feature_columns=[]),
        model_selection=SimpleNamespace(**model_selection),
        models=SimpleNamespace(
            regularized_linear=SimpleNamespace(
                max_iter=1000,
                tol=1e-4,
                hyperparameter_grid=SimpleNamespace(mixing=[0.0, 0.5], penalty_strength=[0.01, 0.1])
            ),
            gradient_boosted_trees=SimpleNamespace(
                nthread=1,
                hyperparameter_grid=SimpleNamespace(n_estimators=[20], max_depth=[2], learning_rate=[0.3])
            )
        )
    )


def build_separable_dataset(n_positive: int = 60, n_negative: int = 40, seed: int = 0) -> FeatureDataset:
    """Two features, each separating the classes on its own."""
    rng = np.random.default_rng(seed)
    labels = np.array([True] * n_positive + [False] * n_negative)
    rng.shuffle(labels)
    sign = np.where(labels, 1.0, -1.0)
    features = pd.DataFrame({
        'sentiment_score': sign * rng.uniform(1.0, 2.0, len(labels)),
        'follower_ratio': sign * rng.uniform(0.5, 3.0, len(labels)),
    })
    return FeatureDataset(features=features, labels=pd.Series(labels, name='truth_label'))


@pytest.fixture
def app_logger():
    return RecordingLogger()


@pytest.fixture
def error_handler(app_logger):
    return ErrorHandlerFactory(app_logger)


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def separable_dataset():
    return build_separable_dataset()


@pytest.fixture
def noisy_dataset():
    """Overlapping classes with three informative-but-noisy features."""
    rng = np.random.default_rng(3)
    labels = rng.random(200) < 0.45
    features = pd.DataFrame(
        rng.normal(size=(200, 3)) + labels[:, None] * np.array([0.8, 0.4, 0.0]),
        columns=['readability', 'retweet_count', 'account_age']
    )
    return FeatureDataset(features=features, labels=pd.Series(labels, name='truth_label'))


@pytest.fixture
def config_factory():
    return build_config


@pytest.fixture
def dataset_factory():
    return build_separable_dataset
