import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from veracity_ml.core.error_handling.error_handler import ConfigurationError, ConvergenceError
from veracity_ml.framework.data_classes import HyperparameterGrid
from veracity_ml.model_selection.trainers import (
    GradientBoostedTreeTrainer,
    RegularizedLinearTrainer,
    TrainerFactory
)


@pytest.fixture
def linear_trainer(config, app_logger, error_handler):
    return RegularizedLinearTrainer(config, app_logger, error_handler)


@pytest.fixture
def tree_trainer(config, app_logger, error_handler):
    return GradientBoostedTreeTrainer(config, app_logger, error_handler)


def test_linear_probabilities(linear_trainer, separable_dataset):
    fitted = linear_trainer.fit(separable_dataset, {'mixing': 0.5, 'penalty_strength': 0.01}, seed=1)
    probabilities = linear_trainer.predict_probability(fitted, separable_dataset)

    assert probabilities.shape == (len(separable_dataset),)
    assert np.all((probabilities >= 0.0) & (probabilities <= 1.0))
    assert roc_auc_score(separable_dataset.label_array(), probabilities) == 1.0


def test_linear_penalty_maps_to_inverse_regularization(linear_trainer, separable_dataset):
    fitted = linear_trainer.fit(separable_dataset, {'mixing': 1.0, 'penalty_strength': 0.1}, seed=1)
    assert fitted.C == pytest.approx(1.0 / (len(separable_dataset) * 0.1))
    assert fitted.l1_ratio == 1.0


@pytest.mark.parametrize('hyperparams', [
    {'mixing': 1.5, 'penalty_strength': 0.1},
    {'mixing': -0.1, 'penalty_strength': 0.1},
    {'mixing': 0.5, 'penalty_strength': -1.0},
    {'mixing': 0.5},
])
def test_linear_rejects_invalid_hyperparameters(linear_trainer, separable_dataset, hyperparams):
    with pytest.raises(ConfigurationError):
        linear_trainer.fit(separable_dataset, hyperparams, seed=1)


def test_linear_iteration_budget_exhausted(config, app_logger, error_handler, noisy_dataset):
    config.models.regularized_linear.max_iter = 1
    trainer = RegularizedLinearTrainer(config, app_logger, error_handler)

    with pytest.raises(ConvergenceError) as exc_info:
        trainer.fit(noisy_dataset, {'mixing': 0.0, 'penalty_strength': 0.01}, seed=1)
    assert exc_info.value.additional_info['max_iter'] == 1
    assert len(app_logger.errors_of_type('ConvergenceError')) == 1


def test_tree_probabilities_are_seeded(tree_trainer, noisy_dataset):
    hyperparams = {'n_estimators': 15, 'max_depth': 3, 'learning_rate': 0.3, 'subsample': 0.7,
                   'colsample_bytree': 0.7}
    first = tree_trainer.predict_probability(tree_trainer.fit(noisy_dataset, hyperparams, seed=5), noisy_dataset)
    second = tree_trainer.predict_probability(tree_trainer.fit(noisy_dataset, hyperparams, seed=5), noisy_dataset)

    assert np.all((first >= 0.0) & (first <= 1.0))
    np.testing.assert_array_equal(first, second)


def test_tree_separates_separable_data(tree_trainer, separable_dataset):
    fitted = tree_trainer.fit(separable_dataset, {'n_estimators': 10, 'max_depth': 2}, seed=0)
    probabilities = tree_trainer.predict_probability(fitted, separable_dataset)
    assert roc_auc_score(separable_dataset.label_array(), probabilities) == 1.0


def test_tree_rejects_unknown_hyperparameters(tree_trainer, separable_dataset):
    with pytest.raises(ConfigurationError) as exc_info:
        tree_trainer.fit(separable_dataset, {'n_estimators': 5, 'max_leaves': 4}, seed=0)
    assert exc_info.value.additional_info['unknown_hyperparameters'] == ['max_leaves']


def test_default_grid_comes_from_configuration(linear_trainer, tree_trainer):
    assert isinstance(linear_trainer.default_grid(), HyperparameterGrid)
    assert len(linear_trainer.default_grid()) == 4
    assert dict(tree_trainer.default_grid()[0]) == {'learning_rate': 0.3, 'max_depth': 2, 'n_estimators': 20}


def test_missing_grid(config, app_logger, error_handler):
    del config.models.regularized_linear.hyperparameter_grid
    trainer = RegularizedLinearTrainer(config, app_logger, error_handler)
    with pytest.raises(ConfigurationError):
        trainer.default_grid()


def test_factory_builds_configured_models(config, app_logger, error_handler):
    trainers = TrainerFactory.create_trainers(config, app_logger, error_handler)

    assert list(trainers) == ['regularized_linear', 'gradient_boosted_trees']
    assert isinstance(trainers['regularized_linear'], RegularizedLinearTrainer)
    assert isinstance(trainers['gradient_boosted_trees'], GradientBoostedTreeTrainer)


def test_factory_rejects_unknown_model(config, app_logger, error_handler):
    with pytest.raises(ConfigurationError):
        TrainerFactory.create_trainer('random_forest', config, app_logger, error_handler)
