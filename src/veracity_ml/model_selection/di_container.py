"""
Dependency Injection container for the model selection pipeline.
"""

from dependency_injector import containers, providers
from veracity_ml.core.common_di_container import CommonDIContainer

from .dataset_splitter import DatasetSplitter
from .feature_scaler import FeatureScaler
from .fold_assigner import FoldAssigner
from .hyperparameter_search import HyperparameterSearch
from .threshold_selector import ThresholdSelector
from .evaluator import Evaluator
from .results_aggregator import ResultsAggregator
from .model_selection_pipeline import ModelSelectionPipeline
from .trainers.trainer_factory import TrainerFactory


class ModelSelectionDIContainer(containers.DeclarativeContainer):
    # Import common container
    common = providers.Container(CommonDIContainer)

    # Use common container's components
    config = common.config
    app_logger = common.app_logger
    app_file_handler = common.app_file_handler
    error_handler = common.error_handler_factory
    data_access = common.data_access
    data_validator = common.data_validator

    dataset_splitter = providers.Singleton(
        DatasetSplitter,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    feature_scaler = providers.Singleton(
        FeatureScaler,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    fold_assigner = providers.Singleton(
        FoldAssigner,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    # Trainers for the models enabled in configuration
    trainers = providers.Factory(
        TrainerFactory.create_trainers,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    hyperparameter_search = providers.Factory(
        HyperparameterSearch,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler,
        feature_scaler=feature_scaler
    )

    threshold_selector = providers.Singleton(
        ThresholdSelector,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    evaluator = providers.Singleton(
        Evaluator,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler,
        threshold_selector=threshold_selector
    )

    results_aggregator = providers.Singleton(
        ResultsAggregator,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    pipeline = providers.Factory(
        ModelSelectionPipeline,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler,
        dataset_splitter=dataset_splitter,
        feature_scaler=feature_scaler,
        fold_assigner=fold_assigner,
        hyperparameter_search=hyperparameter_search,
        threshold_selector=threshold_selector,
        evaluator=evaluator,
        results_aggregator=results_aggregator,
        trainers=trainers
    )
