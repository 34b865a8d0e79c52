"""
Leakage-safe model selection pipeline.

split -> scale (fit on train only) -> fold assignment -> per model variant:
grid search, refit on the scaled train partition, test-set threshold choice
and evaluation -> comparison table.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import (
    FeatureDataset,
    FoldPlan,
    HyperparameterGrid,
    ModelRunResult,
    PipelineResult,
    ScalingParameters,
    TrainedModel
)
from .dataset_splitter import DatasetSplitter
from .feature_scaler import FeatureScaler
from .fold_assigner import FoldAssigner
from .hyperparameter_search import HyperparameterSearch
from .threshold_selector import ThresholdSelector
from .evaluator import Evaluator
from .results_aggregator import ResultsAggregator
from .seeding import derive_seed, name_key, SPLIT, FOLDS, SEARCH, FINAL_FIT
from .trainers.base_trainer import BaseTrainer
from .trainers.trainer_factory import TrainerFactory


class ModelSelectionPipeline:
    def __init__(self,
                 config: BaseConfigManager,
                 app_logger: BaseAppLogger,
                 error_handler: ErrorHandlerFactory,
                 dataset_splitter: DatasetSplitter,
                 feature_scaler: FeatureScaler,
                 fold_assigner: FoldAssigner,
                 hyperparameter_search: HyperparameterSearch,
                 threshold_selector: ThresholdSelector,
                 evaluator: Evaluator,
                 results_aggregator: ResultsAggregator,
                 trainers: Optional[Mapping[str, BaseTrainer]] = None):
        """
        Args:
            trainers: Trainers by model name. Models requested at run time
                without an entry here are built through TrainerFactory.
        """
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.dataset_splitter = dataset_splitter
        self.feature_scaler = feature_scaler
        self.fold_assigner = fold_assigner
        self.hyperparameter_search = hyperparameter_search
        self.threshold_selector = threshold_selector
        self.evaluator = evaluator
        self.results_aggregator = results_aggregator
        self.trainers = dict(trainers or {})

        self.app_logger.structured_log(logging.INFO, "ModelSelectionPipeline initialized",
                                       trainers=list(self.trainers))

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def run(self, dataset: FeatureDataset, model_names: Optional[Iterable[str]] = None,
            grids: Optional[Mapping[str, HyperparameterGrid]] = None) -> PipelineResult:
        """
        Select, fit and evaluate every requested model variant on one dataset.

        Args:
            dataset: Validated feature table.
            model_names: Variants to run, in report order. Defaults to the
                injected trainers.
            grids: Per-model grid overrides. Models without one use their
                configured default grid.

        Returns:
            PipelineResult with one ModelRunResult per variant and the comparison table.
        """
        settings = self.config.model_selection
        root_seed = int(settings.random_state)
        trainers = self._resolve_trainers(model_names)
        grids = dict(grids or {})

        self.app_logger.structured_log(logging.INFO, "Starting model selection",
                                       n_records=len(dataset),
                                       n_features=len(dataset.schema),
                                       models=list(trainers),
                                       random_state=root_seed)

        # shared by every variant
        split = self.dataset_splitter.split(dataset, float(settings.train_fraction),
                                            derive_seed(root_seed, SPLIT))
        scaling = self.feature_scaler.fit(split.train)
        train = self.feature_scaler.apply(split.train, scaling)
        test = self.feature_scaler.apply(split.test, scaling)
        fold_plans = self.fold_assigner.assign(train, int(settings.n_folds), int(settings.n_repeats),
                                               derive_seed(root_seed, FOLDS))

        model_results: Dict[str, ModelRunResult] = {}
        for name, trainer in trainers.items():
            grid = grids[name] if name in grids else trainer.default_grid()
            with self.app_logger.log_context(model_name=name):
                model_results[name] = self._run_model(name, trainer, grid, train, test,
                                                      scaling, fold_plans, root_seed)

        comparison_table = self.results_aggregator.aggregate(
            (name, result.metrics) for name, result in model_results.items()
        )

        self.app_logger.structured_log(logging.INFO, "Model selection completed",
                                       models=list(model_results))
        return PipelineResult(
            model_results=model_results,
            comparison_table=comparison_table,
            split=split,
            scaling_parameters=scaling
        )

    def _resolve_trainers(self, model_names: Optional[Iterable[str]]) -> Dict[str, BaseTrainer]:
        if model_names is None:
            if not self.trainers:
                raise self.error_handler.create_error_handler(
                    'configuration',
                    "No model variants to run"
                )
            return dict(self.trainers)

        model_names = list(model_names)
        if not model_names or len(set(model_names)) != len(model_names):
            raise self.error_handler.create_error_handler(
                'configuration',
                "Model names must be a non-empty list without duplicates",
                model_names=model_names
            )
        missing = [name for name in model_names if name not in self.trainers]
        created = TrainerFactory.create_trainers(self.config, self.app_logger, self.error_handler, missing)
        return {name: self.trainers.get(name) or created[name] for name in model_names}

    def _run_model(self, name: str, trainer: BaseTrainer, grid: HyperparameterGrid,
                   train: FeatureDataset, test: FeatureDataset, scaling: ScalingParameters,
                   fold_plans: Iterable[FoldPlan], root_seed: int) -> ModelRunResult:
        variant_key = name_key(name)
        search_result = self.hyperparameter_search.search(
            train, grid, list(fold_plans), trainer, derive_seed(root_seed, SEARCH, variant_key)
        )

        fitted_state = trainer.fit(train, search_result.best_params,
                                   derive_seed(root_seed, FINAL_FIT, variant_key))
        probabilities = trainer.predict_probability(fitted_state, test)

        threshold, roc_curve, _ = self.threshold_selector.select_threshold(test.labels, probabilities)
        matrix, metrics = self.evaluator.evaluate(test.labels, probabilities, threshold, roc_curve=roc_curve)

        self.app_logger.structured_log(logging.INFO, "Model evaluated on test partition",
                                       model_name=name,
                                       best_params=search_result.best_params,
                                       threshold=threshold,
                                       **metrics.to_dict())

        return ModelRunResult(
            model_name=name,
            search_result=search_result,
            trained_model=TrainedModel(
                variant=name,
                fitted_state=fitted_state,
                scaling_parameters=scaling,
                hyperparameters=dict(search_result.best_params)
            ),
            threshold=threshold,
            roc_curve=roc_curve,
            confusion_matrix=matrix,
            metrics=metrics
        )
