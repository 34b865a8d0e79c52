"""
Cross-validated grid search over one trainer.

Each grid-point is an independent job: it walks every (repetition, fold) unit
in order, re-fits feature scaling on the unit's fitting subset, trains, and
scores the held-out fold by ROC AUC. Jobs run on a joblib thread pool and
return their CVResult into the slot of their grid index, so the outcome does
not depend on scheduling.
"""

import logging
from contextvars import copy_context
from typing import Any, List, Mapping, Sequence
import numpy as np
from joblib import Parallel, delayed
from sklearn.metrics import roc_auc_score

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.core.error_handling.error_handler import (
    ConvergenceError,
    DegenerateFeatureError,
    DegenerateLabelsError,
    ModelTrainingError
)
from veracity_ml.framework.data_classes import (
    CVResult,
    FeatureDataset,
    FoldPlan,
    HyperparameterGrid,
    SearchResult
)
from .feature_scaler import FeatureScaler
from .seeding import derive_seed
from .trainers.base_trainer import BaseTrainer

# Failures that disqualify one candidate without stopping the search
CANDIDATE_FAILURES = (
    ConvergenceError,
    DegenerateFeatureError,
    DegenerateLabelsError,
    ModelTrainingError,
)


class HyperparameterSearch:
    def __init__(self,
                 config: BaseConfigManager,
                 app_logger: BaseAppLogger,
                 error_handler: ErrorHandlerFactory,
                 feature_scaler: FeatureScaler):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.feature_scaler = feature_scaler
        self.n_jobs = int(getattr(config.model_selection, 'n_jobs', 1))

        self.app_logger.structured_log(logging.INFO, "HyperparameterSearch initialized",
                                       n_jobs=self.n_jobs)

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def search(self, train: FeatureDataset, grid: HyperparameterGrid,
               fold_plans: Sequence[FoldPlan], trainer: BaseTrainer, seed: int) -> SearchResult:
        """
        Rank every grid-point by mean held-out AUC over all (repetition, fold) units.

        Ties go to the grid-point enumerated first. Candidates that fail on any
        unit are excluded from ranking.

        Raises:
            NoViableModelError: every candidate failed
        """
        if len(grid) == 0 or len(fold_plans) == 0:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Hyperparameter search needs a non-empty grid and at least one fold plan",
                model_name=trainer.name,
                n_candidates=len(grid),
                n_fold_plans=len(fold_plans)
            )

        self.app_logger.structured_log(logging.INFO, "Starting hyperparameter search",
                                       model_name=trainer.name,
                                       n_candidates=len(grid),
                                       n_units_per_candidate=sum(plan.n_folds for plan in fold_plans))

        # joblib worker threads do not inherit context variables
        caller_context = copy_context()
        cv_results: List[CVResult] = Parallel(n_jobs=self.n_jobs, prefer='threads')(
            delayed(caller_context.copy().run)(self._evaluate_candidate, train, index, params, fold_plans,
                                               trainer, seed)
            for index, params in enumerate(grid)
        )

        best = None
        for result in cv_results:
            if result.viable and (best is None or result.mean_score > best.mean_score):
                best = result

        if best is None:
            raise self.error_handler.create_error_handler(
                'no_viable_model',
                "Every hyperparameter candidate failed",
                model_name=trainer.name,
                n_candidates=len(grid),
                failures=[result.failure for result in cv_results]
            )

        n_excluded = sum(not result.viable for result in cv_results)
        self.app_logger.structured_log(logging.INFO, "Hyperparameter search completed",
                                       model_name=trainer.name,
                                       best_params=best.params,
                                       best_mean_score=best.mean_score,
                                       n_excluded=n_excluded)

        return SearchResult(
            best_params=dict(best.params),
            best_index=best.grid_index,
            best_mean_score=best.mean_score,
            cv_results=tuple(cv_results)
        )

    def _evaluate_candidate(self, train: FeatureDataset, grid_index: int, params: Mapping[str, Any],
                            fold_plans: Sequence[FoldPlan], trainer: BaseTrainer, seed: int) -> CVResult:
        """Score one grid-point on every unit, stopping at its first failure."""
        scores = []
        for plan in fold_plans:
            for fold, fit_positions, held_out_positions in plan.splits():
                unit_seed = derive_seed(seed, grid_index, plan.repetition, fold)
                try:
                    score = self._score_unit(train, fit_positions, held_out_positions,
                                             params, trainer, unit_seed)
                except CANDIDATE_FAILURES as e:
                    self.app_logger.structured_log(logging.WARNING, "Candidate excluded from ranking",
                                                   model_name=trainer.name,
                                                   grid_index=grid_index,
                                                   hyperparameters=dict(params),
                                                   repetition=plan.repetition,
                                                   fold=fold,
                                                   failure=type(e).__name__)
                    return CVResult(grid_index=grid_index, params=dict(params), scores=tuple(scores),
                                    failure=f"{type(e).__name__}: {e.message}")
                scores.append(score)

        result = CVResult(grid_index=grid_index, params=dict(params), scores=tuple(scores))
        self.app_logger.structured_log(logging.DEBUG, "Candidate scored",
                                       model_name=trainer.name,
                                       grid_index=grid_index,
                                       mean_score=result.mean_score)
        return result

    def _score_unit(self, train: FeatureDataset, fit_positions: np.ndarray, held_out_positions: np.ndarray,
                    params: Mapping[str, Any], trainer: BaseTrainer, seed: int) -> float:
        fit_data = train.take(fit_positions)
        held_out = train.take(held_out_positions)

        # scaling is local to this unit
        scaling = self.feature_scaler.fit(fit_data)
        fitted = trainer.fit(self.feature_scaler.apply(fit_data, scaling), params, seed)
        probabilities = trainer.predict_probability(fitted, self.feature_scaler.apply(held_out, scaling))

        y_true = held_out.label_array()
        if len(np.unique(y_true)) < 2:
            raise self.error_handler.create_error_handler(
                'degenerate_labels',
                "Held-out fold contains a single class",
                model_name=trainer.name,
                n_records=len(y_true)
            )
        if not np.all(np.isfinite(probabilities)):
            raise self.error_handler.create_error_handler(
                'model_training',
                "Model produced non-finite probabilities",
                model_name=trainer.name,
                hyperparameters=dict(params)
            )
        return float(roc_auc_score(y_true, probabilities))
