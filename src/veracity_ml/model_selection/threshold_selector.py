import logging
from typing import Sequence, Tuple
import numpy as np
from sklearn.metrics import auc as trapezoid_auc

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import ROCCurve


class ThresholdSelector:
    """
    ROC construction and Youden's J threshold choice.

    A record counts as predicted positive at threshold t iff its probability is
    strictly greater than t, the same rule the Evaluator applies. Candidate
    thresholds are the distinct predicted probabilities in descending order,
    followed by -inf so the curve ends at (1, 1).
    """

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: ErrorHandlerFactory):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

    def build_roc_curve(self, true_labels: Sequence[bool], predicted_probabilities: Sequence[float]) -> ROCCurve:
        """
        Raises:
            DegenerateLabelsError: true_labels holds a single class
        """
        y_true = np.asarray(true_labels, dtype=bool)
        y_prob = np.asarray(predicted_probabilities, dtype=float)
        if y_true.shape != y_prob.shape:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Labels and probabilities differ in length",
                n_labels=len(y_true),
                n_probabilities=len(y_prob)
            )

        n_positive = int(y_true.sum())
        n_negative = len(y_true) - n_positive
        if n_positive == 0 or n_negative == 0:
            raise self.error_handler.create_error_handler(
                'degenerate_labels',
                "ROC curve is undefined for a single-class label set",
                n_positive=n_positive,
                n_negative=n_negative
            )

        thresholds = np.unique(y_prob)[::-1]
        positive_scores = np.sort(y_prob[y_true])
        negative_scores = np.sort(y_prob[~y_true])

        # records strictly above each threshold
        true_positives = n_positive - np.searchsorted(positive_scores, thresholds, side='right')
        false_positives = n_negative - np.searchsorted(negative_scores, thresholds, side='right')

        true_positives = np.append(true_positives, n_positive)
        false_positives = np.append(false_positives, n_negative)
        tpr = true_positives / n_positive
        fpr = false_positives / n_negative
        thresholds = np.append(thresholds, -np.inf)

        return ROCCurve(
            false_positive_rates=tuple(float(v) for v in fpr),
            true_positive_rates=tuple(float(v) for v in tpr),
            thresholds=tuple(float(v) for v in thresholds),
            true_positive_counts=tuple(int(v) for v in true_positives),
            false_positive_counts=tuple(int(v) for v in false_positives)
        )

    @staticmethod
    def area_under_curve(roc_curve: ROCCurve) -> float:
        """Trapezoidal area under the ROC curve."""
        return float(trapezoid_auc(roc_curve.false_positive_rates, roc_curve.true_positive_rates))

    def select_threshold(self, true_labels: Sequence[bool],
                         predicted_probabilities: Sequence[float]) -> Tuple[float, ROCCurve, float]:
        """
        Choose the threshold maximizing TPR - FPR.

        Ties go to the first, i.e. highest, threshold reaching the maximum.

        Returns:
            (threshold, roc_curve, auc)
        """
        roc_curve = self.build_roc_curve(true_labels, predicted_probabilities)
        # integer form of J; argmax keeps the first maximum
        best = int(np.argmax(roc_curve.youden_j_numerators()))
        threshold = roc_curve.thresholds[best]
        area = self.area_under_curve(roc_curve)

        self.app_logger.structured_log(logging.INFO, "Decision threshold selected",
                                       threshold=threshold,
                                       youden_j=roc_curve.youden_j()[best],
                                       auc=area,
                                       n_candidates=len(roc_curve))
        return threshold, roc_curve, area
