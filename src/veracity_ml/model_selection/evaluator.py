import logging
from typing import Optional, Sequence, Tuple
import numpy as np
from sklearn.metrics import confusion_matrix

from veracity_ml.core.config_management.base_config_manager import BaseConfigManager
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from veracity_ml.core.error_handling.error_handler_factory import ErrorHandlerFactory
from veracity_ml.framework.data_classes import ConfusionMatrix, MetricsReport, ROCCurve
from .threshold_selector import ThresholdSelector


def _ratio(numerator: float, denominator: float) -> float:
    return float(numerator / denominator) if denominator else 0.0


class Evaluator:
    """Confusion matrix and derived metrics at a fixed decision threshold."""

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger,
                 error_handler: ErrorHandlerFactory, threshold_selector: ThresholdSelector):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.threshold_selector = threshold_selector

    def evaluate(self, true_labels: Sequence[bool], predicted_probabilities: Sequence[float],
                 threshold: float, roc_curve: Optional[ROCCurve] = None) -> Tuple[ConfusionMatrix, MetricsReport]:
        """
        Binarize at probability > threshold and compute accuracy, sensitivity,
        specificity, precision and F1. Ratios with a zero denominator are 0.

        AUC comes from roc_curve when given, otherwise from a curve built on the
        same labels and probabilities.
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
        y_pred = y_prob > threshold

        tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[False, True]).ravel()
        matrix = ConfusionMatrix(
            true_positives=int(tp),
            false_positives=int(fp),
            true_negatives=int(tn),
            false_negatives=int(fn)
        )

        if roc_curve is None:
            roc_curve = self.threshold_selector.build_roc_curve(y_true, y_prob)

        sensitivity = _ratio(tp, tp + fn)
        precision = _ratio(tp, tp + fp)
        report = MetricsReport(
            accuracy=_ratio(tp + tn, matrix.total),
            sensitivity=sensitivity,
            specificity=_ratio(tn, tn + fp),
            precision=precision,
            f1=_ratio(2 * precision * sensitivity, precision + sensitivity),
            auc=ThresholdSelector.area_under_curve(roc_curve)
        )

        self.app_logger.structured_log(logging.INFO, "Classification metrics calculated",
                                       threshold=float(threshold),
                                       n_samples=matrix.total,
                                       **report.to_dict())
        return matrix, report
