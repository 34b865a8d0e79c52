"""Data classes for ROC curves and threshold-dependent classification metrics."""

from dataclasses import dataclass, asdict
from typing import Dict, Tuple
import pandas as pd


@dataclass(frozen=True)
class ROCCurve:
    """ROC points ordered by decreasing threshold."""
    false_positive_rates: Tuple[float, ...]
    true_positive_rates: Tuple[float, ...]
    thresholds: Tuple[float, ...]
    # records strictly above each threshold, when built from labelled predictions
    true_positive_counts: Tuple[int, ...] = ()
    false_positive_counts: Tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.thresholds)

    def youden_j(self) -> Tuple[float, ...]:
        return tuple(tpr - fpr for fpr, tpr in zip(self.false_positive_rates, self.true_positive_rates))

    def youden_j_numerators(self) -> Tuple[int, ...]:
        """
        TPR - FPR scaled by n_positive * n_negative, i.e. tp * n_neg - fp * n_pos.

        Exact integers, so equal J values always compare equal.
        """
        if not self.true_positive_counts:
            raise ValueError("ROC curve carries no counts")
        n_positive = self.true_positive_counts[-1]
        n_negative = self.false_positive_counts[-1]
        return tuple(tp * n_negative - fp * n_positive
                     for tp, fp in zip(self.true_positive_counts, self.false_positive_counts))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'threshold': self.thresholds,
            'false_positive_rate': self.false_positive_rates,
            'true_positive_rate': self.true_positive_rates
        })


@dataclass(frozen=True)
class ConfusionMatrix:
    true_positives: int
    false_positives: int
    true_negatives: int
    false_negatives: int

    @property
    def total(self) -> int:
        return self.true_positives + self.false_positives + self.true_negatives + self.false_negatives


@dataclass(frozen=True)
class MetricsReport:
    """Container for classification metrics of one trained model."""
    accuracy: float = 0.0
    sensitivity: float = 0.0
    specificity: float = 0.0
    precision: float = 0.0
    f1: float = 0.0
    auc: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
