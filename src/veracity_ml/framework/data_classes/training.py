"""Data classes for hyperparameter grids, search results and trained models."""

from dataclasses import dataclass, field
from types import MappingProxyType, SimpleNamespace
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple
import numpy as np
import pandas as pd
from sklearn.model_selection import ParameterGrid

from .datasets import ScalingParameters, Split
from .metrics import ROCCurve, ConfusionMatrix, MetricsReport


def _expand_candidates(values: Any) -> list:
    """Turn one parameter's candidate spec into a list of values."""
    if isinstance(values, SimpleNamespace):
        values = vars(values)
    if isinstance(values, Mapping):
        if 'logspace' not in values:
            raise ValueError(f"Unsupported candidate spec: {dict(values)}")
        logspace = values['logspace']
        if isinstance(logspace, SimpleNamespace):
            logspace = vars(logspace)
        return np.logspace(logspace['start'], logspace['stop'], int(logspace['num'])).tolist()
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


@dataclass(frozen=True)
class HyperparameterGrid:
    """
    Cartesian product of per-parameter candidate lists.

    Points follow scikit-learn's ParameterGrid order: keys sorted, last key
    varying fastest. Each point is a read-only mapping.
    """
    points: Tuple[Mapping[str, Any], ...]

    @classmethod
    def from_spec(cls, spec: Any) -> 'HyperparameterGrid':
        """
        Build a grid from a mapping of parameter name to candidates.

        Candidates may be a list, a scalar, or ``{"logspace": {"start", "stop", "num"}}``.
        """
        if isinstance(spec, SimpleNamespace):
            spec = vars(spec)
        expanded = {name: _expand_candidates(values) for name, values in spec.items()}
        return cls(points=tuple(MappingProxyType(dict(point)) for point in ParameterGrid(expanded)))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self.points)

    def __getitem__(self, index: int) -> Mapping[str, Any]:
        return self.points[index]


@dataclass(frozen=True)
class CVResult:
    """Validation scores of one grid-point across every (repetition, fold) unit."""
    grid_index: int
    params: Dict[str, Any]
    scores: Tuple[float, ...] = ()
    failure: Optional[str] = None

    @property
    def viable(self) -> bool:
        return self.failure is None and len(self.scores) > 0

    @property
    def mean_score(self) -> Optional[float]:
        if not self.viable:
            return None
        return float(np.mean(self.scores))


@dataclass(frozen=True)
class SearchResult:
    best_params: Dict[str, Any]
    best_index: int
    best_mean_score: float
    cv_results: Tuple[CVResult, ...]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for result in self.cv_results:
            row = {'grid_index': result.grid_index}
            row.update(result.params)
            row['mean_score'] = result.mean_score
            row['n_scores'] = len(result.scores)
            row['failure'] = result.failure
            rows.append(row)
        return pd.DataFrame(rows)


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """A fitted trainer state together with the scaling that produced its inputs."""
    variant: str
    fitted_state: Any
    scaling_parameters: ScalingParameters
    hyperparameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class ModelRunResult:
    """Everything one model variant produced during a pipeline run."""
    model_name: str
    search_result: SearchResult
    trained_model: TrainedModel
    threshold: float
    roc_curve: ROCCurve
    confusion_matrix: ConfusionMatrix
    metrics: MetricsReport


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Per-model results of one pipeline run plus their comparison table."""
    model_results: Dict[str, ModelRunResult]
    comparison_table: pd.DataFrame
    split: Optional[Split] = None
    scaling_parameters: Optional[ScalingParameters] = None
