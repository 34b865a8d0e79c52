from .datasets import FeatureDataset, Split, ScalingParameters, FoldPlan
from .metrics import ROCCurve, ConfusionMatrix, MetricsReport
from .training import (
    HyperparameterGrid,
    CVResult,
    SearchResult,
    TrainedModel,
    ModelRunResult,
    PipelineResult
)

__all__ = [
    'FeatureDataset',
    'Split',
    'ScalingParameters',
    'FoldPlan',
    'ROCCurve',
    'ConfusionMatrix',
    'MetricsReport',
    'HyperparameterGrid',
    'CVResult',
    'SearchResult',
    'TrainedModel',
    'ModelRunResult',
    'PipelineResult'
]
