"""Data classes for labeled feature tables and the partitions derived from them."""

from dataclasses import dataclass
from typing import Dict, Iterator, Sequence, Tuple
import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=False)
class FeatureDataset:
    """
    Numeric feature table plus a boolean label per record.

    The shared index identifies records (the row number of the source table),
    so partitions can be compared by index. Instances are never mutated;
    every transformation returns a new dataset.
    """
    features: pd.DataFrame
    labels: pd.Series

    def __post_init__(self):
        if not self.features.index.equals(self.labels.index):
            raise ValueError("features and labels must share the same index")

    @property
    def schema(self) -> Tuple[str, ...]:
        return tuple(self.features.columns)

    @property
    def index(self) -> pd.Index:
        return self.features.index

    def __len__(self) -> int:
        return len(self.labels)

    def label_array(self) -> np.ndarray:
        """Labels as a 0/1 integer array, the form the fitting libraries expect."""
        return self.labels.to_numpy(dtype=int)

    def class_counts(self) -> Dict[bool, int]:
        counts = self.labels.value_counts()
        return {label: int(counts.get(label, 0)) for label in (False, True)}

    def take(self, positions: Sequence[int]) -> 'FeatureDataset':
        """Select records by position, keeping their original index."""
        positions = np.asarray(positions, dtype=int)
        return FeatureDataset(
            features=self.features.iloc[positions].copy(),
            labels=self.labels.iloc[positions].copy()
        )

    def with_features(self, features: pd.DataFrame) -> 'FeatureDataset':
        """Same records and labels with a replacement feature table."""
        return FeatureDataset(features=features, labels=self.labels.copy())


@dataclass(frozen=True, eq=False)
class Split:
    """Disjoint train/test partition of one dataset."""
    train: FeatureDataset
    test: FeatureDataset


@dataclass(frozen=True, eq=False)
class ScalingParameters:
    """Per-feature mean and (population) standard deviation fit on a training partition."""
    means: pd.Series
    stds: pd.Series

    @property
    def feature_names(self) -> Tuple[str, ...]:
        return tuple(self.means.index)


@dataclass(frozen=True, eq=False)
class FoldPlan:
    """
    One repetition of a stratified k-fold assignment.

    fold_ids[i] is the fold of the training record at position i.
    """
    repetition: int
    n_folds: int
    fold_ids: np.ndarray

    def __post_init__(self):
        fold_ids = np.array(self.fold_ids, dtype=int)
        fold_ids.setflags(write=False)
        object.__setattr__(self, 'fold_ids', fold_ids)

    def splits(self) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
        """Yield (fold, fit_positions, held_out_positions) for every fold."""
        for fold in range(self.n_folds):
            held_out = self.fold_ids == fold
            yield fold, np.flatnonzero(~held_out), np.flatnonzero(held_out)
