"""
AdaGrad: adaptive per-feature learning rates.

Paper: https://jmlr.org/papers/v12/duchi11a.html

Each feature's step is the base rate divided by the square root of one
plus its squared-gradient history before the step. With empty history the
first step equals a plain SGD step.
"""

import math
from typing import Mapping, MutableMapping, Optional

import numpy as np

from ..config import UpdaterType
from ..data import FeatureIndex
from .base import UpdateRule
from .factory import register_updater


@register_updater(UpdaterType.ADAGRAD)
class AdaGradUpdater(UpdateRule):
    """
    AdaGrad update rule.

    History is kept in a dense array addressed through the shared feature
    index, sized to the expected feature count and grown on demand.
    """

    def __init__(
        self,
        rate: float,
        expected_num_features: int = 0,
        feature_index: Optional[FeatureIndex] = None,
        **kwargs,
    ):
        """
        Initialize AdaGrad updater.

        Args:
            rate: Base learning rate
            expected_num_features: Initial history size
            feature_index: Index shared with the gradient engine (a private
                one is created if None)
        """
        if rate <= 0.0:
            raise ValueError(f"Learning rate must be > 0: {rate}")
        self.rate = rate
        self.feature_index = feature_index if feature_index is not None else FeatureIndex()
        self.sum_grad_squared = np.zeros(max(expected_num_features, 1), dtype=np.float64)

    def _ensure_capacity(self, position: int) -> None:
        size = len(self.sum_grad_squared)
        if position < size:
            return
        new_size = max(position + 1, 2 * size)
        grown = np.zeros(new_size, dtype=np.float64)
        grown[:size] = self.sum_grad_squared
        self.sum_grad_squared = grown

    def update(
        self,
        weights: MutableMapping[str, float],
        gradient: Mapping[str, float],
        timestep: int,
    ) -> None:
        for name, g in gradient.items():
            idx = self.feature_index.index_of(name, add=True)
            self._ensure_capacity(idx)
            rate = self.rate / math.sqrt(1.0 + self.sum_grad_squared[idx])
            weights[name] = weights.get(name, 0.0) - rate * g
            self.sum_grad_squared[idx] += g * g

    def __repr__(self) -> str:
        return f"AdaGradUpdater(rate={self.rate}, history_size={len(self.sum_grad_squared)})"
