"""
Plain stochastic gradient descent.
"""

from typing import Mapping, MutableMapping

from ..config import UpdaterType
from .base import UpdateRule
from .factory import register_updater


@register_updater(UpdaterType.SGD)
class SGDUpdater(UpdateRule):
    """w <- w - rate * g"""

    def __init__(self, rate: float, **kwargs):
        if rate <= 0.0:
            raise ValueError(f"Learning rate must be > 0: {rate}")
        self.rate = rate

    def update(
        self,
        weights: MutableMapping[str, float],
        gradient: Mapping[str, float],
        timestep: int,
    ) -> None:
        for name, g in gradient.items():
            weights[name] = weights.get(name, 0.0) - self.rate * g

    def __repr__(self) -> str:
        return f"SGDUpdater(rate={self.rate})"
