"""
Base update rule interface.
"""

from abc import ABC, abstractmethod
from typing import Mapping, MutableMapping


class UpdateRule(ABC):
    """
    Abstract base class for online weight updates.

    Each optimizer run owns its updater; stateful rules are never shared.
    """

    @abstractmethod
    def update(
        self,
        weights: MutableMapping[str, float],
        gradient: Mapping[str, float],
        timestep: int,
    ) -> None:
        """
        Move `weights` against `gradient`, in place.

        Args:
            weights: Weights to modify
            gradient: Gradient of the objective at `weights`
            timestep: Number of updates applied before this one
        """
        pass
