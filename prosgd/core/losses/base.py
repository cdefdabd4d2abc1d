"""
Base objective interface.

Every objective evaluates a regularized loss and its gradient at a point,
so the gradient engine can swap implementations without changing how it
builds inputs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np


@dataclass
class ObjectiveOutput:
    """
    Standardized objective output.

    Attributes:
        value: Objective value at the evaluation point
        gradient: Derivative with respect to the weights, same shape as them
        metrics: Dictionary of metrics to log (e.g. loss terms, accuracy)
    """
    value: float
    gradient: np.ndarray
    metrics: Dict[str, float]


class BaseObjective(ABC):
    """
    Abstract base class for convex objectives over a labeled example set.
    """

    @abstractmethod
    def compute(
        self,
        X: np.ndarray,
        y: np.ndarray,
        weights: np.ndarray,
        example_weights: Optional[np.ndarray] = None,
    ) -> ObjectiveOutput:
        """
        Evaluate objective and gradient.

        Args:
            X: Design matrix [n_examples, dimension]
            y: Label positions (0 or 1) [n_examples]
            weights: Evaluation point [dimension]
            example_weights: Optional per-example weights [n_examples]

        Returns:
            ObjectiveOutput with value, gradient and metrics
        """
        pass

    def derivative_at(self, X: np.ndarray, y: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """Gradient only."""
        return self.compute(X, y, weights).gradient


def check_inputs(
    X: np.ndarray,
    y: np.ndarray,
    weights: np.ndarray,
    example_weights: Optional[np.ndarray],
) -> None:
    """Validate objective input shapes."""
    if X.ndim != 2:
        raise ValueError(f"X must be 2-dimensional, got shape {X.shape}")
    if y.shape != (X.shape[0],):
        raise ValueError(f"y shape {y.shape} does not match {X.shape[0]} examples")
    if weights.shape != (X.shape[1],):
        raise ValueError(f"weights shape {weights.shape} does not match dimension {X.shape[1]}")
    if example_weights is not None and example_weights.shape != (X.shape[0],):
        raise ValueError(
            f"example_weights shape {example_weights.shape} does not match {X.shape[0]} examples"
        )
