"""
Gaussian log prior (L2 regularization).
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class GaussianPrior:
    """
    Zero-mean quadratic prior.

    value(w) = ||w||^2 / (2 sigma^2), gradient(w) = w / sigma^2.
    """
    sigma_sq: float

    def __post_init__(self) -> None:
        if not self.sigma_sq > 0.0:
            raise ValueError(f"Prior variance must be > 0: {self.sigma_sq}")

    def value(self, weights: np.ndarray) -> float:
        return float(np.dot(weights, weights) / (2.0 * self.sigma_sq))

    def gradient(self, weights: np.ndarray) -> np.ndarray:
        return weights / self.sigma_sq
