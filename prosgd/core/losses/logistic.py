"""
Binary logistic regression objective.

Negative conditional log-likelihood of the labels under
p(POSITIVE | x) = sigmoid(w . x), plus a Gaussian prior:

    L(w) = sum_i c_i log(1 + exp(-s_i w . x_i)) + ||w||^2 / (2 sigma^2)

with s_i = +1 for POSITIVE and -1 for NEGATIVE. The gradient is

    dL/dw = sum_i c_i (sigmoid(w . x_i) - y_i) x_i + w / sigma^2
"""

from typing import Optional

import numpy as np

from .base import BaseObjective, ObjectiveOutput, check_inputs
from .prior import GaussianPrior
from .registry import register_objective_backend


def sigmoid(z: np.ndarray) -> np.ndarray:
    """Logistic function without overflow for large |z|."""
    out = np.empty_like(z, dtype=np.float64)
    pos = z >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-z[pos]))
    exp_z = np.exp(z[~pos])
    out[~pos] = exp_z / (1.0 + exp_z)
    return out


@register_objective_backend("numpy")
class LogisticObjective(BaseObjective):
    """
    Logistic objective with closed-form gradient.
    """

    def __init__(self, prior: GaussianPrior):
        """
        Initialize logistic objective.

        Args:
            prior: Gaussian prior over the weights
        """
        self.prior = prior

    def compute(
        self,
        X: np.ndarray,
        y: np.ndarray,
        weights: np.ndarray,
        example_weights: Optional[np.ndarray] = None,
    ) -> ObjectiveOutput:
        check_inputs(X, y, weights, example_weights)
        c = np.ones(X.shape[0]) if example_weights is None else example_weights

        logits = X @ weights
        signs = 2.0 * y - 1.0
        # -log(sigmoid(s z)) = log(1 + exp(-s z))
        nll = float(np.sum(c * np.logaddexp(0.0, -signs * logits)))
        prior_value = self.prior.value(weights)

        residual = c * (sigmoid(logits) - y)
        gradient = X.T @ residual + self.prior.gradient(weights)

        accuracy = float(np.mean((logits > 0) == (y > 0.5))) if X.shape[0] else 0.0
        return ObjectiveOutput(
            value=nll + prior_value,
            gradient=gradient,
            metrics={
                "logistic_loss": nll,
                "prior_value": prior_value,
                "accuracy": accuracy,
            },
        )
