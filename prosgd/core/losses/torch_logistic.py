"""
Logistic objective evaluated with PyTorch autograd.

Same objective as the numpy backend, computed in float64 so both agree to
numerical precision. torch is imported on first use.
"""

from typing import Optional

import numpy as np

from .base import BaseObjective, ObjectiveOutput, check_inputs
from .prior import GaussianPrior
from .registry import register_objective_backend


@register_objective_backend("pytorch")
class TorchLogisticObjective(BaseObjective):
    """
    Logistic objective with gradient from autograd.
    """

    def __init__(self, prior: GaussianPrior):
        self.prior = prior

    def compute(
        self,
        X: np.ndarray,
        y: np.ndarray,
        weights: np.ndarray,
        example_weights: Optional[np.ndarray] = None,
    ) -> ObjectiveOutput:
        check_inputs(X, y, weights, example_weights)
        import torch
        import torch.nn.functional as F

        X_t = torch.as_tensor(X, dtype=torch.float64)
        y_t = torch.as_tensor(y, dtype=torch.float64)
        w = torch.tensor(weights, dtype=torch.float64, requires_grad=True)
        c = (
            torch.ones(X.shape[0], dtype=torch.float64)
            if example_weights is None
            else torch.as_tensor(example_weights, dtype=torch.float64)
        )

        logits = X_t @ w
        nll = (c * F.binary_cross_entropy_with_logits(logits, y_t, reduction="none")).sum()
        prior_value = (w * w).sum() / (2.0 * self.prior.sigma_sq)
        total = nll + prior_value
        total.backward()

        with torch.no_grad():
            accuracy = ((logits > 0) == (y_t > 0.5)).double().mean().item() if X.shape[0] else 0.0

        return ObjectiveOutput(
            value=total.item(),
            gradient=w.grad.detach().numpy().copy(),
            metrics={
                "logistic_loss": nll.item(),
                "prior_value": prior_value.item(),
                "accuracy": accuracy,
            },
        )
