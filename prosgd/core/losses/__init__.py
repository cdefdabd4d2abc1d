"""
Objectives for pairwise ranking.

Implements:
- Gaussian (quadratic) log prior
- Binary logistic regression objective, closed form (numpy) and
  autograd (pytorch) backends
"""

from .base import BaseObjective, ObjectiveOutput
from .prior import GaussianPrior
from .logistic import LogisticObjective
from .registry import (
    ObjectiveRegistry,
    create_objective,
    register_objective_backend,
)
from . import torch_logistic  # noqa: F401  registers the "pytorch" backend

__all__ = [
    "BaseObjective",
    "ObjectiveOutput",
    "GaussianPrior",
    "LogisticObjective",
    "ObjectiveRegistry",
    "create_objective",
    "register_objective_backend",
]
