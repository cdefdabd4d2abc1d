"""
Gradient engine.

Builds a Gaussian-prior logistic objective over a training set and returns
its gradient at the current weights, by feature name.
"""

import logging
from typing import Dict, Mapping

from ..config import PROConfig
from ..data import FeatureIndex, LabelIndex
from ..losses import GaussianPrior, create_objective
from ..sampling import TrainingExampleSet

logger = logging.getLogger(__name__)


class GradientEngine:
    """
    Regularized logistic gradient with data-fraction prior correction.

    A full sampling pass over the tuning set yields at most
    2 * xi * tune_set_size examples. A call that realizes only a fraction
    of that gets a prior variance of sigma^2 / fraction, so regularization
    pressure per example stays comparable however many pairs survived.

    Usage:
        engine = GradientEngine(config, feature_index)
        gradient = engine.compute_gradient(examples, weights, batch_size=1)
    """

    def __init__(self, config: PROConfig, feature_index: FeatureIndex, backend: str = "numpy"):
        """
        Initialize gradient engine.

        Args:
            config: Optimizer configuration (xi, tune_set_size, sigma)
            feature_index: Index shared with the optimizer and updaters
            backend: Objective backend name
        """
        self.config = config
        self.feature_index = feature_index
        self.backend = backend
        self.label_index = LabelIndex()

    def data_fraction(self, num_examples: int) -> float:
        """Realized share of the maximum example yield."""
        return num_examples / (2.0 * self.config.xi * self.config.tune_set_size)

    def compute_gradient(
        self,
        examples: TrainingExampleSet,
        weights: Mapping[str, float],
        batch_size: int,
    ) -> Dict[str, float]:
        """
        Gradient of the objective at `weights`.

        Args:
            examples: Training set for this call
            weights: Current weights, read only
            batch_size: Number of tuning instances the examples came from

        Returns:
            Sparse gradient (feature name -> value); empty for an empty
            training set
        """
        if len(examples) == 0:
            return {}

        fraction = self.data_fraction(len(examples))
        prior = GaussianPrior(sigma_sq=self.config.sigma_sq / fraction)

        self.feature_index.add_all(weights.keys())
        self.feature_index.add_all(examples.feature_names())
        # Later insertions by other threads land beyond this dimension
        dimension = max(len(weights), len(self.feature_index))

        X, y = examples.to_arrays(self.feature_index, self.label_index, dimension)
        w = self.feature_index.to_array(weights, dimension)

        objective = create_objective(self.backend, prior)
        output = objective.compute(X, y, w)

        logger.debug(
            f"Objective over {len(examples)} examples from {batch_size} instances, "
            f"dimension {dimension}, data fraction {fraction:.4f}: "
            f"value {output.value:.4f}, accuracy {output.metrics['accuracy']:.3f}"
        )
        return self.feature_index.to_sparse(output.gradient)
