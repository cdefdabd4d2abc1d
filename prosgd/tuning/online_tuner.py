"""
OnlineTuner - epoch loop over a tuning set.

Orchestrates online tuning:
1. Shuffle the tuning instances each epoch
2. Cut them into mini-batches
3. Get a gradient from the optimizer for each batch
4. Apply it with the run's update rule

Decoding is outside this loop: n-best lists are taken as given, so
repeated epochs re-sample pairs from the same lists.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass, field
import logging
import time
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from ..core.data import TuningInstance
from ..infrastructure.reproducibility import SeedConfig, hash_config, set_seed
from ..optimizer import PairwiseRankingOptimizer

logger = logging.getLogger(__name__)


@dataclass
class OnlineTunerConfig:
    """Configuration for the online tuning loop."""

    epochs: int = 1
    batch_size: int = 1  # 1 uses the single-instance gradient path
    shuffle: bool = True
    num_threads: int = 1  # Sampling threads per batch (concurrent metrics only)
    seed: Optional[int] = None  # Shuffle seed, also applied to global generators
    filter_sparse_features: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.epochs <= 0:
            raise ValueError(f"Epochs must be > 0: {self.epochs}")
        if self.batch_size <= 0:
            raise ValueError(f"Batch size must be > 0: {self.batch_size}")
        if self.num_threads < 1:
            raise ValueError(f"Number of threads must be >= 1: {self.num_threads}")


@dataclass
class TuningResult:
    """Result from an online tuning run."""

    weights: Dict[str, float]
    epochs_completed: int
    updates_applied: int
    null_gradients: int
    config_hash: str
    training_time_seconds: float = 0.0
    gradient_norms: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "weights": dict(self.weights),
            "epochs_completed": self.epochs_completed,
            "updates_applied": self.updates_applied,
            "null_gradients": self.null_gradients,
            "config_hash": self.config_hash,
            "training_time_seconds": self.training_time_seconds,
        }


class OnlineTuner:
    """
    Online tuner over a fixed set of n-best lists.

    Features:
    - Single-instance or mini-batch gradients
    - Sparse feature support accumulated across the whole run
    - Null gradients are counted and skipped, never fatal
    """

    def __init__(self, optimizer: PairwiseRankingOptimizer, config: Optional[OnlineTunerConfig] = None):
        """
        Initialize tuner.

        Args:
            optimizer: PRO-SGD optimizer
            config: Loop configuration (uses defaults if None)
        """
        self.optimizer = optimizer
        self.config = config or OnlineTunerConfig()
        self._rng = np.random.default_rng(self.config.seed)

    def _batches(self, num_instances: int) -> List[np.ndarray]:
        order = np.arange(num_instances)
        if self.config.shuffle:
            self._rng.shuffle(order)
        size = self.config.batch_size
        return [order[i:i + size] for i in range(0, num_instances, size)]

    def tune(
        self,
        instances: Sequence[TuningInstance],
        metric,
        initial_weights: Optional[Mapping[str, float]] = None,
    ) -> TuningResult:
        """
        Run the configured number of epochs.

        Args:
            instances: Tuning set
            metric: Sentence-level metric
            initial_weights: Starting weights (copied; empty if None)

        Returns:
            TuningResult with the final weights
        """
        if len(instances) == 0:
            raise ValueError("Tuning set is empty")

        weights: Dict[str, float] = dict(initial_weights or {})
        updater = self.optimizer.new_updater()
        support: Optional[Counter] = Counter() if self.config.filter_sparse_features else None
        result = TuningResult(
            weights=weights,
            epochs_completed=0,
            updates_applied=0,
            null_gradients=0,
            config_hash=hash_config({
                "optimizer": self.optimizer.config,
                "tuner": self.config,
            }),
        )
        logger.info(
            f"Tuning {len(instances)} instances for {self.config.epochs} epochs "
            f"with {self.optimizer}"
        )

        if self.config.seed is not None:
            # Global generators cover the torch objective backend
            set_seed(SeedConfig(seed=self.config.seed))

        start = time.time()
        executor_context = (
            ThreadPoolExecutor(max_workers=self.config.num_threads)
            if self.config.num_threads > 1 else nullcontext()
        )
        with executor_context as executor:
            for epoch in range(self.config.epochs):
                for batch in self._batches(len(instances)):
                    members = [instances[i] for i in batch]
                    if len(members) == 1:
                        inst = members[0]
                        gradient = self.optimizer.get_gradient(
                            weights, inst.source, inst.source_id, inst.candidates,
                            inst.references, metric, support,
                        )
                    else:
                        gradient = self.optimizer.get_batch_gradient(
                            weights,
                            [inst.source for inst in members],
                            [inst.source_id for inst in members],
                            [inst.candidates for inst in members],
                            [inst.references for inst in members],
                            metric,
                            support,
                            executor=executor,
                        )

                    if not gradient:
                        result.null_gradients += 1
                        continue
                    updater.update(weights, gradient, result.updates_applied)
                    result.updates_applied += 1
                    result.gradient_norms.append(
                        float(np.sqrt(sum(g * g for g in gradient.values())))
                    )

                result.epochs_completed = epoch + 1
                logger.info(
                    f"Epoch {epoch + 1}/{self.config.epochs}: "
                    f"{result.updates_applied} updates, {result.null_gradients} null gradients"
                )

        result.training_time_seconds = time.time() - start
        return result
