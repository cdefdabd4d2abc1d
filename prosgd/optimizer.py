"""
Pairwise Ranking Optimization with stochastic gradient updates.

Samples candidate pairs from n-best lists, turns the highest-margin pairs
into signed feature-difference examples and returns the gradient of a
regularized logistic objective over them. Applying the gradient is left to
the caller, through an update rule obtained from `new_updater()`.

Usage:
    optimizer = PairwiseRankingOptimizer(PROConfig(tune_set_size=len(tune_set)))
    updater = optimizer.new_updater()
    gradient = optimizer.get_gradient(weights, source, source_id, nbest, refs, metric, counts)
    updater.update(weights, gradient, timestep)
"""

from concurrent.futures import Executor
import logging
import threading
from typing import Dict, Mapping, MutableMapping, Optional, Sequence, Set

import numpy as np

from .core.config import PROConfig
from .core.data import Candidate, FeatureIndex, update_feature_whitelist
from .core.sampling import PairSampler, TrainingExampleSet, TrainingSetBuilder
from .core.training import GradientEngine
from .core.updaters import UpdateRule, create_updater
from .infrastructure.reproducibility import hash_config

logger = logging.getLogger(__name__)


class PairwiseRankingOptimizer:
    """
    PRO-SGD online optimizer.

    Safe to call from several threads at once: each call builds its own
    training set, pair sampling draws from per-instance child generators,
    the shared feature index serializes new insertions, and support
    counters passed as `feature_whitelist` are updated under a lock held
    by this optimizer. Metrics that are not thread-safe are serialized
    per instance.
    """

    def __init__(
        self,
        config: PROConfig,
        feature_index: Optional[FeatureIndex] = None,
        backend: str = "numpy",
    ):
        """
        Initialize optimizer.

        Args:
            config: Optimizer configuration
            feature_index: Index shared across calls (created if None)
            backend: Objective backend ("numpy" or "pytorch")
        """
        self.config = config
        self.feature_index = feature_index if feature_index is not None else FeatureIndex()

        self.sampler = PairSampler(config)
        self.builder = TrainingSetBuilder(config, self.sampler)
        self.engine = GradientEngine(config, self.feature_index, backend=backend)

        self._rng = np.random.default_rng(config.seed)
        self._rng_lock = threading.Lock()
        # Guards caller-owned support counters shared by concurrent calls
        self._whitelist_lock = threading.Lock()

        logger.info(f"Initialized {self} (config {hash_config(config)[:12]})")

    def _spawn_rng(self) -> np.random.Generator:
        with self._rng_lock:
            return self._rng.spawn(1)[0]

    def _whitelist(
        self,
        feature_whitelist: Optional[MutableMapping[str, int]],
        translation_lists: Sequence[Sequence[Candidate]],
    ) -> Optional[Set[str]]:
        if feature_whitelist is None:
            logger.debug("Sparse feature filtering disabled")
            return None
        with self._whitelist_lock:
            whitelist = update_feature_whitelist(
                feature_whitelist, translation_lists, self.config.min_feature_segment_count
            )
        logger.info(f"# of whitelist features: {len(whitelist)}")
        return whitelist

    def _sample(
        self,
        source_ids: Sequence[int],
        translation_lists: Sequence[Sequence[Candidate]],
        reference_lists: Sequence[Sequence[Sequence[str]]],
        metric,
        feature_whitelist: Optional[MutableMapping[str, int]],
        executor: Optional[Executor] = None,
    ) -> TrainingExampleSet:
        if not (len(source_ids) == len(translation_lists) == len(reference_lists)):
            raise ValueError(
                f"Batch length mismatch: {len(source_ids)} source ids, "
                f"{len(translation_lists)} n-best lists, {len(reference_lists)} reference lists"
            )
        whitelist = self._whitelist(feature_whitelist, translation_lists)
        return self.builder.build(
            source_ids,
            metric,
            translation_lists,
            reference_lists,
            whitelist,
            self._spawn_rng(),
            executor=executor,
        )

    def get_gradient(
        self,
        weights: Mapping[str, float],
        source: Sequence[str],
        source_id: int,
        translations: Sequence[Candidate],
        references: Sequence[Sequence[str]],
        metric,
        feature_whitelist: Optional[MutableMapping[str, int]] = None,
    ) -> Dict[str, float]:
        """
        Online learning, one tuning instance at a time.

        Args:
            weights: Current weights, not modified
            source: Source sentence tokens
            source_id: Tuning instance identifier
            translations: n-best list
            references: Reference token sequences
            metric: Sentence-level metric
            feature_whitelist: Running per-feature support counts, updated
                in place (None disables sparse feature filtering)

        Returns:
            Sparse gradient; empty when no pair was sampled

        Raises:
            ValueError: On missing weights or metric, a negative source id,
                or empty translations or references
        """
        if weights is None:
            raise ValueError("weights are required")
        if metric is None:
            raise ValueError("A metric is required")
        if source_id < 0:
            raise ValueError(f"source_id must be >= 0: {source_id}")
        if len(translations) == 0:
            raise ValueError(f"Empty n-best list for source_id {source_id}")
        if len(references) == 0:
            raise ValueError(f"No references for source_id {source_id}")

        dataset = self._sample([source_id], [translations], [references], metric, feature_whitelist)
        if len(dataset) == 0:
            logger.warning(f"Null gradient for sourceId: {source_id}")
            return {}

        gradient = self.engine.compute_gradient(dataset, weights, 1)
        logger.debug(f"Gradient: {gradient}")
        return gradient

    def get_batch_gradient(
        self,
        weights: Mapping[str, float],
        sources: Sequence[Sequence[str]],
        source_ids: Sequence[int],
        translation_lists: Sequence[Sequence[Candidate]],
        reference_lists: Sequence[Sequence[Sequence[str]]],
        metric,
        feature_whitelist: Optional[MutableMapping[str, int]] = None,
        executor: Optional[Executor] = None,
    ) -> Dict[str, float]:
        """
        Mini-batch learning.

        Args:
            weights: Current weights, not modified
            sources: Source sentence tokens per instance
            source_ids: Identifier per instance
            translation_lists: n-best list per instance
            reference_lists: Reference list per instance
            metric: Sentence-level metric
            feature_whitelist: Running per-feature support counts
            executor: Optional executor for sampling with a concurrent metric

        Returns:
            Sparse gradient; empty when no pair was sampled in the batch

        Raises:
            ValueError: On missing arguments or mismatched batch lengths
        """
        if weights is None:
            raise ValueError("weights are required")
        if source_ids is None or len(source_ids) == 0:
            raise ValueError("source_ids must be non-empty")
        negative = [source_id for source_id in source_ids if source_id < 0]
        if negative:
            raise ValueError(f"source_ids must be >= 0: {negative}")
        if metric is None:
            raise ValueError("A metric is required")
        if len(translation_lists) == 0 or len(reference_lists) == 0:
            raise ValueError("translation and reference lists must be non-empty")

        dataset = self._sample(
            source_ids, translation_lists, reference_lists, metric, feature_whitelist, executor
        )
        if len(dataset) == 0:
            logger.warning(f"Null gradient for mini-batch: {list(source_ids)}")
            return {}

        gradient = self.engine.compute_gradient(dataset, weights, len(source_ids))
        logger.debug(f"Gradient: {gradient}")
        return gradient

    def new_updater(self) -> UpdateRule:
        """A fresh update rule for one optimizer run."""
        return create_updater(
            self.config.updater_type,
            rate=self.config.rate,
            expected_num_features=self.config.expected_num_features,
            feature_index=self.feature_index,
        )

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__} gamma: {self.config.gamma} xi: {self.config.xi} "
            f"threshold: {self.config.n_threshold:.2f} "
            f"feature-filter: {self.config.min_feature_segment_count} "
            f"updater: {self.config.updater_type.value}"
        )
