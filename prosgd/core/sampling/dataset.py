"""
Training-set construction from sampled pairs.

Each selected pair yields two examples: the winner-minus-loser feature
difference labeled POSITIVE and its negation labeled NEGATIVE. A two-class
logistic classifier trained on these learns a separating hyperplane in
feature-difference space, which is the ranking hyperplane.

Single-instance (online) learning is the batch case with one element.
"""

from collections import Counter
from concurrent.futures import Executor
import logging
from typing import AbstractSet, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np

from ..config import PROConfig
from ..data import Candidate, CandidatePair, FeatureIndex, Label, LabelIndex, TrainingExample
from ..metrics import metric_guard
from .pairs import PairSampler

logger = logging.getLogger(__name__)


def _difference(
    plus: Mapping[str, float],
    minus: Mapping[str, float],
    whitelist: Optional[AbstractSet[str]],
) -> Dict[str, float]:
    """Sparse `plus - minus`, restricted to the whitelist."""
    diff = dict(plus)
    for name, value in minus.items():
        diff[name] = diff.get(name, 0.0) - value
    if whitelist is None:
        return {name: value for name, value in diff.items() if value != 0.0}
    return {
        name: value for name, value in diff.items()
        if value != 0.0 and name in whitelist
    }


class TrainingExampleSet:
    """
    Examples assembled for one gradient computation.

    Built and discarded within a single call.
    """

    def __init__(self):
        self.examples: List[TrainingExample] = []

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self) -> Iterator[TrainingExample]:
        return iter(self.examples)

    def add(self, example: TrainingExample) -> None:
        self.examples.append(example)

    def add_pair(
        self,
        winner_features: Mapping[str, float],
        loser_features: Mapping[str, float],
        whitelist: Optional[AbstractSet[str]] = None,
    ) -> None:
        """
        Add the signed example pair for one selected candidate pair.

        Args:
            winner_features: Features of the higher-scoring candidate
            loser_features: Features of the lower-scoring candidate
            whitelist: Features allowed to participate (None keeps all)
        """
        self.add(TrainingExample(_difference(winner_features, loser_features, whitelist), Label.POSITIVE))
        self.add(TrainingExample(_difference(loser_features, winner_features, whitelist), Label.NEGATIVE))

    @property
    def num_pairs(self) -> int:
        return len(self.examples) // 2

    def label_counts(self) -> Dict[Label, int]:
        counts = Counter(example.label for example in self.examples)
        return {label: counts.get(label, 0) for label in Label}

    def feature_names(self) -> Set[str]:
        names: Set[str] = set()
        for example in self.examples:
            names.update(example.features)
        return names

    def to_arrays(
        self,
        feature_index: FeatureIndex,
        label_index: LabelIndex,
        dimension: int,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Dense design matrix and label vector.

        Args:
            feature_index: Index holding every feature of this set
            label_index: Two-class label index
            dimension: Number of columns

        Returns:
            (X, y) with X of shape [n_examples, dimension] and y holding
            the label index positions (0 = NEGATIVE, 1 = POSITIVE)
        """
        X = np.zeros((len(self.examples), dimension), dtype=np.float64)
        y = np.zeros(len(self.examples), dtype=np.float64)
        for row, example in enumerate(self.examples):
            for name, value in example.features.items():
                col = feature_index.index_of(name)
                if col < 0 or col >= dimension:
                    raise KeyError(f"Feature '{name}' has no column below dimension {dimension}")
                X[row, col] = value
            y[row] = label_index.index_of(example.label.name)
        return X, y


class TrainingSetBuilder:
    """
    Turns a batch of n-best lists into a training set.

    Scheduling follows the metric's capability: a concurrent metric lets
    instances be sampled through an executor, anything else is sampled in
    a serialized loop. Either way each instance's score+update sequence
    runs inside the metric's critical section.
    """

    def __init__(self, config: PROConfig, sampler: Optional[PairSampler] = None):
        """
        Initialize training-set builder.

        Args:
            config: Optimizer configuration
            sampler: Pair sampler (created from config if None)
        """
        self.config = config
        self.sampler = sampler or PairSampler(config)

    def _sample_instance(
        self,
        source_id: int,
        candidates: Sequence[Candidate],
        references: Sequence[Sequence[str]],
        metric,
        rng: np.random.Generator,
    ) -> List[CandidatePair]:
        with metric_guard(metric):
            pairs = self.sampler.sample(candidates, references, source_id, metric, rng)
            metric.update(source_id, references, candidates[0].translation)
        return pairs

    def build(
        self,
        source_ids: Sequence[int],
        metric,
        translation_lists: Sequence[Sequence[Candidate]],
        reference_lists: Sequence[Sequence[Sequence[str]]],
        feature_whitelist: Optional[AbstractSet[str]],
        rng: np.random.Generator,
        executor: Optional[Executor] = None,
    ) -> TrainingExampleSet:
        """
        Sample every instance of a batch and assemble the examples.

        Args:
            source_ids: One identifier per instance
            metric: Sentence-level metric
            translation_lists: One n-best list per instance
            reference_lists: One reference list per instance
            feature_whitelist: Features allowed in training (None keeps all)
            rng: Parent generator; each instance samples from its own child
            executor: Optional executor for concurrent metrics

        Returns:
            Examples in instance order; empty when no pair survived

        Raises:
            ValueError: If batch lengths disagree or an instance has an
                empty n-best or reference list
        """
        if metric is None:
            raise ValueError("A metric is required")
        if not (len(source_ids) == len(translation_lists) == len(reference_lists)):
            raise ValueError(
                f"Batch length mismatch: {len(source_ids)} source ids, "
                f"{len(translation_lists)} n-best lists, {len(reference_lists)} reference lists"
            )
        for source_id, candidates, references in zip(source_ids, translation_lists, reference_lists):
            if len(candidates) == 0:
                raise ValueError(f"Empty n-best list for source_id {source_id}")
            if len(references) == 0:
                raise ValueError(f"No references for source_id {source_id}")

        # Child generators are fixed before any work is scheduled
        rngs = rng.spawn(len(source_ids))
        jobs = list(zip(source_ids, translation_lists, reference_lists, rngs))

        if executor is not None and metric.is_threadsafe():
            selected = list(executor.map(
                lambda job: self._sample_instance(job[0], job[1], job[2], metric, job[3]),
                jobs,
            ))
        else:
            selected = [
                self._sample_instance(source_id, candidates, references, metric, child)
                for source_id, candidates, references, child in jobs
            ]

        dataset = TrainingExampleSet()
        for i, (pairs, candidates) in enumerate(zip(selected, translation_lists)):
            for pair in pairs:
                dataset.add_pair(
                    candidates[pair.winner].features,
                    candidates[pair.loser].features,
                    feature_whitelist,
                )
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        f"{pair.margin:.2f} {i} {pair.winner} {pair.loser} || "
                        f"{' '.join(candidates[pair.winner].translation)} || "
                        f"{' '.join(candidates[pair.loser].translation)}"
                    )
        return dataset
