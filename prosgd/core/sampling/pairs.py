"""
Pair sampling from a single n-best list.

Draws candidate pairs uniformly at random, keeps the ones whose metric
margin clears the noise threshold, and retains the highest-margin pairs.
Pairs below the threshold are dropped outright, which biases training
toward confidently distinguished translations.
"""

import heapq
import logging
from typing import Dict, List, Sequence

import numpy as np

from ..config import PROConfig
from ..data import Candidate, CandidatePair

logger = logging.getLogger(__name__)


class PairSampler:
    """
    PRO pair sampler.

    Usage:
        sampler = PairSampler(config)
        with metric_guard(metric):
            pairs = sampler.sample(candidates, references, source_id, metric, rng)
            metric.update(source_id, references, candidates[0].translation)
    """

    def __init__(self, config: PROConfig):
        """
        Initialize pair sampler.

        Args:
            config: Optimizer configuration (gamma, xi, n_threshold)
        """
        self.config = config

    def sample(
        self,
        candidates: Sequence[Candidate],
        references: Sequence[Sequence[str]],
        source_id: int,
        metric,
        rng: np.random.Generator,
    ) -> List[CandidatePair]:
        """
        Sample and select pairs from one n-best list.

        Draws are made with replacement and a candidate may be paired with
        itself; such draws have zero margin. Duplicate pairs are kept.

        Args:
            candidates: Non-empty n-best list
            references: Reference token sequences
            source_id: Tuning instance identifier passed to the metric
            metric: Sentence-level metric
            rng: Random generator, not shared with other threads

        Returns:
            At most xi pairs, winner first, sorted by (margin, winner, loser)
            descending. Empty when no draw clears the threshold.
        """
        n = len(candidates)
        if n == 0:
            raise ValueError(f"Cannot sample from an empty n-best list (source_id {source_id})")

        # Scores only change through metric.update(), which runs after sampling
        scores: Dict[int, float] = {}

        def score(j: int) -> float:
            if j not in scores:
                scores[j] = metric.score(source_id, references, candidates[j].translation)
            return scores[j]

        draws = rng.integers(0, n, size=(self.config.gamma, 2))
        pairs: List[CandidatePair] = []
        for j, j_prime in draws.tolist():
            g_j = score(j)
            g_j_prime = score(j_prime)
            margin = abs(g_j - g_j_prime)
            if margin >= self.config.n_threshold:
                if g_j > g_j_prime:
                    pairs.append(CandidatePair(margin, j, j_prime))
                else:
                    pairs.append(CandidatePair(margin, j_prime, j))

        selected = heapq.nlargest(self.config.xi, pairs)
        logger.debug(
            f"source_id {source_id}: {len(pairs)}/{self.config.gamma} draws above threshold, "
            f"{len(selected)} selected"
        )
        return selected
