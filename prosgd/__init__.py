"""
Pairwise ranking optimization with stochastic gradient updates (PRO-SGD).

Tunes the feature weights of a statistical machine translation system from
sampled n-best list evidence.
"""

from .optimizer import PairwiseRankingOptimizer

__version__ = "0.1.0"

__all__ = ["PairwiseRankingOptimizer"]
