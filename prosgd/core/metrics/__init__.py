"""
Sentence-level translation quality metrics.

The metric implementations live outside this package; this module defines
the contract and the two scheduling capabilities.
"""

from .protocol import (
    SentenceLevelMetric,
    ConcurrentMetric,
    ExclusiveMetric,
    metric_guard,
)

__all__ = [
    "SentenceLevelMetric",
    "ConcurrentMetric",
    "ExclusiveMetric",
    "metric_guard",
]
