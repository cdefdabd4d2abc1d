"""
Metric Protocol - contract for sentence-level quality metrics.

A metric scores candidate translations against references and may keep
running corpus statistics (e.g. BLEU background counts) that it refreshes
through `update()`. Metrics declare whether scoring is safe to run
concurrently; for metrics that are not, every score+update sequence for
one tuning instance must run inside `exclusive()`.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from typing import ContextManager, Iterator, Sequence

# Shared critical section for duck-typed metrics that report themselves
# unsafe but carry no lock of their own.
_FALLBACK_LOCK = threading.RLock()


class SentenceLevelMetric(ABC):
    """
    Abstract base class for sentence-level metrics.

    Subclass ConcurrentMetric or ExclusiveMetric rather than this class
    directly.
    """

    @abstractmethod
    def score(
        self,
        source_id: int,
        references: Sequence[Sequence[str]],
        translation: Sequence[str],
    ) -> float:
        """
        Score one candidate translation.

        Args:
            source_id: Tuning instance identifier
            references: Reference token sequences
            translation: Candidate output tokens

        Returns:
            Quality score, higher is better
        """
        pass

    @abstractmethod
    def update(
        self,
        source_id: int,
        references: Sequence[Sequence[str]],
        translation: Sequence[str],
    ) -> None:
        """
        Refresh running statistics with the top-1 translation of an instance.

        Called exactly once per instance per sampling pass.
        """
        pass

    @abstractmethod
    def is_threadsafe(self) -> bool:
        """Whether `score` and `update` may run concurrently."""
        pass

    @abstractmethod
    def exclusive(self) -> ContextManager:
        """Critical section guarding one instance's score+update sequence."""
        pass


class ConcurrentMetric(SentenceLevelMetric):
    """A metric whose scoring needs no coordination."""

    def is_threadsafe(self) -> bool:
        return True

    def exclusive(self) -> ContextManager:
        return nullcontext()


class ExclusiveMetric(SentenceLevelMetric):
    """
    A metric with mutable running state.

    All score+update sequences on one instance of this class are
    serialized through a per-metric re-entrant lock.
    """

    def __new__(cls, *args, **kwargs):
        instance = super().__new__(cls)
        instance._metric_lock = threading.RLock()
        return instance

    def is_threadsafe(self) -> bool:
        return False

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._metric_lock:
            yield


def metric_guard(metric) -> ContextManager:
    """
    Critical section for any object following the metric contract.

    Args:
        metric: A SentenceLevelMetric, or any object with `score`,
            `update` and `is_threadsafe`

    Returns:
        Context manager to hold while scoring and updating one instance
    """
    if isinstance(metric, SentenceLevelMetric):
        return metric.exclusive()
    if metric.is_threadsafe():
        return nullcontext()
    return _FALLBACK_LOCK
