"""
Pytest configuration and shared fixtures for prosgd tests.
"""

from typing import Dict, List, Sequence

import pytest

from prosgd.core.data import Candidate, TuningInstance
from prosgd.core.metrics import ConcurrentMetric, ExclusiveMetric


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests"
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests by default unless --run-slow is passed."""
    if config.getoption("--run-slow"):
        # --run-slow given, don't skip slow tests
        return

    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class LookupMetric(ExclusiveMetric):
    """
    Scores a translation by table lookup on its joined tokens.

    Records every update() call so tests can check the feedback hook.
    """

    def __init__(self, scores: Dict[str, float]):
        self.scores = scores
        self.updates: List[tuple] = []

    def score(self, source_id, references, translation) -> float:
        return self.scores[" ".join(translation)]

    def update(self, source_id, references, translation) -> None:
        self.updates.append((source_id, tuple(translation)))


class ConcurrentLookupMetric(ConcurrentMetric):
    """Thread-safe lookup metric."""

    def __init__(self, scores: Dict[str, float]):
        self.scores = scores

    def score(self, source_id, references, translation) -> float:
        return self.scores[" ".join(translation)]

    def update(self, source_id, references, translation) -> None:
        pass


def make_candidates(features: Sequence[Dict[str, float]]) -> List[Candidate]:
    """Candidates whose translation is the single token 'c<i>'."""
    return [Candidate(features=f, translation=(f"c{i}",)) for i, f in enumerate(features)]


@pytest.fixture
def three_candidates() -> List[Candidate]:
    """n-best list of three candidates with dense and sparse features."""
    return make_candidates([
        {"LM": -10.0, "TM": -4.0, "WordPenalty": -5.0, "sparse:a": 1.0},
        {"LM": -12.0, "TM": -3.0, "WordPenalty": -6.0, "sparse:b": 1.0},
        {"LM": -15.0, "TM": -6.0, "WordPenalty": -4.0},
    ])


@pytest.fixture
def three_scores() -> Dict[str, float]:
    """Metric scores for the three-candidate list."""
    return {"c0": 0.80, "c1": 0.50, "c2": 0.10}


@pytest.fixture
def references() -> List[List[str]]:
    return [["the", "reference"]]


@pytest.fixture
def instance(three_candidates, references) -> TuningInstance:
    return TuningInstance(
        source_id=0,
        candidates=three_candidates,
        references=references,
        source=("la", "source"),
    )
