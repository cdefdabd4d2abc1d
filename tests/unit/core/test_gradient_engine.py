"""
Unit tests for the gradient engine.
"""

import numpy as np
import pytest

from prosgd.core.config import PROConfig
from prosgd.core.data import FeatureIndex
from prosgd.core.sampling import TrainingExampleSet, TrainingSetBuilder
from prosgd.core.training.gradient import GradientEngine

from conftest import LookupMetric, make_candidates


@pytest.fixture
def config():
    return PROConfig(tune_set_size=4, gamma=50, xi=3, n_threshold=0.2, sigma=0.1)


def pairs_dataset(pairs):
    dataset = TrainingExampleSet()
    for winner, loser in pairs:
        dataset.add_pair(winner, loser)
    return dataset


def test_empty_examples_give_empty_gradient(config):
    engine = GradientEngine(config, FeatureIndex())
    assert engine.compute_gradient(TrainingExampleSet(), {"LM": 1.0}, 1) == {}


def test_data_fraction(config):
    engine = GradientEngine(config, FeatureIndex())
    assert engine.data_fraction(6) == pytest.approx(6 / 24)
    assert engine.data_fraction(24) == pytest.approx(1.0)


def test_prior_scaled_by_data_fraction(config):
    """With no usable features only the rescaled prior remains: w * fraction / sigma^2."""
    dataset = pairs_dataset([({}, {})] * 3)
    engine = GradientEngine(config, FeatureIndex())

    gradient = engine.compute_gradient(dataset, {"LM": 1.0, "TM": -2.0}, 1)

    fraction = 6 / 24
    assert gradient["LM"] == pytest.approx(1.0 * fraction / 0.01)
    assert gradient["TM"] == pytest.approx(-2.0 * fraction / 0.01)


def test_gradient_matches_closed_form(config):
    dataset = pairs_dataset([({"a": 1.0, "b": 2.0}, {"a": 0.5}), ({"b": 1.0}, {"c": 1.0})])
    weights = {"a": 0.3, "c": -0.2}
    index = FeatureIndex()
    engine = GradientEngine(config, index)

    gradient = engine.compute_gradient(dataset, weights, 1)

    names = ["a", "b", "c"]
    X = np.array([
        [0.5, 2.0, 0.0], [-0.5, -2.0, 0.0],
        [0.0, 1.0, -1.0], [0.0, -1.0, 1.0],
    ])
    y = np.array([1.0, 0.0, 1.0, 0.0])
    w = np.array([weights.get(n, 0.0) for n in names])
    sigma_sq = 0.01 / (4 / 24)
    expected = X.T @ (1.0 / (1.0 + np.exp(-X @ w)) - y) + w / sigma_sq

    for name, value in zip(names, expected):
        assert gradient[name] == pytest.approx(value)


def test_dimension_covers_shared_index(config):
    """Features indexed by earlier calls stay addressable."""
    index = FeatureIndex(["old:1", "old:2"])
    engine = GradientEngine(config, index)
    dataset = pairs_dataset([({"new": 1.0}, {})])

    gradient = engine.compute_gradient(dataset, {"old:2": 1.0}, 1)

    assert set(gradient) == {"new", "old:2"}
    assert index.index_of("new") == 2


def test_weights_not_mutated(config):
    weights = {"a": 0.5}
    engine = GradientEngine(config, FeatureIndex())
    engine.compute_gradient(pairs_dataset([({"a": 1.0}, {})]), weights, 1)
    assert weights == {"a": 0.5}


def test_batch_of_copies_scales_single_gradient():
    """
    At zero weights the prior contributes nothing, so a batch of N copies
    of one instance has N times the single-instance gradient.
    """
    config = PROConfig(tune_set_size=10, gamma=50, xi=1, n_threshold=0.2)
    candidates = make_candidates([{"LM": -1.0, "TM": 2.0}, {"LM": -3.0, "TM": 1.0}])
    scores = {"c0": 0.9, "c1": 0.1}
    builder = TrainingSetBuilder(config)
    engine = GradientEngine(config, FeatureIndex())

    single = builder.build(
        [0], LookupMetric(scores), [candidates], [[["r"]]], None, np.random.default_rng(1)
    )
    batch = builder.build(
        [0, 1, 2], LookupMetric(scores), [candidates] * 3, [[["r"]]] * 3, None,
        np.random.default_rng(2),
    )

    g_single = engine.compute_gradient(single, {}, 1)
    g_batch = engine.compute_gradient(batch, {}, 3)

    assert set(g_single) == set(g_batch) == {"LM", "TM"}
    for name in g_single:
        assert g_batch[name] == pytest.approx(3 * g_single[name])
