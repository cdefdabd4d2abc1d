"""
Unit tests for the online tuning loop.
"""

import pytest

from prosgd import PairwiseRankingOptimizer
from prosgd.core.config import PROConfig
from prosgd.core.data import TuningInstance
from prosgd.tuning import OnlineTuner, OnlineTunerConfig

from conftest import ConcurrentLookupMetric, LookupMetric, make_candidates


def tuning_set(n):
    """Instances where the best candidate has the most 'good' and least 'bad'."""
    instances = []
    for source_id in range(n):
        candidates = make_candidates([
            {"good": 3.0, "bad": 0.0},
            {"good": 1.0, "bad": 1.0},
            {"good": 0.0, "bad": 4.0},
        ])
        instances.append(TuningInstance(source_id, candidates, [["ref"]], ("src",)))
    return instances


SCORES = {"c0": 0.9, "c1": 0.5, "c2": 0.1}


def make_optimizer(n, **kwargs):
    params = dict(
        tune_set_size=n, gamma=50, xi=3, n_threshold=0.2, sigma=1.0, seed=3,
        min_feature_segment_count=1,
    )
    params.update(kwargs)
    return PairwiseRankingOptimizer(PROConfig(**params))


def test_config_validation():
    with pytest.raises(ValueError):
        OnlineTunerConfig(epochs=0)
    with pytest.raises(ValueError):
        OnlineTunerConfig(batch_size=0)
    with pytest.raises(ValueError):
        OnlineTunerConfig(num_threads=0)


def test_online_tuning_learns_ranking():
    instances = tuning_set(4)
    tuner = OnlineTuner(make_optimizer(4), OnlineTunerConfig(epochs=2, seed=0))

    result = tuner.tune(instances, LookupMetric(SCORES))

    assert result.epochs_completed == 2
    assert result.updates_applied == 8
    assert result.null_gradients == 0
    assert result.weights["good"] > 0.0
    assert result.weights["bad"] < 0.0


def test_mini_batch_tuning():
    instances = tuning_set(5)
    tuner = OnlineTuner(
        make_optimizer(5, updater_type="adagrad"),
        OnlineTunerConfig(epochs=1, batch_size=2, seed=0),
    )

    result = tuner.tune(instances, LookupMetric(SCORES), initial_weights={"good": 0.0})

    # Batches of 2, 2 and 1
    assert result.updates_applied == 3
    assert result.weights["good"] > 0.0
    assert len(result.gradient_norms) == 3


def test_threaded_sampling():
    instances = tuning_set(4)
    tuner = OnlineTuner(
        make_optimizer(4),
        OnlineTunerConfig(epochs=1, batch_size=4, num_threads=2, seed=0),
    )

    result = tuner.tune(instances, ConcurrentLookupMetric(SCORES))

    assert result.updates_applied == 1


def test_null_gradients_are_skipped():
    instances = tuning_set(2)
    tuner = OnlineTuner(make_optimizer(2), OnlineTunerConfig(epochs=1))

    result = tuner.tune(instances, LookupMetric({"c0": 0.5, "c1": 0.5, "c2": 0.5}), {"good": 1.0})

    assert result.null_gradients == 2
    assert result.updates_applied == 0
    assert result.weights == {"good": 1.0}


def test_initial_weights_not_mutated():
    initial = {"good": 0.0}
    OnlineTuner(make_optimizer(2)).tune(tuning_set(2), LookupMetric(SCORES), initial)
    assert initial == {"good": 0.0}


def test_result_serialization():
    result = OnlineTuner(make_optimizer(2)).tune(tuning_set(2), LookupMetric(SCORES))
    data = result.to_dict()
    assert data["epochs_completed"] == 1
    assert len(data["config_hash"]) == 64


def test_empty_tuning_set():
    with pytest.raises(ValueError, match="empty"):
        OnlineTuner(make_optimizer(1)).tune([], LookupMetric(SCORES))


def test_seed_applied_to_global_generators(monkeypatch):
    seeds = []
    monkeypatch.setattr(
        "prosgd.tuning.online_tuner.set_seed", lambda config: seeds.append(config.seed)
    )

    OnlineTuner(make_optimizer(2), OnlineTunerConfig(seed=17)).tune(tuning_set(2), LookupMetric(SCORES))
    OnlineTuner(make_optimizer(2), OnlineTunerConfig()).tune(tuning_set(2), LookupMetric(SCORES))

    assert seeds == [17]


def test_seeded_runs_are_reproducible():
    results = [
        OnlineTuner(make_optimizer(3), OnlineTunerConfig(epochs=2, seed=5)).tune(
            tuning_set(3), LookupMetric(SCORES)
        )
        for _ in range(2)
    ]
    assert results[0].weights == results[1].weights
