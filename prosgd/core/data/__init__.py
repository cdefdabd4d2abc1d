"""
Data model for pairwise ranking optimization.
"""

from .types import (
    Candidate,
    TuningInstance,
    CandidatePair,
    Label,
    TrainingExample,
)
from .index import FeatureIndex, LabelIndex
from .whitelist import update_feature_whitelist

__all__ = [
    "Candidate",
    "TuningInstance",
    "CandidatePair",
    "Label",
    "TrainingExample",
    "FeatureIndex",
    "LabelIndex",
    "update_feature_whitelist",
]
