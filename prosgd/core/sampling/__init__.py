"""
PRO sampling: pair selection and training-set construction.
"""

from .pairs import PairSampler
from .dataset import TrainingExampleSet, TrainingSetBuilder

__all__ = ["PairSampler", "TrainingExampleSet", "TrainingSetBuilder"]
