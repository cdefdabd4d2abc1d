"""
Core data types for tuning.

Defines the n-best list entries, sampled pairs and the signed training
examples derived from them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, NamedTuple, Sequence


@dataclass(frozen=True)
class Candidate:
    """
    One entry of an n-best list.

    Attributes:
        features: Sparse feature vector (feature name -> value)
        translation: Decoded output tokens
    """
    features: Mapping[str, float]
    translation: Sequence[str] = ()


@dataclass(frozen=True)
class TuningInstance:
    """
    A source sentence with its n-best list and references.

    Read-only for the duration of a sampling pass.
    """
    source_id: int
    candidates: Sequence[Candidate]
    references: Sequence[Sequence[str]]
    source: Sequence[str] = field(default=())

    def __post_init__(self):
        """Validate tuning instance."""
        if self.source_id < 0:
            raise ValueError(f"source_id must be >= 0: {self.source_id}")
        if len(self.candidates) == 0:
            raise ValueError(f"empty n-best list for source_id {self.source_id}")
        if len(self.references) == 0:
            raise ValueError(f"no references for source_id {self.source_id}")


class CandidatePair(NamedTuple):
    """
    A sampled pair of candidates from one n-best list.

    The metric score of `winner` exceeds that of `loser` by `margin`.
    Tuple ordering (margin, winner, loser) is the selection order.
    """
    margin: float
    winner: int
    loser: int


class Label(Enum):
    """Binary class labels. Values are the label index positions."""
    NEGATIVE = 0
    POSITIVE = 1


@dataclass
class TrainingExample:
    """A signed feature-difference vector with its class label."""
    features: Dict[str, float]
    label: Label
