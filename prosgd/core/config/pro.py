"""
PRO-SGD configuration with the standard tuning defaults.

Defaults follow the online setting: a few hundred draws per n-best list
and a handful of retained pairs. Batch PRO typically uses gamma=5000,
xi=50 and a threshold of 0.05 on a [0, 1] metric scale.
"""

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Optional
import logging

import yaml

logger = logging.getLogger(__name__)


class UpdaterType(Enum):
    """Weight update rules."""
    SGD = "sgd"  # Single scalar learning rate
    ADAGRAD = "adagrad"  # Per-feature adaptive learning rate

    @classmethod
    def parse(cls, value) -> "UpdaterType":
        """
        Resolve a configuration string to an update rule.

        Unrecognized values fall back to SGD.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown updater type '{value}', falling back to {cls.SGD.value}")
            return cls.SGD


@dataclass
class PROConfig:
    """
    Pairwise ranking optimizer configuration.

    Invalid values fail construction; nothing is clamped.
    """
    tune_set_size: int  # Number of source sentences in the tuning set
    expected_num_features: int = 0  # Initial size of per-feature updater state
    min_feature_segment_count: int = 3  # Instances a sparse feature must fire in
    gamma: int = 500  # Pair draws per n-best list
    xi: int = 15  # Pairs retained per n-best list
    n_threshold: float = 5.0  # Minimum metric margin of a retained pair
    sigma: float = 0.1  # Gaussian prior standard deviation
    rate: float = 0.1  # Learning rate
    updater_type: UpdaterType = UpdaterType.SGD
    seed: Optional[int] = None  # Pair sampling seed (None: OS entropy)

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.updater_type = UpdaterType.parse(self.updater_type)

        if self.min_feature_segment_count < 1:
            raise ValueError(
                f"Feature segment count must be >= 1: {self.min_feature_segment_count}"
            )
        if self.gamma <= 0:
            raise ValueError(f"Gamma must be > 0: {self.gamma}")
        if self.xi <= 0:
            raise ValueError(f"Xi must be > 0: {self.xi}")
        if self.n_threshold < 0.0:
            raise ValueError(f"Threshold must be >= 0: {self.n_threshold}")
        if self.tune_set_size <= 0:
            raise ValueError(f"Tuning set size must be > 0: {self.tune_set_size}")
        if self.expected_num_features < 0:
            raise ValueError(
                f"Expected number of features must be >= 0: {self.expected_num_features}"
            )
        if self.sigma <= 0.0:
            raise ValueError(f"Sigma must be > 0: {self.sigma}")
        if self.rate <= 0.0:
            raise ValueError(f"Learning rate must be > 0: {self.rate}")

    @property
    def sigma_sq(self) -> float:
        return self.sigma * self.sigma

    @classmethod
    def from_args(cls, tune_set_size: int, expected_num_features: int, *args: str) -> "PROConfig":
        """
        Build a configuration from positional tuner arguments.

        Order: min_feature_segment_count, gamma, xi, n_threshold, sigma,
        rate, updater_type. Missing trailing arguments keep their defaults.

        Example:
            >>> PROConfig.from_args(1000, 20, "2", "1000", "30").xi
            30
        """
        names = [
            ("min_feature_segment_count", int),
            ("gamma", int),
            ("xi", int),
            ("n_threshold", float),
            ("sigma", float),
            ("rate", float),
            ("updater_type", str),
        ]
        if len(args) > len(names):
            raise ValueError(f"Too many optimizer arguments: {list(args)}")

        kwargs = {name: convert(value) for (name, convert), value in zip(names, args)}
        return cls(
            tune_set_size=tune_set_size,
            expected_num_features=expected_num_features,
            **kwargs,
        )


def load_pro_config(config_path: str) -> PROConfig:
    """
    Load optimizer configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        PROConfig instance

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file holds unknown keys or invalid values
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    known = {f.name for f in fields(PROConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown optimizer config keys: {unknown}")
    if "tune_set_size" not in data:
        raise ValueError(f"Missing required key 'tune_set_size' in {config_path}")

    return PROConfig(**data)
