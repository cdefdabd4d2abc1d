"""
Reproducibility utilities.

Seed management and config fingerprints for reproducible tuning runs.
"""

from dataclasses import dataclass, asdict, is_dataclass
from enum import Enum
import random
import hashlib
import json
from typing import Any, Union
import numpy as np


@dataclass
class SeedConfig:
    """Seed configuration for reproducibility."""
    seed: int = 42
    set_python: bool = True
    set_numpy: bool = True
    set_torch: bool = True


def set_seed(seed_or_config: Union[int, SeedConfig] = 42) -> None:
    """
    Set all global random seeds.

    Pair sampling draws from its own generator; this covers third-party
    code and the torch objective backend.

    Args:
        seed_or_config: Either an integer seed (default: 42) or a SeedConfig object
    """
    if isinstance(seed_or_config, int):
        config = SeedConfig(seed=seed_or_config)
    else:
        config = seed_or_config

    if config.set_python:
        random.seed(config.seed)

    if config.set_numpy:
        np.random.seed(config.seed)

    if config.set_torch:
        try:
            import torch
            torch.manual_seed(config.seed)
        except ImportError:
            pass


def _default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


def hash_config(config: Any) -> str:
    """
    Generate a SHA256 hash of a configuration for experiment tracking.

    Supports dictionaries, dataclasses and nested structures.

    Args:
        config: Configuration object (dict or dataclass)

    Returns:
        64-character hex string (SHA256 hash)
    """
    if is_dataclass(config) and not isinstance(config, type):
        config_dict = asdict(config)
    elif isinstance(config, dict):
        config_dict = config
    else:
        config_dict = vars(config) if hasattr(config, "__dict__") else {"value": str(config)}

    # Sort keys for consistent ordering
    json_str = json.dumps(config_dict, sort_keys=True, default=_default)

    return hashlib.sha256(json_str.encode()).hexdigest()
