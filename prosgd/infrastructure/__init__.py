"""
Infrastructure utilities.

Cross-cutting concerns: reproducibility.
"""

from .reproducibility import set_seed, SeedConfig, hash_config

__all__ = ["set_seed", "SeedConfig", "hash_config"]
