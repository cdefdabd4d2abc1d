"""
Configuration management.

Dataclass models validated at construction.
"""

from .pro import PROConfig, UpdaterType, load_pro_config

__all__ = ["PROConfig", "UpdaterType", "load_pro_config"]
