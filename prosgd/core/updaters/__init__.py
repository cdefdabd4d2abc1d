"""
In-place weight update rules.

- SGD: single scalar learning rate
- AdaGrad: per-feature learning rate scaled by accumulated squared gradients
"""

from .base import UpdateRule
from .sgd import SGDUpdater
from .adagrad import AdaGradUpdater
from .factory import UpdaterRegistry, create_updater, register_updater

__all__ = [
    "UpdateRule",
    "SGDUpdater",
    "AdaGradUpdater",
    "UpdaterRegistry",
    "create_updater",
    "register_updater",
]
