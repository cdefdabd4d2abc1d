"""
Updater Factory - registry and factory for update rules.

The rule is resolved once from configuration; callers get a fresh,
independently stateful updater from every factory call.
"""

from typing import Dict, List, Optional, Type, Union
import logging

from ..config import UpdaterType
from ..data import FeatureIndex
from .base import UpdateRule

logger = logging.getLogger(__name__)


class UpdaterRegistry:
    """
    Registry of update rule implementations keyed by UpdaterType.
    """

    _updaters: Dict[UpdaterType, Type[UpdateRule]] = {}

    @classmethod
    def register(cls, updater_type: UpdaterType, updater_class: Type[UpdateRule]) -> None:
        if updater_type in cls._updaters:
            logger.warning(
                f"Updater '{updater_type.value}' already registered. Overwriting with {updater_class}"
            )
        cls._updaters[updater_type] = updater_class

    @classmethod
    def get(cls, updater_type: UpdaterType) -> Type[UpdateRule]:
        """
        Implementation for a rule, SGD when the rule is not registered.
        """
        if updater_type not in cls._updaters:
            logger.warning(f"No updater registered for '{updater_type.value}', using sgd")
            return cls._updaters[UpdaterType.SGD]
        return cls._updaters[updater_type]

    @classmethod
    def list_updaters(cls) -> List[str]:
        return [updater_type.value for updater_type in cls._updaters]


def create_updater(
    updater_type: Union[str, UpdaterType],
    rate: float,
    expected_num_features: int = 0,
    feature_index: Optional[FeatureIndex] = None,
) -> UpdateRule:
    """
    Create a new update rule.

    Args:
        updater_type: "sgd", "adagrad" or an UpdaterType; unrecognized
            strings fall back to SGD
        rate: Learning rate
        expected_num_features: Initial per-feature state size
        feature_index: Index shared with the gradient engine

    Returns:
        A fresh UpdateRule instance

    Example:
        >>> updater = create_updater("adagrad", rate=0.1, expected_num_features=20)
    """
    updater_class = UpdaterRegistry.get(UpdaterType.parse(updater_type))
    return updater_class(
        rate=rate,
        expected_num_features=expected_num_features,
        feature_index=feature_index,
    )


def register_updater(updater_type: UpdaterType):
    """
    Decorator for registering update rule classes.

    Example:
        @register_updater(UpdaterType.SGD)
        class SGDUpdater(UpdateRule):
            ...
    """

    def decorator(cls):
        UpdaterRegistry.register(updater_type, cls)
        return cls

    return decorator
