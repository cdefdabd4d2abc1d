"""
Objective Registry - registry and factory for objective backends.

Backends register themselves under a name ("numpy", "pytorch") and are
created from that name plus a prior.
"""

from typing import Dict, List, Type
import logging

from .base import BaseObjective
from .prior import GaussianPrior

logger = logging.getLogger(__name__)


class ObjectiveRegistry:
    """
    Registry for available objective backends.
    """

    _backends: Dict[str, Type[BaseObjective]] = {}

    @classmethod
    def register(cls, name: str, objective_class: Type[BaseObjective]) -> None:
        """
        Register an objective implementation.

        Args:
            name: Backend name (e.g., "numpy", "pytorch")
            objective_class: Class implementing BaseObjective
        """
        if name in cls._backends:
            logger.warning(
                f"Objective backend '{name}' already registered. Overwriting with {objective_class}"
            )

        cls._backends[name] = objective_class
        logger.debug(f"Registered objective backend: {name} -> {objective_class.__name__}")

    @classmethod
    def create(cls, name: str, prior: GaussianPrior) -> BaseObjective:
        """
        Create an objective for a backend.

        Raises:
            ValueError: If backend not found in registry
        """
        backend = name.lower()
        if backend not in cls._backends:
            available = ", ".join(cls._backends.keys())
            raise ValueError(
                f"Unknown objective backend: {backend}. "
                f"Available backends: {available}"
            )
        return cls._backends[backend](prior)

    @classmethod
    def list_backends(cls) -> List[str]:
        return list(cls._backends.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name.lower() in cls._backends

    @classmethod
    def unregister(cls, name: str) -> None:
        """
        Unregister a backend (mainly for testing).
        """
        if name in cls._backends:
            del cls._backends[name]
            logger.debug(f"Unregistered objective backend: {name}")


def create_objective(backend: str, prior: GaussianPrior) -> BaseObjective:
    """
    Convenience function to create an objective.

    Example:
        >>> objective = create_objective("numpy", GaussianPrior(sigma_sq=0.01))
    """
    return ObjectiveRegistry.create(backend, prior)


def register_objective_backend(name: str):
    """
    Decorator for registering objective classes.

    Example:
        @register_objective_backend("numpy")
        class LogisticObjective(BaseObjective):
            ...
    """

    def decorator(cls):
        ObjectiveRegistry.register(name, cls)
        return cls

    return decorator
