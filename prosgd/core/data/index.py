"""
Feature and label indices.

A stable bijection between names and dense positions, shared by every
gradient computation over the lifetime of an optimizer so that weight
vectors and gradients stay addressable by the same coordinates.
"""

import threading
from typing import Dict, Iterable, Iterator, List, Mapping

import numpy as np


class FeatureIndex:
    """
    Append-only, thread-safe name <-> position index.

    Once assigned, a name's position never changes. Concurrent first
    insertions of the same name are serialized so that a name receives
    exactly one position.

    Usage:
        index = FeatureIndex()
        i = index.index_of("LM", add=True)
        dense = index.to_array(weights, len(index))
    """

    def __init__(self, names: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._objects: List[str] = []
        self._indices: Dict[str, int] = {}
        self._locked = False
        for name in names:
            self.add(name)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, name: object) -> bool:
        return name in self._indices

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._objects))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={len(self)}, locked={self._locked})"

    @property
    def is_locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        """Refuse any further insertions."""
        self._locked = True

    def add(self, name: str) -> int:
        """
        Return the position of `name`, assigning a new one if needed.

        Raises:
            KeyError: If the name is new and the index is locked
        """
        # Fast path: reads of an existing name need no lock
        idx = self._indices.get(name)
        if idx is not None:
            return idx
        with self._lock:
            idx = self._indices.get(name)
            if idx is not None:
                return idx
            if self._locked:
                raise KeyError(f"Index is locked, cannot add: {name}")
            idx = len(self._objects)
            self._objects.append(name)
            self._indices[name] = idx
            return idx

    def add_all(self, names: Iterable[str]) -> None:
        for name in names:
            self.add(name)

    def index_of(self, name: str, add: bool = False) -> int:
        """
        Position of `name`, or -1 when absent and `add` is False.
        """
        if add:
            return self.add(name)
        return self._indices.get(name, -1)

    def get(self, position: int) -> str:
        """Name stored at `position`."""
        return self._objects[position]

    def to_array(self, mapping: Mapping[str, float], dimension: int) -> np.ndarray:
        """
        Project a sparse mapping into dense coordinates.

        Names missing from the index, or positioned beyond `dimension`,
        are left out (weight 0).
        """
        dense = np.zeros(dimension, dtype=np.float64)
        for name, value in mapping.items():
            idx = self._indices.get(name, -1)
            if 0 <= idx < dimension:
                dense[idx] = value
        return dense

    def to_sparse(self, array: np.ndarray) -> Dict[str, float]:
        """
        Re-express a dense vector by name, keeping non-zero entries.
        """
        sparse: Dict[str, float] = {}
        for idx in np.flatnonzero(array):
            if idx < len(self._objects):
                sparse[self._objects[idx]] = float(array[idx])
        return sparse


class LabelIndex(FeatureIndex):
    """
    Two-class label index, fixed at construction.

    NEGATIVE sits at position 0 and POSITIVE at position 1; the logistic
    objective relies on this order.
    """

    NEGATIVE = "NEGATIVE"
    POSITIVE = "POSITIVE"

    def __init__(self):
        super().__init__([self.NEGATIVE, self.POSITIVE])
        self.lock()
