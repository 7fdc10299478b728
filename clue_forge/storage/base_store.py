"""
Minimal key-value persistence interface used by the difficulty engine.

The engine reads and writes a handful of logical keys (difficultyAdjustments,
qualityRatingsLog, formatIssuesLog) and never depends on a storage medium.
"""

import copy
from abc import ABC, abstractmethod
from typing import Dict, Any

DIFFICULTY_ADJUSTMENTS_KEY = "difficultyAdjustments"
QUALITY_RATINGS_LOG_KEY = "qualityRatingsLog"
FORMAT_ISSUES_LOG_KEY = "formatIssuesLog"


class BaseKeyValueStore(ABC):
    """
    Base class for persistence collaborators.

    Implementations must tolerate an empty, corrupt or absent backing medium
    by returning an empty mapping from load().
    """

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """
        Read every stored key.

        Returns:
            Mapping of key to JSON-compatible value, empty if nothing is stored
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """
        Persist a single key, leaving other keys untouched.

        Args:
            key: Logical key name
            value: JSON-compatible value
        """
        pass

    def get(self, key: str, default: Any = None) -> Any:
        """Read a single key, or default when it is not stored."""
        return self.load().get(key, default)


class InMemoryStore(BaseKeyValueStore):
    """Process-local store, used for tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, Any] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
