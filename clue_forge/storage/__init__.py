"""
Persistence collaborators for Clue Forge.

The engine only talks to BaseKeyValueStore (load/save); JsonFileStore and
InMemoryStore are the shipped implementations.
"""

from .base_store import (
    BaseKeyValueStore,
    InMemoryStore,
    DIFFICULTY_ADJUSTMENTS_KEY,
    QUALITY_RATINGS_LOG_KEY,
    FORMAT_ISSUES_LOG_KEY,
)
from .json_store import JsonFileStore
from .logs import QualityRatingsLog, FormatIssueLog
from .ratings_export import RatingsExporter

__all__ = [
    "BaseKeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "QualityRatingsLog",
    "FormatIssueLog",
    "RatingsExporter",
    "DIFFICULTY_ADJUSTMENTS_KEY",
    "QUALITY_RATINGS_LOG_KEY",
    "FORMAT_ISSUES_LOG_KEY",
]
