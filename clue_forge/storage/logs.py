"""
Append-only analytics logs kept in the key-value store.

- QualityRatingsLog: every rating seen by the difficulty aggregator, tagged
  with its category, value, clue and answer, for offline review.
- FormatIssueLog: every clue that failed validation, for later analysis of
  generator failure modes.

Both logs grow without bound; neither is ever rewritten or pruned.
"""

import logging
from typing import Dict, List, Any, Iterable

from .base_store import (
    BaseKeyValueStore,
    QUALITY_RATINGS_LOG_KEY,
    FORMAT_ISSUES_LOG_KEY,
)
from ..core.board import utc_now

logger = logging.getLogger(__name__)


def _read_list(store: BaseKeyValueStore, key: str) -> List[Dict[str, Any]]:
    """Read a list-valued key, treating absent or corrupt values as empty."""
    value = store.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Stored {key} is not a list, treating as empty")
        return []
    return [entry for entry in value if isinstance(entry, dict)]


class QualityRatingsLog:
    """
    Flat log of rated clues.

    Entry format: {category, value, clue, answer, outcome, timestamp, rating_id}
    """

    def __init__(self, store: BaseKeyValueStore):
        self.store = store

    def entries(self) -> List[Dict[str, Any]]:
        return _read_list(self.store, QUALITY_RATINGS_LOG_KEY)

    def append(self, new_entries: Iterable[Dict[str, Any]]) -> int:
        """
        Append entries whose rating_id is not logged yet.

        Args:
            new_entries: Candidate log entries

        Returns:
            Number of entries actually appended
        """
        existing = self.entries()
        seen_ids = {entry.get("rating_id") for entry in existing if entry.get("rating_id")}

        appended = 0
        for entry in new_entries:
            rating_id = entry.get("rating_id")
            if rating_id and rating_id in seen_ids:
                continue
            existing.append(dict(entry))
            if rating_id:
                seen_ids.add(rating_id)
            appended += 1

        if appended:
            self.store.save(QUALITY_RATINGS_LOG_KEY, existing)
            logger.debug(f"Appended {appended} entries to the ratings log")
        return appended

    def for_category(self, category_title: str) -> List[Dict[str, Any]]:
        return [e for e in self.entries() if e.get("category") == category_title]


class FormatIssueLog:
    """Log of clues that failed the word-exclusion or vagueness rules."""

    def __init__(self, store: BaseKeyValueStore):
        self.store = store

    def entries(self) -> List[Dict[str, Any]]:
        return _read_list(self.store, FORMAT_ISSUES_LOG_KEY)

    def record(self, category: str, clue: str, answer: str, issue: str) -> None:
        existing = self.entries()
        existing.append(
            {
                "category": category,
                "clue": clue,
                "answer": answer,
                "issue": issue,
                "timestamp": utc_now(),
            }
        )
        self.store.save(FORMAT_ISSUES_LOG_KEY, existing)
