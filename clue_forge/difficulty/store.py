"""
DifficultyStore: per-category difficulty adjustments across sessions.

Adjustments are keyed by category title and persisted under the
difficultyAdjustments key of the injected key-value store. Entries are created
lazily on first adjustment and never evicted, so the store grows with every
distinct category title ever played.

Category lookup is fuzzy: an exact title wins, otherwise the first stored
title that contains, or is contained in, the requested title
(case-insensitive) is used. Overlapping words can therefore match unrelated
categories ("World History" vs "History of Art").
"""

import logging
from typing import Dict, Optional, Tuple

from ..core.board import TIERS, MIN_ADJUSTMENT, MAX_ADJUSTMENT, default_adjustments
from ..storage.base_store import BaseKeyValueStore, DIFFICULTY_ADJUSTMENTS_KEY

logger = logging.getLogger(__name__)


def sanitize_adjustments(raw) -> Dict[int, int]:
    """
    Coerce a persisted adjustment map into {tier: int in [-2, 2]}.

    Unknown tiers and non-numeric values are dropped; missing tiers are 0.
    """
    adjustments = default_adjustments()
    if not isinstance(raw, dict):
        return adjustments

    for tier, value in raw.items():
        try:
            tier = int(tier)
            value = int(value)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Ignoring malformed adjustment entry {tier!r}: {value!r}")
            continue
        if tier in adjustments:
            adjustments[tier] = max(MIN_ADJUSTMENT, min(MAX_ADJUSTMENT, value))
    return adjustments


def titles_match(stored_title: str, requested_title: str) -> bool:
    """Case-insensitive substring containment in either direction."""
    stored = stored_title.lower()
    requested = requested_title.lower()
    return stored in requested or requested in stored


class DifficultyStore:
    """
    Mapping of category title to its per-tier adjustment map.

    Loaded once at session start via load(); every merge() writes through to
    the persistence collaborator.
    """

    def __init__(self, store: BaseKeyValueStore):
        self.logger = logging.getLogger("DifficultyStore")
        self.store = store
        self._adjustments: Dict[str, Dict[int, int]] = {}

    def load(self) -> "DifficultyStore":
        """Read persisted adjustments, treating absent or corrupt data as empty."""
        raw = self.store.get(DIFFICULTY_ADJUSTMENTS_KEY)
        self._adjustments = {}

        if raw is None:
            self.logger.info("No stored difficulty adjustments, starting empty")
            return self
        if not isinstance(raw, dict):
            self.logger.warning("Stored difficulty adjustments are corrupt, starting empty")
            return self

        for title, tiers in raw.items():
            self._adjustments[str(title)] = sanitize_adjustments(tiers)

        self.logger.info(f"Loaded difficulty adjustments for {len(self._adjustments)} categories")
        return self

    def titles(self):
        return list(self._adjustments)

    def get(self, title: str) -> Optional[Dict[int, int]]:
        adjustments = self._adjustments.get(title)
        return dict(adjustments) if adjustments is not None else None

    def lookup(self, title: str) -> Optional[Tuple[str, Dict[int, int]]]:
        """
        Find the stored adjustments that apply to a category title.

        Args:
            title: Category title, possibly never seen before

        Returns:
            (stored_title, adjustments) for the exact or first fuzzy match,
            or None when nothing matches
        """
        if title in self._adjustments:
            return title, dict(self._adjustments[title])

        for stored_title, adjustments in self._adjustments.items():
            if titles_match(stored_title, title):
                self.logger.debug(f"Category '{title}' fuzzy-matched stored '{stored_title}'")
                return stored_title, dict(adjustments)
        return None

    def merge(self, title: str, adjustments: Dict[int, int]) -> Dict[int, int]:
        """
        Merge a category's adjustments into the store and persist.

        Tiers not present in adjustments keep their stored values; other
        categories are untouched.

        Returns:
            The merged adjustment map for the category
        """
        merged = dict(self._adjustments.get(title, default_adjustments()))
        for tier, value in adjustments.items():
            tier = int(tier)
            if tier in TIERS:
                merged[tier] = max(MIN_ADJUSTMENT, min(MAX_ADJUSTMENT, int(value)))
        self._adjustments[title] = merged
        self.save()
        return dict(merged)

    def save(self) -> None:
        payload = {
            title: {str(tier): value for tier, value in tiers.items()}
            for title, tiers in self._adjustments.items()
        }
        self.store.save(DIFFICULTY_ADJUSTMENTS_KEY, payload)
