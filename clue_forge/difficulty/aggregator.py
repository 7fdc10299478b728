"""
Difficulty aggregation: per-tier success rates to bounded adjustments.

The update rule is a ratchet over the previous adjustment, not a fresh
computation from the success rate:

    success rate        new adjustment
    > 0.85              +2 (snap)
    (0.65, 0.85]        min(previous + 1, +2)
    [0.35, 0.65]        previous
    [0.15, 0.35)        max(previous - 1, -2)
    < 0.15              -2 (snap)

Tiers with fewer than three ratings keep their previous adjustment.
"""

import logging
from typing import Dict, List, Any

import numpy as np

from ..core.board import (
    Category,
    Outcome,
    TIERS,
    MIN_ADJUSTMENT,
    MAX_ADJUSTMENT,
)
from ..storage.logs import QualityRatingsLog
from .store import DifficultyStore

MIN_RATINGS_FOR_ADJUSTMENT = 3

TOO_EASY_RATE = 0.85
EASY_RATE = 0.65
HARD_RATE = 0.35
TOO_HARD_RATE = 0.15


def adjust_tier(previous: int, success_rate: float) -> int:
    """
    Apply the asymmetric ratchet to a single tier.

    Args:
        previous: Current adjustment for the tier, in [-2, 2]
        success_rate: Share of good ratings, in [0, 1]

    Returns:
        New adjustment in [-2, 2]
    """
    if success_rate > TOO_EASY_RATE:
        return MAX_ADJUSTMENT
    if success_rate > EASY_RATE:
        return min(previous + 1, MAX_ADJUSTMENT)
    if success_rate >= HARD_RATE:
        return previous
    if success_rate >= TOO_HARD_RATE:
        return max(previous - 1, MIN_ADJUSTMENT)
    return MIN_ADJUSTMENT


class DifficultyAggregator:
    """
    Recomputes a category's adjustment map from its clues' rating histories.

    Every pass merges the result into the DifficultyStore and appends any
    rating not yet logged to the quality ratings log.
    """

    def __init__(
        self,
        difficulty_store: DifficultyStore,
        ratings_log: QualityRatingsLog,
        min_ratings: int = MIN_RATINGS_FOR_ADJUSTMENT,
    ):
        self.logger = logging.getLogger("DifficultyAggregator")
        self.difficulty_store = difficulty_store
        self.ratings_log = ratings_log
        self.min_ratings = min_ratings

    def success_rate(self, category: Category, tier: int):
        """
        Share of good ratings for a tier.

        Returns:
            (success_rate, rating_count); success_rate is None with no ratings
        """
        ratings = [
            rating
            for clue in category.clues
            if clue.value == tier
            for rating in clue.ratings
        ]
        if not ratings:
            return None, 0
        outcomes = np.array([rating.outcome is Outcome.GOOD for rating in ratings])
        return float(outcomes.mean()), len(ratings)

    def recompute(self, category: Category) -> Dict[int, int]:
        """
        Update and persist the category's difficulty adjustments.

        The previous value of each tier is the stored adjustment for the
        category title when one exists, otherwise the category's own map
        (seeded by the generator from a fuzzy match).

        Args:
            category: Category whose clue ratings changed

        Returns:
            The updated adjustment map for the category
        """
        stored = self.difficulty_store.get(category.title)
        if stored is not None:
            adjustments = stored
        else:
            adjustments = {tier: category.difficulty_adjustment.get(tier, 0) for tier in TIERS}

        rated = {}
        for tier in TIERS:
            rate, count = self.success_rate(category, tier)
            if count < self.min_ratings:
                continue

            previous = adjustments.get(tier, 0)
            adjustments[tier] = adjust_tier(previous, rate)
            rated[tier] = adjustments[tier]
            if adjustments[tier] != previous:
                self.logger.info(
                    f"'{category.title}' ${tier}: success rate {rate:.2f} over "
                    f"{count} ratings, adjustment {previous:+d} -> {adjustments[tier]:+d}"
                )

        category.difficulty_adjustment = adjustments
        # An existing entry only takes the tiers that had enough ratings
        self.difficulty_store.merge(category.title, rated if stored is not None else adjustments)
        self.ratings_log.append(self._log_entries(category))
        return dict(adjustments)

    def _log_entries(self, category: Category) -> List[Dict[str, Any]]:
        return [
            {
                "category": category.title,
                "value": clue.value,
                "clue": clue.text,
                "answer": clue.answer,
                "outcome": rating.outcome.value,
                "timestamp": rating.timestamp,
                "rating_id": rating.rating_id,
            }
            for clue in category.clues
            for rating in clue.ratings
        ]
