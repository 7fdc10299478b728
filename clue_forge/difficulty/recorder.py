"""
Rating recorder: turns clue resolutions into append-only outcome signals.
"""

import logging
from typing import Optional

from ..core.board import Clue, Outcome, Rating, utc_now

logger = logging.getLogger(__name__)


def outcome_for_resolution(awarded: bool, deductions: int = 0) -> Optional[Outcome]:
    """
    Map how a clue was resolved to the outcome that should be recorded.

    Args:
        awarded: A player answered correctly and was awarded points
        deductions: Number of players who lost points on the clue

    Returns:
        GOOD when points were awarded, BAD when at least one deduction
        occurred, None for the skip path (no signal recorded)
    """
    if awarded:
        return Outcome.GOOD
    if deductions > 0:
        return Outcome.BAD
    return None


def record_outcome(clue: Clue, outcome, timestamp: Optional[str] = None) -> Rating:
    """
    Append a rating to the clue's history.

    Prior ratings are never overwritten or removed.

    Args:
        clue: Clue that was just resolved
        outcome: Outcome or "good"/"bad"
        timestamp: ISO-8601 judgement time, defaults to now

    Returns:
        The appended Rating

    Raises:
        ValueError: If outcome is not good or bad
    """
    rating = Rating(outcome=Outcome.parse(outcome), timestamp=timestamp or utc_now())
    clue.ratings.append(rating)
    logger.debug(
        f"Recorded {rating.outcome.value} rating for ${clue.value} clue "
        f"({len(clue.ratings)} total)"
    )
    return rating
