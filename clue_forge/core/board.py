"""
Board data model for generated trivia games.

This module defines the entities the difficulty engine operates on: ratings,
clues, categories and the six-category board that owns them. Boards are
replaced wholesale on every generation; clues are never deleted individually.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Any, Optional

logger = logging.getLogger(__name__)

TIERS = (200, 400, 600, 800, 1000)
CATEGORY_COUNT = 6
DAILY_DOUBLE_COUNT = 2
MIN_ADJUSTMENT = -2
MAX_ADJUSTMENT = 2

DEFAULT_CATEGORY_TITLES = (
    "World History",
    "Science",
    "Pop Culture",
    "Literature",
    "Sports",
    "Geography",
)


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def default_adjustments() -> Dict[int, int]:
    """Return an all-zero adjustment map keyed by the canonical tiers."""
    return {tier: 0 for tier in TIERS}


class Outcome(str, Enum):
    """Binary quality signal recorded when a clue is resolved in play."""

    GOOD = "good"
    BAD = "bad"

    @classmethod
    def parse(cls, value) -> "Outcome":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown outcome: {value!r}. Use 'good' or 'bad'") from None


@dataclass(frozen=True)
class Rating:
    """
    Immutable outcome signal for a single clue resolution.

    Attributes:
        outcome: GOOD if a player was awarded points, BAD otherwise
        timestamp: ISO-8601 time the answer was judged
        rating_id: Stable identity used to append the rating to logs only once
    """

    outcome: Outcome
    timestamp: str = field(default_factory=utc_now)
    rating_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "timestamp": self.timestamp,
            "rating_id": self.rating_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rating":
        return cls(
            outcome=Outcome.parse(data["outcome"]),
            timestamp=data.get("timestamp") or utc_now(),
            rating_id=data.get("rating_id") or uuid.uuid4().hex,
        )


@dataclass
class Clue:
    """
    A statement shown to players, paired with its correct response.

    Attributes:
        text: Clue text shown to contestants
        answer: Correct response ("What is ...?")
        value: Point value tier (200-1000)
        daily_double: Whether the value is replaced by a wager
        rule_violation: Validation failure reason, kept for editor visibility
        ratings: Append-only outcome history
        revealed: Clue has been opened on the board
        answered: Clue has been resolved
    """

    text: str
    answer: str
    value: int
    daily_double: bool = False
    rule_violation: Optional[str] = None
    ratings: List[Rating] = field(default_factory=list)
    revealed: bool = False
    answered: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "answer": self.answer,
            "value": self.value,
            "dailyDouble": self.daily_double,
            "ruleViolation": self.rule_violation,
            "ratings": [rating.to_dict() for rating in self.ratings],
            "revealed": self.revealed,
            "answered": self.answered,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Clue":
        return cls(
            text=str(data.get("text", "")),
            answer=str(data.get("answer", "")),
            value=int(data.get("value", 0)),
            daily_double=data.get("dailyDouble") is True,
            rule_violation=data.get("ruleViolation"),
            ratings=[Rating.from_dict(r) for r in data.get("ratings", [])],
            revealed=bool(data.get("revealed", False)),
            answered=bool(data.get("answered", False)),
        )


def placeholder_clue(value: int) -> Clue:
    """Create the editable placeholder used to pad incomplete categories."""
    return Clue(
        text=f"This clue worth ${value} needs to be filled in",
        answer="What is the answer?",
        value=value,
    )


@dataclass
class Category:
    """
    A board column: one clue per tier plus its difficulty adjustment map.

    The adjustment map always carries exactly the five canonical tiers, each
    an integer in [-2, +2].
    """

    title: str
    clues: List[Clue] = field(default_factory=list)
    difficulty_adjustment: Dict[int, int] = field(default_factory=default_adjustments)

    def __post_init__(self):
        adjustments = default_adjustments()
        for tier, value in (self.difficulty_adjustment or {}).items():
            try:
                tier = int(tier)
                value = int(value)
            except (TypeError, ValueError, OverflowError):
                continue
            if tier in adjustments:
                adjustments[tier] = max(MIN_ADJUSTMENT, min(MAX_ADJUSTMENT, value))
        self.difficulty_adjustment = adjustments

    def clue_for_tier(self, tier: int) -> Optional[Clue]:
        for clue in self.clues:
            if clue.value == tier:
                return clue
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "questions": [clue.to_dict() for clue in self.clues],
            "difficultyAdjustment": {
                str(tier): value for tier, value in self.difficulty_adjustment.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            title=str(data.get("title", "")),
            clues=[Clue.from_dict(q) for q in data.get("questions", [])],
            difficulty_adjustment=data.get("difficultyAdjustment") or {},
        )


def placeholder_category(title: str) -> Category:
    """Create a category whose five clues are all placeholders."""
    return Category(title=title, clues=[placeholder_clue(tier) for tier in TIERS])


@dataclass
class Board:
    """A full game board of six categories."""

    categories: List[Category] = field(default_factory=list)

    def titles(self) -> List[str]:
        return [category.title for category in self.categories]

    def all_clues(self) -> List[Clue]:
        return [clue for category in self.categories for clue in category.clues]

    def daily_double_count(self) -> int:
        return sum(1 for clue in self.all_clues() if clue.daily_double)

    def get_clue(self, category_index: int, clue_index: int) -> Clue:
        """
        Look up a clue by board position.

        Raises:
            ValueError: If either index is outside the board
        """
        if not 0 <= category_index < len(self.categories):
            raise ValueError(f"No category at index {category_index}")
        clues = self.categories[category_index].clues
        if not 0 <= clue_index < len(clues):
            raise ValueError(
                f"No clue at index {clue_index} in category {category_index}"
            )
        return clues[clue_index]

    def to_dict(self) -> Dict[str, Any]:
        return {"categories": [category.to_dict() for category in self.categories]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Board":
        return cls(categories=[Category.from_dict(c) for c in data.get("categories", [])])


def default_board() -> Board:
    """Build the initial placeholder board from the default category titles."""
    return Board(
        categories=[placeholder_category(title) for title in DEFAULT_CATEGORY_TITLES]
    )
