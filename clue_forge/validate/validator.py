"""
Content rules for generated clue/answer pairs.

Two checks run in a fixed order:

1. Word exclusion (hard defect): the answer must not reuse any substantive
   word (longer than two characters) from its clue or category title.
2. Specificity (soft heuristic): the clue must not lean on phrasing that tends
   to admit several correct responses ("known for", "this country", ...).

A clue failing both is reported only for word exclusion. Validation never
raises; every input yields a ValidationResult.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .normalizer import normalize, tokenize

logger = logging.getLogger(__name__)

MIN_SIGNIFICANT_TOKEN_LENGTH = 2

WORD_EXCLUSION_PREFIX = "Answer contains words from the clue or category: "
VAGUE_REASON = (
    "Question may be too vague and could accept multiple answers. "
    "Consider adding more specific, distinguishing details."
)

DEFAULT_VAGUE_PHRASES = (
    "known for",
    "famous for",
    "renowned for",
    "recognized for",
    "celebrated for",
    "this country",
    "this nation",
    "this place",
    "this region",
    "this area",
    "this city",
    "this culture",
    "this tradition",
    "unique blend",
    "rich history",
    "diverse landscape",
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation call. Never persisted directly."""

    valid: bool
    reason: Optional[str] = None

    @property
    def is_word_exclusion(self) -> bool:
        return not self.valid and bool(self.reason) and self.reason.startswith(
            WORD_EXCLUSION_PREFIX
        )

    @property
    def is_vague(self) -> bool:
        return not self.valid and self.reason == VAGUE_REASON


class ClueValidator:
    """
    Validates clue/answer pairs against the word-exclusion and vagueness rules.

    Attributes:
        vague_phrases: Normalized phrases that mark a clue as possibly ambiguous
    """

    def __init__(self, vague_phrases: Sequence[str] = DEFAULT_VAGUE_PHRASES):
        self.vague_phrases = [normalize(phrase) for phrase in vague_phrases]

    def validate(self, category_title, clue_text, answer_text) -> ValidationResult:
        """
        Decide whether a clue is acceptable.

        Args:
            category_title: Title of the category owning the clue
            clue_text: Clue shown to contestants
            answer_text: Correct response

        Returns:
            ValidationResult with a reason when the clue fails a rule
        """
        normalized_category = normalize(category_title)
        normalized_clue = normalize(clue_text)
        normalized_answer = normalize(answer_text)

        clue_words = tokenize(
            normalized_category, MIN_SIGNIFICANT_TOKEN_LENGTH
        ) + tokenize(normalized_clue, MIN_SIGNIFICANT_TOKEN_LENGTH)
        answer_words = set(tokenize(normalized_answer))

        overlapping = self._overlapping_words(clue_words, answer_words)
        if overlapping:
            return ValidationResult(
                valid=False, reason=WORD_EXCLUSION_PREFIX + ", ".join(overlapping)
            )

        if any(phrase in normalized_clue for phrase in self.vague_phrases):
            return ValidationResult(valid=False, reason=VAGUE_REASON)

        return ValidationResult(valid=True)

    @staticmethod
    def _overlapping_words(clue_words: List[str], answer_words: set) -> List[str]:
        """Return clue/category words found in the answer, first occurrence order."""
        overlapping = []
        for word in clue_words:
            if word in answer_words and word not in overlapping:
                overlapping.append(word)
        return overlapping


_default_validator = ClueValidator()


def validate(category_title, clue_text, answer_text) -> ValidationResult:
    """Validate with the default vague-phrase list."""
    return _default_validator.validate(category_title, clue_text, answer_text)
