"""
Guidance synthesis: turns difficulty adjustments into generation instructions.

Each category with a non-zero tier produces a block of natural-language
steering text, optionally followed by concrete clues from play history that
the generator should not repeat at that difficulty. The blocks are appended to
the next generation prompt; no model fine-tuning is involved.
"""

import logging
from typing import Dict, List, Any, Iterable, Optional

from ..core.board import Outcome, TIERS
from ..storage.logs import QualityRatingsLog
from .store import DifficultyStore

DEFAULT_MAX_EXAMPLES = 2


class GuidanceSynthesizer:
    """
    Builds the difficulty guidance block for generation prompts.

    Attributes:
        max_examples: Maximum example clue/answer pairs attached per tier
    """

    def __init__(self, max_examples: int = DEFAULT_MAX_EXAMPLES):
        self.logger = logging.getLogger("GuidanceSynthesizer")
        self.max_examples = max_examples

    def synthesize(
        self,
        category_title: str,
        adjustment_map: Dict[int, int],
        historical_ratings: Iterable[Dict[str, Any]],
    ) -> str:
        """
        Build the guidance block for one category.

        Args:
            category_title: Title named in the instructions
            adjustment_map: Tier to adjustment in [-2, 2]
            historical_ratings: Ratings log entries recorded for this category

        Returns:
            Guidance text, or an empty string when every tier is 0
        """
        adjustments = {int(tier): int(value) for tier, value in adjustment_map.items()}
        non_zero = [(tier, adjustments[tier]) for tier in TIERS if adjustments.get(tier, 0)]
        if not non_zero:
            return ""

        history = list(historical_ratings)
        lines = [f'Difficulty adjustments for category "{category_title}" based on player performance:']

        for tier, adjustment in non_zero:
            direction = "HARDER" if adjustment > 0 else "EASIER"
            magnitude = "significantly" if abs(adjustment) >= 2 else "somewhat"
            lines.append(f"- Make ${tier} clues {magnitude} {direction}.")

            wanted = Outcome.GOOD if adjustment > 0 else Outcome.BAD
            examples = self._examples(history, tier, wanted)
            if not examples:
                continue

            if adjustment > 0:
                lines.append(
                    f"  Players found these ${tier} clues too easy; do not repeat them or clues this easy:"
                )
            else:
                lines.append(
                    f"  Players found these ${tier} clues too hard; do not repeat them or clues this obscure:"
                )
            for entry in examples:
                lines.append(f'  * Clue: "{entry.get("clue", "")}" / Answer: "{entry.get("answer", "")}"')

        return "\n".join(lines)

    def _examples(
        self, history: List[Dict[str, Any]], tier: int, outcome: Outcome
    ) -> List[Dict[str, Any]]:
        """Most recent distinct clues for a tier with the given outcome."""
        matching = [
            entry
            for entry in history
            if _as_int(entry.get("value")) == tier and entry.get("outcome") == outcome.value
        ]
        matching.sort(key=lambda entry: str(entry.get("timestamp", "")), reverse=True)

        examples = []
        seen_clues = set()
        for entry in matching:
            clue = entry.get("clue")
            if not clue or clue in seen_clues:
                continue
            seen_clues.add(clue)
            examples.append(entry)
            if len(examples) >= self.max_examples:
                break
        return examples

    def build_guidance(
        self,
        titles: Iterable[str],
        difficulty_store: DifficultyStore,
        ratings_log: QualityRatingsLog,
    ) -> str:
        """
        Concatenate guidance blocks for several category titles.

        Each title is resolved through the store's exact-then-fuzzy lookup;
        the first matching stored category wins.

        Returns:
            Combined guidance text, empty when no category needs adjusting
        """
        blocks = []
        for title in titles:
            match = difficulty_store.lookup(title)
            if match is None:
                continue
            stored_title, adjustments = match
            block = self.synthesize(title, adjustments, ratings_log.for_category(stored_title))
            if block:
                blocks.append(block)

        if blocks:
            self.logger.info(f"Synthesized difficulty guidance for {len(blocks)} categories")
        return "\n\n".join(blocks)


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None
