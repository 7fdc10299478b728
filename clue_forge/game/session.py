"""
Game session: the host-facing surface that resolves clues, records ratings
and keeps difficulty adjustments current.

Each resolved clue yields at most one rating:
- awarded points       -> good
- at least one deduction without an award -> bad
- skipped / no deduction -> nothing recorded

After every recorded rating the category's adjustments are recomputed,
persisted and, when an exporter is configured, the rating is exported.
"""

import logging
from typing import List, Optional, Tuple

from ..core.board import Board, Category, Clue, Rating
from ..difficulty.aggregator import DifficultyAggregator
from ..difficulty.recorder import outcome_for_resolution, record_outcome
from ..difficulty.store import DifficultyStore
from ..storage.base_store import BaseKeyValueStore
from ..storage.logs import FormatIssueLog, QualityRatingsLog
from ..storage.ratings_export import RatingsExporter
from ..utils.config_loader import get_config
from ..validate.validator import ClueValidator, ValidationResult


class GameSession:
    """
    Tracks one board in play.

    Attributes:
        board: Board currently in play
        aggregator: Recomputes adjustments after each rating
        issue_log: Receives validation failures from clue edits
        exporter: Optional durable ratings export
    """

    def __init__(
        self,
        board: Board,
        aggregator: DifficultyAggregator,
        issue_log: Optional[FormatIssueLog] = None,
        exporter: Optional[RatingsExporter] = None,
        validator: Optional[ClueValidator] = None,
    ):
        self.logger = logging.getLogger("GameSession")
        self.board = board
        self.aggregator = aggregator
        self.issue_log = issue_log
        self.exporter = exporter
        self.validator = validator or ClueValidator()

    def reveal_clue(self, category_index: int, clue_index: int) -> Clue:
        clue = self.board.get_clue(category_index, clue_index)
        clue.revealed = True
        return clue

    def answer_clue(self, category_index: int, clue_index: int, correct: bool) -> Optional[Rating]:
        """
        Resolve a clue with a single judged answer.

        Args:
            category_index: Category position on the board
            clue_index: Clue position within the category
            correct: Whether the answer was judged correct

        Returns:
            The recorded Rating
        """
        return self._resolve(
            category_index, clue_index, awarded=correct, deductions=0 if correct else 1
        )

    def deduct_incorrect(
        self, category_index: int, clue_index: int, players: List[str]
    ) -> Optional[Rating]:
        """
        Resolve a clue that no player answered correctly.

        Args:
            category_index: Category position on the board
            clue_index: Clue position within the category
            players: Players who lost points on the clue

        Returns:
            The bad Rating, or None when nobody was deducted
        """
        if players:
            self.logger.info(f"Deducted points from {', '.join(players)}")
        return self._resolve(category_index, clue_index, awarded=False, deductions=len(players))

    def skip_clue(self, category_index: int, clue_index: int) -> None:
        """Close a clue without recording any difficulty signal."""
        self._resolve(category_index, clue_index, awarded=False, deductions=0)

    def _resolve(
        self, category_index: int, clue_index: int, awarded: bool, deductions: int
    ) -> Optional[Rating]:
        clue = self.board.get_clue(category_index, clue_index)
        category = self.board.categories[category_index]
        clue.revealed = True
        clue.answered = True

        outcome = outcome_for_resolution(awarded, deductions)
        if outcome is None:
            self.logger.debug(f"No rating recorded for skipped ${clue.value} clue in '{category.title}'")
            return None

        rating = record_outcome(clue, outcome)
        self.aggregator.recompute(category)
        self._export(category, clue, rating)
        return rating

    def _export(self, category: Category, clue: Clue, rating: Rating):
        if self.exporter is None:
            return
        self.exporter.export(
            {
                "type": "single",
                "rating": {
                    "category": category.title,
                    "clue": clue.text,
                    "answer": clue.answer,
                    "rating": rating.outcome.value,
                    "timestamp": rating.timestamp,
                    "rating_id": rating.rating_id,
                },
            }
        )

    def edit_clue(
        self,
        category_index: int,
        clue_index: int,
        text: str,
        answer: str,
        daily_double: Optional[bool] = None,
        allow_vague: bool = False,
    ) -> Tuple[bool, ValidationResult]:
        """
        Save a host edit to a clue after validating it.

        Word-exclusion failures are saved with the violation flagged. Vague
        clues are rejected unless allow_vague is set. Every failure is written
        to the format issues log.

        Returns:
            (saved, validation result)
        """
        clue = self.board.get_clue(category_index, clue_index)
        category = self.board.categories[category_index]
        result = self.validator.validate(category.title, text, answer)

        if not result.valid:
            self.logger.warning(f"Edited clue in '{category.title}' failed validation: {result.reason}")
            if self.issue_log is not None:
                self.issue_log.record(category.title, text, answer, result.reason)
            if result.is_vague and not allow_vague:
                return False, result

        clue.text = text
        clue.answer = answer
        clue.rule_violation = None if result.valid else result.reason
        if daily_double is not None:
            clue.daily_double = daily_double
        return True, result

    def replace_board(self, board: Optional[Board]) -> bool:
        """
        Swap in a freshly generated board.

        Args:
            board: New board, or None from a cancelled generation request

        Returns:
            True if the board was replaced
        """
        if board is None:
            return False
        self.board = board
        self.logger.info(f"New board in play: {', '.join(board.titles())}")
        return True


def create_session(board: Board, store: BaseKeyValueStore) -> GameSession:
    """
    Wire a GameSession to a persistence collaborator using configured defaults.

    Ratings are exported to RATINGS_EXPORT_PATH when EXPORT_RATINGS is enabled.

    Args:
        board: Board to play
        store: Persistence collaborator holding adjustments and logs

    Returns:
        Ready-to-use GameSession
    """
    config = get_config()
    difficulty_store = DifficultyStore(store).load()
    aggregator = DifficultyAggregator(difficulty_store, QualityRatingsLog(store))

    exporter = None
    if config.get_bool("EXPORT_RATINGS", False):
        exporter = RatingsExporter(
            config.get_string("RATINGS_EXPORT_PATH", "json/ratings-export.json")
        )

    return GameSession(
        board,
        aggregator,
        issue_log=FormatIssueLog(store),
        exporter=exporter,
    )
