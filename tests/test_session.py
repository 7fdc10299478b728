"""
Test suite for clue_forge.game module.
Tests clue resolution, rating recording, editor saves and ratings export.
"""

import json
from unittest.mock import Mock, patch

import pytest

from clue_forge.core.board import Board, Category, Clue, Outcome, TIERS, default_board
from clue_forge.difficulty.aggregator import DifficultyAggregator
from clue_forge.difficulty.store import DifficultyStore
from clue_forge.game.session import GameSession, create_session
from clue_forge.storage.base_store import (
    DIFFICULTY_ADJUSTMENTS_KEY,
    FORMAT_ISSUES_LOG_KEY,
    QUALITY_RATINGS_LOG_KEY,
    InMemoryStore,
)
from clue_forge.storage.logs import FormatIssueLog, QualityRatingsLog


def history_board():
    """Board whose first category is World History with distinct clues."""
    board = default_board()
    board.categories[0] = Category(
        title="World History",
        clues=[
            Clue(text=f"Event number {i} in antiquity", answer=f"What is event {i}?", value=tier)
            for i, tier in enumerate(TIERS)
        ],
    )
    return board


class TestGameSession:
    """Test resolving clues during play."""

    @pytest.fixture
    def backing(self):
        return InMemoryStore()

    @pytest.fixture
    def exporter(self):
        return Mock()

    @pytest.fixture
    def session(self, backing, exporter):
        aggregator = DifficultyAggregator(DifficultyStore(backing).load(), QualityRatingsLog(backing))
        return GameSession(
            history_board(),
            aggregator,
            issue_log=FormatIssueLog(backing),
            exporter=exporter,
        )

    def test_correct_answer_records_good(self, session, backing, exporter):
        """Test a correct answer records a good rating and exports it."""
        rating = session.answer_clue(0, 0, correct=True)

        clue = session.board.categories[0].clues[0]
        assert rating.outcome is Outcome.GOOD
        assert clue.ratings == [rating]
        assert clue.answered and clue.revealed
        assert len(backing.load()[QUALITY_RATINGS_LOG_KEY]) == 1
        exporter.export.assert_called_once_with(
            {
                "type": "single",
                "rating": {
                    "category": "World History",
                    "clue": "Event number 0 in antiquity",
                    "answer": "What is event 0?",
                    "rating": "good",
                    "timestamp": rating.timestamp,
                    "rating_id": rating.rating_id,
                },
            }
        )

    def test_incorrect_answer_records_bad(self, session):
        """Test an incorrect judged answer records a bad rating."""
        assert session.answer_clue(0, 1, correct=False).outcome is Outcome.BAD

    def test_deduction_records_bad(self, session):
        """Test a deduction from at least one player records bad."""
        rating = session.deduct_incorrect(0, 2, ["Alice", "Bob"])
        assert rating.outcome is Outcome.BAD
        assert len(session.board.categories[0].clues[2].ratings) == 1

    def test_no_deduction_records_nothing(self, session, backing, exporter):
        """Test a resolution with no deductions records no rating."""
        assert session.deduct_incorrect(0, 2, []) is None
        assert session.board.categories[0].clues[2].ratings == []
        assert QUALITY_RATINGS_LOG_KEY not in backing.load()
        exporter.export.assert_not_called()

    def test_skip_records_nothing(self, session, backing):
        """Test skipping closes the clue without a rating."""
        session.skip_clue(0, 3)
        clue = session.board.categories[0].clues[3]
        assert clue.answered
        assert clue.ratings == []
        assert DIFFICULTY_ADJUSTMENTS_KEY not in backing.load()

    def test_four_misses_make_tier_easier(self, session, backing):
        """Test repeated misses on the $1000 clue drive its adjustment to -2."""
        for _ in range(4):
            session.answer_clue(0, 4, correct=False)

        assert session.board.categories[0].difficulty_adjustment[1000] == -2
        stored = backing.load()[DIFFICULTY_ADJUSTMENTS_KEY]["World History"]
        assert stored["1000"] == -2
        assert len(backing.load()[QUALITY_RATINGS_LOG_KEY]) == 4

    def test_invalid_position(self, session):
        """Test out-of-range positions raise ValueError."""
        with pytest.raises(ValueError):
            session.answer_clue(6, 0, correct=True)
        with pytest.raises(ValueError):
            session.skip_clue(0, 5)

    def test_reveal(self, session):
        """Test revealing a clue does not resolve it."""
        clue = session.reveal_clue(1, 1)
        assert clue.revealed
        assert not clue.answered


class TestEditClue:
    """Test host edits to clues."""

    @pytest.fixture
    def backing(self):
        return InMemoryStore()

    @pytest.fixture
    def session(self, backing):
        aggregator = DifficultyAggregator(DifficultyStore(backing).load(), QualityRatingsLog(backing))
        return GameSession(history_board(), aggregator, issue_log=FormatIssueLog(backing))

    def test_valid_edit(self, session, backing):
        """Test a valid edit is saved without flags."""
        saved, result = session.edit_clue(
            0, 0, "Signed at Runnymede in 1215", "What is Magna Carta?", daily_double=True
        )
        clue = session.board.categories[0].clues[0]
        assert saved and result.valid
        assert clue.text == "Signed at Runnymede in 1215"
        assert clue.daily_double
        assert clue.rule_violation is None
        assert FORMAT_ISSUES_LOG_KEY not in backing.load()

    def test_word_exclusion_saved_flagged(self, session, backing):
        """Test a word-exclusion failure is saved with its violation."""
        saved, result = session.edit_clue(0, 1, "Charter signed at Runnymede", "What is Magna Charter?")
        clue = session.board.categories[0].clues[1]
        assert saved
        assert result.is_word_exclusion
        assert clue.rule_violation == result.reason
        assert len(backing.load()[FORMAT_ISSUES_LOG_KEY]) == 1

    def test_vague_rejected_unless_allowed(self, session, backing):
        """Test vague edits need explicit confirmation."""
        original = session.board.categories[0].clues[2].text

        saved, result = session.edit_clue(0, 2, "This city is known for canals", "What is Venice?")
        assert not saved and result.is_vague
        assert session.board.categories[0].clues[2].text == original

        saved, _ = session.edit_clue(
            0, 2, "This city is known for canals", "What is Venice?", allow_vague=True
        )
        assert saved
        assert session.board.categories[0].clues[2].rule_violation == result.reason
        assert len(backing.load()[FORMAT_ISSUES_LOG_KEY]) == 2

    def test_valid_edit_clears_previous_flag(self, session):
        """Test fixing a flagged clue clears its violation."""
        session.edit_clue(0, 1, "Charter signed at Runnymede", "What is Magna Charter?")
        session.edit_clue(0, 1, "Signed at Runnymede in 1215", "What is Magna Carta?")
        assert session.board.categories[0].clues[1].rule_violation is None


class TestBoardReplacement:
    """Test swapping boards and session wiring."""

    def test_replace_board(self):
        """Test a new board replaces the old one and None is ignored."""
        aggregator = Mock()
        session = GameSession(default_board(), aggregator)
        new_board = Board(categories=[])

        assert not session.replace_board(None)
        assert session.replace_board(new_board)
        assert session.board is new_board

    def test_create_session_without_export(self):
        """Test the factory wires persistence and leaves export off by default."""
        session = create_session(default_board(), InMemoryStore())
        assert session.exporter is None
        assert isinstance(session.issue_log, FormatIssueLog)

    def test_unseeded_board_keeps_stored_adjustments(self):
        """Test playing a board not built from the store leaves unrated tiers alone."""
        stored = {"200": 2, "400": 1, "600": 0, "800": -1, "1000": -1}
        backing = InMemoryStore({DIFFICULTY_ADJUSTMENTS_KEY: {"World History": stored}})
        session = create_session(default_board(), backing)

        session.answer_clue(0, 1, correct=True)

        assert backing.load()[DIFFICULTY_ADJUSTMENTS_KEY]["World History"] == stored
        assert session.board.categories[0].difficulty_adjustment[200] == 2

    def test_create_session_with_export(self, tmp_path):
        """Test EXPORT_RATINGS enables exporting to the configured path."""
        export_path = tmp_path / "ratings.json"
        config = Mock()
        config.get_bool.return_value = True
        config.get_string.return_value = str(export_path)

        with patch("clue_forge.game.session.get_config", return_value=config):
            session = create_session(history_board(), InMemoryStore())

        session.answer_clue(0, 0, correct=True)
        exported = json.loads(export_path.read_text(encoding="utf-8"))
        assert exported[0]["rating"] == "good"
        assert exported[0]["category"] == "World History"
