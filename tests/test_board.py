"""
Test suite for clue_forge.core board model.
"""

import pytest

from clue_forge.core.board import (
    Board,
    Category,
    Clue,
    Outcome,
    Rating,
    TIERS,
    default_board,
    placeholder_clue,
)


class TestOutcome:
    """Test outcome parsing."""

    def test_parse(self):
        """Test strings and enum members parse, case-insensitively."""
        assert Outcome.parse("good") is Outcome.GOOD
        assert Outcome.parse("BAD") is Outcome.BAD
        assert Outcome.parse(Outcome.GOOD) is Outcome.GOOD

    def test_parse_unknown(self):
        """Test anything else raises ValueError."""
        with pytest.raises(ValueError):
            Outcome.parse("neutral")


class TestCategory:
    """Test category adjustment normalization."""

    def test_adjustments_normalized(self):
        """Test string tiers, clamping and missing tiers on construction."""
        category = Category(title="Science", difficulty_adjustment={"200": 3, 1000: -5, 123: 1})
        assert category.difficulty_adjustment == {200: 2, 400: 0, 600: 0, 800: 0, 1000: -2}

    def test_clue_for_tier(self):
        """Test looking up a clue by value."""
        category = Category(title="Science", clues=[placeholder_clue(tier) for tier in TIERS])
        assert category.clue_for_tier(600).value == 600
        assert category.clue_for_tier(300) is None


class TestBoard:
    """Test board structure and serialization."""

    def test_default_board(self):
        """Test the initial board has six placeholder categories."""
        board = default_board()
        assert board.titles() == [
            "World History",
            "Science",
            "Pop Culture",
            "Literature",
            "Sports",
            "Geography",
        ]
        assert len(board.all_clues()) == 30
        assert board.daily_double_count() == 0

    def test_get_clue_bounds(self):
        """Test out-of-range positions raise ValueError."""
        board = default_board()
        assert board.get_clue(5, 4).value == 1000
        with pytest.raises(ValueError):
            board.get_clue(-1, 0)
        with pytest.raises(ValueError):
            board.get_clue(0, 5)

    def test_serialization(self):
        """Test the board dictionary form and its reconstruction."""
        board = default_board()
        clue = board.categories[0].clues[4]
        clue.daily_double = True
        clue.rule_violation = "Question may be too vague"
        clue.ratings.append(Rating(outcome=Outcome.BAD, timestamp="2024-01-01T00:00:00+00:00", rating_id="abc"))
        board.categories[0].difficulty_adjustment[1000] = -2

        data = board.to_dict()
        category_data = data["categories"][0]
        assert category_data["difficultyAdjustment"]["1000"] == -2
        assert category_data["questions"][4]["dailyDouble"] is True
        assert category_data["questions"][4]["ruleViolation"] == "Question may be too vague"
        assert category_data["questions"][4]["ratings"] == [
            {"outcome": "bad", "timestamp": "2024-01-01T00:00:00+00:00", "rating_id": "abc"}
        ]

        assert Board.from_dict(data) == board

    def test_from_dict_tolerates_missing_fields(self):
        """Test sparse dictionaries fill in defaults."""
        clue = Clue.from_dict({"text": "t", "answer": "a", "value": "400", "dailyDouble": "yes"})
        assert clue.value == 400
        assert clue.daily_double is False
        assert clue.ratings == []

    def test_non_finite_adjustments_dropped(self):
        """Test infinite adjustment values fall back to 0."""
        category = Category.from_dict(
            {"title": "Science", "questions": [], "difficultyAdjustment": {"200": float("inf"), "400": 1}}
        )
        assert category.difficulty_adjustment == {200: 0, 400: 1, 600: 0, 800: 0, 1000: 0}
