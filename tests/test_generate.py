"""
Test suite for clue_forge.generate module.
Tests response parsing, prompt assembly and the board generator's structural
guarantees: six categories, five tiered clues each, exactly two daily doubles,
fail-open validation and cancellation.
"""

import copy
import json
import random
from unittest.mock import Mock

import pytest

from clue_forge.core.board import TIERS, default_board
from clue_forge.difficulty.store import DifficultyStore
from clue_forge.generate.board_generator import BoardGenerator
from clue_forge.generate.parser import BoardParseError, BoardResponseParser
from clue_forge.generate.templates import BoardPromptTemplate
from clue_forge.models.model_interface import ProviderError, ProviderErrorKind
from clue_forge.storage.base_store import (
    DIFFICULTY_ADJUSTMENTS_KEY,
    FORMAT_ISSUES_LOG_KEY,
    QUALITY_RATINGS_LOG_KEY,
    InMemoryStore,
)
from clue_forge.storage.logs import FormatIssueLog, QualityRatingsLog


def board_payload(category_count=6, daily_doubles=((0, 1), (3, 4)), titles=None):
    """Model-style board JSON with clues that pass every content rule."""
    categories = []
    for c in range(category_count):
        title = titles[c] if titles else f"Topic {chr(65 + c)}"
        categories.append(
            {
                "title": title,
                "questions": [
                    {
                        "text": f"Fact {c}{q} under review",
                        "answer": f"What is response {c}{q}?",
                        "value": tier,
                        "dailyDouble": (c, q) in daily_doubles,
                    }
                    for q, tier in enumerate(TIERS)
                ],
            }
        )
    return {"categories": categories}


def fenced(payload):
    return "Here is your board:\n```json\n" + json.dumps(payload, indent=2) + "\n```"


class TestBoardResponseParser:
    """Test best-effort JSON extraction."""

    @pytest.fixture
    def parser(self):
        return BoardResponseParser()

    def test_fenced_block(self, parser):
        """Test JSON inside a fenced code block."""
        categories = parser.parse(fenced(board_payload(2)))
        assert [c["title"] for c in categories] == ["Topic A", "Topic B"]
        assert len(categories[0]["questions"]) == 5

    def test_prose_wrapped_json(self, parser):
        """Test JSON surrounded by prose without fences."""
        response = "Sure! " + json.dumps(board_payload(1)) + " Enjoy the game."
        assert parser.parse(response)[0]["title"] == "Topic A"

    def test_trailing_commas(self, parser):
        """Test trailing commas are tolerated."""
        response = '{"categories": [{"title": "A", "questions": [{"text": "t", "answer": "a", "value": 200},],},],}'
        categories = parser.parse(response)
        assert categories == [
            {"title": "A", "questions": [{"text": "t", "answer": "a", "value": 200}]}
        ]

    def test_skips_malformed_entries(self, parser):
        """Test non-object categories and questions are dropped."""
        response = json.dumps(
            {"categories": ["junk", {"title": "B", "questions": ["x", {"text": "t"}]}, {"title": "C"}]}
        )
        categories = parser.parse(response)
        assert categories == [
            {"title": "B", "questions": [{"text": "t"}]},
            {"title": "C", "questions": []},
        ]

    @pytest.mark.parametrize(
        "response",
        ["", "   ", "no json here", "{broken: json", '{"boards": []}', '{"categories": "none"}'],
    )
    def test_unusable_responses_raise(self, parser, response):
        """Test responses without a categories array raise BoardParseError."""
        with pytest.raises(BoardParseError):
            parser.parse(response)


class TestBoardPromptTemplate:
    """Test prompt assembly."""

    def test_board_prompt_sections(self):
        """Test the board prompt carries counts, titles, reference and guidance."""
        prompt = BoardPromptTemplate().format_board_prompt(
            ["Old A", "Old B"], reference_text="Moon landing notes", guidance="- Make $200 clues somewhat HARDER."
        )
        assert "EXACTLY 6" in prompt
        assert "EXACTLY 2" in prompt
        assert "Old A, Old B" in prompt
        assert "Moon landing notes" in prompt
        assert "DIFFICULTY GUIDANCE FROM PREVIOUS GAMES" in prompt
        assert "- Make $200 clues somewhat HARDER." in prompt
        assert "STRICT WORD EXCLUSION RULE" in prompt

    def test_board_prompt_without_guidance(self):
        """Test the guidance section is omitted when there is none."""
        prompt = BoardPromptTemplate().format_board_prompt([])
        assert "DIFFICULTY GUIDANCE" not in prompt

    def test_custom_system_message(self):
        """Test a custom system message replaces the default rules."""
        prompt = BoardPromptTemplate("House rules only.").format_board_prompt([])
        assert "House rules only." in prompt
        assert "STRICT WORD EXCLUSION RULE" not in prompt

    def test_category_prompt(self):
        """Test the single-category prompt names the title and other categories."""
        prompt = BoardPromptTemplate().format_category_prompt("Volcanoes", ["Topic A", "Topic B"])
        assert '"Volcanoes"' in prompt
        assert "Topic A, Topic B" in prompt
        assert "exactly 1 category." in prompt


class TestBoardGenerator:
    """Test board generation end to end with a mocked model."""

    @pytest.fixture
    def backing(self):
        return InMemoryStore()

    @pytest.fixture
    def model(self):
        model = Mock()
        model.generate_response.return_value = fenced(board_payload())
        return model

    @pytest.fixture
    def generator(self, model, backing):
        return BoardGenerator(
            model,
            DifficultyStore(backing).load(),
            QualityRatingsLog(backing),
            issue_log=FormatIssueLog(backing),
            rng=random.Random(7),
            max_attempts=3,
            initial_delay=0.0,
        )

    def assert_board_invariants(self, board):
        assert len(board.categories) == 6
        for category in board.categories:
            assert [clue.value for clue in category.clues] == list(TIERS)
            assert set(category.difficulty_adjustment) == set(TIERS)
        assert board.daily_double_count() == 2

    def test_valid_response(self, generator, model):
        """Test a well-formed response becomes a clean board."""
        board = generator.generate_board(default_board())

        self.assert_board_invariants(board)
        assert board.titles() == [f"Topic {letter}" for letter in "ABCDEF"]
        assert not any(clue.rule_violation for clue in board.all_clues())
        assert board.categories[0].clues[1].daily_double
        assert board.categories[3].clues[4].daily_double
        model.generate_response.assert_called_once()

    def test_input_board_not_mutated(self, generator):
        """Test the current board is left untouched."""
        board = default_board()
        snapshot = copy.deepcopy(board)
        generator.generate_board(board)
        assert board == snapshot

    def test_pads_missing_categories(self, generator, model):
        """Test fewer than six categories are padded with placeholders."""
        model.generate_response.return_value = fenced(board_payload(4, daily_doubles=()))
        board = generator.generate_board(default_board())

        self.assert_board_invariants(board)
        assert board.titles()[4:] == ["World History (Generated)", "Science (Generated)"]
        assert board.categories[5].clues[0].text == "This clue worth $200 needs to be filled in"

    def test_truncates_extra_categories(self, generator, model):
        """Test more than six categories are truncated."""
        model.generate_response.return_value = fenced(board_payload(8))
        board = generator.generate_board(default_board())

        self.assert_board_invariants(board)
        assert board.titles()[-1] == "Topic F"

    @pytest.mark.parametrize(
        "daily_doubles",
        [(), ((0, 0),), ((0, 0), (1, 1), (2, 2), (3, 3), (4, 4))],
    )
    def test_exactly_two_daily_doubles(self, generator, model, daily_doubles):
        """Test missing daily doubles are promoted and extras removed."""
        model.generate_response.return_value = fenced(board_payload(daily_doubles=daily_doubles))
        board = generator.generate_board(default_board())
        assert board.daily_double_count() == 2

    def test_fail_open_validation(self, generator, model, backing):
        """Test rule-breaking clues stay on the board, flagged and logged."""
        payload = board_payload(titles=["Neighborhoods", "B1", "C1", "D1", "E1", "F1"])
        payload["categories"][0]["questions"][2] = {
            "text": "This Greenwich Village area was an epicenter of protest",
            "answer": "What is Greenwich Village?",
            "value": 600,
        }
        payload["categories"][1]["questions"][0]["text"] = "This country is known for tea"
        model.generate_response.return_value = fenced(payload)

        board = generator.generate_board(default_board())

        self.assert_board_invariants(board)
        flagged = board.categories[0].clues[2]
        assert flagged.text.startswith("This Greenwich Village area")
        assert flagged.rule_violation.startswith("Answer contains words from the clue or category: ")
        assert board.categories[1].clues[0].rule_violation.startswith("Question may be too vague")

        issues = backing.load()[FORMAT_ISSUES_LOG_KEY]
        assert [issue["category"] for issue in issues] == ["Neighborhoods", "B1"]

    def test_incomplete_and_unordered_clues(self, generator, model):
        """Test clues are sorted by value and missing tiers padded."""
        payload = board_payload()
        questions = payload["categories"][2]["questions"]
        payload["categories"][2]["questions"] = [questions[3], questions[0], questions[1]]
        model.generate_response.return_value = fenced(payload)

        category = generator.generate_board(default_board()).categories[2]

        assert [clue.value for clue in category.clues] == list(TIERS)
        assert category.clues[0].text == "Fact 20 under review"
        assert category.clues[2].text == "Fact 23 under review"
        assert category.clues[3].text == "This clue worth $800 needs to be filled in"

    def test_unparseable_response_uses_fallback(self, generator, model):
        """Test a response without JSON yields the fallback board."""
        model.generate_response.return_value = "I cannot help with that."
        board = generator.generate_board(default_board())

        self.assert_board_invariants(board)
        assert board.titles()[0] == "World History (AI Error)"
        assert all(title.endswith(" (AI Error)") for title in board.titles())

    def test_guidance_in_prompt_and_adjustments_seeded(self, model, backing):
        """Test stored adjustments steer the prompt and seed new categories."""
        backing.save(DIFFICULTY_ADJUSTMENTS_KEY, {"World History": {"1000": -2}})
        model.generate_response.return_value = fenced(
            board_payload(titles=["World History Trivia", "B1", "C1", "D1", "E1", "F1"])
        )
        generator = BoardGenerator(
            model, DifficultyStore(backing).load(), QualityRatingsLog(backing), initial_delay=0.0
        )

        board = generator.generate_board(default_board())

        prompt = model.generate_response.call_args[0][0]
        assert "DIFFICULTY GUIDANCE FROM PREVIOUS GAMES" in prompt
        assert "- Make $1000 clues significantly EASIER." in prompt
        assert board.categories[0].difficulty_adjustment[1000] == -2
        assert board.categories[1].difficulty_adjustment[1000] == 0

    def test_generation_does_not_touch_ratings(self, generator, backing):
        """Test generation leaves the ratings log and stored adjustments alone."""
        generator.generate_board(default_board())
        stored = backing.load()
        assert QUALITY_RATINGS_LOG_KEY not in stored
        assert DIFFICULTY_ADJUSTMENTS_KEY not in stored

    def test_cancelled_request_is_discarded(self, generator, model):
        """Test a response arriving after cancel() is dropped."""

        def respond(prompt):
            generator.cancel()
            return fenced(board_payload())

        model.generate_response.side_effect = respond
        board = default_board()
        snapshot = copy.deepcopy(board)

        assert generator.generate_board(board) is None
        assert board == snapshot

    def test_non_retryable_error_propagates(self, generator, model):
        """Test auth failures surface immediately without retrying."""
        model.generate_response.side_effect = ProviderError("bad key", ProviderErrorKind.AUTH, 401)

        with pytest.raises(ProviderError) as exc_info:
            generator.generate_board(default_board())

        assert exc_info.value.kind is ProviderErrorKind.AUTH
        assert model.generate_response.call_count == 1

    def test_retryable_error_is_retried(self, generator, model):
        """Test server errors are retried and a later success is used."""
        model.generate_response.side_effect = [
            ProviderError("overloaded", ProviderErrorKind.SERVER, 503),
            fenced(board_payload()),
        ]

        board = generator.generate_board(default_board())

        self.assert_board_invariants(board)
        assert model.generate_response.call_count == 2

    def test_retries_exhausted(self, generator, model):
        """Test the last retryable error is raised once attempts run out."""
        model.generate_response.side_effect = ProviderError("slow down", ProviderErrorKind.RATE_LIMIT, 429)

        with pytest.raises(ProviderError):
            generator.generate_board(default_board())
        assert model.generate_response.call_count == 3


class TestGenerateCategory:
    """Test single-category regeneration."""

    @pytest.fixture
    def model(self):
        model = Mock()
        model.generate_response.return_value = fenced(
            board_payload(1, daily_doubles=(), titles=["Volcano Facts"])
        )
        return model

    @pytest.fixture
    def generator(self, model):
        backing = InMemoryStore()
        return BoardGenerator(
            model,
            DifficultyStore(backing).load(),
            QualityRatingsLog(backing),
            rng=random.Random(3),
            initial_delay=0.0,
        )

    def test_replaces_one_category(self, generator):
        """Test only the requested category changes."""
        board = default_board()
        snapshot = copy.deepcopy(board)

        new_board = generator.generate_category(board, 2)

        assert board == snapshot
        assert new_board.titles()[2] == "Volcano Facts"
        assert new_board.titles()[:2] == board.titles()[:2]
        assert new_board.titles()[3:] == board.titles()[3:]
        assert new_board.daily_double_count() == 2

    def test_requested_title_wins(self, generator, model):
        """Test an explicit title overrides the model's title."""
        new_board = generator.generate_category(default_board(), 0, title="Rivers")
        assert new_board.titles()[0] == "Rivers"
        assert '"Rivers"' in model.generate_response.call_args[0][0]

    def test_invalid_index(self, generator):
        """Test an index outside the board raises ValueError."""
        with pytest.raises(ValueError):
            generator.generate_category(default_board(), 6)

    def test_cancelled(self, generator, model):
        """Test a cancelled category request returns None."""

        def respond(prompt):
            generator.cancel()
            return "{}"

        model.generate_response.side_effect = respond
        assert generator.generate_category(default_board(), 1) is None
