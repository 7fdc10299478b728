"""
Board generator: orchestrates prompt assembly, the model call and clue
re-validation for new boards and single categories.

Validation is fail-open. A returned clue that breaks a content rule is kept on
the board with its rule_violation set and recorded in the format issues log;
board structure is enforced independently of clue quality:
- exactly 6 categories (placeholders appended, extras truncated)
- exactly 5 clues per category, one per tier in tier order
- exactly 2 daily doubles (excess removed, missing ones promoted at random)

A request can be cancelled while the model call is in flight; its response is
then discarded without touching any board or store state.
"""

import copy
import logging
import random
from typing import Dict, List, Any, Optional

from ..core.board import (
    Board,
    Category,
    Clue,
    TIERS,
    CATEGORY_COUNT,
    DAILY_DOUBLE_COUNT,
    DEFAULT_CATEGORY_TITLES,
    placeholder_category,
    placeholder_clue,
)
from ..difficulty.guidance import GuidanceSynthesizer
from ..difficulty.store import DifficultyStore
from ..models.model_interface import retry_with_exponential_backoff
from ..storage.logs import QualityRatingsLog, FormatIssueLog
from ..utils.config_loader import get_config
from ..validate.validator import ClueValidator
from .parser import BoardResponseParser, BoardParseError
from .templates import BoardPromptTemplate


class BoardGenerator:
    """
    Generates boards through an LLM provider, steered by difficulty guidance.

    Attributes:
        model: Object with generate_response(prompt) -> str
        max_attempts: Attempts per request for retryable provider errors
    """

    def __init__(
        self,
        model,
        difficulty_store: DifficultyStore,
        ratings_log: QualityRatingsLog,
        issue_log: Optional[FormatIssueLog] = None,
        validator: Optional[ClueValidator] = None,
        template: Optional[BoardPromptTemplate] = None,
        rng: Optional[random.Random] = None,
        max_attempts: Optional[int] = None,
        initial_delay: Optional[float] = None,
    ):
        self.logger = logging.getLogger("BoardGenerator")
        self.config = get_config()
        generation_config = self.config.get_generation_config()

        self.model = model
        self.difficulty_store = difficulty_store
        self.ratings_log = ratings_log
        self.issue_log = issue_log
        self.validator = validator or ClueValidator()
        self.template = template or BoardPromptTemplate()
        self.parser = BoardResponseParser()
        self.guidance = GuidanceSynthesizer(generation_config["max_guidance_examples"])
        self.rng = rng or random.Random()

        self.max_attempts = max_attempts or generation_config["max_generation_attempts"]
        self.initial_delay = (
            initial_delay
            if initial_delay is not None
            else generation_config["retry_initial_delay"]
        )

        self._ticket = 0

    def cancel(self):
        """Abandon the in-flight request; its response will be discarded."""
        self._ticket += 1
        self.logger.info("Generation request cancelled")

    def _begin_request(self) -> int:
        self._ticket += 1
        return self._ticket

    def _is_stale(self, ticket: int) -> bool:
        if ticket != self._ticket:
            self.logger.warning("Discarding response from a cancelled or superseded request")
            return True
        return False

    def _call_model(self, prompt: str) -> str:
        call = retry_with_exponential_backoff(
            max_attempts=self.max_attempts, initial_delay=self.initial_delay
        )(self.model.generate_response)
        return call(prompt)

    def build_prompt(
        self,
        current_titles: List[str],
        reference_text: str = "",
        system_message: Optional[str] = None,
    ) -> str:
        """
        Assemble the full board prompt including difficulty guidance.

        Args:
            current_titles: Titles of the categories currently on the board
            reference_text: Optional source material
            system_message: Overrides the template's editorial instructions

        Returns:
            Prompt text for the model
        """
        guidance = self.guidance.build_guidance(
            current_titles, self.difficulty_store, self.ratings_log
        )
        template = BoardPromptTemplate(system_message) if system_message else self.template
        return template.format_board_prompt(current_titles, reference_text, guidance)

    def generate_board(self, board: Board, reference_text: str = "") -> Optional[Board]:
        """
        Generate a replacement for the given board.

        Args:
            board: Current board; never mutated
            reference_text: Optional source material for specialized categories

        Returns:
            New Board, or None if the request was cancelled in flight

        Raises:
            ProviderError: For non-retryable failures or exhausted retries
        """
        ticket = self._begin_request()
        prompt = self.build_prompt(board.titles(), reference_text)
        self.logger.info(f"Requesting new board ({len(prompt)} char prompt)")

        response = self._call_model(prompt)
        if self._is_stale(ticket):
            return None

        try:
            raw_categories = self.parser.parse(response)
            categories = [self._build_category(raw) for raw in raw_categories]
        except BoardParseError as e:
            self.logger.error(f"Could not parse generated board, using fallback board: {e}")
            categories = self._fallback_categories()

        categories = self._enforce_category_count(categories)
        self._enforce_daily_doubles(categories)

        new_board = Board(categories=categories)
        violations = sum(1 for clue in new_board.all_clues() if clue.rule_violation)
        self.logger.info(
            f"Generated board with {len(categories)} categories, "
            f"{new_board.daily_double_count()} daily doubles, {violations} flagged clues"
        )
        return new_board

    def generate_category(
        self,
        board: Board,
        index: int,
        title: Optional[str] = None,
        reference_text: str = "",
    ) -> Optional[Board]:
        """
        Regenerate one category of a board.

        Args:
            board: Current board; never mutated
            index: Position of the category to replace
            title: Title for the new category; the model picks one when None
            reference_text: Optional source material

        Returns:
            Copy of the board with the category replaced, or None if cancelled

        Raises:
            ValueError: If index is outside the board
        """
        if not 0 <= index < len(board.categories):
            raise ValueError(f"No category at index {index}")

        ticket = self._begin_request()
        other_titles = [t for i, t in enumerate(board.titles()) if i != index]
        guidance = (
            self.guidance.build_guidance([title], self.difficulty_store, self.ratings_log)
            if title
            else ""
        )
        prompt = self.template.format_category_prompt(title, other_titles, reference_text, guidance)

        response = self._call_model(prompt)
        if self._is_stale(ticket):
            return None

        try:
            raw_categories = self.parser.parse(response)
        except BoardParseError as e:
            self.logger.error(f"Could not parse generated category: {e}")
            raw_categories = []

        if raw_categories:
            raw = dict(raw_categories[0])
            if title:
                raw["title"] = title
            category = self._build_category(raw)
        else:
            category = placeholder_category(title or board.categories[index].title)
            self._seed_adjustments(category)

        new_board = copy.deepcopy(board)
        new_board.categories[index] = category
        self._enforce_daily_doubles(new_board.categories)
        return new_board

    def _build_category(self, raw: Dict[str, Any]) -> Category:
        """Turn one parsed category into a validated, tier-complete Category."""
        title = raw.get("title") or "Untitled Category"
        questions = sorted(raw.get("questions", []), key=_question_sort_key)

        if len(questions) != len(TIERS):
            self.logger.warning(
                f"Category '{title}' returned {len(questions)} clues instead of {len(TIERS)}"
            )

        clues = []
        for position, tier in enumerate(TIERS):
            if position >= len(questions):
                clues.append(placeholder_clue(tier))
                continue
            question = questions[position]
            clue = Clue(
                text=str(question.get("text", "")).strip(),
                answer=str(question.get("answer", "")).strip(),
                value=tier,
                daily_double=question.get("dailyDouble") is True,
            )
            self._validate_clue(title, clue)
            clues.append(clue)

        category = Category(title=title, clues=clues)
        self._seed_adjustments(category)
        return category

    def _validate_clue(self, title: str, clue: Clue):
        result = self.validator.validate(title, clue.text, clue.answer)
        if result.valid:
            return
        clue.rule_violation = result.reason
        self.logger.warning(f"Rule violation in generated clue: {result.reason}")
        if self.issue_log is not None:
            self.issue_log.record(title, clue.text, clue.answer, result.reason)

    def _seed_adjustments(self, category: Category):
        match = self.difficulty_store.lookup(category.title)
        if match is not None:
            category.difficulty_adjustment = match[1]

    def _fallback_categories(self) -> List[Category]:
        return [
            Category(
                title=f"{title} (AI Error)",
                clues=[
                    Clue(
                        text=f"JSON parse error occurred. This is a fallback question {position + 1} for {tier} points.",
                        answer="What is a JSON parsing error?",
                        value=tier,
                    )
                    for position, tier in enumerate(TIERS)
                ],
            )
            for title in DEFAULT_CATEGORY_TITLES
        ]

    def _enforce_category_count(self, categories: List[Category]) -> List[Category]:
        if len(categories) < CATEGORY_COUNT:
            missing = CATEGORY_COUNT - len(categories)
            self.logger.info(
                f"Model returned only {len(categories)} categories instead of {CATEGORY_COUNT}. Adding {missing} placeholders."
            )
            for title in DEFAULT_CATEGORY_TITLES[:missing]:
                placeholder = placeholder_category(f"{title} (Generated)")
                self._seed_adjustments(placeholder)
                categories.append(placeholder)
        elif len(categories) > CATEGORY_COUNT:
            self.logger.info(
                f"Model returned {len(categories)} categories instead of {CATEGORY_COUNT}. Trimming."
            )
            categories = categories[:CATEGORY_COUNT]
        return categories

    def _enforce_daily_doubles(self, categories: List[Category]):
        clues = [clue for category in categories for clue in category.clues]
        daily_doubles = [clue for clue in clues if clue.daily_double]
        self.logger.debug(f"Board has {len(daily_doubles)} daily doubles (target: {DAILY_DOUBLE_COUNT})")

        if len(daily_doubles) > DAILY_DOUBLE_COUNT:
            self.rng.shuffle(daily_doubles)
            for clue in daily_doubles[DAILY_DOUBLE_COUNT:]:
                clue.daily_double = False
        elif len(daily_doubles) < DAILY_DOUBLE_COUNT:
            regular = [clue for clue in clues if not clue.daily_double]
            self.rng.shuffle(regular)
            for clue in regular[: DAILY_DOUBLE_COUNT - len(daily_doubles)]:
                clue.daily_double = True


def _question_sort_key(question: Dict[str, Any]) -> int:
    """Order questions by their stated value; unparseable values sort last."""
    try:
        return int(question.get("value"))
    except (TypeError, ValueError):
        return TIERS[-1] + 1
