"""
Prompt templates for board and category generation.

The default system message carries the editorial rules generated boards must
follow, including the word-exclusion rule the validator re-checks on every
returned clue. Difficulty guidance is appended as its own section.
"""

import logging
from typing import List, Optional

from ..core.board import CATEGORY_COUNT, DAILY_DOUBLE_COUNT, TIERS

DEFAULT_SYSTEM_MESSAGE = """You are a Jeopardy! game creator tasked with generating well-structured, diverse Jeopardy! boards that follow the conventions and expectations of the game show. Your goal is to create categories, clues, and correct question-answer pairs that align with Jeopardy! standards.

The key principles are as follows:
* Clarity & Precision: Ensure that all clues and question-answer pairs are clear, precise, and avoid ambiguity.
* Specificity: Clues must lead to ONE unambiguous answer. Avoid vague clues that could reasonably accept multiple answers. Bad example: "This East Asian country is known for its unique blend of traditional and modern culture" - too vague, could be Japan, South Korea, China, etc. Good example: "Home to Samsung and Hyundai, this East Asian country has Seoul as its capital" - clearly points to South Korea only.
* Variety & Creativity: Strive for a high level of variance in categories and clues across literature, science, pop culture, history, and beyond.
* No Repetition: Each clue-question pair should be unique within the board.
* Ground Truth Only: All clues must reflect accurate, verifiable information.
* Jeopardy! Rhetoric: Clues are framed as statements, with the contestants providing the correct response in the form of a question.
* Progressive Difficulty: $200 clues should be easier and $1000 clues more challenging, with a smooth gradient in between.
* Maintain Clue Integrity: Do not reveal the answer in the clue. Category titles should NOT contain the answer.
* STRICT WORD EXCLUSION RULE: The correct response MUST NOT contain any words that appear in the clue or category. Bad example: Category "Neighborhoods", clue "This Greenwich Village area was the epicenter of the Stonewall Riots", answer "What is Greenwich Village?". Good example: Category "LGBTQ+ History", clue "This 1969 uprising in Greenwich Village marked a turning point in the fight for gay rights", answer "What are the Stonewall Riots?"."""

_CLUE_FORMAT = """{
              "text": "The clue text that would be shown to contestants",
              "answer": "What is the correct response?",
              "value": 200,
              "dailyDouble": false
            }"""


class BoardPromptTemplate:
    """
    Composes generation prompts from instructions, reference material,
    categories-so-far and difficulty guidance.
    """

    def __init__(self, system_message: Optional[str] = None):
        self.logger = logging.getLogger("BoardPromptTemplate")
        self.system_message = system_message or DEFAULT_SYSTEM_MESSAGE

    def _reference_section(self, reference_text: str) -> str:
        combined = (
            f"{self.system_message}\n\n{reference_text}" if reference_text else self.system_message
        )
        return f"Use the following reference content for creating specialized categories and questions: {combined}"

    def _guidance_section(self, guidance: str) -> str:
        if not guidance:
            return ""
        return (
            "DIFFICULTY GUIDANCE FROM PREVIOUS GAMES (apply it to matching categories):\n"
            f"{guidance}"
        )

    def format_board_prompt(
        self,
        current_titles: List[str],
        reference_text: str = "",
        guidance: str = "",
    ) -> str:
        """
        Build the prompt for a complete new board.

        Args:
            current_titles: Titles of the categories currently on the board
            reference_text: Optional source material for specialized categories
            guidance: Difficulty guidance text, may be empty

        Returns:
            Complete prompt string
        """
        tiers = ", ".join(f"${tier}" for tier in TIERS)
        prompt_parts = [
            f"Create a new Jeopardy game board with EXACTLY {CATEGORY_COUNT} creative categories.",
            self._reference_section(reference_text),
            f"For each category, create {len(TIERS)} clues with values {tiers}, ensuring they increase in difficulty.",
        ]
        if current_titles:
            prompt_parts.append(
                "Categories on the previous board (create entirely new titles): "
                + ", ".join(current_titles)
            )
        prompt_parts.append(
            "Important:\n"
            f"- YOU MUST CREATE EXACTLY {CATEGORY_COUNT} CATEGORIES, no more and no less\n"
            "- Clues should be statements or facts, NOT questions\n"
            '- Responses should always start with "What is" or "Who is" etc.\n'
            "- Do not include the answer within the clue text\n"
            f'- Mark EXACTLY {DAILY_DOUBLE_COUNT} clues total as "dailyDouble": true'
        )
        guidance_section = self._guidance_section(guidance)
        if guidance_section:
            prompt_parts.append(guidance_section)
        prompt_parts.append(self._format_instructions(CATEGORY_COUNT))

        prompt = "\n\n".join(prompt_parts)
        self.logger.debug(f"Board prompt built ({len(prompt)} chars)")
        return prompt

    def format_category_prompt(
        self,
        title: Optional[str],
        other_titles: List[str],
        reference_text: str = "",
        guidance: str = "",
    ) -> str:
        """Build the prompt for regenerating a single category."""
        if title:
            opening = f'Create {len(TIERS)} new Jeopardy clues for the category "{title}".'
        else:
            opening = "Create ONE new Jeopardy category with a clever, engaging title."

        prompt_parts = [opening, self._reference_section(reference_text)]
        if other_titles:
            prompt_parts.append(
                "The other categories on this board are (do not overlap with them): "
                + ", ".join(other_titles)
            )
        guidance_section = self._guidance_section(guidance)
        if guidance_section:
            prompt_parts.append(guidance_section)
        prompt_parts.append(self._format_instructions(1))
        return "\n\n".join(prompt_parts)

    def _format_instructions(self, category_count: int) -> str:
        return (
            "Format your response as JSON with this exact structure:\n"
            "{\n"
            '  "categories": [\n'
            "    {\n"
            '      "title": "Category Name",\n'
            '      "questions": [\n'
            f"            {_CLUE_FORMAT},\n"
            "            ... and so on for values 400, 600, 800, 1000\n"
            "      ]\n"
            "    }\n"
            "  ]\n"
            "}\n"
            f'The "categories" array MUST contain exactly {category_count} '
            f"categor{'y' if category_count == 1 else 'ies'}."
        )
