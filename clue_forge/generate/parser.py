"""
Best-effort extraction of board JSON from raw model output.

Models wrap JSON in code fences or surround it with prose. The parser looks
for a fenced block first, then the outermost brace span, drops trailing commas
and decodes. Anything beyond that is treated as a failed generation.
"""

import json
import logging
import re
from typing import Dict, List, Any

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_CONTROL_CHARS_RE = re.compile(r"[\u0000-\u0008\u000b\u000c\u000e-\u001f]")


class BoardParseError(ValueError):
    """Raised when no usable board JSON can be extracted from a response."""


class BoardResponseParser:
    """Parses model responses into raw category dictionaries."""

    def __init__(self):
        self.logger = logging.getLogger("BoardResponseParser")

    def _extract_json_text(self, response: str) -> str:
        match = _CODE_BLOCK_RE.search(response)
        if match:
            self.logger.debug("Found JSON in code block")
            return match.group(1)

        start = response.find("{")
        end = response.rfind("}")
        if start == -1 or end <= start:
            raise BoardParseError("Could not find valid JSON in the response")
        return response[start : end + 1]

    def parse(self, response: str) -> List[Dict[str, Any]]:
        """
        Extract the categories array from a model response.

        Args:
            response: Raw model text

        Returns:
            List of category dicts, each with a title and questions list

        Raises:
            BoardParseError: If no categories can be decoded
        """
        if not response or not response.strip():
            raise BoardParseError("Empty model response")

        json_text = self._extract_json_text(response)
        json_text = _CONTROL_CHARS_RE.sub(" ", json_text)
        json_text = _TRAILING_COMMA_RE.sub(r"\1", json_text)

        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as e:
            self.logger.error(f"Failed to decode board JSON: {e}. Start of response: {response[:500]}")
            raise BoardParseError(f"Invalid board JSON: {e}") from e

        categories = data.get("categories") if isinstance(data, dict) else None
        if not isinstance(categories, list):
            raise BoardParseError('Response JSON has no "categories" array')

        parsed = []
        for category in categories:
            if not isinstance(category, dict):
                self.logger.warning(f"Skipping non-object category entry: {category!r}")
                continue
            questions = category.get("questions")
            parsed.append(
                {
                    "title": str(category.get("title", "")).strip(),
                    "questions": [q for q in questions if isinstance(q, dict)]
                    if isinstance(questions, list)
                    else [],
                }
            )

        self.logger.info(f"Parsed {len(parsed)} categories from model response")
        return parsed
