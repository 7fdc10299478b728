"""
Board generation for Clue Forge.

Architecture:
- templates: BoardPromptTemplate with the editorial system message
- parser: Best-effort board JSON extraction from model output
- board_generator: BoardGenerator orchestrating guidance, model call,
  re-validation and structural invariants
"""

from .templates import BoardPromptTemplate, DEFAULT_SYSTEM_MESSAGE
from .parser import BoardResponseParser, BoardParseError
from .board_generator import BoardGenerator

__all__ = [
    "BoardPromptTemplate",
    "DEFAULT_SYSTEM_MESSAGE",
    "BoardResponseParser",
    "BoardParseError",
    "BoardGenerator",
]
