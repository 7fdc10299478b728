"""
Core data model for the Clue Forge trivia engine.

Classes:
    Board: Six-category game board
    Category: Board column with one clue per tier and its difficulty adjustments
    Clue: A clue/answer pair with its rating history
    Rating: Immutable good/bad outcome signal
    Outcome: Rating outcome enum
"""

from .board import (
    Board,
    Category,
    Clue,
    Rating,
    Outcome,
    TIERS,
    default_board,
    placeholder_category,
    placeholder_clue,
)

__all__ = [
    "Board",
    "Category",
    "Clue",
    "Rating",
    "Outcome",
    "TIERS",
    "default_board",
    "placeholder_category",
    "placeholder_clue",
]
