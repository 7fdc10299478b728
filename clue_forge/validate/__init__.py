"""
Clue validation for Clue Forge.

Key Components:
- normalize: Lowercase and strip punctuation before token comparison
- ClueValidator: Word-exclusion and vagueness rules
- ValidationResult: Pass/fail value with the failure reason
"""

from .normalizer import normalize
from .validator import ClueValidator, ValidationResult, validate

__all__ = ["normalize", "ClueValidator", "ValidationResult", "validate"]
