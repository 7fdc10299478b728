"""
Adaptive difficulty engine for Clue Forge.

This module closes the loop between play outcomes and future generation:
ratings recorded per clue are aggregated per category and tier into bounded
adjustments, which are persisted and turned into guidance text for the next
generation request.

Key Components:
- record_outcome: Append-only rating recorder
- DifficultyAggregator: Ratchet update of per-tier adjustments
- DifficultyStore: Persisted adjustments with fuzzy category lookup
- GuidanceSynthesizer: Natural-language steering text with counter-examples
- ratings_summary: Offline summary of the ratings log
"""

from .recorder import record_outcome, outcome_for_resolution
from .aggregator import DifficultyAggregator, adjust_tier
from .store import DifficultyStore
from .guidance import GuidanceSynthesizer
from .report import ratings_summary, write_report

__all__ = [
    "record_outcome",
    "outcome_for_resolution",
    "DifficultyAggregator",
    "adjust_tier",
    "DifficultyStore",
    "GuidanceSynthesizer",
    "ratings_summary",
    "write_report",
]
