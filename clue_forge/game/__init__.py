"""Game session handling for Clue Forge."""

from .session import GameSession, create_session

__all__ = ["GameSession", "create_session"]
