"""
Clue Forge: adaptive LLM trivia-board generation

Generates Jeopardy-style boards through an LLM provider, re-checks every
returned clue against the editorial content rules, and adapts per-tier
difficulty from how players actually fare on each clue.

Main Components:
- core: Board, Category, Clue and Rating data model
- validate: Text normalizer and clue validator (word exclusion, vagueness)
- difficulty: Rating recorder, ratchet aggregator, DifficultyStore, guidance
- generate: Prompt templates, response parser and BoardGenerator
- models: Unified provider interface (OpenAI, Mistral, DeepSeek, Meta, Gemini)
- storage: Key-value persistence, analytics logs and ratings export
- game: GameSession tying play, ratings and persistence together

Quick Start:
    from clue_forge.core.board import default_board
    from clue_forge.game.session import create_session
    from clue_forge.generate.board_generator import BoardGenerator
    from clue_forge.models.model_interface import UnifiedModelInterface
    from clue_forge.storage.json_store import JsonFileStore

    store = JsonFileStore(".clue_forge/store.json")
    session = create_session(default_board(), store)
    session.answer_clue(0, 4, correct=False)

    generator = BoardGenerator(
        UnifiedModelInterface("openai"),
        session.aggregator.difficulty_store,
        session.aggregator.ratings_log,
    )
    session.replace_board(generator.generate_board(session.board))
"""

__version__ = "0.1.0"
