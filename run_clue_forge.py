#!/usr/bin/env python3
"""
Clue Forge: adaptive LLM trivia-board generation

Command-line front end for generating boards, checking clues against the
content rules, and inspecting the difficulty signal collected from play.

Usage Examples:
  # Use config defaults (minimal command)
  python run_clue_forge.py generate --output boards/next.json

  # Regenerate from the board that was just played, with reference material
  python run_clue_forge.py generate --board boards/last.json --reference notes.txt --provider mistral

  # Check a clue before adding it by hand
  python run_clue_forge.py validate --category "World History" --clue "..." --answer "What is ...?"

  # Inspect what the next generation will be told
  python run_clue_forge.py guidance "World History" "Science"

  # Summaries of the quality ratings log
  python run_clue_forge.py report --format markdown --output reports/ratings.md
  python run_clue_forge.py export-ratings
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from clue_forge.core.board import Board, default_board
from clue_forge.difficulty.guidance import GuidanceSynthesizer
from clue_forge.difficulty.report import ratings_summary, write_report
from clue_forge.difficulty.store import DifficultyStore
from clue_forge.generate.board_generator import BoardGenerator
from clue_forge.models.model_interface import ProviderError, UnifiedModelInterface
from clue_forge.storage.json_store import JsonFileStore
from clue_forge.storage.logs import FormatIssueLog, QualityRatingsLog
from clue_forge.storage.ratings_export import RatingsExporter
from clue_forge.utils.config_loader import get_config
from clue_forge.validate.validator import ClueValidator


def get_config_defaults():
    """Get configuration defaults for CLI arguments."""
    config = get_config()
    return config.get_cli_defaults()


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Setup logging configuration with optional file output."""
    level = logging.DEBUG if verbose else logging.INFO

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(console_handler)

    # File handler always records debug detail
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        logging.info("=== CLUE FORGE TRACE ===")
        logging.info(f"Start time: {datetime.now().isoformat()}")
        logging.info(f"Log file: {log_file}")

    return log_file


def load_board(board_path: Optional[str]) -> Board:
    """Load a board JSON file, or the built-in default board when no path is given."""
    if not board_path:
        return default_board()
    with open(board_path, "r", encoding="utf-8") as f:
        return Board.from_dict(json.load(f))


def open_store(store_path: str):
    """Open the persistent store and the views built on it."""
    store = JsonFileStore(store_path)
    difficulty_store = DifficultyStore(store).load()
    ratings_log = QualityRatingsLog(store)
    issue_log = FormatIssueLog(store)
    return difficulty_store, ratings_log, issue_log


def run_generate(args) -> bool:
    """Generate a new board steered by stored difficulty adjustments."""
    print("🎲 BOARD GENERATION")
    print("=" * 60)

    difficulty_store, ratings_log, issue_log = open_store(args.store)
    board = load_board(args.board)

    reference_text = ""
    if args.reference:
        reference_text = Path(args.reference).read_text(encoding="utf-8")

    model = UnifiedModelInterface(provider=args.provider, model_name=args.model or None)
    generator = BoardGenerator(model, difficulty_store, ratings_log, issue_log=issue_log)

    try:
        new_board = generator.generate_board(board, reference_text)
    except ProviderError as e:
        print(f"❌ Generation failed ({e.kind.value}): {e}")
        logging.error(f"Generation failed: {e}", exc_info=True)
        return False

    if new_board is None:
        print("⚠️  Generation was cancelled")
        return False

    for category in new_board.categories:
        flagged = sum(1 for clue in category.clues if clue.rule_violation)
        suffix = f" ({flagged} flagged)" if flagged else ""
        print(f"   {category.title}{suffix}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(new_board.to_dict(), f, indent=2, ensure_ascii=False)

    print(f"✅ Board saved to: {output_path}")
    return True


def run_validate(args) -> bool:
    """Check a single clue against the content rules."""
    result = ClueValidator().validate(args.category, args.clue, args.answer)
    if result.valid:
        print("✅ Clue passes all content rules")
        return True
    print(f"❌ {result.reason}")
    return False


def run_guidance(args) -> bool:
    """Print the difficulty guidance the next generation would receive."""
    difficulty_store, ratings_log, _ = open_store(args.store)
    max_examples = get_config().get_generation_config()["max_guidance_examples"]
    guidance = GuidanceSynthesizer(max_examples).build_guidance(
        args.titles, difficulty_store, ratings_log
    )
    print(guidance or "No difficulty adjustments for these categories.")
    return True


def run_report(args) -> bool:
    """Summarize the quality ratings log."""
    _, ratings_log, _ = open_store(args.store)
    entries = ratings_log.entries()
    if not entries:
        print("⚠️  Quality ratings log is empty")
        return True

    if args.output:
        path = write_report(entries, args.output, args.format)
        print(f"📊 Report written to: {path}")
    else:
        print(ratings_summary(entries).to_string(index=False))
    return True


def run_export_ratings(args) -> bool:
    """Append logged ratings not yet in the ratings export file."""
    _, ratings_log, _ = open_store(args.store)
    exporter = RatingsExporter(args.export_path)
    exported = exporter.exported_ids()
    ratings = [
        {
            "category": entry.get("category"),
            "clue": entry.get("clue"),
            "answer": entry.get("answer"),
            "rating": entry.get("outcome"),
            "timestamp": entry.get("timestamp"),
            "rating_id": entry.get("rating_id"),
        }
        for entry in ratings_log.entries()
        if not entry.get("rating_id") or entry.get("rating_id") not in exported
    ]
    if not ratings:
        print(f"✅ Nothing new to export to {args.export_path}")
        return True

    count = exporter.export({"type": "batch", "ratings": ratings})
    print(f"📁 {count} ratings exported to {args.export_path}")
    return True


def main(argv=None):
    """Main CLI entry point."""
    config_defaults = get_config_defaults()

    parser = argparse.ArgumentParser(
        description="Clue Forge: adaptive LLM trivia-board generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate --output boards/next.json
  %(prog)s validate --category "Neighborhoods" --clue "..." --answer "What is ...?"
  %(prog)s guidance "World History"
  %(prog)s report --format markdown --output reports/ratings.md
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", help="Also write a debug trace to this file")
    parser.add_argument(
        "--store",
        default=config_defaults["store_path"],
        help=f"Persistent store path (default: {config_defaults['store_path']})",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    generate_parser = subparsers.add_parser("generate", help="Generate a new board")
    generate_parser.add_argument("--board", help="Board JSON currently in play")
    generate_parser.add_argument("--reference", help="Text file with reference material")
    generate_parser.add_argument(
        "--provider",
        default=config_defaults["provider"],
        choices=sorted(UnifiedModelInterface.PROVIDERS),
        help=f"LLM provider (default: {config_defaults['provider']})",
    )
    generate_parser.add_argument(
        "--model",
        default=config_defaults["model"],
        help="Model name (default: provider default)",
    )
    generate_parser.add_argument(
        "--output", default="boards/board.json", help="Where to write the new board"
    )

    validate_parser = subparsers.add_parser("validate", help="Validate a single clue")
    validate_parser.add_argument("--category", required=True, help="Category title")
    validate_parser.add_argument("--clue", required=True, help="Clue text")
    validate_parser.add_argument("--answer", required=True, help="Answer text")

    guidance_parser = subparsers.add_parser(
        "guidance", help="Show difficulty guidance for category titles"
    )
    guidance_parser.add_argument("titles", nargs="+", help="Category titles")

    report_parser = subparsers.add_parser("report", help="Summarize quality ratings")
    report_parser.add_argument("--output", help="Write the report to this file")
    report_parser.add_argument(
        "--format", choices=["csv", "markdown"], default="csv", help="Report format"
    )

    export_parser = subparsers.add_parser(
        "export-ratings", help="Export logged ratings to the ratings export file"
    )
    export_parser.add_argument(
        "--export-path",
        default=config_defaults["export_path"],
        help=f"Export file (default: {config_defaults['export_path']})",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    logging.info(f"COMMAND: {' '.join(sys.argv)}")

    if not args.command:
        parser.print_help()
        return False

    commands = {
        "generate": run_generate,
        "validate": run_validate,
        "guidance": run_guidance,
        "report": run_report,
        "export-ratings": run_export_ratings,
    }

    try:
        return commands[args.command](args)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        return False
    except (OSError, ValueError) as e:
        print(f"❌ {e}")
        logging.error(f"Command {args.command} failed: {e}", exc_info=True)
        return False


def cli():
    """Console script entry point; maps the result of main() to an exit code."""
    success = main()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    cli()
