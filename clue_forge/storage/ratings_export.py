"""
Durable ratings export.

Accepts the export payloads produced by a game session and appends them to a
JSON array on disk:

    {"type": "single", "rating": {...}}
    {"type": "batch", "ratings": [{...}, ...]}
    [{...}, ...]            # bare list, treated as a batch

Each rating entry has the form {category, clue, answer, rating, timestamp,
rating_id}; rating_id lets callers skip ratings that were already exported.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Set, Union

logger = logging.getLogger(__name__)


class RatingsExporter:
    """Appends exported ratings to a JSON file, creating it on first use."""

    def __init__(self, export_path: Union[str, Path] = "json/ratings-export.json"):
        self.export_path = Path(export_path)

    def export(self, payload: Union[Dict[str, Any], List[Dict[str, Any]]]) -> int:
        """
        Append one payload to the export file.

        Args:
            payload: Single, batch or bare-list payload

        Returns:
            Number of ratings written

        Raises:
            ValueError: If the payload matches none of the accepted shapes
        """
        if isinstance(payload, list):
            ratings = payload
        elif isinstance(payload, dict) and payload.get("type") == "single" and payload.get("rating"):
            ratings = [payload["rating"]]
        elif isinstance(payload, dict) and payload.get("type") == "batch" and isinstance(
            payload.get("ratings"), list
        ):
            ratings = payload["ratings"]
        else:
            raise ValueError("Invalid request format")

        existing = self.load()
        existing.extend(ratings)

        try:
            self.export_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.export_path, "w", encoding="utf-8") as f:
                json.dump(existing, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Error saving ratings to {self.export_path}: {e}")
            raise

        logger.info(f"{len(ratings)} ratings saved to {self.export_path}")
        return len(ratings)

    def load(self) -> List[Dict[str, Any]]:
        """Read the export file, treating missing or unreadable content as empty."""
        if not self.export_path.exists():
            return []
        try:
            with open(self.export_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading ratings file {self.export_path}: {e}")
            return []
        return data if isinstance(data, list) else []

    def exported_ids(self) -> Set[str]:
        """rating_id values already present in the export file."""
        return {
            entry["rating_id"]
            for entry in self.load()
            if isinstance(entry, dict) and entry.get("rating_id")
        }
