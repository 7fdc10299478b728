"""
JSON file persistence for the key-value store.

All logical keys live in a single JSON document. A missing or unreadable file
is treated as an empty store; the file is rewritten in full on every save.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Union

from .base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(BaseKeyValueStore):
    """
    Key-value store backed by one JSON file on disk.

    Attributes:
        path: Location of the JSON document
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        logger.info(f"JsonFileStore initialized with file: {self.path}")

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"Store file {self.path} does not exist yet")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read store file {self.path}, treating as empty: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Store file {self.path} is not a JSON object, treating as empty")
            return {}

        return data

    def save(self, key: str, value: Any) -> None:
        data = self.load()
        data[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write key {key} to {self.path}: {e}")
            raise

        logger.debug(f"Saved key {key} to {self.path}")
