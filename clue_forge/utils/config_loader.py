"""
Configuration Management System for Clue Forge.

This module provides centralized configuration management for board generation
and the adaptive difficulty engine. It loads parameters from clue_forge_config.txt
with type-safe parsing and falls back to default values for every component.

Key Features:
- Type-safe parameter parsing (string, int, float, bool)
- Hierarchical configuration: CLI args → Config file → Environment → Defaults
- Global config singleton via get_config()
- Automatic project root detection

The configuration system supports:
- LLM provider settings (provider, model, API keys, timeouts)
- Generation retry policy (attempt count, initial backoff delay)
- Persistence locations (key-value store file, ratings export file)
- Guidance synthesis (number of example clues per tier)
"""

import logging
from pathlib import Path
from typing import Dict, Any, Union

logger = logging.getLogger(__name__)

__all__ = ["ConfigLoader", "get_config", "reload_config"]


class ConfigLoader:
    """
    Loads and manages configuration parameters for the trivia engine.

    Provides type-safe access to configuration values with defaults.
    """

    def __init__(self, config_file: str = "clue_forge_config.txt"):
        """
        Initialize configuration loader.

        Args:
            config_file: Path to configuration file relative to project root
        """
        self.config_file = config_file
        self.config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """Load configuration from file."""
        current_path = Path(__file__).parent
        config_path = None

        # Search up the directory tree
        for _ in range(5):
            potential_path = current_path / self.config_file
            if potential_path.exists():
                config_path = potential_path
                break
            current_path = current_path.parent

        self._load_defaults()

        if config_path is None:
            logger.warning(f"Config file {self.config_file} not found, using defaults")
            return

        logger.info(f"Loading configuration from {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()

                    if not line or line.startswith("#"):
                        continue

                    if "=" not in line:
                        logger.warning(f"Invalid config line {line_num}: {line}")
                        continue

                    key, value = line.split("=", 1)
                    self.config[key.strip()] = self._parse_value(value.strip())

            logger.info(f"Loaded {len(self.config)} configuration parameters")

        except OSError as e:
            logger.error(f"Failed to load config: {e}")
            self._load_defaults()

    def _parse_value(self, value: str) -> Union[str, int, float, bool]:
        """Parse string value to appropriate Python type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        if value.replace(".", "", 1).replace("-", "", 1).isdigit():
            if "." in value:
                return float(value)
            return int(value)

        return value

    def _load_defaults(self):
        """Load default configuration values."""
        self.config = {
            # Provider
            "DEFAULT_PROVIDER": "openai",
            "DEFAULT_MODEL": "",
            "REQUEST_TIMEOUT_SECONDS": 60,
            "DEFAULT_TEMPERATURE": 0.7,
            "MAX_OUTPUT_TOKENS": 4000,
            # Generation retries
            "MAX_GENERATION_ATTEMPTS": 4,
            "RETRY_INITIAL_DELAY": 1.0,
            # Persistence
            "STORE_PATH": ".clue_forge/store.json",
            "RATINGS_EXPORT_PATH": "json/ratings-export.json",
            "EXPORT_RATINGS": False,
            # Guidance
            "MAX_GUIDANCE_EXAMPLES": 2,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration parameter name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self.config.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get integer configuration value."""
        value = self.get(key, default)
        try:
            return int(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid integer value for {key}: {value}")
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get float configuration value."""
        value = self.get(key, default)
        try:
            return float(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid float value for {key}: {value}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get boolean configuration value."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return default

    def get_string(self, key: str, default: str = "") -> str:
        """Get string configuration value."""
        value = self.get(key, default)
        return str(value) if value is not None else default

    def get_generation_config(self) -> Dict[str, Any]:
        """Get board generation configuration parameters."""
        return {
            "max_generation_attempts": self.get_int("MAX_GENERATION_ATTEMPTS", 4),
            "retry_initial_delay": self.get_float("RETRY_INITIAL_DELAY", 1.0),
            "max_output_tokens": self.get_int("MAX_OUTPUT_TOKENS", 4000),
            "temperature": self.get_float("DEFAULT_TEMPERATURE", 0.7),
            "max_guidance_examples": self.get_int("MAX_GUIDANCE_EXAMPLES", 2),
        }

    def get_cli_defaults(self) -> Dict[str, Any]:
        """Get CLI default values."""
        return {
            "provider": self.get_string("DEFAULT_PROVIDER", "openai"),
            "model": self.get_string("DEFAULT_MODEL", ""),
            "store_path": self.get_string("STORE_PATH", ".clue_forge/store.json"),
            "export_path": self.get_string(
                "RATINGS_EXPORT_PATH", "json/ratings-export.json"
            ),
        }


# Global configuration instance
_config = None


def get_config() -> ConfigLoader:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = ConfigLoader()
    return _config


def reload_config():
    """Reload configuration from file."""
    global _config
    _config = ConfigLoader()
    return _config
