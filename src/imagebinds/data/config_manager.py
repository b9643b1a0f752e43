"""Configuration manager - handles user settings."""

import json
from pathlib import Path
from typing import Any, Dict, Optional
from loguru import logger

from ..utils.constants import CONFIG_FILE, DATA_FILE


class ConfigManager:
    """Manages application configuration.

    Loads user settings from a JSON file and fills in defaults for
    missing settings. Keybindings and scan timing are fixed and not part
    of the configuration.

    Attributes:
        config_file: Path to user config file
        config: Current configuration dictionary
    """

    DEFAULTS: Dict[str, Any] = {
        "storage": {
            "data_file": str(DATA_FILE),
        },
        "logging": {
            "debug": False,
        },
    }

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to config file (uses default if None)
        """
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self.load()

        logger.info(f"ConfigManager initialized: {self.config_file}")

    def load(self) -> bool:
        """Load configuration from file.

        Returns:
            True if loaded successfully
        """
        try:
            if self.config_file.exists():
                with open(self.config_file, "r", encoding="utf-8") as f:
                    user_config = json.load(f)
                if not isinstance(user_config, dict):
                    raise ValueError("top level of config must be an object")
                logger.info("Configuration loaded")
            else:
                user_config = {}
                logger.info("Using default configuration")

            self._config = self._merge_with_defaults(user_config, self.DEFAULTS)
            return True

        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            self._config = self._merge_with_defaults({}, self.DEFAULTS)
            return False

    def _merge_with_defaults(
        self,
        config: Dict[str, Any],
        defaults: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Merge config with defaults, keeping user values.

        Args:
            config: User configuration
            defaults: Default configuration

        Returns:
            Merged configuration
        """
        result = {
            key: dict(value) if isinstance(value, dict) else value
            for key, value in defaults.items()
        }

        for key, value in config.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_with_defaults(value, result[key])
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key.

        Args:
            key: Key in format "section.setting" (e.g., "storage.data_file")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self._config
        for part in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default

        return value

    @property
    def config(self) -> Dict[str, Any]:
        """Get full configuration dictionary."""
        return self._config.copy()
