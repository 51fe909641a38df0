"""
Configuration manager for persisting the rotation config.

Saves/loads AppConfig to/from <storage_dir>/config.json. A missing or
corrupt file is replaced by the defaults, which are written back so the
user has something to edit.
"""

import json
from pathlib import Path
from typing import Optional

from .app_config import AppConfig, ConfigInvalid
from .state_store import write_json_atomic


class ConfigManager:
    """
    Manages persistence of the rotation config.

    Saves to storage/config.json
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file (default: storage/config.json)
        """
        if config_path is None:
            config_path = "storage/config.json"

        self.config_path = Path(config_path)

    def save_config(self, config: AppConfig) -> bool:
        """
        Save configuration to JSON.

        Returns:
            True if saved successfully
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            write_json_atomic(self.config_path, config.to_dict())
            return True
        except (OSError, TypeError, ValueError) as e:
            print(f"[CONFIG] ERROR: Failed to save config: {e}")
            return False

    def load_config(self) -> AppConfig:
        """
        Load configuration from JSON.

        Returns:
            Stored AppConfig, or the default config (persisted) if the file
            is missing or unusable
        """
        if not self.config_path.exists():
            return self._reset_to_default()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                return AppConfig.from_dict(json.load(f))
        except (json.JSONDecodeError, UnicodeDecodeError, IOError, ConfigInvalid) as e:
            print(f"[CONFIG] WARNING: Invalid config, restoring defaults: {e}")
            return self._reset_to_default()

    def _reset_to_default(self) -> AppConfig:
        config = AppConfig()
        self.save_config(config)
        return config
