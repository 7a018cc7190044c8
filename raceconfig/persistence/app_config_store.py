"""Remembered folders, kept as JSON between runs."""

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from raceconfig.api.app_config import AppConfig
from raceconfig.config import DEFAULT_APP_CONFIG_DIR, DEFAULT_APP_CONFIG_FILE
from raceconfig.persistence.template_store import write_text

logger = logging.getLogger(__name__.split(".")[-1])


class AppConfigStore:
    """Loads and saves the application config file."""

    def __init__(self, config_dir: Union[str, Path] = DEFAULT_APP_CONFIG_DIR):
        """
        Initialize config store.

        Args:
            config_dir: Directory holding the config file
        """
        self.config_dir = Path(config_dir)
        self.config_path = self.config_dir / DEFAULT_APP_CONFIG_FILE

    def load(self) -> AppConfig:
        """
        Load the config; defaults when the file is missing or unreadable.

        Returns:
            AppConfig
        """
        if not self.config_path.exists():
            return AppConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return AppConfig.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
            return AppConfig()

    def save(self, config: AppConfig) -> str:
        """
        Save the config as indented JSON.

        Returns:
            Path to the written file
        """
        return write_text(self.config_path, config.model_dump_json(indent=2))
