"""Application (folder) configuration."""

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from raceconfig.config import DEFAULT_OUTPUT_DIR, DEFAULT_TEMPLATES_DIR

if TYPE_CHECKING:
    from raceconfig.persistence.app_config_store import AppConfigStore


class AppConfig(BaseModel):
    """Folders remembered between runs."""

    templates_path: Optional[str] = Field(
        default=None, description="Folder containing the YAML templates"
    )
    output_path: Optional[str] = Field(default=None, description="Folder receiving exported files")

    def get_templates_path(self) -> str:
        """Templates folder, with the default if not set."""
        return self.templates_path or DEFAULT_TEMPLATES_DIR

    def get_output_path(self) -> str:
        """Output folder, with the default if not set."""
        return self.output_path or DEFAULT_OUTPUT_DIR


class AppConfigManager:
    """Manages the application config and persists every update."""

    def __init__(self, store: Optional["AppConfigStore"] = None) -> None:
        """Initialize from the store, or with defaults when there is none."""
        self._store = store
        self._config = store.load() if store else AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current config."""
        return self._config

    def update_config(self, new_config: AppConfig) -> None:
        """Update configuration and save it."""
        self._config = new_config
        if self._store is not None:
            self._store.save(new_config)
