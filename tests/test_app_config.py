"""Tests for AppConfig and its store."""

import json

from raceconfig.api.app_config import AppConfig, AppConfigManager
from raceconfig.config import DEFAULT_APP_CONFIG_FILE, DEFAULT_OUTPUT_DIR, DEFAULT_TEMPLATES_DIR
from raceconfig.persistence.app_config_store import AppConfigStore


class TestAppConfig:
    """Test suite for AppConfig."""

    def test_app_config_defaults(self):
        """Test AppConfig with defaults."""
        config = AppConfig()
        assert config.templates_path is None
        assert config.output_path is None
        assert config.get_templates_path() == DEFAULT_TEMPLATES_DIR
        assert config.get_output_path() == DEFAULT_OUTPUT_DIR

    def test_app_config_custom(self):
        """Test AppConfig with custom values."""
        config = AppConfig(templates_path="/races/templates", output_path="/races/out")
        assert config.get_templates_path() == "/races/templates"
        assert config.get_output_path() == "/races/out"


class TestAppConfigStore:
    """Test suite for AppConfigStore."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test loading before anything was saved."""
        assert AppConfigStore(tmp_path).load() == AppConfig()

    def test_save_and_load(self, tmp_path):
        """Test that a saved config is read back."""
        store = AppConfigStore(tmp_path / "cfg")
        config = AppConfig(templates_path="/t")

        path = store.save(config)

        assert path == str(tmp_path / "cfg" / DEFAULT_APP_CONFIG_FILE)
        with open(path, "r", encoding="utf-8") as f:
            assert json.load(f) == {"templates_path": "/t", "output_path": None}
        assert store.load() == config

    def test_broken_file_gives_defaults(self, tmp_path):
        """Test that unreadable content is ignored."""
        (tmp_path / DEFAULT_APP_CONFIG_FILE).write_text("{not json", encoding="utf-8")
        assert AppConfigStore(tmp_path).load() == AppConfig()

    def test_wrong_shape_gives_defaults(self, tmp_path):
        """Test that content of the wrong shape is ignored."""
        (tmp_path / DEFAULT_APP_CONFIG_FILE).write_text('{"templates_path": 5}', encoding="utf-8")
        assert AppConfigStore(tmp_path).load() == AppConfig()


class TestAppConfigManager:
    """Test suite for AppConfigManager."""

    def test_manager_without_store(self):
        """Test AppConfigManager with defaults."""
        manager = AppConfigManager()
        assert isinstance(manager.config, AppConfig)

    def test_manager_update_persists(self, tmp_path):
        """Test that updates are saved through the store."""
        manager = AppConfigManager(AppConfigStore(tmp_path))
        manager.update_config(AppConfig(output_path="/o"))

        assert manager.config.output_path == "/o"
        assert AppConfigManager(AppConfigStore(tmp_path)).config.output_path == "/o"
