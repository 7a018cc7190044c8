"""Tests for the Flask API."""

import pytest
import yaml

from raceconfig.api import app as app_module
from raceconfig.api.app_config import AppConfig, AppConfigManager
from raceconfig.persistence.app_config_store import AppConfigStore


@pytest.fixture
def client(tmp_path, templates_dir, monkeypatch):
    """Test client with config stored under tmp_path and the bundled templates."""
    manager = AppConfigManager(AppConfigStore(tmp_path / "cfg"))
    manager.update_config(AppConfig(templates_path=str(templates_dir), output_path=str(tmp_path / "out")))
    monkeypatch.setattr(app_module, "_app_config_manager", manager)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as client:
        yield client


class TestConfigEndpoints:
    """Test suite for /api/config."""

    def test_get_config(self, client, templates_dir):
        """Test reading the remembered folders."""
        response = client.get("/api/config")
        assert response.status_code == 200
        assert response.get_json()["templates_path"] == str(templates_dir)

    def test_put_config(self, client, tmp_path):
        """Test remembering new folders."""
        response = client.put("/api/config", json={"templates_path": str(tmp_path)})
        assert response.status_code == 200
        assert response.get_json()["config"]["templates_path"] == str(tmp_path)
        assert AppConfigStore(tmp_path / "cfg").load().templates_path == str(tmp_path)

    def test_put_config_invalid(self, client):
        """Test that bad values are rejected."""
        response = client.put("/api/config", json={"templates_path": 5})
        assert response.status_code == 400

    def test_put_config_requires_json(self, client):
        """Test that a non-JSON body is rejected."""
        response = client.put("/api/config", data="x")
        assert response.status_code == 400


class TestTemplateEndpoints:
    """Test suite for /api/templates."""

    def test_list_templates(self, client):
        """Test listing the configured folder."""
        response = client.get("/api/templates")
        assert response.status_code == 200
        assert response.get_json()["templates"] == [{"file": "The Witness.yaml"}]

    def test_get_template(self, client):
        """Test parsing one file."""
        response = client.get("/api/templates/The%20Witness.yaml")
        assert response.status_code == 200
        template = response.get_json()["template"]
        assert template["game_name"] == "The Witness"
        assert template["file"] == "The Witness.yaml"
        lasers = next(o for o in template["options"] if o["display_name"] == "mountain_lasers")
        assert lasers["type"] == "numeric_weighted"
        assert (lasers["min"], lasers["max"]) == (1, 11)

    def test_get_unknown_template(self, client):
        """Test that unknown files are 404."""
        response = client.get("/api/templates/Nope.yaml")
        assert response.status_code == 404

    def test_parse_posted_template(self, client, basic_template_text):
        """Test parsing text from the request."""
        response = client.post("/api/templates/parse", json={"yaml": basic_template_text})
        assert response.status_code == 200
        assert len(response.get_json()["template"]["options"]) == 4

    def test_parse_invalid_template(self, client):
        """Test that template errors map to 422."""
        response = client.post("/api/templates/parse", json={"yaml": "name: nobody\n"})
        assert response.status_code == 422
        assert "game" in response.get_json()["message"]

    def test_parse_syntax_error_has_position(self, client):
        """Test that syntax errors report line and column."""
        response = client.post("/api/templates/parse", json={"yaml": "game: [oops\n"})
        assert response.status_code == 422
        assert response.get_json()["line"] is not None

    def test_parse_requires_text(self, client):
        """Test that a missing yaml field is rejected."""
        response = client.post("/api/templates/parse", json={"other": 1})
        assert response.status_code == 400


class TestGenerateEndpoint:
    """Test suite for /api/generate."""

    def test_generate_from_file(self, client):
        """Test generating from a configured template with selections."""
        response = client.post(
            "/api/generate",
            json={
                "file": "The Witness.yaml",
                "player_name": "  Alice ",
                "selections": {"The Witness.mountain_lasers": 9},
            },
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["player_name"] == "Alice"
        data = yaml.safe_load(body["yaml"])
        assert data["name"] == "Alice"
        assert data["The Witness"]["mountain_lasers"][9] == 50

    def test_generate_from_text_default_name(self, client, basic_template_text):
        """Test generating from posted text with the default player name."""
        response = client.post("/api/generate", json={"yaml": basic_template_text})
        assert response.status_code == 200
        assert yaml.safe_load(response.get_json()["yaml"])["name"] == "Runner01"

    def test_generate_bad_selection(self, client):
        """Test that selection errors map to 400."""
        response = client.post(
            "/api/generate",
            json={"file": "The Witness.yaml", "selections": {"The Witness.mountain_lasers": 50}},
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid selection"

    def test_generate_unknown_file(self, client):
        """Test that unknown files are 404."""
        response = client.post("/api/generate", json={"file": "Nope.yaml"})
        assert response.status_code == 404

    def test_generate_needs_template(self, client):
        """Test that either file or yaml is required."""
        response = client.post("/api/generate", json={"player_name": "Alice"})
        assert response.status_code == 400

    def test_generate_rejects_unusable_name(self, client):
        """Test that names without file name characters are rejected."""
        response = client.post("/api/generate", json={"file": "The Witness.yaml", "player_name": "???"})
        assert response.status_code == 400


class TestExportEndpoint:
    """Test suite for /api/races/export."""

    def test_export(self, client, tmp_path):
        """Test round-robin assignment and written files."""
        response = client.post(
            "/api/races/export",
            json={
                "teams": ["Red", "Blue"],
                "racers": [
                    {"name": "Alice", "game": "The Witness"},
                    {"name": "Bob", "game": "The Witness"},
                    {"name": "Carol", "game": "The Witness"},
                ],
            },
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["teams"] == [
            {"name": "Red", "racers": ["Alice", "Carol"]},
            {"name": "Blue", "racers": ["Bob"]},
        ]
        assert len(body["files"]) == 3
        assert (tmp_path / "out" / "Blue" / "Bob.yaml").exists()

    def test_export_dot_team_stays_in_output(self, client, tmp_path):
        """Test that a team called '..' writes inside the output folder."""
        response = client.post(
            "/api/races/export",
            json={"teams": [".."], "racers": [{"name": "Bob", "game": "The Witness"}]},
        )
        assert response.status_code == 200
        assert (tmp_path / "out" / "team" / "Bob.yaml").exists()
        assert not (tmp_path / "Bob.yaml").exists()

    def test_export_bad_selection_writes_nothing(self, client, tmp_path):
        """Test that one bad selection fails the export before any file is written."""
        response = client.post(
            "/api/races/export",
            json={
                "teams": ["Red"],
                "racers": [
                    {"name": "Alice", "game": "The Witness"},
                    {"name": "Bob", "game": "The Witness", "selections": {"The Witness.mountain_lasers": 99}},
                ],
            },
        )
        assert response.status_code == 400
        assert not (tmp_path / "out").exists()

    def test_export_requires_teams(self, client):
        """Test that at least one team is required."""
        response = client.post("/api/races/export", json={"racers": [{"name": "A", "game": "G"}]})
        assert response.status_code == 400

    def test_export_invalid_racer(self, client):
        """Test that malformed racers are rejected."""
        response = client.post("/api/races/export", json={"teams": ["Red"], "racers": [{"name": ""}]})
        assert response.status_code == 400


class TestErrorHandling:
    """Test suite for JSON error bodies."""

    def test_unknown_api_route_is_json(self, client):
        """Test that 404s under /api are JSON."""
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json()["code"] == 404
