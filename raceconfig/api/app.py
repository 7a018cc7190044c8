"""Flask API application."""

import logging
from typing import Optional

from flask import Flask, jsonify, request
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from raceconfig.api.app_config import AppConfig, AppConfigManager
from raceconfig.config import DEFAULT_API_DEBUG, DEFAULT_API_HOST, DEFAULT_API_PORT, DEFAULT_PLAYER_NAME
from raceconfig.errors import SelectionError, TemplateError
from raceconfig.models.race import RacePlan, Racer, Team
from raceconfig.models.template import GameTemplate
from raceconfig.persistence.app_config_store import AppConfigStore
from raceconfig.persistence.template_store import TemplateStore
from raceconfig.race.services import apply_selections, export_race_plan
from raceconfig.security.input_sanitizer import InputSanitizer
from raceconfig.templates.generator import PlayerYamlGenerator
from raceconfig.templates.parser import TemplateParser


logging.basicConfig(level=logging.DEBUG, format='[%(name)-19s - %(levelname)5s] %(message)s')

app = Flask("flask.raceconfig")


@app.before_request
def log_request_info():
    app.logger.info('Access to: %s from %s (%s)',
        request.url,
        request.headers.get('X-Forwarded-For', request.remote_addr),
        request.headers.get('User-Agent'))


# Error handlers for API routes
@app.errorhandler(HTTPException)
def handle_http_exception(e: HTTPException):
    """Return JSON instead of HTML for HTTP errors in API routes."""
    if request.path.startswith("/api/"):
        response = e.get_response()
        response.data = jsonify(
            {
                "error": e.name,
                "code": e.code,
                "description": e.description,
            }
        ).data
        response.content_type = "application/json"
        return response
    return e


@app.errorhandler(SelectionError)
def handle_selection_error(e: SelectionError):
    """Selections that do not fit their option are client errors."""
    return jsonify({"error": "Invalid selection", "message": str(e)}), 400


@app.errorhandler(TemplateError)
def handle_template_error(e: TemplateError):
    """Templates that cannot be interpreted."""
    app.logger.warning(f"Template error: {e}")
    body = {"error": "Invalid template", "message": str(e)}
    line = getattr(e, "line", None)
    if line is not None:
        body["line"] = line
        body["column"] = e.column
    return jsonify(body), 422


@app.errorhandler(500)
def handle_internal_error(e: Exception):
    """Handle 500 errors."""
    if request.path.startswith("/api/"):
        app.logger.error(f"Internal server error: {e}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
    return "Internal Server Error", 500


_app_config_manager = AppConfigManager(AppConfigStore())
_input_sanitizer = InputSanitizer()


def _template_store() -> TemplateStore:
    """Store over the currently configured templates folder."""
    return TemplateStore(_app_config_manager.config.get_templates_path())


def _json_body() -> tuple[Optional[dict], Optional[tuple]]:
    """Read the JSON object body, or an error response."""
    if not request.is_json:
        return None, (jsonify({"error": "Content-Type must be application/json"}), 400)
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return None, (jsonify({"error": "No data provided"}), 400)
    return data, None


def _serialize_template(template: GameTemplate, file_name: Optional[str] = None) -> dict:
    """Convert a template to a JSON-friendly dict."""
    serialized = template.model_dump(mode="json")
    if file_name is not None:
        serialized["file"] = file_name
    return serialized


@app.route("/api/config", methods=["GET"])
def get_app_config():
    """Get the remembered folders."""
    config = _app_config_manager.config
    return jsonify(
        {
            "config": config.model_dump(),
            "templates_path": config.get_templates_path(),
            "output_path": config.get_output_path(),
        }
    )


@app.route("/api/config", methods=["PUT"])
def update_app_config():
    """Remember new folders."""
    data, error = _json_body()
    if error:
        return error

    try:
        new_config = AppConfig(**data)
    except ValidationError as e:
        return jsonify({"error": "Invalid configuration", "message": str(e)}), 400

    _app_config_manager.update_config(new_config)
    return jsonify({"success": True, "config": _app_config_manager.config.model_dump()})


@app.route("/api/templates", methods=["GET"])
def list_templates():
    """List template files in the configured folder."""
    store = _template_store()
    return jsonify(
        {
            "templates_path": str(store.templates_dir),
            "templates": [{"file": path.name} for path in store.discover()],
        }
    )


@app.route("/api/templates/<file_name>", methods=["GET"])
def get_template(file_name: str):
    """Parse one template file of the configured folder."""
    store = _template_store()
    path = store.resolve(file_name)
    if path is None:
        return jsonify({"error": "Template not found"}), 404
    return jsonify({"template": _serialize_template(store.load(path), path.name)})


@app.route("/api/templates/parse", methods=["POST"])
def parse_posted_template():
    """Parse template text sent by the client."""
    data, error = _json_body()
    if error:
        return error

    raw = data.get("yaml")
    if not isinstance(raw, str) or not raw.strip():
        return jsonify({"error": "Template text is required"}), 400

    return jsonify({"template": _serialize_template(TemplateParser.parse(raw, source="request"))})


@app.route("/api/generate", methods=["POST"])
def generate_player_file():
    """Generate a player file from a template and selections."""
    data, error = _json_body()
    if error:
        return error

    file_name = data.get("file")
    raw = data.get("yaml")
    selections = data.get("selections") or {}
    if not isinstance(selections, dict):
        return jsonify({"error": "selections must be an object"}), 400

    if file_name:
        store = _template_store()
        path = store.resolve(file_name)
        if path is None:
            return jsonify({"error": "Template not found"}), 404
        template = store.load(path)
    elif isinstance(raw, str) and raw.strip():
        template = TemplateParser.parse(raw, source="request")
    else:
        return jsonify({"error": "Either file or yaml is required"}), 400

    player_name = data.get("player_name") or DEFAULT_PLAYER_NAME
    if not isinstance(player_name, str):
        return jsonify({"error": "player_name must be a string"}), 400
    player_name = _input_sanitizer.sanitize(player_name)
    is_safe, error_msg = _input_sanitizer.is_safe(player_name)
    if not is_safe:
        return jsonify({"error": f"Input validation failed: {error_msg}"}), 400

    selected = apply_selections(template, selections)
    content = PlayerYamlGenerator.generate(selected, player_name)
    return jsonify({"game": template.game_name, "player_name": player_name, "yaml": content})


@app.route("/api/races/export", methods=["POST"])
def export_race():
    """Deal racers onto teams and write their player files."""
    data, error = _json_body()
    if error:
        return error

    team_names = data.get("teams") or []
    racer_data = data.get("racers") or []
    if not isinstance(team_names, list) or not isinstance(racer_data, list):
        return jsonify({"error": "teams and racers must be lists"}), 400
    if not team_names:
        return jsonify({"error": "At least one team is required"}), 400

    try:
        plan = RacePlan(
            teams=[Team(name=str(name)) for name in team_names],
            unassigned_racers=[Racer(**item) for item in racer_data],
            templates_by_game=_template_store().load_all(),
        )
    except (ValidationError, TypeError) as e:
        return jsonify({"error": "Invalid race data", "message": str(e)}), 400

    output_dir = data.get("output_dir") or _app_config_manager.config.get_output_path()
    files = export_race_plan(output_dir, plan)
    return jsonify(
        {
            "success": True,
            "output_dir": str(output_dir),
            "teams": [
                {"name": team.name, "racers": [racer.name for racer in team.racers]} for team in plan.teams
            ],
            "files": files,
        }
    )


if __name__ == "__main__":
    app.run(host=DEFAULT_API_HOST, port=DEFAULT_API_PORT, debug=DEFAULT_API_DEBUG)
