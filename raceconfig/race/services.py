"""Team assignment and per-team export of player files."""

import logging
from pathlib import Path
from typing import Union

from raceconfig.errors import SelectionError
from raceconfig.models.race import RacePlan, Racer, Team
from raceconfig.models.template import GameTemplate
from raceconfig.persistence.template_store import write_text
from raceconfig.security.input_sanitizer import InputSanitizer, sanitize_filename
from raceconfig.templates.generator import PlayerYamlGenerator

logger = logging.getLogger(__name__.split(".")[-1])

_sanitizer = InputSanitizer()


def assign_round_robin(teams: list[Team], racers: list[Racer]) -> None:
    """Deal racers onto teams in order: racer i joins team i % len(teams)."""
    if not teams:
        logger.warning(f"No teams to assign {len(racers)} racers to")
        return
    for index, racer in enumerate(racers):
        teams[index % len(teams)].racers.append(racer)


def apply_selections(template: GameTemplate, selections: dict) -> GameTemplate:
    """
    Copy a template and store the given selections on the copy.

    Args:
        template: Parsed template; left untouched
        selections: Option key path -> selected value

    Returns:
        A deep copy carrying the selections

    Raises:
        SelectionError: If a key path is unknown or a value does not fit
    """
    selected = template.model_copy(deep=True)
    for key_path, value in selections.items():
        option = selected.get_option(key_path)
        if option is None:
            raise SelectionError(f"Unknown option '{key_path}'", source=template.game_name)
        option.select(value)
    return selected


def _unique_file_name(stem: str, taken: set[str]) -> str:
    file_name = f"{stem}.yaml"
    counter = 2
    # Case-insensitive file systems treat Bob.yaml and bob.yaml as one file
    while file_name.lower() in taken:
        file_name = f"{stem} ({counter}).yaml"
        counter += 1
    taken.add(file_name.lower())
    return file_name


def plan_player_files(
    output_dir: Union[str, Path],
    teams: list[Team],
    templates: dict[str, GameTemplate],
) -> list[tuple[Path, str]]:
    """
    Generate every player file of a race without touching the disk.

    Racers whose game has no template are logged and skipped. Racers whose
    names clean up to the same file name in one team get numbered files.

    Args:
        output_dir: Root output folder
        teams: Teams with their racers
        templates: Game name -> template

    Returns:
        (path, content) pairs in team and racer order

    Raises:
        SelectionError: If any racer carries an unusable selection
        ValueError: If a team folder would land outside the output folder
    """
    root = Path(output_dir)
    planned = []
    taken_by_dir: dict[Path, set[str]] = {}
    for team in teams:
        team_dir = root / (sanitize_filename(team.name) or "team")
        if not team_dir.resolve().is_relative_to(root.resolve()):
            raise ValueError(f"Team folder for '{team.name}' is outside {root}")
        taken = taken_by_dir.setdefault(team_dir, set())
        for racer in team.racers:
            template = templates.get(racer.game)
            if template is None:
                logger.warning(f"No template for {racer.game}; skipping racer {racer.name}")
                continue

            player_name = _sanitizer.sanitize(racer.name)
            content = PlayerYamlGenerator.generate(apply_selections(template, racer.selections), player_name)
            file_name = _unique_file_name(sanitize_filename(player_name) or "player", taken)
            planned.append((team_dir / file_name, content))
    return planned


def export_player_yamls(
    output_dir: Union[str, Path],
    teams: list[Team],
    templates: dict[str, GameTemplate],
) -> list[str]:
    """
    Write one player file per racer into ``<output_dir>/<team>/<racer>.yaml``.

    Every file is generated before the first one is written, so a bad
    selection leaves the output folder untouched.

    Returns:
        Paths of the written files
    """
    planned = plan_player_files(output_dir, teams, templates)
    written = [write_text(path, content) for path, content in planned]
    logger.info(f"Exported {len(written)} player files to {output_dir}")
    return written


def export_race_plan(output_dir: Union[str, Path], plan: RacePlan) -> list[str]:
    """Deal the plan's unassigned racers onto its teams, then export every team."""
    if plan.teams:
        assign_round_robin(plan.teams, plan.unassigned_racers)
        plan.unassigned_racers = []
    return export_player_yamls(output_dir, plan.teams, plan.templates_by_game)
