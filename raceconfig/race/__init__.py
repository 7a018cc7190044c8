"""Race planning: teams, racers and exported player files."""

from raceconfig.models.race import RacePlan, Racer, Team
from raceconfig.race.services import (
    apply_selections,
    assign_round_robin,
    export_player_yamls,
    export_race_plan,
    plan_player_files,
    sanitize_filename,
)

__all__ = [
    "Racer",
    "Team",
    "RacePlan",
    "apply_selections",
    "assign_round_robin",
    "export_player_yamls",
    "export_race_plan",
    "plan_player_files",
    "sanitize_filename",
]
