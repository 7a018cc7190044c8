"""Data models module for RaceConfig."""

# Templates
from raceconfig.models.template import GameTemplate, OptionType, RandomizerOption, get_option

# Races
from raceconfig.models.race import RacePlan, Racer, Team

__all__ = [
    # Templates
    "GameTemplate",
    "OptionType",
    "RandomizerOption",
    "get_option",
    # Races
    "Racer",
    "Team",
    "RacePlan",
]
