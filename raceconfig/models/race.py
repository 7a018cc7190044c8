"""Race planning models."""

from typing import Any

from pydantic import BaseModel, Field

from raceconfig.models.template import GameTemplate


class Racer(BaseModel):
    """A participant playing one game."""

    name: str = Field(min_length=1, description="Player name written into the generated file")
    game: str = Field(description="Game name; matches GameTemplate.game_name")
    tags: dict[str, str] = Field(default_factory=dict, description="Optional metadata")
    selections: dict[str, Any] = Field(
        default_factory=dict, description="Option key path -> selected value"
    )


class Team(BaseModel):
    """A named group of racers."""

    name: str = Field(min_length=1, description="Team name, also its output folder")
    racers: list[Racer] = Field(default_factory=list, description="Racers in this team")


class RacePlan(BaseModel):
    """Teams, leftover racers and the templates they play."""

    teams: list[Team] = Field(default_factory=list, description="All teams")
    unassigned_racers: list[Racer] = Field(default_factory=list, description="Racers not yet placed")
    templates_by_game: dict[str, GameTemplate] = Field(
        default_factory=dict, description="Game name -> template"
    )
