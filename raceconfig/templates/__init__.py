"""Template classification and regeneration."""

from raceconfig.templates.classifier import classify
from raceconfig.templates.generator import DocumentEditor, PlayerYamlGenerator, generate_player_yaml
from raceconfig.templates.parser import TemplateParser, parse_from_file, parse_template
from raceconfig.templates.range_extractor import extract_range

__all__ = [
    "classify",
    "extract_range",
    "DocumentEditor",
    "PlayerYamlGenerator",
    "generate_player_yaml",
    "TemplateParser",
    "parse_from_file",
    "parse_template",
]
