"""Pytest configuration and fixtures."""

import shutil
import textwrap
from pathlib import Path

import pytest
import yaml

TEMPLATES_DIR = Path(__file__).parent / "templates"


def compose_mapping(text: str):
    """Compose a YAML snippet and return its root mapping node."""
    return yaml.compose(textwrap.dedent(text), Loader=yaml.SafeLoader)


@pytest.fixture
def basic_template_text():
    """Small template covering every option shape."""
    return textwrap.dedent(
        """\
        game: TestGame
        description: A test game
        name: Player1
        requires:
          version: 1.0
        TestGame:
          Option1:
            true: 10
            false: 5
          Option2:
            1: 100
            2: 200
            random: 50
          Option3:
            - A
            - B
          Option4: Value4
        """
    )


@pytest.fixture
def witness_template_path():
    """Path of the bundled The Witness template."""
    return TEMPLATES_DIR / "The Witness.yaml"


@pytest.fixture
def witness_template_text(witness_template_path):
    """Verbatim text of the bundled The Witness template."""
    with open(witness_template_path, "r", encoding="utf-8", newline="") as f:
        return f.read()


@pytest.fixture
def templates_dir(tmp_path):
    """Temporary templates folder holding a copy of the bundled templates."""
    target = tmp_path / "templates"
    shutil.copytree(TEMPLATES_DIR, target)
    return target
