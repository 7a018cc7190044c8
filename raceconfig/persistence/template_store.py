"""Template folder access and output file writing."""

import logging
from pathlib import Path
from typing import Optional, Union

from raceconfig.config import DEFAULT_TEMPLATE_SUFFIXES, DEFAULT_TEMPLATES_DIR
from raceconfig.errors import TemplateError
from raceconfig.models.template import GameTemplate
from raceconfig.templates.parser import TemplateParser

logger = logging.getLogger(__name__.split(".")[-1])


def read_text(path: Union[str, Path]) -> str:
    """Read a file verbatim (line endings untouched)."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: Union[str, Path], content: str) -> str:
    """
    Write a file atomically, creating parent directories.

    Args:
        path: Destination file
        content: Text to write

    Returns:
        Path of the written file
    """
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = file_path.with_suffix(file_path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

        # Atomic rename
        temp_path.replace(file_path)
        logger.debug(f"Wrote {file_path}")
        return str(file_path)
    except OSError as e:
        logger.error(f"Error writing {file_path}: {e}", exc_info=True)
        raise


class TemplateStore:
    """Finds and loads the template files of one folder."""

    def __init__(
        self,
        templates_dir: Union[str, Path] = DEFAULT_TEMPLATES_DIR,
        suffixes: tuple[str, ...] = DEFAULT_TEMPLATE_SUFFIXES,
    ):
        """
        Initialize template store.

        Args:
            templates_dir: Folder holding the template files
            suffixes: File suffixes treated as templates
        """
        self.templates_dir = Path(templates_dir)
        self.suffixes = tuple(s.lower() for s in suffixes)

    def discover(self) -> list[Path]:
        """
        List template files at the top level of the folder.

        Returns:
            Template paths sorted by file name; empty when the folder is missing
        """
        if not self.templates_dir.is_dir():
            logger.warning(f"Templates folder not found: {self.templates_dir}")
            return []

        return sorted(
            (
                path
                for path in self.templates_dir.iterdir()
                if path.is_file() and path.suffix.lower() in self.suffixes
            ),
            key=lambda path: path.name.lower(),
        )

    def resolve(self, file_name: str) -> Optional[Path]:
        """Find a discovered template by file name; None if it is not one."""
        for path in self.discover():
            if path.name == file_name:
                return path
        return None

    def read_text(self, path: Union[str, Path]) -> str:
        """Read one template's text."""
        return read_text(path)

    def load(self, path: Union[str, Path]) -> GameTemplate:
        """Parse one template file."""
        return TemplateParser.parse(self.read_text(path), source=str(path))

    def load_all(self) -> dict[str, GameTemplate]:
        """
        Load every template in the folder.

        Files that fail to parse are logged and skipped; when two files
        declare the same game the first one (by file name) is kept.

        Returns:
            Dictionary mapping game name to GameTemplate
        """
        templates: dict[str, GameTemplate] = {}
        for path in self.discover():
            try:
                template = self.load(path)
            except (TemplateError, OSError, UnicodeDecodeError) as e:
                logger.error(f"Skipping template {path.name}: {e}", exc_info=True)
                continue

            if template.game_name in templates:
                logger.warning(f"Skipping {path.name}: a template for {template.game_name} is already loaded")
                continue

            templates[template.game_name] = template
            logger.info(f"Loaded template {path.name} ({template.game_name})")

        return templates
