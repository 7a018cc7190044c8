"""Template parser: YAML text to GameTemplate."""

import logging
from pathlib import Path
from typing import Optional, Union

from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from raceconfig.errors import MalformedNodeError, MissingFieldError
from raceconfig.helpers.debug import log_call
from raceconfig.models.template import GameTemplate, OptionType, RandomizerOption
from raceconfig.templates.classifier import classify
from raceconfig.templates.yaml_nodes import compose_document, get_scalar, is_blank, mapping_get

logger = logging.getLogger(__name__)


class TemplateParser:
    """Parses template documents into GameTemplate models."""

    @staticmethod
    @log_call
    def parse_from_file(path: Union[str, Path]) -> GameTemplate:
        """
        Read and parse a template file.

        Args:
            path: Template file path

        Returns:
            Parsed GameTemplate

        Raises:
            MissingFieldError: If the top-level 'game' field is absent
            MalformedNodeError: If the document or an option has an unusable shape
            TemplateSyntaxError: If the file is not valid YAML
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8", newline="") as f:
            raw = f.read()
        return TemplateParser.parse(raw, source=str(path))

    @staticmethod
    def parse(raw: str, source: Optional[str] = None) -> GameTemplate:
        """
        Parse template text.

        Args:
            raw: Template text, kept verbatim as ``raw_yaml``
            source: Optional path used in error messages

        Returns:
            Parsed GameTemplate
        """
        root = compose_document(raw, source)
        if root is None:
            raise MissingFieldError("game", source, "The document is empty.")
        if not isinstance(root, MappingNode):
            raise MalformedNodeError("Template root must be a mapping.", source)

        game_node = mapping_get(root, "game")
        game_name = get_scalar(root, "game")
        if game_node is not None and game_name is None:
            raise MissingFieldError("game", source, "It must be a single game name.")
        if game_name is None or not game_name.strip():
            raise MissingFieldError("game", source)

        required_version = None
        requires = mapping_get(root, "requires")
        if isinstance(requires, MappingNode):
            required_version = get_scalar(requires, "version")

        options: list[RandomizerOption] = []
        game_block = mapping_get(root, game_name)
        if isinstance(game_block, MappingNode):
            options = TemplateParser.parse_options(raw, game_name, game_block, source)
        elif game_block is not None and not is_blank(game_block):
            raise MalformedNodeError(f"'{game_name}' block must be a mapping of options.", source)

        template = GameTemplate(
            game_name=game_name,
            description=get_scalar(root, "description"),
            required_version=required_version,
            default_player_name=get_scalar(root, "name"),
            raw_yaml=raw,
            options=options,
        )
        logger.info(f"Parsed template for {game_name} with {len(options)} option(s)")
        return template

    @staticmethod
    def parse_options(
        raw: str, game_name: str, game_block: MappingNode, source: Optional[str] = None
    ) -> list[RandomizerOption]:
        """
        Build one option per entry of the game block, in document order.

        Empty sequences and blank scalars are skipped. Empty mappings are kept
        as dictionary options the caller can fill in.
        """
        options: list[RandomizerOption] = []
        for key_node, node in game_block.value:
            if not isinstance(key_node, ScalarNode):
                raise MalformedNodeError(
                    f"Option keys under '{game_name}' must be scalars (line {key_node.start_mark.line + 1}).",
                    source,
                )
            key = key_node.value
            option = TemplateParser.parse_option(raw, game_name, key, node, source)
            if option is None:
                logger.debug(f"Skipping empty option {game_name}.{key}")
                continue
            options.append(option)
        return options

    @staticmethod
    def parse_option(
        raw: str, game_name: str, key: str, node: Node, source: Optional[str] = None
    ) -> Optional[RandomizerOption]:
        """Turn one game block entry into an option; None for skipped empty entries."""
        key_path = f"{game_name}.{key}"
        if isinstance(node, MappingNode):
            return classify(game_name, key, node, raw, source)
        if isinstance(node, SequenceNode):
            if is_blank(node):
                return None
            return RandomizerOption(
                key_path=key_path,
                display_name=key,
                type=OptionType.LIST,
                default_list=[item.value for item in node.value if isinstance(item, ScalarNode)],
                selected_list=[],
            )
        if isinstance(node, ScalarNode):
            if is_blank(node):
                return None
            return RandomizerOption(
                key_path=key_path,
                display_name=key,
                type=OptionType.PASS_THROUGH,
                selected_value=node.value,
            )
        raise MalformedNodeError(f"Unable to parse {key_path}.", source)


def parse_template(raw: str, source: Optional[str] = None) -> GameTemplate:
    """Parse template text."""
    return TemplateParser.parse(raw, source)


def parse_from_file(path: Union[str, Path]) -> GameTemplate:
    """Read and parse a template file."""
    return TemplateParser.parse_from_file(path)
