"""Player YAML generator: bakes option selections into a copy of the template."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from raceconfig.config import SELECTED_WEIGHT, UNSELECTED_WEIGHT
from raceconfig.errors import MalformedNodeError, TemplateConsistencyError
from raceconfig.helpers.debug import log_call
from raceconfig.models.template import GameTemplate, OptionType, RandomizerOption, normalize_key
from raceconfig.templates.yaml_nodes import (
    compose_document,
    content_end,
    mapping_entry,
    parse_int,
    render_scalar,
    starts_line,
)

logger = logging.getLogger(__name__)

# Caller hook over the top-level scalar fields (name already replaced)
TopLevelMutator = Callable[[dict[str, str]], None]

_VALUE_INDICATOR_RE = re.compile(r"[ \t]*:[ \t]*(?P<anchor>&[^\s,\[\]{}]+)?")
_ALIAS_VALUE_RE = re.compile(r"[ \t]*:[ \t]*\*[^\s,\[\]{}]+")


@dataclass(frozen=True)
class TextEdit:
    """Replace ``text[start:end]`` with ``replacement``; start == end inserts."""

    start: int
    end: int
    replacement: str


class DocumentEditor:
    """Collects in-place rewrites of a YAML document and applies them in one pass.

    Rewrites are positioned with the marks of a node graph composed from the
    same text, so everything outside the rewritten values (comments, blank
    lines, quoting, key order) is carried over byte for byte.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.newline = "\r\n" if "\r\n" in text else "\n"
        self._edits: dict[tuple[int, int], str] = {}

    def replace(self, start: int, end: int, replacement: str) -> None:
        # Aliased nodes share marks; the last rewrite of a span wins
        self._edits[(start, end)] = replacement

    def insert(self, index: int, text: str) -> None:
        self._edits[(index, index)] = self._edits.get((index, index), "") + text

    def value_span(self, key_node: Node, value_node: Node) -> tuple[int, int]:
        """Span from the end of a key through the end of its value."""
        start = key_node.end_mark.index
        if value_node.start_mark.index < start:
            # Alias to an anchor defined earlier: only the "*name" token is ours
            match = _ALIAS_VALUE_RE.match(self.text, start)
            if not match:
                raise TemplateConsistencyError(
                    f"Cannot locate the value of '{key_node.value}' at line {key_node.start_mark.line + 1}."
                )
            return start, match.end()
        return start, content_end(value_node, self.text)

    def set_value(self, key_node: Node, value_node: Node, rendered: str) -> None:
        """Rewrite an entry's value as an inline scalar or flow collection."""
        start, end = self.value_span(key_node, value_node)
        self.replace(start, end, f"{self._indicator(start)} {rendered}")

    def set_block_value(self, key_node: Node, value_node: Node, lines: list[str], indent: int) -> None:
        """Rewrite an entry's value as block lines at the given indentation."""
        start, end = self.value_span(key_node, value_node)
        body = self.newline.join(" " * indent + line for line in lines)
        self.replace(start, end, f"{self._indicator(start)}{self.newline}{body}")

    def append_entry(self, mapping: MappingNode, entry: str) -> None:
        """Add ``key: value`` after the last entry of a mapping."""
        if mapping.flow_style or not mapping.value:
            close = mapping.end_mark.index - 1
            if self.text[close : close + 1] != "}":
                raise TemplateConsistencyError(
                    f"Cannot extend the mapping at line {mapping.start_mark.line + 1}."
                )
            separator = ", " if mapping.value else ""
            self.insert(close, f"{separator}{entry}")
            return

        last_key, last_value = mapping.value[-1]
        _, end = self.value_span(last_key, last_value)
        eol = self.text.find("\n", end)
        if eol == -1:
            eol = len(self.text)
        elif eol > 0 and self.text[eol - 1] == "\r":
            eol -= 1
        indent = mapping.value[0][0].start_mark.column
        self.insert(eol, f"{self.newline}{' ' * indent}{entry}")

    def prepend_entry(self, mapping: MappingNode, entry: str) -> None:
        """Add ``key: value`` before the first entry of a mapping."""
        if mapping.flow_style:
            self.insert(mapping.start_mark.index + 1, f"{entry}, " if mapping.value else entry)
            return
        indent = mapping.start_mark.column
        self.insert(mapping.start_mark.index, f"{entry}{self.newline}{' ' * indent}")

    def render(self) -> str:
        """Apply every collected edit and return the new text."""
        edits = sorted(
            (TextEdit(start, end, text) for (start, end), text in self._edits.items()),
            key=lambda edit: (edit.start, edit.end),
        )
        pieces = []
        cursor = 0
        for edit in edits:
            if edit.start < cursor:
                raise TemplateConsistencyError(
                    f"Overlapping rewrites at offset {edit.start} of the template."
                )
            pieces.append(self.text[cursor : edit.start])
            pieces.append(edit.replacement)
            cursor = edit.end
        pieces.append(self.text[cursor:])
        return "".join(pieces)

    def _indicator(self, start: int) -> str:
        # Keep an anchor that sits on the value so aliases elsewhere still resolve
        match = _VALUE_INDICATOR_RE.match(self.text, start)
        anchor = match.group("anchor") if match else None
        return f": {anchor}" if anchor else ":"


class PlayerYamlGenerator:
    """Generates per-player YAML from a template and its option selections."""

    @staticmethod
    @log_call
    def generate(
        template: GameTemplate,
        player_name: str,
        mutate_top_level: Optional[TopLevelMutator] = None,
    ) -> str:
        """
        Generate a player file.

        ``template.raw_yaml`` is composed afresh on every call, so the
        template itself is never touched and repeated calls give the same
        text. Selections are written as given; range checks belong to the
        caller.

        Args:
            template: Parsed template with selections applied
            player_name: Value for the top-level ``name`` field
            mutate_top_level: Optional hook that may edit the top-level scalar
                fields (``{key: text}``) after ``name`` is replaced

        Returns:
            YAML text of the player file

        Raises:
            TemplateConsistencyError: If the template has options but its game
                block is no longer in ``raw_yaml``
        """
        raw = template.raw_yaml
        root = compose_document(raw)
        if not isinstance(root, MappingNode):
            raise MalformedNodeError("Template root must be a mapping.")

        editor = DocumentEditor(raw)
        PlayerYamlGenerator._apply_top_level(editor, root, player_name, mutate_top_level)

        game_entry = mapping_entry(root, template.game_name)
        game_block = game_entry[1] if game_entry else None
        if isinstance(game_block, MappingNode):
            for option in template.options:
                PlayerYamlGenerator._apply_option(editor, game_block, option)
        elif template.options:
            raise TemplateConsistencyError(
                f"Game block '{template.game_name}' is missing from the template text."
            )

        output = editor.render()
        logger.info(f"Generated {template.game_name} YAML for player {player_name}")
        return output

    @staticmethod
    def _apply_top_level(
        editor: DocumentEditor,
        root: MappingNode,
        player_name: str,
        mutate_top_level: Optional[TopLevelMutator],
    ) -> None:
        original = {
            key_node.value: value_node.value
            for key_node, value_node in root.value
            if isinstance(key_node, ScalarNode) and isinstance(value_node, ScalarNode)
        }
        fields = dict(original)
        fields["name"] = player_name
        if mutate_top_level is not None:
            mutate_top_level(fields)

        new_entries = []
        for key, value in fields.items():
            if key != "name" and key in original and original[key] == value:
                continue
            # Player names must read back as strings, even "123" or "yes"
            rendered = render_scalar("" if value is None else str(value), string=key == "name")
            entry = mapping_entry(root, key)
            if entry is None:
                new_entries.append(f"{render_scalar(key)}: {rendered}")
            elif isinstance(entry[1], ScalarNode) or key == "name":
                editor.set_value(entry[0], entry[1], rendered)
            else:
                logger.warning(f"Top-level field '{key}' is not a scalar; leaving it unchanged")

        for entry_text in new_entries:
            editor.prepend_entry(root, entry_text)

    @staticmethod
    def _apply_option(editor: DocumentEditor, game_block: MappingNode, option: RandomizerOption) -> None:
        entry = mapping_entry(game_block, option.display_name)
        if entry is None:
            logger.debug(f"Option {option.key_path} is not in the document; skipping")
            return
        key_node, value_node = entry

        match option.type:
            case OptionType.ENUM_WEIGHTED | OptionType.BOOLEAN_WEIGHTED | OptionType.NUMERIC_WEIGHTED:
                if not isinstance(value_node, MappingNode):
                    logger.warning(f"Option {option.key_path} is no longer a mapping; skipping")
                    return
                if option.type == OptionType.NUMERIC_WEIGHTED:
                    _write_numeric(editor, value_node, option)
                else:
                    _write_choice(editor, value_node, option)
            case OptionType.LIST:
                items = option.selected_list or option.default_list or []
                if _scalar_items(value_node) == items:
                    return
                _write_list(editor, key_node, value_node, items)
            case OptionType.DICTIONARY:
                entries = option.selected_dictionary
                if entries is None:
                    entries = option.default_dictionary or {}
                if _scalar_entries(value_node) == entries:
                    return
                _write_dictionary(editor, key_node, value_node, entries)
            case OptionType.PASS_THROUGH:
                value = option.selected_value or ""
                if isinstance(value_node, ScalarNode) and value_node.value == value:
                    return
                editor.set_value(key_node, value_node, render_scalar(value))


def _weight(selected: bool) -> str:
    return str(SELECTED_WEIGHT if selected else UNSELECTED_WEIGHT)


def _scalar_items(node: Node) -> Optional[list[str]]:
    """Entries of an all-scalar sequence, None for anything else."""
    if not isinstance(node, SequenceNode) or not all(isinstance(item, ScalarNode) for item in node.value):
        return None
    return [item.value for item in node.value]


def _scalar_entries(node: Node) -> Optional[dict[str, str]]:
    """Entries of an all-scalar mapping, None for anything else."""
    if not isinstance(node, MappingNode):
        return None
    if not all(isinstance(k, ScalarNode) and isinstance(v, ScalarNode) for k, v in node.value):
        return None
    entries = {k.value: v.value for k, v in node.value}
    # Duplicate keys would collapse; rewrite those
    return entries if len(entries) == len(node.value) else None


def _write_choice(editor: DocumentEditor, mapping: MappingNode, option: RandomizerOption) -> None:
    selected = (option.selected_value or "").strip()
    boolean = option.type == OptionType.BOOLEAN_WEIGHTED
    for key_node, value_node in mapping.value:
        key = key_node.value.strip() if isinstance(key_node, ScalarNode) else None
        if boolean:
            chosen = key is not None and normalize_key(key) == normalize_key(selected)
        else:
            chosen = key == selected
        editor.set_value(key_node, value_node, _weight(chosen))


def _write_numeric(editor: DocumentEditor, mapping: MappingNode, option: RandomizerOption) -> None:
    specials = option.specials or {}
    matched = False
    for key_node, value_node in mapping.value:
        key = key_node.value if isinstance(key_node, ScalarNode) else None
        number = parse_int(key)
        if number is not None:
            chosen = option.selected_number is not None and number == option.selected_number
            matched = matched or chosen
        else:
            chosen = option.use_random and key in specials
        editor.set_value(key_node, value_node, _weight(chosen))

    if option.selected_number is not None and not matched:
        editor.append_entry(mapping, f"{option.selected_number}: {SELECTED_WEIGHT}")


def _block_indent(key_node: Node, value_node: Node, text: str, mapping: bool) -> Optional[int]:
    """Indentation for a block rewrite, or None when the value must stay inline."""
    if not isinstance(value_node, (MappingNode, SequenceNode)) or value_node.flow_style:
        return None
    if not value_node.value or value_node.start_mark.index < key_node.end_mark.index:
        return None
    if not starts_line(value_node, text):
        return None
    indent = value_node.start_mark.column
    # A sequence may sit at its key's column, a mapping may not
    if mapping and indent <= key_node.start_mark.column:
        indent = key_node.start_mark.column + 2
    return indent


def _write_list(editor: DocumentEditor, key_node: Node, value_node: Node, items: list[str]) -> None:
    indent = _block_indent(key_node, value_node, editor.text, mapping=False)
    if items and indent is not None:
        editor.set_block_value(key_node, value_node, [f"- {render_scalar(item)}" for item in items], indent)
        return
    rendered = ", ".join(render_scalar(item, flow=True) for item in items)
    editor.set_value(key_node, value_node, f"[{rendered}]")


def _write_dictionary(editor: DocumentEditor, key_node: Node, value_node: Node, entries: dict[str, str]) -> None:
    indent = _block_indent(key_node, value_node, editor.text, mapping=True)
    if entries and indent is not None:
        lines = [f"{render_scalar(k)}: {render_scalar(v)}" for k, v in entries.items()]
        editor.set_block_value(key_node, value_node, lines, indent)
        return
    rendered = ", ".join(
        f"{render_scalar(k, flow=True)}: {render_scalar(v, flow=True)}" for k, v in entries.items()
    )
    editor.set_value(key_node, value_node, f"{{{rendered}}}")


def generate_player_yaml(
    template: GameTemplate,
    player_name: str,
    mutate_top_level: Optional[TopLevelMutator] = None,
) -> str:
    """Generate a player file from a template and its selections."""
    return PlayerYamlGenerator.generate(template, player_name, mutate_top_level)
