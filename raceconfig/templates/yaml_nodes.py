"""Typed accessors over the PyYAML node graph.

Templates are read through ``yaml.compose_all`` rather than ``yaml.safe_load``:
the composed graph keeps key order, the raw text of every scalar (``'true'``,
``True`` and ``true`` stay distinguishable from resolved booleans) and the
source marks the generator needs to rewrite values in place.
"""

import json
import re
from typing import Optional

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from raceconfig.errors import TemplateSyntaxError

_INT_RE = re.compile(r"^\s*[+-]?\d+\s*$")
_FLOW_INDICATORS = set(",[]{}")
_STR_TAG = "tag:yaml.org,2002:str"


def compose_document(text: str, source: Optional[str] = None) -> Optional[Node]:
    """
    Compose the first document of a YAML stream into a node graph.

    Args:
        text: Document text
        source: Optional path used in error messages

    Returns:
        Root node, or None for an empty document

    Raises:
        TemplateSyntaxError: If the text is not valid YAML
    """
    try:
        return next(iter(yaml.compose_all(text, Loader=yaml.SafeLoader)), None)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise TemplateSyntaxError(
            f"Invalid YAML: {e}",
            source,
            line=mark.line + 1 if mark else None,
            column=mark.column + 1 if mark else None,
        ) from e


def scalar_text(node: Optional[Node]) -> Optional[str]:
    """Raw text of a scalar node, None for anything else."""
    if isinstance(node, ScalarNode):
        return node.value
    return None


def mapping_entry(mapping: MappingNode, key: str) -> Optional[tuple[Node, Node]]:
    """Find the first ``(key_node, value_node)`` pair whose scalar key equals ``key``."""
    for key_node, value_node in mapping.value:
        if isinstance(key_node, ScalarNode) and key_node.value == key:
            return key_node, value_node
    return None


def mapping_get(mapping: MappingNode, key: str) -> Optional[Node]:
    """Value node stored under ``key``."""
    entry = mapping_entry(mapping, key)
    return entry[1] if entry else None


def get_scalar(mapping: MappingNode, key: str) -> Optional[str]:
    """Scalar text stored under ``key``; None when absent or not a scalar."""
    return scalar_text(mapping_get(mapping, key))


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parse a decimal integer the way template weights are written."""
    if text is None or not _INT_RE.match(text):
        return None
    return int(text)


def node_weight(node: Node) -> int:
    """Integer weight of a value node; anything unparseable counts as 0."""
    weight = parse_int(scalar_text(node))
    return 0 if weight is None else weight


def is_blank(node: Node) -> bool:
    """Empty mapping, empty sequence or whitespace-only scalar."""
    if isinstance(node, (MappingNode, SequenceNode)):
        return not node.value
    if isinstance(node, ScalarNode):
        return not node.value.strip()
    return False


def content_end(node: Node, text: str) -> int:
    """
    Index just past the last character that belongs to a node.

    Block collections report an end mark at the next token, which can lie
    after trailing comments and blank lines, so their end is taken from the
    last child instead.
    """
    if isinstance(node, MappingNode) and not node.flow_style and node.value:
        return content_end(node.value[-1][1], text)
    if isinstance(node, SequenceNode) and not node.flow_style and node.value:
        return content_end(node.value[-1], text)
    start = node.start_mark.index
    end = node.end_mark.index
    while end > start and text[end - 1] in " \t\r\n":
        end -= 1
    return end


def starts_line(node: Node, text: str) -> bool:
    """Whether only indentation precedes the node on its line."""
    index = node.start_mark.index
    line_start = text.rfind("\n", 0, index) + 1
    return not text[line_start:index].strip()


def render_scalar(value: str, flow: bool = False, string: bool = False) -> str:
    """
    Emit a scalar for splicing into a document.

    Plain style is kept whenever the text reads back as the same plain
    scalar, so ``50`` stays an integer and ``true`` a boolean, as in the
    template. With ``string`` set, plain style is only kept for text that
    also resolves to a string. Anything else is single-quoted, or
    double-quoted when it spans lines or holds non-printable characters.
    """
    if value and not (flow and _FLOW_INDICATORS.intersection(value)):
        try:
            node = yaml.compose(value, Loader=yaml.SafeLoader)
        except yaml.YAMLError:
            node = None
        if (
            isinstance(node, ScalarNode)
            and node.style is None
            and node.value == value
            and (not string or node.tag == _STR_TAG)
        ):
            return value
    if "\n" in value or not value.isprintable():
        return json.dumps(value)
    return "'" + value.replace("'", "''") + "'"
