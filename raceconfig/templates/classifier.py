"""Infer the semantic type of a weighted option block."""

import logging
from dataclasses import dataclass, field
from typing import Callable, NamedTuple, Optional

from yaml.nodes import MappingNode, ScalarNode

from raceconfig.config import SPECIAL_SELECTOR_KEYS
from raceconfig.errors import MalformedNodeError
from raceconfig.models.template import OptionType, RandomizerOption, normalize_key
from raceconfig.templates.range_extractor import extract_range
from raceconfig.templates.yaml_nodes import node_weight, parse_int

logger = logging.getLogger(__name__)

BOOLEAN_KEYS = frozenset({"true", "false"})


@dataclass
class KeyScan:
    """Keys of one option mapping, split by kind, in document order."""

    keys: list[str] = field(default_factory=list)
    numeric_keys: list[int] = field(default_factory=list)
    weights: dict[str, int] = field(default_factory=dict)
    specials: dict[str, int] = field(default_factory=dict)
    # Every key with its weight, specials included
    all_weights: dict[str, int] = field(default_factory=dict)

    @property
    def normalized_keys(self) -> set[str]:
        return {normalize_key(k) for k in self.keys}


def is_special_key(key: str) -> bool:
    """Whether a key is a non-numeric selector such as ``random-low``."""
    return normalize_key(key) in SPECIAL_SELECTOR_KEYS


def scan_keys(mapping: MappingNode) -> KeyScan:
    """Split a mapping's keys into numeric, special and plain keys with their weights."""
    scan = KeyScan()
    for key_node, value_node in mapping.value:
        if not isinstance(key_node, ScalarNode):
            continue
        key = key_node.value
        weight = node_weight(value_node)
        scan.keys.append(key)
        scan.all_weights[key] = weight

        number = parse_int(key)
        if number is not None:
            scan.numeric_keys.append(number)
            scan.weights[key] = weight
        elif is_special_key(key):
            scan.specials[key] = weight
        else:
            scan.weights[key] = weight
    return scan


class ClassificationRule(NamedTuple):
    """A type with the predicate that selects it and the builder that fills it in."""

    option_type: OptionType
    matches: Callable[[KeyScan], bool]
    build: Callable[["OptionContext", KeyScan], RandomizerOption]


@dataclass(frozen=True)
class OptionContext:
    """Where an option block lives."""

    game_name: str
    key: str
    raw_text: str

    @property
    def key_path(self) -> str:
        return f"{self.game_name}.{self.key}"


def _heaviest(weights: dict[str, int]) -> Optional[str]:
    # max() keeps the first of equal weights, i.e. document order
    if not weights:
        return None
    return max(weights, key=lambda k: weights[k])


def _is_numeric(scan: KeyScan) -> bool:
    return bool(scan.numeric_keys)


def _is_boolean(scan: KeyScan) -> bool:
    return not scan.numeric_keys and scan.normalized_keys == BOOLEAN_KEYS


def _is_enum(scan: KeyScan) -> bool:
    return bool(scan.keys)


def _build_numeric(context: OptionContext, scan: KeyScan) -> RandomizerOption:
    key_min, key_max = min(scan.numeric_keys), max(scan.numeric_keys)
    comment_min, comment_max = extract_range(context.raw_text, context.game_name, context.key)
    low = key_min if comment_min is None else comment_min
    high = key_max if comment_max is None else comment_max
    if low > high:
        logger.debug(
            f"{context.key_path}: documented range [{low}, {high}] is inverted, using keys"
        )
        low, high = key_min, key_max

    numeric = [(n, scan.weights[k]) for n, k in _numeric_items(scan)]
    # max() keeps the first of equal weights, i.e. document order
    default, _ = max(numeric, key=lambda item: item[1])
    default = max(low, min(high, default))

    return RandomizerOption(
        key_path=context.key_path,
        display_name=context.key,
        type=OptionType.NUMERIC_WEIGHTED,
        weights=scan.weights,
        specials=scan.specials,
        min=low,
        max=high,
        default_numeric=default,
        selected_number=default,
    )


def _numeric_items(scan: KeyScan) -> list[tuple[int, str]]:
    return [(n, k) for k in scan.weights if (n := parse_int(k)) is not None]


def _build_boolean(context: OptionContext, scan: KeyScan) -> RandomizerOption:
    return RandomizerOption(
        key_path=context.key_path,
        display_name=context.key,
        type=OptionType.BOOLEAN_WEIGHTED,
        weights=scan.all_weights,
        selected_value=_heaviest(scan.all_weights),
    )


def _build_enum(context: OptionContext, scan: KeyScan) -> RandomizerOption:
    return RandomizerOption(
        key_path=context.key_path,
        display_name=context.key,
        type=OptionType.ENUM_WEIGHTED,
        weights=scan.all_weights,
        selected_value=_heaviest(scan.all_weights),
    )


# Evaluated top to bottom, first match wins
RULES: list[ClassificationRule] = [
    ClassificationRule(OptionType.NUMERIC_WEIGHTED, _is_numeric, _build_numeric),
    ClassificationRule(OptionType.BOOLEAN_WEIGHTED, _is_boolean, _build_boolean),
    ClassificationRule(OptionType.ENUM_WEIGHTED, _is_enum, _build_enum),
]


def classify(
    game_name: str, key: str, mapping_node: MappingNode, raw_text: str, source: Optional[str] = None
) -> RandomizerOption:
    """
    Classify one option mapping.

    Args:
        game_name: Game block key
        key: Option key
        mapping_node: Composed mapping under the option key
        raw_text: Full template text, consulted for range comments only
        source: Optional path used in error messages

    Returns:
        RandomizerOption typed as numeric, boolean, enum or (empty) dictionary

    Raises:
        MalformedNodeError: If the mapping has entries but none with a scalar key
    """
    context = OptionContext(game_name=game_name, key=key, raw_text=raw_text)
    scan = scan_keys(mapping_node)

    for rule in RULES:
        if rule.matches(scan):
            option = rule.build(context, scan)
            logger.debug(f"Classified {context.key_path} as {rule.option_type.value}")
            return option

    if mapping_node.value:
        raise MalformedNodeError(
            f"Unable to parse {context.key_path}: its keys must be scalars "
            f"(line {mapping_node.start_mark.line + 1}).",
            source,
        )
    return RandomizerOption(
        key_path=context.key_path,
        display_name=key,
        type=OptionType.DICTIONARY,
        default_dictionary={},
        selected_dictionary={},
    )
