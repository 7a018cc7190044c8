"""Template and option models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from raceconfig.errors import SelectionError


class OptionType(str, Enum):
    """Semantic type inferred for an option block."""

    ENUM_WEIGHTED = "enum_weighted"
    BOOLEAN_WEIGHTED = "boolean_weighted"
    NUMERIC_WEIGHTED = "numeric_weighted"
    LIST = "list"
    DICTIONARY = "dictionary"
    PASS_THROUGH = "pass_through"


WEIGHTED_TYPES = frozenset(
    {OptionType.ENUM_WEIGHTED, OptionType.BOOLEAN_WEIGHTED, OptionType.NUMERIC_WEIGHTED}
)


def normalize_key(key: str) -> str:
    """Trim, strip one pair of surrounding quotes and lower-case a key."""
    text = key.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1]
    return text.lower()


class RandomizerOption(BaseModel):
    """One configurable option found under the game block.

    The ``selected_*`` fields (and ``use_random``) are written by the caller
    before generation; everything else is fixed once the parser builds it.
    """

    key_path: str = Field(description="'<game>.<key>', unique within a template")
    display_name: str = Field(description="Raw option key")
    type: OptionType = Field(description="Inferred option type")

    # Weighted payload
    weights: Optional[dict[str, int]] = Field(
        default=None, description="Candidate key -> weight (enum, boolean and numeric options)"
    )
    specials: Optional[dict[str, int]] = Field(
        default=None, description="Special selector key -> weight (numeric options only)"
    )
    min: Optional[int] = Field(default=None, description="Lower slider bound")
    max: Optional[int] = Field(default=None, description="Upper slider bound")
    default_numeric: Optional[int] = Field(default=None, description="Highest-weighted numeric key")

    # Collection payloads
    default_list: Optional[list[str]] = Field(default=None, description="Template list entries")
    default_dictionary: Optional[dict[str, str]] = Field(
        default=None, description="Template dictionary entries"
    )

    # Caller selections
    selected_value: Optional[str] = Field(default=None, description="Chosen key or scalar text")
    selected_number: Optional[int] = Field(default=None, description="Chosen numeric value")
    use_random: bool = Field(default=False, description="Keep the special selectors active")
    selected_list: Optional[list[str]] = Field(default=None, description="Chosen list entries")
    selected_dictionary: Optional[dict[str, str]] = Field(
        default=None, description="Chosen dictionary entries"
    )

    @model_validator(mode="after")
    def _check_payload(self) -> "RandomizerOption":
        weighted = self.type in WEIGHTED_TYPES
        numeric = self.type == OptionType.NUMERIC_WEIGHTED
        if weighted != (self.weights is not None):
            raise ValueError(f"{self.key_path}: weights must be set exactly for weighted options")
        if (self.type == OptionType.LIST) != (self.default_list is not None):
            raise ValueError(f"{self.key_path}: default_list must be set exactly for list options")
        if (self.type == OptionType.DICTIONARY) != (self.default_dictionary is not None):
            raise ValueError(
                f"{self.key_path}: default_dictionary must be set exactly for dictionary options"
            )
        numeric_fields = (self.specials, self.min, self.max, self.default_numeric)
        if numeric and any(value is None for value in numeric_fields):
            raise ValueError(f"{self.key_path}: numeric options need specials, min, max and default")
        if not numeric and any(value is not None for value in numeric_fields):
            raise ValueError(f"{self.key_path}: only numeric options carry specials and bounds")
        return self

    @property
    def is_weighted(self) -> bool:
        """Whether the option is written back as a weight map."""
        return self.type in WEIGHTED_TYPES

    def select(self, value: Any) -> None:
        """
        Validate and store a caller selection.

        Enum and boolean options take one of their keys, numeric options an
        integer inside ``[min, max]`` or a special selector (which turns on
        ``use_random``), list options a list, dictionary options a mapping
        and pass-through options any scalar.

        Raises:
            SelectionError: If the value does not fit the option
        """
        match self.type:
            case OptionType.ENUM_WEIGHTED:
                if not isinstance(value, str) or value not in self.weights:
                    raise SelectionError(f"{self.key_path}: '{value}' is not one of {list(self.weights)}")
                self.selected_value = value
            case OptionType.BOOLEAN_WEIGHTED:
                wanted = normalize_key(str(value))
                for key in self.weights:
                    if normalize_key(key) == wanted:
                        self.selected_value = key
                        return
                raise SelectionError(f"{self.key_path}: '{value}' is not a boolean choice")
            case OptionType.NUMERIC_WEIGHTED:
                self._select_number(value)
            case OptionType.LIST:
                if not isinstance(value, (list, tuple)):
                    raise SelectionError(f"{self.key_path}: expected a list, got {type(value).__name__}")
                self.selected_list = [_scalar_text(item) for item in value]
            case OptionType.DICTIONARY:
                if not isinstance(value, dict):
                    raise SelectionError(f"{self.key_path}: expected a mapping, got {type(value).__name__}")
                self.selected_dictionary = {
                    _scalar_text(k): _scalar_text(v) for k, v in value.items()
                }
            case OptionType.PASS_THROUGH:
                if isinstance(value, (list, tuple, dict)):
                    raise SelectionError(f"{self.key_path}: expected a scalar, got {type(value).__name__}")
                self.selected_value = "" if value is None else _scalar_text(value)

    def _select_number(self, value: Any) -> None:
        if isinstance(value, bool):
            raise SelectionError(f"{self.key_path}: expected a number, got a boolean")
        if isinstance(value, str):
            token = normalize_key(value)
            if token in {normalize_key(k) for k in self.specials}:
                self.use_random = True
                self.selected_number = None
                return
            try:
                value = int(token)
            except ValueError:
                raise SelectionError(f"{self.key_path}: '{value}' is neither a number nor a special key") from None
        if not isinstance(value, int):
            raise SelectionError(f"{self.key_path}: expected a number, got {type(value).__name__}")
        if not self.min <= value <= self.max:
            raise SelectionError(f"{self.key_path}: {value} is outside [{self.min}, {self.max}]")
        self.selected_number = value
        self.use_random = False


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class GameTemplate(BaseModel):
    """One parsed template document."""

    model_config = ConfigDict(frozen=True)  # Only the contained option selections change

    game_name: str = Field(description="Canonical game identifier and key of the option block")
    description: Optional[str] = Field(default=None, description="Top-level description")
    required_version: Optional[str] = Field(default=None, description="requires.version")
    default_player_name: Optional[str] = Field(default=None, description="Top-level name")

    # Raw YAML to preserve comments/structure for regeneration
    raw_yaml: str = Field(description="Original document text")

    options: list[RandomizerOption] = Field(
        default_factory=list, description="Options under the game block, in document order"
    )

    def get_option(self, key_path: str) -> Optional[RandomizerOption]:
        """Find an option by its key path."""
        return next((option for option in self.options if option.key_path == key_path), None)


def get_option(template: GameTemplate, key_path: str) -> Optional[RandomizerOption]:
    """Find an option by its key path."""
    return template.get_option(key_path)
