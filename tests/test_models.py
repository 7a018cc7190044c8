"""Tests for template models."""

import pytest
from pydantic import ValidationError

from raceconfig.errors import SelectionError
from raceconfig.models.template import GameTemplate, OptionType, RandomizerOption, get_option, normalize_key


def _numeric(**overrides):
    fields = dict(
        key_path="G.n",
        display_name="n",
        type=OptionType.NUMERIC_WEIGHTED,
        weights={"1": 10, "5": 50},
        specials={"random": 0, "random-low": 0},
        min=1,
        max=10,
        default_numeric=5,
        selected_number=5,
    )
    fields.update(overrides)
    return RandomizerOption(**fields)


def _enum(option_type=OptionType.ENUM_WEIGHTED, weights=None):
    return RandomizerOption(
        key_path="G.e",
        display_name="e",
        type=option_type,
        weights=weights or {"Easy": 1, "Hard": 2},
    )


class TestNormalizeKey:
    """Test suite for normalize_key."""

    @pytest.mark.parametrize(
        "key,expected",
        [("True", "true"), ("'false'", "false"), ('"TRUE"', "true"), ("  x ", "x"), ("'a\"", "'a\"")],
    )
    def test_normalize(self, key, expected):
        """Test trimming, unquoting and lower-casing."""
        assert normalize_key(key) == expected


class TestOptionInvariants:
    """Test suite for the per-type payload checks."""

    def test_weighted_needs_weights(self):
        """Test that weighted options require weights."""
        with pytest.raises(ValidationError):
            RandomizerOption(key_path="G.e", display_name="e", type=OptionType.ENUM_WEIGHTED)

    def test_list_cannot_carry_weights(self):
        """Test that non-weighted options reject weights."""
        with pytest.raises(ValidationError):
            RandomizerOption(
                key_path="G.l", display_name="l", type=OptionType.LIST, default_list=[], weights={"a": 1}
            )

    def test_numeric_needs_bounds(self):
        """Test that numeric options require bounds and a default."""
        with pytest.raises(ValidationError):
            RandomizerOption(
                key_path="G.n", display_name="n", type=OptionType.NUMERIC_WEIGHTED, weights={"1": 1}
            )

    def test_enum_cannot_carry_bounds(self):
        """Test that only numeric options carry bounds."""
        with pytest.raises(ValidationError):
            RandomizerOption(
                key_path="G.e", display_name="e", type=OptionType.ENUM_WEIGHTED, weights={"a": 1}, min=1
            )

    def test_use_random_defaults_false(self):
        """Test the initial random flag."""
        assert _numeric().use_random is False


class TestSelect:
    """Test suite for RandomizerOption.select."""

    def test_enum_accepts_known_key(self):
        """Test a valid enum choice."""
        option = _enum()
        option.select("Easy")
        assert option.selected_value == "Easy"

    def test_enum_rejects_unknown_key(self):
        """Test an invalid enum choice."""
        with pytest.raises(SelectionError):
            _enum().select("Medium")

    def test_boolean_accepts_bool_and_text(self):
        """Test boolean choices given as bool or text."""
        option = _enum(OptionType.BOOLEAN_WEIGHTED, {"true": 1, "false": 0})
        option.select(False)
        assert option.selected_value == "false"
        option.select("TRUE")
        assert option.selected_value == "true"

    def test_boolean_rejects_other(self):
        """Test an invalid boolean choice."""
        option = _enum(OptionType.BOOLEAN_WEIGHTED, {"true": 1, "false": 0})
        with pytest.raises(SelectionError):
            option.select("maybe")

    def test_numeric_in_range(self):
        """Test a number inside the bounds."""
        option = _numeric(use_random=True)
        option.select(7)
        assert option.selected_number == 7
        assert option.use_random is False

    def test_numeric_from_text(self):
        """Test a number given as text."""
        option = _numeric()
        option.select("3")
        assert option.selected_number == 3

    @pytest.mark.parametrize("value", [0, 11, True, "lots", 2.5])
    def test_numeric_rejects(self, value):
        """Test out-of-range and non-integer values."""
        with pytest.raises(SelectionError):
            _numeric().select(value)

    @pytest.mark.parametrize("value", ["random", "random-low", "Random"])
    def test_numeric_special_turns_on_random(self, value):
        """Test that special selectors switch to random."""
        option = _numeric()
        option.select(value)
        assert option.use_random is True
        assert option.selected_number is None

    def test_numeric_special_needs_template_key(self):
        """Test that a special selector the option does not offer is rejected."""
        option = _numeric(specials={})
        with pytest.raises(SelectionError):
            option.select("random")
        assert option.use_random is False
        assert option.selected_number == 5

    def test_selection_error_is_value_error(self):
        """Test that selection errors are ValueErrors."""
        with pytest.raises(ValueError):
            _numeric().select(99)

    def test_list_and_dictionary(self):
        """Test collection selections."""
        option = RandomizerOption(key_path="G.l", display_name="l", type=OptionType.LIST, default_list=["a"])
        option.select(["x", 2, True])
        assert option.selected_list == ["x", "2", "true"]
        with pytest.raises(SelectionError):
            option.select("x")

        option = RandomizerOption(
            key_path="G.d", display_name="d", type=OptionType.DICTIONARY, default_dictionary={}
        )
        option.select({"Key": 3})
        assert option.selected_dictionary == {"Key": "3"}
        with pytest.raises(SelectionError):
            option.select(["Key"])

    def test_pass_through(self):
        """Test scalar selections."""
        option = RandomizerOption(key_path="G.p", display_name="p", type=OptionType.PASS_THROUGH)
        option.select(True)
        assert option.selected_value == "true"
        option.select(None)
        assert option.selected_value == ""
        with pytest.raises(SelectionError):
            option.select({"a": 1})


class TestGameTemplate:
    """Test suite for GameTemplate."""

    def test_get_option(self):
        """Test lookup by key path."""
        option = _enum()
        template = GameTemplate(game_name="G", raw_yaml="game: G\n", options=[option])
        assert template.get_option("G.e") is option
        assert get_option(template, "G.e") is option
        assert template.get_option("G.missing") is None

    def test_template_is_frozen(self):
        """Test that template fields cannot be reassigned."""
        template = GameTemplate(game_name="G", raw_yaml="game: G\n")
        with pytest.raises(ValidationError):
            template.game_name = "H"
