"""Tests for per-field flag handling."""

from formatflex.document import Row
from formatflex.models import ConversionConfig
from formatflex.output.field_policy import (
    apply_field_policy,
    apply_row_policy,
    apply_rows_policy,
    apply_text_policy,
    apply_value_policy,
    coerce_field,
)


class TestFieldPolicy:
    """Tests for single fields and rows."""

    def test_defaults_leave_fields_alone(self) -> None:
        assert apply_field_policy("  x  ", ConversionConfig()) == "  x  "
        assert apply_field_policy(None, ConversionConfig()) is None

    def test_trim(self) -> None:
        assert apply_field_policy("\t x \n", ConversionConfig(trim=True)) == "x"

    def test_parse_types_is_a_no_op(self) -> None:
        config = ConversionConfig(parse_types=True)
        assert apply_field_policy("42", config) == "42"
        assert coerce_field("true") == "true"

    def test_ignore_empty_shifts_fields(self) -> None:
        config = ConversionConfig(ignore_empty=True)
        assert apply_row_policy(["a", "", None, "b"], config) == ["a", "b"]

    def test_whitespace_field_is_empty_only_after_trim(self) -> None:
        assert apply_row_policy([" "], ConversionConfig(ignore_empty=True)) == [" "]
        config = ConversionConfig(trim=True, ignore_empty=True)
        assert apply_row_policy([" "], config) == []

    def test_rows_left_empty_are_dropped(self) -> None:
        rows = [Row.from_values(["a"]), Row.from_values([""]), Row()]
        config = ConversionConfig(ignore_empty=True)
        assert apply_rows_policy(rows, config) == [["a"]]

    def test_empty_rows_kept_by_default(self) -> None:
        rows = [Row.from_values(["a"]), Row()]
        assert apply_rows_policy(rows, ConversionConfig()) == [["a"], []]


class TestTextPolicy:
    """Tests for block text handling."""

    def test_untouched_without_flags(self) -> None:
        text = " a \n\n b \n"
        assert apply_text_policy(text, ConversionConfig()) == text

    def test_trim_and_ignore_empty(self) -> None:
        config = ConversionConfig(trim=True, ignore_empty=True)
        assert apply_text_policy(" a \n\n b \n", config) == "a\nb"


class TestValuePolicy:
    """Tests for tree values."""

    def test_trims_nested_strings(self) -> None:
        value = {"a": [" x ", {"b": " y "}], "n": 1}
        result = apply_value_policy(value, ConversionConfig(trim=True))
        assert result == {"a": ["x", {"b": "y"}], "n": 1}

    def test_prunes_empty_values(self) -> None:
        value = {"keep": 0, "none": None, "blank": "", "list": ["", None], "map": {}}
        result = apply_value_policy(value, ConversionConfig(ignore_empty=True))
        assert result == {"keep": 0}

    def test_top_level_container_is_kept(self) -> None:
        result = apply_value_policy({"a": ""}, ConversionConfig(ignore_empty=True))
        assert result == {}
