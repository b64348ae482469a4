"""Tests for the tolerant cell parsers."""

from datetime import date

import pytest

from prospect_config.schema import FieldType
from prospect_ingestion.mapping.coercion import (
    coerce_cell,
    is_empty,
    parse_date,
    parse_integer,
    parse_list,
    parse_number,
    parse_text,
)


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, "", "   ", "-", " - "])
    def test_empty_values(self, value):
        assert is_empty(value)

    def test_custom_tokens(self):
        assert is_empty("n/a", ("n/a",))
        assert not is_empty("-", ("n/a",))

    def test_non_empty(self):
        assert not is_empty("0")


class TestScalarParsers:
    def test_parse_text_strips(self):
        assert parse_text("  Acme  ") == "Acme"
        assert parse_text("   ") is None

    @pytest.mark.parametrize(
        "raw,expected",
        [("350", 350), (" 42 ", 42), ("350.0", 350), ("-7", -7), ("1_000", 1000)],
    )
    def test_parse_integer(self, raw, expected):
        assert parse_integer(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "3.5", "201-500", "NaN", "inf", ""])
    def test_parse_integer_rejects(self, raw):
        assert parse_integer(raw) is None

    def test_parse_number(self):
        assert parse_number("95") == 95.0
        assert parse_number("0.87") == pytest.approx(0.87)
        assert parse_number("high") is None
        assert parse_number("Infinity") is None


class TestParseList:
    def test_split_trim_and_drop_empties(self):
        assert parse_list(" SaaS ; B2B;;-; ") == ("SaaS", "B2B")

    def test_custom_delimiter(self):
        assert parse_list("a|b", delimiter="|") == ("a", "b")

    def test_single_item(self):
        assert parse_list("React") == ("React",)


class TestParseDate:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("01 2024", date(2024, 1, 1)),
            ("3/2021", date(2021, 3, 1)),
            ("11-2019", date(2019, 11, 1)),
            ("2020", date(2020, 1, 1)),
            ("2024-03-05", date(2024, 3, 5)),
            ("03/05/2024", date(2024, 3, 5)),
            ("Jan 15, 2024", date(2024, 1, 15)),
            ("15 March 2022", date(2022, 3, 15)),
            ("2024-01-15T10:30:00Z", date(2024, 1, 15)),
        ],
    )
    def test_accepted_forms(self, raw, expected):
        assert parse_date(raw) == expected

    @pytest.mark.parametrize("raw", ["13 2024", "0000", "yesterday", "2024-02-30", "  "])
    def test_unparseable_is_none(self, raw):
        assert parse_date(raw) is None


class TestCoerceCell:
    def test_dispatches_on_field_type(self):
        assert coerce_cell("350", FieldType.INTEGER) == 350
        assert coerce_cell("a;b", FieldType.LIST) == ("a", "b")
        assert coerce_cell("2020", FieldType.DATE) == date(2020, 1, 1)
        assert coerce_cell(" x ", FieldType.STRING) == "x"

    def test_list_uses_given_delimiter(self):
        assert coerce_cell("a,b", FieldType.LIST, list_delimiter=",") == ("a", "b")

    def test_bad_number_is_none_not_error(self):
        assert coerce_cell("abc", FieldType.INTEGER) is None
