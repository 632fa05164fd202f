"""Unit tests for lenient input coercion."""

from __future__ import annotations

from decimal import Decimal

import pytest

from estimatepro.core.coerce import round_half_up, to_number, to_optional_number, to_text


class TestToNumber:
    """Malformed numeric input becomes 0 instead of an error."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("12.5", 12.5),
            ("  7 ", 7.0),
            (3, 3.0),
            (Decimal("2.50"), 2.5),
            (True, 1.0),
            (False, 0.0),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "nan", "inf", [], {}])
    def test_malformed_values_become_zero(self, value):
        assert to_number(value) == 0.0


class TestToOptionalNumber:
    def test_blank_is_none(self):
        assert to_optional_number(None) is None
        assert to_optional_number("") is None
        assert to_optional_number("   ") is None

    def test_malformed_is_zero_not_none(self):
        assert to_optional_number("abc") == 0.0

    def test_number_passes_through(self):
        assert to_optional_number("3") == 3.0


class TestToText:
    def test_none_is_empty(self):
        assert to_text(None) == ""

    def test_strips_and_stringifies(self):
        assert to_text("  Demolition ") == "Demolition"
        assert to_text(5) == "5"


class TestRoundHalfUp:
    """Currency rounding rounds halves away from zero, never to even."""

    def test_half_cent_rounds_up(self):
        assert round_half_up(0.125) == 0.13
        assert round_half_up(2.675) == 2.68

    def test_whole_amounts_unchanged(self):
        assert round_half_up(115.00000000000001) == 115.0

    def test_malformed_input_is_zero(self):
        assert round_half_up("abc") == 0.0
