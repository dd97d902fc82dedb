"""
Tests for brewcalc.normalizer.

Parsing never raises, clamping keeps values in range, and formatting
never leaks binary float artifacts.
"""

from decimal import Decimal

import pytest

from brewcalc.normalizer import (
    clamp_non_negative,
    clamp_percent,
    format_decimal,
    format_field,
    parse_decimal,
    parse_optional,
)


class TestParseDecimal:
    """Tests for parse_decimal()."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("5,5", 5.5),
            ("5.5", 5.5),
            (" 12.0 ", 12.0),
            ("0,25", 0.25),
            ("-3", -3.0),
            ("+5", 5.0),
            (",5", 0.5),
            ("5.", 5.0),
            (7, 7.0),
            (2.5, 2.5),
            (Decimal("1.25"), 1.25),
        ],
    )
    def test_accepts_point_and_comma(self, raw, expected):
        assert parse_decimal(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", None, "abc", "1.234,5", "nan", "inf", "-inf", True, "1_000", "1e3", "5,5,5", "0x10", "+"],
    )
    def test_invalid_input_is_zero(self, raw):
        """Empty, garbage and non-finite input all map to 0."""
        assert parse_decimal(raw) == 0.0

    def test_non_finite_float_is_zero(self):
        assert parse_decimal(float("nan")) == 0.0
        assert parse_decimal(float("inf")) == 0.0


class TestParseOptional:
    """Tests for parse_optional()."""

    def test_blank_is_none(self):
        assert parse_optional(None) is None
        assert parse_optional("") is None
        assert parse_optional("  ") is None

    def test_garbage_is_zero_not_none(self):
        assert parse_optional("abc") == 0.0

    def test_number(self):
        assert parse_optional("72,5") == 72.5


class TestClamping:
    """Tests for clamp_non_negative() and clamp_percent()."""

    def test_non_negative_floors_at_zero(self):
        assert clamp_non_negative(-3) == 0.0
        assert clamp_non_negative(4.2) == 4.2

    def test_percent_range(self):
        assert clamp_percent(-1) == 0.0
        assert clamp_percent(150) == 100.0
        assert clamp_percent(75) == 75.0

    def test_none_passes_through(self):
        assert clamp_non_negative(None) is None
        assert clamp_percent(None) is None

    @pytest.mark.parametrize("raw", ["-5", "-0,1", "abc", "", "-1e9", "12"])
    def test_parsed_input_never_negative(self, raw):
        """Whatever the user types, a normalized mass or percentage is >= 0."""
        assert clamp_non_negative(parse_decimal(raw)) >= 0
        assert 0 <= clamp_percent(parse_decimal(raw)) <= 100


class TestFormatDecimal:
    """Tests for format_decimal()."""

    def test_no_binary_artifacts(self):
        assert format_decimal(5.6000000001, 2) == "5.60"

    def test_rounds_half_up_on_shortest_repr(self):
        """2.675 is 2.67499... in binary; users typed 2.675, so round up."""
        assert format_decimal(2.675, 2) == "2.68"
        assert format_decimal(0.5, 0) == "1"

    def test_no_exponent_notation(self):
        assert format_decimal(1e20, 1) == "100000000000000000000.0"
        assert format_decimal(1e-7, 3) == "0.000"

    def test_negative_zero_is_plain_zero(self):
        assert format_decimal(-0.001, 1) == "0.0"

    def test_zero_precision(self):
        assert format_decimal(46.4999, 0) == "46"

    def test_garbage_formats_as_zero(self):
        assert format_decimal("abc", 2) == "0.00"


class TestFormatField:
    """Tests for format_field()."""

    def test_field_precision(self):
        assert format_field("original_gravity_plato", 12.46) == "12.5"
        assert format_field("ibu", 46.5) == "47"
        assert format_field("color_ebc", 8.2) == "8"
        assert format_field("batch_volume_liters", 23.04) == "23.0"

    def test_unknown_field_uses_default_precision(self):
        assert format_field("something", 1.005) == "1.01"

    def test_none_is_empty(self):
        assert format_field("abv_percent", None) == ""
