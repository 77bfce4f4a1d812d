"""Tests for the tolerance and matching primitives."""

from decimal import Decimal

import pytest

from taxxon_core.matching import (
    format_amount,
    names_match,
    parse_amount,
    to_decimal,
    values_match,
)

SAMPLES = [
    Decimal("0"),
    Decimal("0.01"),
    Decimal("42.5"),
    Decimal("99.99"),
    Decimal("100"),
    Decimal("1234.56"),
    Decimal("50000"),
    Decimal("250000.75"),
]


class TestValuesMatch:
    """Test suite for values_match."""

    @pytest.mark.parametrize("value", SAMPLES)
    def test_reflexive(self, value: Decimal):
        """Every value matches itself."""
        assert values_match(value, value)

    def test_symmetric(self):
        """Argument order never changes the answer."""
        for a in SAMPLES:
            for b in SAMPLES:
                assert values_match(a, b) == values_match(b, a)

    def test_small_amounts_use_one_cent_tolerance(self):
        """Under $100 amounts must agree within a cent."""
        assert values_match(Decimal("50.00"), Decimal("50.01"))
        assert not values_match(Decimal("50.00"), Decimal("50.02"))

    def test_large_amounts_use_two_percent_tolerance(self):
        """At or above $100 a 2% drift of the larger value is tolerated."""
        assert values_match(Decimal("1000"), Decimal("1020"))
        assert not values_match(Decimal("1000"), Decimal("1021"))

    def test_regime_switches_on_larger_value(self):
        """The larger of the two values picks the tolerance regime."""
        assert values_match(Decimal("99.99"), Decimal("100"))
        assert not values_match(Decimal("98"), Decimal("99.5"))

    def test_tax_deducted_mismatch(self):
        """$8,500 against $8,000 is well beyond 2%."""
        assert not values_match(Decimal("8500"), Decimal("8000"))

    def test_zero_against_positive(self):
        """Zero never matches a positive amount."""
        assert not values_match(Decimal("0"), Decimal("0.02"))
        assert not values_match(Decimal("0"), Decimal("500"))


class TestParseAmount:
    """Test suite for parse_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (50000, Decimal("50000")),
            (1234.56, Decimal("1234.56")),
            ("8500", Decimal("8500")),
            ("$1,234.56", Decimal("1234.56")),
            ("  42 ", Decimal("42")),
            ("-12.5", Decimal("-12.5")),
            (Decimal("7.25"), Decimal("7.25")),
        ],
    )
    def test_parses_numbers(self, raw, expected: Decimal):
        """Numbers and numeric strings are parsed to Decimal."""
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "N/A", "twelve", True, False, float("nan"), float("inf"), "Infinity", [], {}],
    )
    def test_unparseable_is_zero(self, raw):
        """Anything that is not a finite number becomes zero."""
        assert parse_amount(raw) == Decimal("0")

    @pytest.mark.parametrize("raw", ["9E999999", "-9E999999", "1e16", Decimal("1E+400")])
    def test_implausible_magnitude_is_zero(self, raw):
        """Exponent-notation values too large to be money become zero."""
        assert parse_amount(raw) == Decimal("0")

    def test_large_but_plausible_amount(self):
        assert parse_amount("9999999999999999") == Decimal("9999999999999999")
        assert parse_amount("1.5E3") == Decimal("1500")

    def test_float_goes_through_str(self):
        """Floats keep their short decimal representation."""
        assert to_decimal(0.1) == Decimal("0.1")


class TestNamesMatch:
    """Test suite for names_match."""

    def test_containment_either_direction(self):
        """One name containing the other is a match."""
        assert names_match("Acme Corp", "Acme Corporation")
        assert names_match("ACME CORPORATION", "acme corp")

    def test_unrelated_names(self):
        """Names with no containment do not match."""
        assert not names_match("Acme Corp", "Globex Inc")

    @pytest.mark.parametrize("a,b", [("", "Acme"), ("Acme", ""), ("", ""), ("   ", "Acme")])
    def test_blank_never_matches(self, a: str, b: str):
        """A blank name is not evidence of a match."""
        assert not names_match(a, b)


class TestFormatAmount:
    """Test suite for format_amount."""

    def test_whole_amount(self):
        assert format_amount(Decimal("50000")) == "$50,000"
        assert format_amount(Decimal("8500.00")) == "$8,500"

    def test_cents(self):
        assert format_amount(Decimal("1234.5")) == "$1,234.50"
