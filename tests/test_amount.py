"""Tests for amount normalization."""

import math

import pytest

from expense_tracker.validation.amount import (
    clean_amount_text,
    decimal_comma_to_point,
    is_finite_number,
    normalize_amount,
    parse_leading_float,
    strip_currency_words,
    strip_letters,
    strip_symbols_and_whitespace,
)


class TestNumericFastPath:
    """Finite numbers pass through untouched."""

    @pytest.mark.parametrize("value", [0, 12, -7, 12.5, 1e-9, 123456789.125])
    def test_finite_numbers_are_identity(self, value):
        """Test normalize(x) == x for finite numbers."""
        assert normalize_amount(value) == value

    def test_non_finite_floats_are_rejected(self):
        """Test that NaN and infinities never come back as amounts."""
        assert math.isnan(normalize_amount(float("nan")))
        assert math.isnan(normalize_amount(float("inf")))
        assert math.isnan(normalize_amount(float("-inf")))

    def test_booleans_are_not_numbers(self):
        """Test that True is not read as 1."""
        assert not is_finite_number(True)
        assert math.isnan(normalize_amount(True))

    def test_huge_integer_is_rejected(self):
        """Test that ints beyond float range are rejected, not raised."""
        assert not is_finite_number(10 ** 400)


class TestTextNormalization:
    """Loosely formatted text amounts."""

    def test_decimal_comma_with_euro_sign(self):
        assert normalize_amount("12,50 €") == 12.5

    def test_glued_currency_word(self):
        assert normalize_amount("20euros") == 20

    def test_separate_currency_word(self):
        assert normalize_amount("15 eur") == 15
        assert normalize_amount("15 EUR") == 15
        assert normalize_amount("7 euro") == 7

    def test_leading_symbol_and_inner_spaces(self):
        assert normalize_amount("€ 1 234,56") == 1234.56

    def test_negative_amount(self):
        assert normalize_amount("-5,25") == -5.25

    def test_trailing_garbage_after_number(self):
        assert normalize_amount("12.5 (approx.)") == 12.5

    @pytest.mark.parametrize("value", ["eureka", "abc", "", "   ", "€", "eur", "-", "."])
    def test_text_without_number_is_invalid(self, value):
        assert math.isnan(normalize_amount(value))

    def test_none_is_invalid(self):
        assert math.isnan(normalize_amount(None))


class TestCleaningSteps:
    """Each cleaning step on its own."""

    def test_currency_words_need_word_boundaries(self):
        """Test that only exact currency tokens are removed."""
        assert strip_currency_words("eureka eur") == "eureka "
        assert strip_currency_words("20euros") == "20euros"
        assert strip_currency_words("5 euros, 3 euro") == "5 , 3 "

    def test_symbols_and_whitespace(self):
        assert strip_symbols_and_whitespace(" 1 2\t3€\n") == "123"
        assert strip_symbols_and_whitespace("9â‚¬") == "9"

    def test_decimal_comma(self):
        assert decimal_comma_to_point("3,14") == "3.14"

    def test_strip_letters(self):
        assert strip_letters("12kg5") == "125"

    def test_full_pipeline(self):
        assert clean_amount_text("  12,50 EUR ") == "12.50"


class TestParseLeadingFloat:
    """Leading numeric prefix parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("12.5x", 12.5),
            ("1.2.3", 1.2),
            ("-3", -3.0),
            ("+4", 4.0),
            (".5", 0.5),
            ("5.", 5.0),
            ("1e3", 1000.0),
            ("1e", 1.0),
            ("2E-2kg", 0.02),
        ],
    )
    def test_valid_prefixes(self, text, expected):
        assert parse_leading_float(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "-", "+.", "--5", "x12"])
    def test_no_prefix(self, text):
        assert math.isnan(parse_leading_float(text))

    def test_infinity_word_is_not_a_number(self):
        assert math.isnan(parse_leading_float("Infinity"))
        assert math.isnan(normalize_amount("-Infinity"))

    def test_overflowing_exponent_is_not_finite(self):
        """Test that an exponent past float range never yields an amount."""
        assert parse_leading_float("1e999") == math.inf
        assert math.isnan(normalize_amount(float("1e999")))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
