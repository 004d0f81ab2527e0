"""
Amount Normalization

Turns whatever the user typed into the amount field into a float, or
rejects it. Users paste amounts like "12,50 €", "15 eur" or "20euros";
all of these must come out as plain numbers.

Cleaning runs as a fixed pipeline of small steps, each usable and
testable on its own:

1. lowercase
2. drop the whole-word currency tokens "euro", "euros", "eur"
3. drop euro symbols and all whitespace
4. turn decimal commas into decimal points
5. drop every remaining letter

The cleaned text is then read as a leading float prefix: "12.5x"
gives 12.5, "x12" gives nothing.

Invalid input yields NaN (see INVALID_AMOUNT), never an exception.
"""

import math
from itertools import groupby
from typing import Any

# Sentinel returned for anything that is not a usable amount
INVALID_AMOUNT = math.nan

CURRENCY_WORDS = frozenset({"euro", "euros", "eur"})

# The euro sign, plus the form it takes when UTF-8 is decoded as cp1252
CURRENCY_SYMBOLS = ("â‚¬", "€")

_ASCII_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_WORD_CHARS = _ASCII_LETTERS | frozenset("0123456789_")
_DIGITS = frozenset("0123456789")


def is_finite_number(value: Any) -> bool:
    """True for real int/float values that are finite. Booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def is_valid_amount(value: float) -> bool:
    """Check a normalized amount."""
    return is_finite_number(value)


# =============================================================================
# CLEANING STEPS
# =============================================================================

def strip_currency_words(text: str) -> str:
    """
    Remove standalone currency words.

    The text is split into runs of word characters and runs of
    everything else; only a word run that is exactly a currency token
    is dropped, so "eureka" and "20euros" pass through untouched.
    """
    pieces = []
    for is_word, run in groupby(text, key=lambda ch: ch in _WORD_CHARS):
        token = "".join(run)
        if is_word and token.lower() in CURRENCY_WORDS:
            continue
        pieces.append(token)
    return "".join(pieces)


def strip_symbols_and_whitespace(text: str) -> str:
    """Remove euro signs and every whitespace character."""
    for symbol in CURRENCY_SYMBOLS:
        text = text.replace(symbol, "")
    return "".join(ch for ch in text if not ch.isspace())


def decimal_comma_to_point(text: str) -> str:
    """Read "12,50" as "12.50"."""
    return text.replace(",", ".")


def strip_letters(text: str) -> str:
    """Remove any alphabetic characters left over (units, stray words)."""
    return "".join(ch for ch in text if ch not in _ASCII_LETTERS)


def clean_amount_text(text: str) -> str:
    """Run the full cleaning pipeline over raw text."""
    text = text.lower()
    text = strip_currency_words(text)
    text = strip_symbols_and_whitespace(text)
    text = decimal_comma_to_point(text)
    return strip_letters(text)


# =============================================================================
# PARSING
# =============================================================================

def parse_leading_float(text: str) -> float:
    """
    Parse the longest numeric prefix of text.

    Accepts an optional sign, digits with an optional fractional part
    (".5" and "5." are both fine) and an optional exponent. Anything
    after the prefix is ignored. Returns NaN when there is no prefix.
    """
    text = text.lstrip()
    pos = 0
    length = len(text)

    if pos < length and text[pos] in "+-":
        pos += 1

    int_start = pos
    while pos < length and text[pos] in _DIGITS:
        pos += 1
    int_digits = pos - int_start

    frac_digits = 0
    if pos < length and text[pos] == ".":
        frac_start = pos + 1
        end = frac_start
        while end < length and text[end] in _DIGITS:
            end += 1
        frac_digits = end - frac_start
        if int_digits or frac_digits:
            pos = end

    if not int_digits and not frac_digits:
        return INVALID_AMOUNT

    # Exponent only counts when at least one digit follows it
    if pos < length and text[pos] in "eE":
        exp_pos = pos + 1
        if exp_pos < length and text[exp_pos] in "+-":
            exp_pos += 1
        exp_start = exp_pos
        while exp_pos < length and text[exp_pos] in _DIGITS:
            exp_pos += 1
        if exp_pos > exp_start:
            pos = exp_pos

    try:
        return float(text[:pos])
    except (ValueError, OverflowError):
        return INVALID_AMOUNT


def normalize_amount(value: Any) -> float:
    """
    Convert user input into an amount.

    Args:
        value: Text, a number, or None

    Returns:
        The amount as a float, or NaN when the input is not usable.
        Finite numbers are returned unchanged without any cleaning.
    """
    if value is None:
        return INVALID_AMOUNT

    if is_finite_number(value):
        return float(value)

    cleaned = clean_amount_text(str(value))
    parsed = parse_leading_float(cleaned)

    if not math.isfinite(parsed):
        return INVALID_AMOUNT
    return parsed
