"""Amount validation package."""

from expense_tracker.validation.amount import (
    INVALID_AMOUNT,
    clean_amount_text,
    is_finite_number,
    is_valid_amount,
    normalize_amount,
    parse_leading_float,
)

__all__ = [
    "INVALID_AMOUNT",
    "clean_amount_text",
    "is_finite_number",
    "is_valid_amount",
    "normalize_amount",
    "parse_leading_float",
]
