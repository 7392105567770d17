"""Utility functions for the EMI calculator.

This module provides helpers for parsing user input into ``Decimal`` values
and for converting a tenure in years into a whole number of monthly periods.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[str, int, float, Decimal]

# Shorthand suffixes accepted for amounts, e.g. "500k" or "5l" (lakh).
_AMOUNT_SUFFIXES = {
    "k": Decimal("1000"),
    "l": Decimal("100000"),
    "m": Decimal("1000000"),
}


def decimal_from_str(value: Number) -> Decimal:
    """Convert a numeric string (or number) into a ``Decimal``.

    The function strips whitespace and thousands separators. Floats are
    converted through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion. It raises ``ValueError`` if conversion fails
    or the value is not finite.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            cleaned = str(value).strip().replace(",", "")
            result = Decimal(cleaned)
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: Number) -> Decimal:
    """Parse a loan amount with optional ``k``/``l``/``m`` suffixes.

    Accepts plain numbers ("500000"), grouped numbers ("5,00,000") and
    shorthand such as "500k" (500 000), "5l" (5 lakh) or "1.2m".
    """
    if not isinstance(value, str):
        return decimal_from_str(value)
    text = value.strip().lower().replace("₹", "")
    factor = Decimal("1")
    if text and text[-1] in _AMOUNT_SUFFIXES:
        factor = _AMOUNT_SUFFIXES[text[-1]]
        text = text[:-1]
    return decimal_from_str(text) * factor


def parse_percent(value: Number) -> Decimal:
    """Parse an annual rate such as "8.5" or "8.5%" into percent units."""
    if isinstance(value, str):
        value = value.strip()
        if value.endswith("%"):
            value = value[:-1]
    return decimal_from_str(value)


def tenure_to_months(tenure_years: Decimal) -> int:
    """Return the number of monthly periods for a tenure in years.

    Fractional months are rounded to the nearest whole month, with exact
    halves rounded up (0.125 years is 1.5 months and becomes 2).
    """
    months = (tenure_years * 12).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(months)
