# tests/test_validation.py
from __future__ import annotations

from decimal import Decimal

import pytest

from emi_calc.errors import INVALID_INPUT_MESSAGE, InvalidLoanInput, InvalidTenure
from emi_calc.utils import decimal_from_str, parse_amount, parse_percent
from emi_calc.validation import parse_loan_input


def test_parses_plain_strings():
    loan = parse_loan_input(" 500000 ", "8.5", "20")
    assert loan.principal == Decimal("500000")
    assert loan.annual_rate_percent == Decimal("8.5")
    assert loan.tenure_years == Decimal("20")


@pytest.mark.parametrize("raw", ["5,00,000", "500,000", "500k", "5l", "0.5m", "₹5,00,000"])
def test_amount_shorthand_and_grouping(raw):
    assert parse_amount(raw) == Decimal("500000")


def test_percent_sign_is_accepted():
    assert parse_percent("8.5%") == Decimal("8.5")


def test_zero_rate_is_valid():
    assert parse_loan_input("100000", "0", "1").annual_rate_percent == 0


def test_fractional_tenure_is_valid():
    assert parse_loan_input("100000", "9", "1.5").tenure_years == Decimal("1.5")


@pytest.mark.parametrize(
    "fields",
    [
        ("", "8.5", "20"),
        ("500000", "", "20"),
        ("500000", "8.5", "   "),
        (None, "8.5", "20"),
        ("abc", "8.5", "20"),
        ("0", "8.5", "20"),
        ("-100", "8.5", "20"),
        ("500000", "-1", "20"),
        ("500000", "8.5", "0"),
        ("500000", "8.5", "-2"),
        ("nan", "8.5", "20"),
        ("500000", "inf", "20"),
        ("k", "8.5", "20"),
    ],
)
def test_invalid_fields_raise_with_user_message(fields):
    with pytest.raises(InvalidLoanInput) as info:
        parse_loan_input(*fields)
    assert str(info.value) == INVALID_INPUT_MESSAGE
    assert info.value.message == INVALID_INPUT_MESSAGE


def test_custom_message_is_carried():
    with pytest.raises(InvalidLoanInput, match="try again"):
        parse_loan_input("", "", "", message="try again")


def test_decimal_from_str_uses_decimal_text_of_floats():
    assert decimal_from_str(0.1) == Decimal("0.1")
    with pytest.raises(ValueError):
        decimal_from_str("twelve")


def test_overlong_tenure_keeps_its_own_message():
    with pytest.raises(InvalidTenure, match="cannot exceed 100 years"):
        parse_loan_input("500000", "8.5", "1e8")


def test_overflowing_amount_is_invalid_input():
    with pytest.raises(InvalidLoanInput, match=INVALID_INPUT_MESSAGE):
        parse_loan_input("1e999999k", "8.5", "20")
