# tests/conftest.py
from __future__ import annotations

from decimal import Decimal

import pytest

from emi_calc.data_models import LoanInput
from emi_calc.engine import compute_loan


class FakeGenerator:
    """Records prompts and returns a canned reply (or raises)."""

    def __init__(self, reply: str = "An EMI is a fixed monthly payment.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def home_loan() -> LoanInput:
    """₹5 lakh at 8.5 % for 20 years."""
    return LoanInput(Decimal("500000"), Decimal("8.5"), Decimal("20"))


@pytest.fixture
def home_loan_result(home_loan):
    return compute_loan(home_loan)


@pytest.fixture
def fake_generator():
    def _factory(**kwargs) -> FakeGenerator:
        return FakeGenerator(**kwargs)

    return _factory
