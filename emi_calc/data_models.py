"""Data models for the EMI calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan input supplied by the user, individual schedule entries,
the computed loan result and the outcome of a two-loan comparison. Using
frozen dataclasses keeps results immutable so they can be shared between the
CLI, the web app and the chat assistant without copying.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .errors import InvalidLoanInput, InvalidTenure

# Longest loan accepted; keeps the schedule at no more than 1200 rows.
MAX_TENURE_YEARS = 100


@dataclass(frozen=True)
class LoanInput:
    """A validated loan request.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed. Must be positive.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``8.5`` means 8.5 %). Zero is
        allowed and produces a straight-line schedule.
    tenure_years: Decimal
        Loan duration in years, at most ``MAX_TENURE_YEARS``. Fractional
        years are permitted and are converted to whole months by the engine.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    tenure_years: Decimal

    def __post_init__(self) -> None:
        for value in (self.principal, self.annual_rate_percent, self.tenure_years):
            if not isinstance(value, Decimal) or not value.is_finite():
                raise InvalidLoanInput()
        if self.principal <= 0 or self.annual_rate_percent < 0 or self.tenure_years <= 0:
            raise InvalidLoanInput()
        if self.tenure_years > MAX_TENURE_YEARS:
            raise InvalidTenure(f"Loan tenure cannot exceed {MAX_TENURE_YEARS} years.")


@dataclass(frozen=True)
class AmortizationEntry:
    """One month of the amortization schedule.

    ``principal_component + interest_component`` equals ``payment_amount`` for
    every period except the last, where the principal component is forced to
    the entering balance so the loan closes at exactly zero.
    """

    period: int
    payment_amount: Decimal
    principal_component: Decimal
    interest_component: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class LoanResult:
    """The computed EMI, totals and full schedule for one loan."""

    installment_amount: Decimal
    total_interest: Decimal
    total_payment: Decimal
    schedule: Tuple[AmortizationEntry, ...]

    @property
    def period_count(self) -> int:
        return len(self.schedule)

    @property
    def principal(self) -> Decimal:
        """Sum of principal repaid over the schedule."""
        return sum((e.principal_component for e in self.schedule), Decimal("0"))

    @property
    def nominal_total_payment(self) -> Decimal:
        """``installment_amount × period_count``.

        This can differ from ``total_payment`` by a fraction of a cent because
        the last period absorbs the accumulated rounding drift.
        ``total_payment`` is the authoritative figure.
        """
        return self.installment_amount * self.period_count


@dataclass(frozen=True)
class ComparisonOutcome:
    """Results of computing two loans side by side.

    Either result may be ``None`` when that side's input was invalid. At
    least one of them is always present.
    """

    first: Optional[LoanResult]
    second: Optional[LoanResult]
    message: str
