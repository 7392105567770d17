"""Core calculation engine for the EMI calculator.

This module implements the financial logic required to build the
amortization schedule of a fixed-rate, fully amortizing loan repaid in equal
monthly installments (EMI). Results are returned as an immutable
``LoanResult`` holding the installment, the totals and one ``AmortizationEntry``
per month.

The engine is a pure function of its inputs. It keeps no module state, so it
can be called concurrently and its results can be cached by input tuple.
"""

from __future__ import annotations

from decimal import Decimal, Overflow, getcontext, localcontext
from typing import List, Tuple

from .data_models import AmortizationEntry, LoanInput, LoanResult
from .errors import InvalidLoanInput, InvalidTenure
from .utils import Number, decimal_from_str, tenure_to_months

getcontext().prec = 28  # increase precision for financial calculations

ZERO = Decimal("0")

# Below this value of n * i the annuity and its first-order expansion agree
# to well beyond 28 digits.
_SERIES_THRESHOLD = Decimal("1e-30")

TOO_LARGE_MESSAGE = "Loan values are too large to compute."


def _calculate_installment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the equal monthly installment for a loan.

    The formula is:

        payment = P * i / (1 - (1 + i)^-n)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.

    ``1 - (1 + i)^-n`` is close to ``n * i`` for small rates, so it is
    evaluated with enough extra digits to survive the subtraction. When
    ``n * i`` is below the working precision the first-order expansion
    ``P / n * (1 + (n + 1) * i / 2)`` is used instead.
    """
    if term <= 0:
        raise InvalidTenure("Loan tenure must be at least one month.")
    if rate_per_month == 0:
        return principal / Decimal(term)
    if rate_per_month * term < _SERIES_THRESHOLD:
        return principal / Decimal(term) * (1 + (term + 1) * rate_per_month / 2)
    with localcontext() as ctx:
        ctx.prec += max(0, -rate_per_month.adjusted()) + len(str(term))
        discount = (1 + rate_per_month) ** -term
        installment = principal * rate_per_month / (1 - discount)
    return +installment


def compute_loan(loan: LoanInput) -> LoanResult:
    """Compute the EMI, totals and amortization schedule for ``loan``.

    Parameters
    ----------
    loan: LoanInput
        A validated loan request.

    Returns
    -------
    LoanResult
        ``installment_amount`` is the constant monthly payment,
        ``total_interest`` the sum of the schedule's interest column and
        ``total_payment`` equals ``principal + total_interest``.

    Raises
    ------
    InvalidTenure
        If the tenure rounds to zero whole months.
    InvalidLoanInput
        If the amounts are too large for decimal arithmetic.
    """
    rate_per_month = loan.annual_rate_percent / Decimal(12 * 100)
    term = tenure_to_months(loan.tenure_years)
    try:
        installment = _calculate_installment(loan.principal, rate_per_month, term)
        schedule, total_interest = _build_schedule(loan.principal, rate_per_month, term, installment)
        total_payment = loan.principal + total_interest
    except Overflow as exc:
        raise InvalidLoanInput(TOO_LARGE_MESSAGE) from exc

    return LoanResult(
        installment_amount=installment,
        total_interest=total_interest,
        total_payment=total_payment,
        schedule=tuple(schedule),
    )


def _build_schedule(
    principal: Decimal, rate_per_month: Decimal, term: int, installment: Decimal
) -> Tuple[List[AmortizationEntry], Decimal]:
    schedule: List[AmortizationEntry] = []
    balance = principal
    total_interest = ZERO
    for period in range(1, term + 1):
        interest = balance * rate_per_month
        if period == term:
            # Last period closes the loan exactly, absorbing rounding drift.
            principal_component = balance
        else:
            principal_component = installment - interest
        balance -= principal_component
        if balance < 0:
            balance = ZERO
        total_interest += interest
        schedule.append(
            AmortizationEntry(
                period=period,
                payment_amount=installment,
                principal_component=principal_component,
                interest_component=interest,
                remaining_balance=balance,
            )
        )
    return schedule, total_interest


def compute_amortization(principal: Number, annual_rate_percent: Number, tenure_years: Number) -> LoanResult:
    """Compute a loan from plain values.

    Accepts strings, ints, floats or ``Decimal`` values and raises
    ``InvalidLoanInput`` if any of them is not a finite number satisfying
    principal > 0, rate >= 0 and tenure > 0.
    """
    try:
        loan = LoanInput(
            principal=decimal_from_str(principal),
            annual_rate_percent=decimal_from_str(annual_rate_percent),
            tenure_years=decimal_from_str(tenure_years),
        )
    except ValueError as exc:
        if isinstance(exc, InvalidLoanInput):
            raise
        raise InvalidLoanInput() from exc
    return compute_loan(loan)
