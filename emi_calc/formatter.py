"""Output helpers for the EMI calculator.

This module renders computed loans for people: rupee-formatted amounts,
the principal-versus-interest chart data consumed by the web page, JSON-safe
schedule rows and simple text tables for the terminal. Rounding to two
decimals happens here only; the engine keeps full precision.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional

from .comparison import metric_rows
from .data_models import AmortizationEntry, ComparisonOutcome, LoanResult

CURRENCY_SYMBOL = "₹"
CENT = Decimal("0.01")


def _group_en_in(digits: str) -> str:
    """Group an integer digit string the Indian way: 12,34,56,789."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_number(amount: Any) -> str:
    """Format a number with two decimals and en-IN digit grouping."""
    value = Decimal(str(amount if amount is not None else 0)).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, frac = f"{abs(value):.2f}".partition(".")
    return f"{sign}{_group_en_in(whole)}.{frac}"


def format_currency(amount: Any) -> str:
    """Return ``amount`` as a rupee string, e.g. ``₹5,00,000.00``.

    ``None`` is shown as zero.
    """
    text = format_number(amount)
    if text.startswith("-"):
        return f"-{CURRENCY_SYMBOL}{text[1:]}"
    return f"{CURRENCY_SYMBOL}{text}"


def chart_payload(result: LoanResult) -> Dict[str, Any]:
    """Data for the principal-versus-interest doughnut chart."""
    principal = float(result.principal)
    interest = float(result.total_interest)
    total = principal + interest
    shares = [round(v / total * 100, 2) if total else 0.0 for v in (principal, interest)]
    return {
        "labels": ["Principal Amount", "Total Interest"],
        "values": [principal, interest],
        "percentages": shares,
    }


def serialize_schedule(schedule: Iterable[AmortizationEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    return [
        {
            "month": e.period,
            "payment": float(e.payment_amount),
            "principal": float(e.principal_component),
            "interest": float(e.interest_component),
            "balance": float(e.remaining_balance),
        }
        for e in schedule
    ]


def print_summary(result: LoanResult) -> None:
    """Print the EMI and totals in a human-readable format."""
    print("Summary")
    print("-" * 48)
    print(f"Monthly EMI        : {format_currency(result.installment_amount)}")
    print(f"Total interest     : {format_currency(result.total_interest)}")
    print(f"Total payment      : {format_currency(result.total_payment)}")
    print(f"Months             : {result.period_count}")
    print("-" * 48)


def print_schedule(schedule: Iterable[AmortizationEntry], max_rows: Optional[int] = None) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[AmortizationEntry]
        The schedule entries to print.
    max_rows: Optional[int]
        Print at most this many rows and note how many were left out.
    """
    rows = list(schedule)
    shown = rows if max_rows is None else rows[:max_rows]
    print("\t".join(["Month", "Payment", "Principal", "Interest", "Balance"]))
    for entry in shown:
        print(
            "\t".join(
                [
                    str(entry.period),
                    format_number(entry.payment_amount),
                    format_number(entry.principal_component),
                    format_number(entry.interest_component),
                    format_number(entry.remaining_balance),
                ]
            )
        )
    if len(shown) < len(rows):
        print(f"... {len(rows) - len(shown)} more rows not shown.")
    print("Note: Totals may vary slightly due to final payment adjustments for rounding.")


def print_comparison(outcome: ComparisonOutcome) -> None:
    """Print two loans side by side.

    The difference column is Loan 2 minus Loan 1; a negative difference means
    the second loan is cheaper. It is left blank when a side is missing.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':16s} {'Loan 1':>18s} {'Loan 2':>18s} {'Difference':>18s}")
    for label, v1, v2 in metric_rows(outcome):
        c1 = format_currency(v1) if v1 is not None else "N/A"
        c2 = format_currency(v2) if v2 is not None else "N/A"
        diff = format_currency(v2 - v1) if v1 is not None and v2 is not None else ""
        print(f"{label:16s} {c1:>18s} {c2:>18s} {diff:>18s}")
    print("=" * 72)
    print(outcome.message)
