"""Side-by-side computation of two independent loans."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .data_models import ComparisonOutcome, LoanInput, LoanResult
from .engine import compute_loan
from .errors import InvalidLoanInput
from .validation import parse_loan_input

logger = logging.getLogger(__name__)

NO_VALID_SCENARIO_MESSAGE = "Please enter valid numbers for at least one loan scenario."

# The three headline metrics shown in the comparison table.
COMPARISON_METRICS: Tuple[Tuple[str, str], ...] = (
    ("Monthly EMI", "installment_amount"),
    ("Total Interest", "total_interest"),
    ("Total Payment", "total_payment"),
)


def _try_parse(fields: Sequence) -> Optional[LoanInput]:
    try:
        return parse_loan_input(*fields)
    except InvalidLoanInput:
        return None


def compare_inputs(first: Optional[LoanInput], second: Optional[LoanInput]) -> ComparisonOutcome:
    """Compute each present input on its own and describe what was compared.

    Raises ``InvalidLoanInput`` when neither input is present.
    """
    if first is None and second is None:
        raise InvalidLoanInput(NO_VALID_SCENARIO_MESSAGE)

    result1 = compute_loan(first) if first is not None else None
    result2 = compute_loan(second) if second is not None else None

    if result1 is not None and result2 is not None:
        message = "Comparison calculated successfully."
    elif result1 is not None:
        message = "Comparison calculated for Loan 1 only."
    else:
        message = "Comparison calculated for Loan 2 only."
    logger.debug("comparison: %s", message)
    return ComparisonOutcome(first=result1, second=result2, message=message)


def compare_loans(first: Sequence, second: Sequence) -> ComparisonOutcome:
    """Validate two raw ``(amount, rate, tenure)`` triples and compare them.

    A side whose fields do not validate is left out (its result is ``None``)
    instead of failing the whole comparison.
    """
    return compare_inputs(_try_parse(first), _try_parse(second))


def metric_rows(outcome: ComparisonOutcome):
    """Yield ``(label, first_value, second_value)`` for the comparison table.

    Missing sides yield ``None``.
    """
    for label, attr in COMPARISON_METRICS:
        yield label, _metric(outcome.first, attr), _metric(outcome.second, attr)


def _metric(result: Optional[LoanResult], attr: str):
    return getattr(result, attr) if result is not None else None
