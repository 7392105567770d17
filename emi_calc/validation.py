"""Turn raw form or command-line values into a validated ``LoanInput``."""

from __future__ import annotations

from typing import Optional

from .data_models import LoanInput
from .errors import INVALID_INPUT_MESSAGE, InvalidLoanInput, InvalidTenure
from .utils import Number, decimal_from_str, parse_amount, parse_percent


def parse_loan_input(
    amount: Optional[Number],
    rate: Optional[Number],
    tenure: Optional[Number],
    *,
    message: str = INVALID_INPUT_MESSAGE,
) -> LoanInput:
    """Parse the three loan fields and check them.

    Empty fields, non-numeric text, NaN/infinity, a non-positive amount, a
    negative rate or a non-positive tenure all raise ``InvalidLoanInput``
    carrying ``message``. A tenure longer than ``MAX_TENURE_YEARS`` raises
    ``InvalidTenure`` with its own message.
    """
    if any(v is None or (isinstance(v, str) and not v.strip()) for v in (amount, rate, tenure)):
        raise InvalidLoanInput(message)
    try:
        return LoanInput(
            principal=parse_amount(amount),
            annual_rate_percent=parse_percent(rate),
            tenure_years=decimal_from_str(tenure),
        )
    except InvalidTenure:
        raise
    except (ValueError, ArithmeticError) as exc:
        raise InvalidLoanInput(message) from exc

