"""Error types raised by the EMI calculator.

Exports
-------
- InvalidLoanInput: principal/rate/tenure failed validation
- InvalidTenure: the tenure rounds to zero whole months or is too long
- ComputationUnavailable: the chat assistant's text-generation call failed
"""

from __future__ import annotations

INVALID_INPUT_MESSAGE = "Please enter valid positive numbers for all fields."


class InvalidLoanInput(ValueError):
    """Loan input violated principal > 0, rate >= 0 or tenure > 0.

    The message is meant to be shown to the user as is.
    """

    def __init__(self, message: str = INVALID_INPUT_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class InvalidTenure(InvalidLoanInput):
    """The tenure converts to zero monthly periods or exceeds the longest term."""


class ComputationUnavailable(RuntimeError):
    """Transport or non-success status from the text-generation endpoint."""


__all__ = [
    "INVALID_INPUT_MESSAGE",
    "InvalidLoanInput",
    "InvalidTenure",
    "ComputationUnavailable",
]
