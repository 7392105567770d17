"""Command‑line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi‑command
interface. Users can print a full amortization schedule, view only the
summary, compare two loans side by side or ask the chat assistant a question
about a loan.
"""

from __future__ import annotations

import logging
import shlex
from typing import Optional, Tuple

import click

from .assistant import ChatSession, GeminiClient, build_loan_context
from .comparison import compare_loans
from .data_models import LoanInput, LoanResult
from .engine import compute_loan
from .errors import InvalidLoanInput
from .formatter import print_comparison, print_schedule, print_summary
from .validation import parse_loan_input


def build_loan_from_options(principal: str, rate: str, tenure: str) -> LoanInput:
    """Validate CLI option strings, turning failures into ``click.BadParameter``."""
    try:
        return parse_loan_input(principal, rate, tenure)
    except InvalidLoanInput as exc:
        raise click.BadParameter(exc.message)


def _run(loan: LoanInput) -> LoanResult:
    try:
        return compute_loan(loan)
    except InvalidLoanInput as exc:
        raise click.BadParameter(exc.message)


def parse_scenario_opts(opts: str) -> Tuple[str, str, str]:
    """Parse a quoted scenario string such as ``"-p 500k -r 8.5 -t 20"``.

    Returns the raw ``(principal, rate, tenure)`` strings.
    """
    tokens = shlex.split(opts)
    params = {"principal": None, "rate": None, "tenure": None}
    names = {
        "-p": "principal",
        "--principal": "principal",
        "-r": "rate",
        "--rate": "rate",
        "-t": "tenure",
        "--tenure": "tenure",
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in names:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {token} needs a value")
        params[names[token]] = tokens[i + 1]
        i += 2
    for key, value in params.items():
        if value is None:
            raise click.BadParameter(f"Scenario missing required option {key}")
    return params["principal"], params["rate"], params["tenure"]


def loan_options(func):
    """Shared ``--principal``/``--rate``/``--tenure`` options."""
    func = click.option("--tenure", "-t", "tenure", required=True, help="Loan tenure in years (e.g. 20 or 1.5)")(func)
    func = click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)")(func)
    func = click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 500000, 500k, 5l)")(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """An EMI calculator with loan comparison and an AI assistant."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@loan_options
@click.option("--max-rows", "max_rows", type=int, default=120, show_default=True, help="Rows of the schedule to print (0 for all)")
def schedule(principal: str, rate: str, tenure: str, max_rows: int) -> None:
    """Compute and print the full amortization schedule."""
    result = _run(build_loan_from_options(principal, rate, tenure))
    print_summary(result)
    if max_rows and result.period_count > max_rows:
        click.echo(f"Schedule has {result.period_count} rows; showing first {max_rows} rows.")
        print_schedule(result.schedule, max_rows=max_rows)
    else:
        print_schedule(result.schedule)


@cli.command()
@loan_options
def summary(principal: str, rate: str, tenure: str) -> None:
    """Compute and print only the EMI and totals."""
    print_summary(_run(build_loan_from_options(principal, rate, tenure)))


@cli.command()
@click.option("--loan1", "loan1", required=True, help="First loan options quoted string")
@click.option("--loan2", "loan2", required=True, help="Second loan options quoted string")
def compare(loan1: str, loan2: str) -> None:
    """Compare two loans.

    Loans are provided as quoted option strings, for example:

        emi-calc compare --loan1 "-p 500k -r 8.5 -t 20" --loan2 "-p 500k -r 7.9 -t 15"

    A loan whose values are not valid is shown as N/A.
    """
    try:
        outcome = compare_loans(parse_scenario_opts(loan1), parse_scenario_opts(loan2))
    except InvalidLoanInput as exc:
        raise click.UsageError(exc.message)
    print_comparison(outcome)


@cli.command()
@click.argument("question")
@click.option("--principal", "-p", "principal", help="Loan amount to include as context")
@click.option("--rate", "-r", "rate", help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure", help="Loan tenure in years")
def ask(question: str, principal: Optional[str], rate: Optional[str], tenure: Optional[str]) -> None:
    """Ask the AI assistant a question, optionally about a loan.

    Reads GEMINI_API_KEY and GEMINI_URL from the environment.
    """
    loans = []
    if principal or rate or tenure:
        loan = build_loan_from_options(principal or "", rate or "", tenure or "")
        loans.append(("Loan 1", loan, _run(loan)))
    session = ChatSession()
    reply = session.submit(question, build_loan_context(loans), GeminiClient.from_env())
    if reply is None:
        raise click.BadParameter("Question must not be empty")
    click.echo(reply)


if __name__ == "__main__":
    cli()
