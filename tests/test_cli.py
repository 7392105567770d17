# tests/test_cli.py
from __future__ import annotations

import click
import pytest
from click.testing import CliRunner

from emi_calc import main
from emi_calc.main import cli, parse_scenario_opts


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_summary(runner):
    res = runner.invoke(cli, ["summary", "-p", "500k", "-r", "8.5", "-t", "20"])
    assert res.exit_code == 0, res.output
    assert "Monthly EMI        : ₹4,339." in res.output
    assert "Months             : 240" in res.output


def test_schedule_truncates_long_output(runner):
    res = runner.invoke(cli, ["schedule", "-p", "500000", "-r", "8.5", "-t", "20", "--max-rows", "12"])
    assert res.exit_code == 0, res.output
    assert "Schedule has 240 rows; showing first 12 rows." in res.output
    assert "228 more rows not shown." in res.output


def test_schedule_prints_every_row_for_short_loans(runner):
    res = runner.invoke(cli, ["schedule", "-p", "120000", "-r", "0", "-t", "1"])
    assert res.exit_code == 0, res.output
    assert "12\t10,000.00\t10,000.00\t0.00\t0.00" in res.output


def test_invalid_input_is_a_usage_error(runner):
    res = runner.invoke(cli, ["summary", "-p", "abc", "-r", "8.5", "-t", "20"])
    assert res.exit_code == 2
    assert "Please enter valid positive numbers for all fields." in res.output


def test_tenure_under_half_a_month_is_rejected(runner):
    res = runner.invoke(cli, ["summary", "-p", "1000", "-r", "8", "-t", "0.04"])
    assert res.exit_code == 2
    assert "at least one month" in res.output


def test_compare_both(runner):
    res = runner.invoke(cli, ["compare", "--loan1", "-p 500k -r 8.5 -t 20", "--loan2", "-p 500k -r 7.9 -t 15"])
    assert res.exit_code == 0, res.output
    assert "Monthly EMI" in res.output
    assert "Comparison calculated successfully." in res.output


def test_compare_one_invalid(runner):
    res = runner.invoke(cli, ["compare", "--loan1", "-p 500k -r 8.5 -t 20", "--loan2", "-p 0 -r 7.9 -t 15"])
    assert res.exit_code == 0, res.output
    assert "N/A" in res.output
    assert "Comparison calculated for Loan 1 only." in res.output


def test_compare_none_valid(runner):
    res = runner.invoke(cli, ["compare", "--loan1", "-p x -r 1 -t 1", "--loan2", "-p 0 -r 1 -t 1"])
    assert res.exit_code == 2
    assert "at least one loan scenario" in res.output


def test_parse_scenario_opts():
    assert parse_scenario_opts("--principal 5l -r 9 --tenure 3") == ("5l", "9", "3")
    with pytest.raises(click.BadParameter):
        parse_scenario_opts("-p 5l -r 9")
    with pytest.raises(click.BadParameter):
        parse_scenario_opts("-p 5l -r 9 -t 3 --fees 10")
    with pytest.raises(click.BadParameter):
        parse_scenario_opts("-p 5l -r 9 -t")


def test_ask_sends_loan_context(runner, monkeypatch, fake_generator):
    gen = fake_generator(reply="Your EMI is fixed.")

    class _Client:
        @classmethod
        def from_env(cls):
            return gen

    monkeypatch.setattr(main, "GeminiClient", _Client)
    res = runner.invoke(cli, ["ask", "Why is interest so high?", "-p", "500000", "-r", "8.5", "-t", "20"])
    assert res.exit_code == 0, res.output
    assert "Your EMI is fixed." in res.output
    assert "Loan 1: Principal ₹500000, Rate 8.5%, Tenure 20 years." in gen.prompts[0]


def test_ask_without_loan(runner, monkeypatch, fake_generator):
    gen = fake_generator(reply="Sure.")

    class _Client:
        @classmethod
        def from_env(cls):
            return gen

    monkeypatch.setattr(main, "GeminiClient", _Client)
    res = runner.invoke(cli, ["ask", "What is EMI?"])
    assert res.exit_code == 0, res.output
    assert "No loan calculated yet." in gen.prompts[0]


def test_overlong_tenure_is_a_usage_error(runner):
    res = runner.invoke(cli, ["summary", "-p", "500000", "-r", "8.5", "-t", "1e8"])
    assert res.exit_code == 2
    assert "cannot exceed 100 years" in res.output


def test_compare_drops_overlong_scenario(runner):
    res = runner.invoke(cli, ["compare", "--loan1", "-p 500k -r 8.5 -t 20", "--loan2", "-p 500k -r 8.5 -t 1e8"])
    assert res.exit_code == 0, res.output
    assert "Comparison calculated for Loan 1 only." in res.output
