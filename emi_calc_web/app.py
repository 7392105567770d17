import json
import logging
import os
from functools import lru_cache
from typing import Optional, Tuple
from uuid import uuid4

from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from emi_calc.assistant import GeminiClient, build_loan_context
from emi_calc.comparison import compare_loans, metric_rows
from emi_calc.data_models import ComparisonOutcome, LoanInput, LoanResult
from emi_calc.engine import compute_loan
from emi_calc.errors import InvalidLoanInput
from emi_calc.formatter import chart_payload, format_currency, serialize_schedule
from emi_calc.validation import parse_loan_input
from emi_calc_web.state import ChatSessionRegistry, LoanForm, ScreenState

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
app.jinja_env.filters["inr"] = format_currency

chat_client = GeminiClient.from_env()
chat_sessions = ChatSessionRegistry(max_sessions=int(os.environ.get("CHAT_MAX_SESSIONS", "1000")))


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _load_state() -> ScreenState:
    return ScreenState.from_dict(session.get("screen"))


def _save_state(state: ScreenState) -> None:
    session["screen"] = state.to_dict()
    session.modified = True


@lru_cache(maxsize=256)
def _compute(loan: LoanInput) -> LoanResult:
    return compute_loan(loan)


def _shown_result(form: LoanForm, shown: bool) -> Optional[Tuple[LoanInput, LoanResult]]:
    """The input and result for a loan whose result is on screen."""
    if not shown:
        return None
    loan = form.to_input()
    if loan is None:
        return None
    return loan, _compute(loan)


def _handle_calculate(state: ScreenState, form) -> None:
    state.clear_message()
    state.loan1 = LoanForm.from_form(form, "1")
    try:
        _compute(parse_loan_input(*state.loan1.fields()))
    except InvalidLoanInput as exc:
        state.show_result1 = False
        state.error(exc.message)
        return
    state.show_result1 = True


def _handle_compare(state: ScreenState, form) -> None:
    state.clear_message()
    state.loan1 = LoanForm.from_form(form, "1")
    state.loan2 = LoanForm.from_form(form, "2")
    try:
        outcome = compare_loans(state.loan1.fields(), state.loan2.fields())
    except InvalidLoanInput as exc:
        state.show_result1 = False
        state.show_result2 = False
        state.error(exc.message)
        return
    state.show_result1 = outcome.first is not None
    state.show_result2 = outcome.second is not None
    state.success(outcome.message)


def _render(state: ScreenState, user_token: str):
    shown1 = _shown_result(state.loan1, state.show_result1)
    shown2 = _shown_result(state.loan2, state.show_result2)
    result1 = shown1[1] if shown1 else None
    result2 = shown2[1] if shown2 else None
    comparison_rows = []
    if result1 is not None or result2 is not None:
        comparison_rows = list(metric_rows(ComparisonOutcome(result1, result2, state.message)))

    return render_template(
        "index.html",
        state=state,
        result1=result1,
        result2=result2,
        schedule=serialize_schedule(result1.schedule) if result1 else [],
        comparison_rows=comparison_rows,
        chart_payload=json.dumps(chart_payload(result1)) if result1 else "null",
        chat_history=chat_sessions.get(user_token).to_list(),
        asset_version=app.config["ASSET_VERSION"],
    )


@app.route("/", methods=["GET", "POST"])
def index():
    user_token = _ensure_user_token()
    state = _load_state()

    if request.method == "POST":
        action = request.form.get("action", "calculate")
        state.set_tab(request.form.get("tab"))
        if action == "compare":
            _handle_compare(state, request.form)
        else:
            _handle_calculate(state, request.form)
        _save_state(state)
    elif request.args.get("tab"):
        state.set_tab(request.args.get("tab"))
        state.clear_message()
        _save_state(state)

    return _render(state, user_token)


@app.post("/chat")
def chat():
    user_token = _ensure_user_token()
    state = _load_state()
    payload = request.get_json(silent=True) or {}
    question = str(payload.get("message", ""))

    loans = []
    for label, shown in (
        ("Loan 1", _shown_result(state.loan1, state.show_result1)),
        ("Loan 2", _shown_result(state.loan2, state.show_result2)),
    ):
        if shown:
            loans.append((label, shown[0], shown[1]))

    conversation = chat_sessions.get(user_token)
    reply = conversation.submit(question, build_loan_context(loans), chat_client)
    return jsonify(reply=reply, history=conversation.to_list())


@app.post("/chat/reset")
def reset_chat():
    user_token = session.get("user_token")
    if user_token:
        chat_sessions.reset(user_token)
    return redirect(url_for("index"))


if __name__ == "__main__":
    logger.info("Starting EMI Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
