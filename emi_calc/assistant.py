"""AI chat assistant for questions about computed loans.

The assistant sends one prompt per user question to a Gemini
``generateContent`` endpoint and appends the text reply to a transcript.
The loan figures the user is looking at are included in the prompt as plain
text so answers can refer to them.

Failures of the remote call never reach the caller: ``ChatSession`` logs
them and appends a fixed fallback message instead. The user may resend.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

import requests

from .data_models import LoanInput, LoanResult
from .errors import ComputationUnavailable
from .formatter import format_currency

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash-preview-09-2025:generateContent"
)
DEFAULT_TIMEOUT_S = 30.0

GREETING = (
    "Hello! I'm here to help you understand your EMI calculation. "
    "Ask me about your loan results or general finance concepts!"
)
EMPTY_REPLY_MESSAGE = "I could not process that request right now. Please try again."
ERROR_FALLBACK_MESSAGE = "Oops! I encountered an error during the API call. Please try again later."
NO_LOAN_CONTEXT = "No loan calculated yet."

_PROMPT_TEMPLATE = (
    "You are a helpful financial assistant specializing in EMI and loan concepts. "
    "Explain financial concepts clearly, concisely, and in a friendly manner.\n"
    "The user is currently using an EMI calculator. Here are their current calculation details: {context}\n"
    "User's Question: {question}"
)


def _plain(value) -> str:
    """Render an input value without a trailing ``.0`` or exponent."""
    return format(value.normalize(), "f") if hasattr(value, "normalize") else str(value)


def describe_loan(label: str, loan: LoanInput, result: LoanResult) -> str:
    return (
        f"{label}: Principal ₹{_plain(loan.principal)}, Rate {_plain(loan.annual_rate_percent)}%, "
        f"Tenure {_plain(loan.tenure_years)} years. EMI: {format_currency(result.installment_amount)}, "
        f"Total Interest: {format_currency(result.total_interest)}."
    )


def build_loan_context(loans: Iterable[Tuple[str, LoanInput, LoanResult]]) -> str:
    """One sentence per computed loan, or a note that nothing was computed."""
    parts = [describe_loan(label, loan, result) for label, loan, result in loans]
    return " ".join(parts) if parts else NO_LOAN_CONTEXT


def build_prompt(question: str, context: str) -> str:
    return _PROMPT_TEMPLATE.format(context=context, question=question)


def extract_reply_text(body: Dict[str, Any]) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a Gemini response."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return EMPTY_REPLY_MESSAGE
    return text or EMPTY_REPLY_MESSAGE


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class GeminiClient:
    """Minimal client for the Gemini ``generateContent`` REST call."""

    def __init__(self, url: str = DEFAULT_GEMINI_URL, api_key: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT_S) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "GeminiClient":
        """Build a client from ``GEMINI_URL``, ``GEMINI_API_KEY`` and ``GEMINI_TIMEOUT``."""
        return cls(
            url=os.environ.get("GEMINI_URL") or DEFAULT_GEMINI_URL,
            api_key=os.environ.get("GEMINI_API_KEY"),
            timeout=float(os.environ.get("GEMINI_TIMEOUT", DEFAULT_TIMEOUT_S)),
        )

    def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the reply text.

        Raises ``ComputationUnavailable`` when no API key is configured, on
        transport errors and on non-2xx responses.
        """
        if not self.api_key:
            raise ComputationUnavailable("GEMINI_API_KEY is not configured")
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            resp = requests.post(
                self.url,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ComputationUnavailable(str(e)) from e
        if not 200 <= resp.status_code < 300:
            raise ComputationUnavailable(f"HTTP error! status: {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as e:
            raise ComputationUnavailable("Response body is not JSON") from e
        return extract_reply_text(body)


@dataclass
class ChatMessage:
    sender: str  # "user" or "bot"
    text: str


class ChatSession:
    """Conversation transcript with one in-flight request at a time.

    Every submission takes a ticket. Starting a new submission (or calling
    ``cancel``) supersedes the current ticket; a reply that arrives for a
    superseded ticket is dropped instead of being appended.
    """

    def __init__(self, history: Optional[List[ChatMessage]] = None) -> None:
        self.history: List[ChatMessage] = history if history is not None else [ChatMessage("bot", GREETING)]
        self._ticket = 0
        self._in_flight: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def is_typing(self) -> bool:
        return self._in_flight is not None

    def begin(self, question: str) -> Optional[int]:
        """Record the user's question and return a ticket, or ``None`` if blank."""
        text = (question or "").strip()
        if not text:
            return None
        with self._lock:
            self.history.append(ChatMessage("user", text))
            self._ticket += 1
            self._in_flight = self._ticket
            return self._ticket

    def cancel(self) -> None:
        with self._lock:
            self._ticket += 1
            self._in_flight = None

    def finish(self, ticket: int, reply: str) -> bool:
        """Append ``reply`` if ``ticket`` is still current. Returns whether it was kept."""
        with self._lock:
            if ticket != self._ticket:
                logger.info("Dropping reply for superseded chat request %s", ticket)
                return False
            self.history.append(ChatMessage("bot", reply))
            self._in_flight = None
            return True

    def submit(self, question: str, context: str, client: TextGenerator) -> Optional[str]:
        """Ask ``question`` with ``context`` and return the reply that was shown.

        Returns ``None`` for a blank question or when a newer submission
        superseded this one while it was in flight.
        """
        ticket = self.begin(question)
        if ticket is None:
            return None
        prompt = build_prompt(question.strip(), context)
        try:
            reply = client.generate(prompt)
        except ComputationUnavailable as exc:
            logger.error("Chat request failed: %s", exc)
            reply = ERROR_FALLBACK_MESSAGE
        return reply if self.finish(ticket, reply) else None

    def to_list(self) -> List[Dict[str, str]]:
        return [asdict(m) for m in self.history]
