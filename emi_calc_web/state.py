"""Per-user UI state for the web app.

The screen state (form values, which results are showing, active tab and the
status message) is a small dataclass that round-trips through the Flask
session cookie. Chat transcripts are kept server-side in a bounded
in-memory registry keyed by the user's token. Neither is ever passed to the
engine; the app hands the engine plain ``LoanInput`` values.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from emi_calc.assistant import ChatSession
from emi_calc.data_models import LoanInput
from emi_calc.errors import InvalidLoanInput
from emi_calc.validation import parse_loan_input

TABS = ("calculator", "comparison")


@dataclass
class LoanForm:
    """Raw text of one loan's three input fields."""

    amount: str = ""
    rate: str = ""
    tenure: str = ""

    def fields(self) -> Tuple[str, str, str]:
        return self.amount, self.rate, self.tenure

    def to_input(self) -> Optional[LoanInput]:
        """The validated input, or ``None`` if the fields do not validate."""
        try:
            return parse_loan_input(*self.fields())
        except InvalidLoanInput:
            return None

    @classmethod
    def from_form(cls, form, suffix: str) -> "LoanForm":
        return cls(
            amount=form.get(f"amount{suffix}", "").strip(),
            rate=form.get(f"rate{suffix}", "").strip(),
            tenure=form.get(f"tenure{suffix}", "").strip(),
        )


@dataclass
class ScreenState:
    """Everything the single screen needs to redraw itself."""

    loan1: LoanForm = field(default_factory=LoanForm)
    loan2: LoanForm = field(default_factory=LoanForm)
    show_result1: bool = False
    show_result2: bool = False
    tab: str = "calculator"
    message: str = ""
    message_type: str = ""  # "error" or "success"

    def set_tab(self, tab: Optional[str]) -> None:
        if tab in TABS:
            self.tab = tab

    def clear_message(self) -> None:
        self.message = ""
        self.message_type = ""

    def error(self, text: str) -> None:
        self.message = text
        self.message_type = "error"

    def success(self, text: str) -> None:
        self.message = text
        self.message_type = "success"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScreenState":
        if not data:
            return cls()
        state = cls(
            loan1=LoanForm(**data.get("loan1", {})),
            loan2=LoanForm(**data.get("loan2", {})),
            show_result1=bool(data.get("show_result1")),
            show_result2=bool(data.get("show_result2")),
            message=data.get("message", ""),
            message_type=data.get("message_type", ""),
        )
        state.set_tab(data.get("tab"))
        return state


class ChatSessionRegistry:
    """In-memory chat sessions, one per user token.

    At most ``max_sessions`` are kept; the least recently used is evicted.
    """

    def __init__(self, *, max_sessions: int = 1000) -> None:
        self._sessions: "OrderedDict[str, ChatSession]" = OrderedDict()
        self._max_sessions = max_sessions
        self._lock = threading.Lock()

    def get(self, user_token: str) -> ChatSession:
        with self._lock:
            session = self._sessions.get(user_token)
            if session is None:
                session = ChatSession()
                self._sessions[user_token] = session
            self._sessions.move_to_end(user_token)
            self._trim()
            return session

    def reset(self, user_token: str) -> None:
        """Forget the user's transcript and drop any reply still in flight."""
        with self._lock:
            session = self._sessions.pop(user_token, None)
        if session is not None:
            session.cancel()

    def __len__(self) -> int:
        return len(self._sessions)

    def _trim(self) -> None:
        if not self._max_sessions or self._max_sessions < 0:
            return
        while len(self._sessions) > self._max_sessions:
            self._sessions.popitem(last=False)
