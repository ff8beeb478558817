"""Logical state of the text service session: preedit, split and candidate selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

PAGE_SIZE = 9


class SessionKind(Enum):
    """Which phase the session is in."""

    IDLE = "idle"
    PREEDIT = "preedit"
    WAITING = "waiting"
    SPLIT_PREEDIT = "split_preedit"
    SELECTING = "selecting"


@dataclass
class _Idle:
    pass


@dataclass
class _Preedit:
    text: str


@dataclass
class _Waiting:
    text: str
    pos_x: int
    pos_y: int


@dataclass
class _SplitPreedit:
    target: str
    remainder: str


@dataclass
class _Selecting:
    original_preedit: str
    candidates: list[str] = field(default_factory=list)
    selected: int = 0
    page_size: int = PAGE_SIZE
    llm_pending: bool = False
    pos_x: int = 0
    pos_y: int = 0
    punct_pending: str | None = None
    remainder: str = ""


_KINDS = {
    _Idle: SessionKind.IDLE,
    _Preedit: SessionKind.PREEDIT,
    _Waiting: SessionKind.WAITING,
    _SplitPreedit: SessionKind.SPLIT_PREEDIT,
    _Selecting: SessionKind.SELECTING,
}


class SessionState:
    """The session's current phase together with the data that phase carries.

    ``keys_captured`` mirrors whether the IME must consume keys itself: it is
    set while selecting candidates and while adjusting a split preedit.
    """

    def __init__(self) -> None:
        self._state: _Idle | _Preedit | _Waiting | _SplitPreedit | _Selecting = _Idle()
        self._keys_captured = False

    def __repr__(self) -> str:
        return f"SessionState({self._state!r})"

    @property
    def kind(self) -> SessionKind:
        """The current phase."""
        return _KINDS[type(self._state)]

    @property
    def keys_captured(self) -> bool:
        """True while the IME consumes keys for selection or split adjustment."""
        return self._keys_captured

    @property
    def selected(self) -> int | None:
        """Index of the selected candidate while selecting."""
        state = self._state
        return state.selected if isinstance(state, _Selecting) else None

    # ─── transitions ────────────────────────────────────────────────────

    def set_idle(self) -> None:
        """Return to the idle phase."""
        self._state = _Idle()
        self._keys_captured = False

    def set_preedit(self, text: str) -> None:
        """Show unconverted preedit text."""
        self._state = _Preedit(text)
        self._keys_captured = False

    def set_waiting(self, text: str, pos_x: int, pos_y: int) -> None:
        """Wait for conversion results at a caret position."""
        self._state = _Waiting(text, pos_x, pos_y)
        self._keys_captured = False

    def set_split_preedit(self, target: str, remainder: str) -> None:
        """Show a preedit split into a conversion target and a remainder."""
        self._state = _SplitPreedit(target, remainder)
        self._keys_captured = True

    def activate_selecting(
        self,
        candidates: list[str],
        original_preedit: str,
        pos_x: int = 0,
        pos_y: int = 0,
        llm_pending: bool = False,
        remainder: str = "",
    ) -> None:
        """Enter candidate selection with the first candidate selected."""
        self._state = _Selecting(
            original_preedit=original_preedit,
            candidates=list(candidates),
            llm_pending=llm_pending,
            pos_x=pos_x,
            pos_y=pos_y,
            remainder=remainder,
        )
        self._keys_captured = True

    # ─── split preedit ──────────────────────────────────────────────────

    def is_split_preedit(self) -> bool:
        """True in the split preedit phase."""
        return isinstance(self._state, _SplitPreedit)

    def split_target(self) -> str | None:
        """Conversion target of a split preedit."""
        state = self._state
        return state.target if isinstance(state, _SplitPreedit) else None

    def split_remainder(self) -> str | None:
        """Unconverted remainder of a split preedit."""
        state = self._state
        return state.remainder if isinstance(state, _SplitPreedit) else None

    def split_shrink(self) -> bool:
        """Move the target's last character to the remainder; the target keeps at least one."""
        state = self._state
        if not isinstance(state, _SplitPreedit) or len(state.target) <= 1:
            return False
        state.remainder = state.target[-1] + state.remainder
        state.target = state.target[:-1]
        return True

    def split_extend(self) -> bool:
        """Move the remainder's first character to the target."""
        state = self._state
        if not isinstance(state, _SplitPreedit) or not state.remainder:
            return False
        state.target += state.remainder[0]
        state.remainder = state.remainder[1:]
        return True

    # ─── queries ────────────────────────────────────────────────────────

    def is_selecting(self) -> bool:
        """True in the candidate selection phase."""
        return isinstance(self._state, _Selecting)

    def is_waiting(self) -> bool:
        """True while waiting for conversion results."""
        return isinstance(self._state, _Waiting)

    def preedit_text(self) -> str | None:
        """The text being composed, or None when idle."""
        state = self._state
        if isinstance(state, (_Preedit, _Waiting)):
            return state.text
        if isinstance(state, _Selecting):
            return state.original_preedit
        if isinstance(state, _SplitPreedit):
            return state.target
        return None

    def original_preedit(self) -> str | None:
        """The preedit the current phase started from, or None when idle."""
        return self.preedit_text()

    def waiting_info(self) -> tuple[str, int, int] | None:
        """Text and caret position while waiting."""
        state = self._state
        if isinstance(state, _Waiting):
            return state.text, state.pos_x, state.pos_y
        return None

    def current_candidate(self) -> str | None:
        """The selected candidate while selecting."""
        state = self._state
        if isinstance(state, _Selecting) and 0 <= state.selected < len(state.candidates):
            return state.candidates[state.selected]
        return None

    def take_selecting_remainder(self) -> str:
        """Remove and return the remainder left after a split conversion."""
        state = self._state
        if not isinstance(state, _Selecting):
            return ""
        remainder, state.remainder = state.remainder, ""
        return remainder

    def selecting_remainder(self) -> str:
        """The remainder left after a split conversion, without removing it."""
        state = self._state
        return state.remainder if isinstance(state, _Selecting) else ""

    def selecting_pos(self) -> tuple[int, int] | None:
        """Caret position while selecting."""
        state = self._state
        if isinstance(state, _Selecting):
            return state.pos_x, state.pos_y
        return None

    # ─── paging ─────────────────────────────────────────────────────────

    def current_page(self) -> int:
        """Zero-based page of the selected candidate."""
        state = self._state
        return state.selected // state.page_size if isinstance(state, _Selecting) else 0

    def total_pages(self) -> int:
        """Number of candidate pages."""
        state = self._state
        if not isinstance(state, _Selecting) or not state.candidates:
            return 0
        return -(-len(state.candidates) // state.page_size)

    def page_candidates(self) -> list[str]:
        """Candidates on the page holding the selection."""
        state = self._state
        if not isinstance(state, _Selecting) or not state.candidates:
            return []
        start = (state.selected // state.page_size) * state.page_size
        return state.candidates[start : start + state.page_size]

    def page_selected(self) -> int:
        """Position of the selection within its page."""
        state = self._state
        return state.selected % state.page_size if isinstance(state, _Selecting) else 0

    def page_info(self) -> str:
        """"current/total" when there is more than one page, else empty."""
        total = self.total_pages()
        if total <= 1:
            return ""
        return f"{self.current_page() + 1}/{total}"

    # ─── selection movement ─────────────────────────────────────────────

    def next_with_page_wrap(self) -> None:
        """Select the next candidate; crossing a page lands on the new page's first."""
        state = self._state
        if not isinstance(state, _Selecting) or not state.candidates:
            return
        next_idx = (state.selected + 1) % len(state.candidates)
        cur_page = state.selected // state.page_size
        next_page = next_idx // state.page_size
        state.selected = next_page * state.page_size if next_page != cur_page else next_idx

    def prev(self) -> None:
        """Select the previous candidate, wrapping to the last."""
        state = self._state
        if not isinstance(state, _Selecting) or not state.candidates:
            return
        state.selected = (state.selected - 1) % len(state.candidates)

    def next_page(self) -> None:
        """Select the first candidate of the next page, wrapping."""
        state = self._state
        if not isinstance(state, _Selecting) or not state.candidates:
            return
        pages = self.total_pages()
        state.selected = ((state.selected // state.page_size + 1) % pages) * state.page_size

    def prev_page(self) -> None:
        """Select the first candidate of the previous page, wrapping."""
        state = self._state
        if not isinstance(state, _Selecting) or not state.candidates:
            return
        pages = self.total_pages()
        state.selected = ((state.selected // state.page_size - 1) % pages) * state.page_size

    def select_nth_in_page(self, n: int) -> bool:
        """Select the 1-based ``n``-th candidate of the current page if it exists."""
        state = self._state
        if n < 1 or not isinstance(state, _Selecting):
            return False
        idx = (state.selected // state.page_size) * state.page_size + (n - 1)
        if idx >= len(state.candidates):
            return False
        state.selected = idx
        return True

    # ─── pending punctuation ────────────────────────────────────────────

    def set_punct_pending(self, c: str) -> None:
        """Remember punctuation to append when the candidate is committed."""
        if not isinstance(c, str) or len(c) != 1:
            raise ValueError("punctuation must be a single character")
        state = self._state
        if isinstance(state, _Selecting):
            state.punct_pending = c

    def take_punct_pending(self) -> str | None:
        """Remove and return pending punctuation."""
        state = self._state
        if not isinstance(state, _Selecting):
            return None
        pending, state.punct_pending = state.punct_pending, None
        return pending