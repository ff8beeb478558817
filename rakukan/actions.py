"""Actions requested by the user and actions applied to the client text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .input_mode import InputMode

_U8_MAX = 0xFF
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class UserActionKind(Enum):
    """Every action a key press can resolve to."""

    INPUT = "input"
    FULL_WIDTH_SPACE = "full_width_space"
    CONVERT = "convert"
    COMMIT_RAW = "commit_raw"
    BACKSPACE = "backspace"
    CANCEL_ALL = "cancel_all"
    CANCEL = "cancel"
    HIRAGANA = "hiragana"
    KATAKANA = "katakana"
    HALF_KATAKANA = "half_katakana"
    FULL_LATIN = "full_latin"
    HALF_LATIN = "half_latin"
    CYCLE_KANA = "cycle_kana"
    CANDIDATE_NEXT = "candidate_next"
    CANDIDATE_PREV = "candidate_prev"
    CANDIDATE_PAGE_DOWN = "candidate_page_down"
    CANDIDATE_PAGE_UP = "candidate_page_up"
    CANDIDATE_SELECT = "candidate_select"
    IME_OFF = "ime_off"
    IME_ON = "ime_on"
    IME_TOGGLE = "ime_toggle"
    MODE_HIRAGANA = "mode_hiragana"
    MODE_KATAKANA = "mode_katakana"
    MODE_ALPHANUMERIC = "mode_alphanumeric"
    CURSOR_LEFT = "cursor_left"
    CURSOR_RIGHT = "cursor_right"
    SEGMENT_SHRINK = "segment_shrink"
    SEGMENT_EXTEND = "segment_extend"
    PUNCTUATE = "punctuate"
    TAB = "tab"
    UNKNOWN = "unknown"


_CHAR_KINDS = frozenset({UserActionKind.INPUT, UserActionKind.PUNCTUATE})


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class UserAction:
    """A resolved key press; INPUT and PUNCTUATE carry a character,
    CANDIDATE_SELECT carries a 1-based candidate number."""

    kind: UserActionKind
    char: str | None = None
    number: int | None = None

    def __post_init__(self) -> None:
        if self.kind in _CHAR_KINDS:
            if not isinstance(self.char, str) or len(self.char) != 1:
                raise ValueError(f"{self.kind.name} requires a single character")
            if self.number is not None:
                raise ValueError(f"{self.kind.name} does not take a number")
        elif self.kind is UserActionKind.CANDIDATE_SELECT:
            if not _is_int(self.number) or not 0 <= self.number <= _U8_MAX:
                raise ValueError("CANDIDATE_SELECT requires a number in 0..255")
            if self.char is not None:
                raise ValueError("CANDIDATE_SELECT does not take a character")
        elif self.char is not None or self.number is not None:
            raise ValueError(f"{self.kind.name} takes no payload")

    @classmethod
    def input(cls, ch: str) -> UserAction:
        """A character typed into the preedit."""
        return cls(UserActionKind.INPUT, char=ch)

    @classmethod
    def punctuate(cls, ch: str) -> UserAction:
        """A punctuation mark that converts or commits."""
        return cls(UserActionKind.PUNCTUATE, char=ch)

    @classmethod
    def candidate_select(cls, n: int) -> UserAction:
        """Selection of candidate ``n`` on the current page."""
        return cls(UserActionKind.CANDIDATE_SELECT, number=n)


class SetSelectionType(Enum):
    """How the candidate selection moves."""

    UP = "up"
    DOWN = "down"
    NUMBER = "number"


class SetTextType(Enum):
    """Character class the preedit is rewritten into."""

    HIRAGANA = "hiragana"
    KATAKANA = "katakana"
    HALF_KATAKANA = "half_katakana"
    FULL_LATIN = "full_latin"
    HALF_LATIN = "half_latin"


class ClientActionKind(Enum):
    """Operations applied to the client document."""

    START_COMPOSITION = "start_composition"
    END_COMPOSITION = "end_composition"
    APPEND_TEXT = "append_text"
    REMOVE_TEXT = "remove_text"
    SHRINK_TEXT = "shrink_text"
    SET_TEXT_WITH_TYPE = "set_text_with_type"
    SET_SELECTION = "set_selection"
    SET_IME_MODE = "set_ime_mode"


_PAYLOAD_FIELD = {
    ClientActionKind.APPEND_TEXT: "text",
    ClientActionKind.SHRINK_TEXT: "text",
    ClientActionKind.SET_TEXT_WITH_TYPE: "text_type",
    ClientActionKind.SET_SELECTION: "selection",
    ClientActionKind.SET_IME_MODE: "mode",
}

_FIELD_TYPES = {
    "text": str,
    "text_type": SetTextType,
    "selection": SetSelectionType,
    "number": int,
    "mode": InputMode,
}


@dataclass(frozen=True)
class ClientAction:
    """One operation on the client text with the payload its kind needs."""

    kind: ClientActionKind
    text: str | None = None
    text_type: SetTextType | None = None
    selection: SetSelectionType | None = None
    number: int | None = None
    mode: InputMode | None = None

    def __post_init__(self) -> None:
        allowed: set[str] = set()
        required = _PAYLOAD_FIELD.get(self.kind)
        if required is not None:
            allowed.add(required)
            if not isinstance(getattr(self, required), _FIELD_TYPES[required]):
                raise ValueError(f"{self.kind.name} requires {required}")
            if required == "selection" and self.selection is SetSelectionType.NUMBER:
                allowed.add("number")
                if not _is_int(self.number) or not _I32_MIN <= self.number <= _I32_MAX:
                    raise ValueError("NUMBER selection requires a 32-bit number")
        for name in _FIELD_TYPES:
            if name not in allowed and getattr(self, name) is not None:
                raise ValueError(f"{self.kind.name} does not take {name}")