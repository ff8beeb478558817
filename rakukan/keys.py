"""Key names, key specifications and bindable actions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .actions import UserAction, UserActionKind

_U8_MAX = 0xFF
_CANDIDATE_N_TAG = "candidate_n"


class KeyAction(Enum):
    """Action names that can appear in a key binding."""

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
    FULL_WIDTH_SPACE = "full_width_space"
    CANDIDATE_NEXT = "candidate_next"
    CANDIDATE_PREV = "candidate_prev"
    CANDIDATE_PAGE_DOWN = "candidate_page_down"
    CANDIDATE_PAGE_UP = "candidate_page_up"
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


@dataclass(frozen=True)
class CandidateN:
    """Binding that selects candidate ``n`` on the current page."""

    n: int

    def __post_init__(self) -> None:
        if isinstance(self.n, bool) or not isinstance(self.n, int) or not 0 <= self.n <= _U8_MAX:
            raise ValueError(f"candidate number must be in 0..255, got {self.n!r}")


Action = KeyAction | CandidateN


def to_user_action(action: Action) -> UserAction:
    """The user action a binding triggers."""
    if isinstance(action, CandidateN):
        return UserAction.candidate_select(action.n)
    if isinstance(action, KeyAction):
        return UserAction(UserActionKind[action.name])
    raise TypeError(f"not a key action: {action!r}")


def parse_action(value: Any) -> Action:
    """Parse an action as written in a keymap file.

    A plain name such as ``"convert"``, or ``{candidate_n = 3}``.
    """
    if isinstance(value, (KeyAction, CandidateN)):
        return value
    if isinstance(value, str):
        try:
            return KeyAction(value)
        except ValueError:
            raise ValueError(f"unknown action {value!r}") from None
    if isinstance(value, Mapping) and set(value) == {_CANDIDATE_N_TAG}:
        return CandidateN(value[_CANDIDATE_N_TAG])
    raise ValueError(f"unknown action {value!r}")


_VK_BY_NAME = {
    "backspace": 0x08,
    "bs": 0x08,
    "tab": 0x09,
    "enter": 0x0D,
    "return": 0x0D,
    "escape": 0x1B,
    "esc": 0x1B,
    "space": 0x20,
    "backquote": 0xC0,
    "grave": 0xC0,
    "semicolon": 0xBA,
    "equal": 0xBB,
    "comma": 0xBC,
    "minus": 0xBD,
    "period": 0xBE,
    "slash": 0xBF,
    "leftbracket": 0xDB,
    "backslash": 0xDC,
    "rightbracket": 0xDD,
    "quote": 0xDE,
    "pageup": 0x21,
    "pgup": 0x21,
    "pagedown": 0x22,
    "pgdn": 0x22,
    "end": 0x23,
    "home": 0x24,
    "left": 0x25,
    "up": 0x26,
    "right": 0x27,
    "down": 0x28,
    "delete": 0x2E,
    "del": 0x2E,
    **{f"f{i}": 0x6F + i for i in range(1, 13)},
    "zenkaku": 0xF3,
    "hankaku": 0xF3,
    "kanji": 0xF3,
    "henkan": 0x1C,
    "muhenkan": 0x1D,
    "eisuu": 0xF0,
    "alphanumeric": 0xF0,
    "katakana": 0xF1,
    "hiragana_key": 0xF2,
    "caps": 0x14,
}


def name_to_vk(name: str) -> int | None:
    """Virtual-key code for a lower-case key name, or None if unknown."""
    return _VK_BY_NAME.get(name)


@dataclass(frozen=True)
class KeySpec:
    """A virtual key together with its modifier state."""

    vk: int
    ctrl: bool = False
    shift: bool = False
    alt: bool = False

    @classmethod
    def parse(cls, s: str) -> KeySpec | None:
        """Parse text such as ``"Ctrl+Space"``; None if it names no known key."""
        ctrl = shift = alt = False
        vk: int | None = None
        for part in s.split("+"):
            name = part.strip().lower()
            if name in ("ctrl", "control"):
                ctrl = True
            elif name == "shift":
                shift = True
            elif name == "alt":
                alt = True
            else:
                code = name_to_vk(name)
                if code is None:
                    return None
                vk = code
        if vk is None:
            return None
        return cls(vk=vk, ctrl=ctrl, shift=shift, alt=alt)