"""Input modes of the IME."""

from __future__ import annotations

from enum import Enum


class InputMode(Enum):
    """What kind of text typed keys produce."""

    HIRAGANA = 0
    KATAKANA = 1
    ALPHANUMERIC = 2

    def is_kana(self) -> bool:
        """True for the two kana modes."""
        return self in (InputMode.HIRAGANA, InputMode.KATAKANA)

    def label(self) -> str:
        """Short indicator shown on the language bar."""
        return _LABELS[self]


_LABELS = {
    InputMode.HIRAGANA: "あ",
    InputMode.KATAKANA: "ア",
    InputMode.ALPHANUMERIC: "A",
}