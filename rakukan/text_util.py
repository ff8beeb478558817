"""Character class conversions for the preedit."""

from __future__ import annotations

_HIRAGANA_FIRST = 0x3041
_HIRAGANA_LAST = 0x3096
_KANA_OFFSET = 0x60
_KATAKANA_FIRST = 0x30A1
_KATAKANA_LAST = 0x30F6
_ASCII_FIRST = 0x21
_ASCII_LAST = 0x7E
_FULLWIDTH_FIRST = 0xFF01
_FULLWIDTH_LAST = 0xFF5E

_TO_KATAKANA = {
    cp: cp + _KANA_OFFSET for cp in range(_HIRAGANA_FIRST, _HIRAGANA_LAST + 1)
}
_TO_HIRAGANA = {
    cp: cp - _KANA_OFFSET for cp in range(_KATAKANA_FIRST, _KATAKANA_LAST + 1)
}
_TO_FULL_LATIN = {
    cp: cp - _ASCII_FIRST + _FULLWIDTH_FIRST
    for cp in range(_ASCII_FIRST, _ASCII_LAST + 1)
}
_TO_HALF_LATIN = {
    cp: cp - _FULLWIDTH_FIRST + _ASCII_FIRST
    for cp in range(_FULLWIDTH_FIRST, _FULLWIDTH_LAST + 1)
}


def to_katakana(s: str) -> str:
    """Hiragana to full-width katakana (F7); other characters unchanged."""
    return s.translate(_TO_KATAKANA)


def to_hiragana(s: str) -> str:
    """Full-width katakana to hiragana; other characters unchanged."""
    return s.translate(_TO_HIRAGANA)


def to_full_latin(s: str) -> str:
    """Printable ASCII to full-width forms (F9)."""
    return s.translate(_TO_FULL_LATIN)


def to_half_latin(s: str) -> str:
    """Full-width ASCII forms back to ASCII (F10)."""
    return s.translate(_TO_HALF_LATIN)


def to_half_katakana(s: str) -> str:
    """Half-width katakana conversion (F8); currently yields full-width katakana."""
    return to_katakana(s)