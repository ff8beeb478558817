"""Preedit state of a composition."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Composition:
    """Preedit text, its candidates and whether composing has begun."""

    preedit: str = ""
    candidates: list[str] = field(default_factory=list)
    candidate_index: int | None = None
    is_composing: bool = False

    def is_empty(self) -> bool:
        """True when there is no preedit text."""
        return not self.preedit

    def clear(self) -> None:
        """Reset everything to the initial state."""
        self.preedit = ""
        self.candidates = []
        self.candidate_index = None
        self.is_composing = False

    def set_preedit(self, text: str) -> None:
        """Replace the preedit; composing follows whether it is non-empty."""
        self.preedit = text
        self.is_composing = bool(text)