"""IME-wide state: the active input mode and per-document mode memory."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, field

from .config import AppConfig
from .input_mode import InputMode

logger = logging.getLogger(__name__)

# The engine picks the real layer count; CPU builds override it with zero.
_ALL_GPU_LAYERS = 0xFFFF_FFFF

_TERMINAL_CLASSES = frozenset(
    {
        "CASCADIA_HOSTING_WINDOW_CLASS",
        "ConsoleWindowClass",
        "VirtualConsoleClass",
        "mintty",
    }
)


@dataclass
class IMEState:
    """The current input mode and the sink cookies registered by the service."""

    input_mode: InputMode = InputMode.HIRAGANA
    cookies: dict[uuid.UUID, int] = field(default_factory=dict)

    def set_mode(self, mode: InputMode) -> None:
        """Switch the input mode."""
        if not isinstance(mode, InputMode):
            raise TypeError(f"not an input mode: {mode!r}")
        logger.info("input mode: %s -> %s", self.input_mode.name, mode.name)
        self.input_mode = mode


def is_terminal_class(class_name: str | None) -> bool:
    """True for window classes of console and terminal hosts."""
    return bool(class_name) and class_name in _TERMINAL_CLASSES


class DocModeStore:
    """Remembers the input mode of each document manager across focus changes.

    Document managers are identified by any non-zero hashable handle; zero
    means "no document manager".
    """

    def __init__(self) -> None:
        self._modes: dict[object, InputMode] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._modes)

    def __contains__(self, dm: object) -> bool:
        with self._lock:
            return dm in self._modes

    def on_focus_change(
        self,
        prev_dm: object,
        next_dm: object,
        current_mode: InputMode,
        next_window_class: str | None = None,
    ) -> InputMode | None:
        """Save the mode of the document losing focus and return the mode
        to apply to the one gaining it.

        Returns None when there is no next document or the store is busy.
        A document seen for the first time starts in alphanumeric mode if its
        window is a terminal, otherwise in hiragana mode.
        """
        if not self._lock.acquire(blocking=False):
            return None
        try:
            if prev_dm:
                self._modes[prev_dm] = current_mode
            if not next_dm:
                return None
            saved = self._modes.get(next_dm)
            if saved is not None:
                return saved
            if is_terminal_class(next_window_class):
                logger.debug(
                    "doc_mode: terminal detected (class=%r), default=Alphanumeric",
                    next_window_class,
                )
                mode = InputMode.ALPHANUMERIC
            else:
                mode = InputMode.HIRAGANA
            self._modes[next_dm] = mode
            return mode
        finally:
            self._lock.release()

    def remove(self, dm: object) -> None:
        """Forget a document manager that has been destroyed."""
        if not self._lock.acquire(blocking=False):
            return
        try:
            self._modes.pop(dm, None)
        finally:
            self._lock.release()


def build_engine_config_json(config: AppConfig) -> str:
    """The compact JSON engine configuration derived from the app configuration."""
    num_candidates = config.effective_num_candidates()
    logger.info(
        "engine config: num_candidates=%d main_gpu=%d model_variant=%r",
        num_candidates,
        config.main_gpu,
        config.model_variant,
    )
    payload: dict[str, object] = {
        "num_candidates": num_candidates,
        "n_gpu_layers": _ALL_GPU_LAYERS,
        "main_gpu": config.main_gpu,
        "n_threads": 0,
    }
    if config.model_variant is not None:
        payload["model_variant"] = config.model_variant
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)