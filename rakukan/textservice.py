"""Text service identity, display attributes and wire helpers."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from enum import Enum

CLSID_PREFIX = "CLSID\\"
INPROC_SUFFIX = "\\InProcServer32"
SERVICE_NAME = "Rakukan"

GUID_TEXT_SERVICE = uuid.UUID(int=0xC0DDF8B0_1F1E_4C2D_A9E3_5F7B8D6E2A4C)
GUID_PROFILE = uuid.UUID(int=0xC0DDF8B1_1F1E_4C2D_A9E3_5F7B8D6E2A4C)
GUID_DISPLAY_ATTRIBUTE = uuid.UUID(int=0xC0DDF8B2_1F1E_4C2D_A9E3_5F7B8D6E2A4C)
GUID_DISPLAY_ATTRIBUTE_INPUT = uuid.UUID(int=0xC0DDF8B3_1F1E_4C2D_A9E3_5F7B8D6E2A4C)

TEXTSERVICE_LANGBARITEMSINK_COOKIE = 0x414D414B

_U32_MAX = 0xFFFF_FFFF
_U128_MAX = (1 << 128) - 1


def to_wide_16_unpadded(s: str) -> list[int]:
    """UTF-16 code units of ``s``."""
    data = s.encode("utf-16-le")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def to_wide_16(s: str) -> list[int]:
    """UTF-16 code units of ``s`` followed by a terminating zero unit."""
    return [*to_wide_16_unpadded(s), 0]


def to_wide(s: str) -> bytes:
    """Little-endian UTF-16 bytes of ``s`` followed by one zero byte."""
    return s.encode("utf-16-le") + b"\x00"


def dword_bytes(value: int) -> bytes:
    """Little-endian bytes of an unsigned 32-bit value."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise ValueError(f"not an unsigned 32-bit value: {value!r}")
    return value.to_bytes(4, "little")


def guid_string(value: uuid.UUID | int) -> str:
    """Registry form of a GUID: lower-case hex in braces."""
    if isinstance(value, uuid.UUID):
        guid = value
    elif isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= _U128_MAX:
        guid = uuid.UUID(int=value)
    else:
        raise ValueError(f"not a GUID: {value!r}")
    return "{" + str(guid) + "}"


class LineStyle(Enum):
    """Underline style of a display attribute."""

    NONE = 0
    SOLID = 1
    DOT = 2
    DASH = 3
    SQUIGGLE = 4


class TextAttribute(Enum):
    """Role of the attributed text in the composition."""

    INPUT = 0
    TARGET_CONVERTED = 1
    CONVERTED = 2
    TARGET_NOT_CONVERTED = 3
    INPUT_ERROR = 4
    FIXED_CONVERTED = 5
    OTHER = -1


@dataclass(frozen=True)
class DisplayAttribute:
    """How a run of composition text is drawn; ``None`` colours mean default."""

    line_style: LineStyle
    bold_line: bool
    attribute: TextAttribute
    text_color: int | None = None
    background_color: int | None = None
    line_color: int | None = None


DISPLAY_ATTRIBUTE_CONVERTED = DisplayAttribute(
    line_style=LineStyle.SOLID,
    bold_line=True,
    attribute=TextAttribute.TARGET_CONVERTED,
)

DISPLAY_ATTRIBUTE_INPUT = DisplayAttribute(
    line_style=LineStyle.DOT,
    bold_line=False,
    attribute=TextAttribute.INPUT,
)


class ModuleRefCount:
    """Thread-safe count of live objects keeping the module loaded."""

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def add_ref(self) -> int:
        """Increment and return the previous count."""
        with self._lock:
            previous = self._count
            self._count += 1
            return previous

    def release(self) -> int:
        """Decrement and return the previous count."""
        with self._lock:
            if self._count == 0:
                raise RuntimeError("release without matching add_ref")
            previous = self._count
            self._count -= 1
            return previous

    def can_unload(self) -> bool:
        """True when no references are held."""
        with self._lock:
            return self._count == 0