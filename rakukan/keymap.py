"""Key bindings: presets, the keymap file and key resolution."""

from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .actions import UserAction, UserActionKind
from .config import ConfigError, KeyboardLayout
from .input_mode import InputMode
from .keys import Action, KeyAction, KeySpec, parse_action, to_user_action

logger = logging.getLogger(__name__)

_VK_BACK = 0x08
_VK_TAB = 0x09
_VK_RETURN = 0x0D
_VK_ESCAPE = 0x1B
_VK_SPACE = 0x20

_FALLBACK_ACTIONS = {
    _VK_RETURN: UserActionKind.COMMIT_RAW,
    _VK_SPACE: UserActionKind.CONVERT,
    _VK_BACK: UserActionKind.BACKSPACE,
    _VK_ESCAPE: UserActionKind.CANCEL,
}

_PUNCTUATION = frozenset("、。，．")


class KeymapPreset(Enum):
    """Built-in binding sets."""

    MS_IME_US = "ms-ime-us"
    MS_IME_JIS = "ms-ime-jis"
    CUSTOM = "custom"


@dataclass(frozen=True)
class KeyBinding:
    """A key description and the action it triggers."""

    key: str
    action: Action

    @classmethod
    def _from_table(cls, table: Any) -> KeyBinding:
        if not isinstance(table, Mapping):
            raise ConfigError("each binding must be a table")
        key = table.get("key")
        if not isinstance(key, str):
            raise ConfigError("binding key must be a string")
        if "action" not in table:
            raise ConfigError(f"binding {key!r} has no action")
        try:
            action = parse_action(table["action"])
        except ValueError as exc:
            raise ConfigError(f"binding {key!r}: {exc}") from None
        return cls(key=key, action=action)


@dataclass
class KeymapConfig:
    """Contents of keymap.toml."""

    preset: KeymapPreset | None = KeymapPreset.MS_IME_JIS
    inherit_preset: bool = True
    bindings: list[KeyBinding] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> KeymapConfig:
        """Build from parsed TOML; a missing preset stays unset."""
        if not isinstance(data, Mapping):
            raise ConfigError("keymap must be a table")
        preset: KeymapPreset | None = None
        if "preset" in data:
            try:
                preset = KeymapPreset(data["preset"])
            except (ValueError, TypeError):
                choices = ", ".join(repr(p.value) for p in KeymapPreset)
                raise ConfigError(f"preset must be one of {choices}") from None
        inherit = data.get("inherit_preset", True)
        if not isinstance(inherit, bool):
            raise ConfigError("inherit_preset must be a boolean")
        raw = data.get("bindings", [])
        if not isinstance(raw, list):
            raise ConfigError("bindings must be an array of tables")
        bindings = [KeyBinding._from_table(table) for table in raw]
        return cls(preset=preset, inherit_preset=inherit, bindings=bindings)


def _bind(key: str, action: KeyAction) -> KeyBinding:
    return KeyBinding(key=key, action=action)


_PRESETS: dict[KeymapPreset, tuple[tuple[str, KeyAction], ...]] = {
    KeymapPreset.MS_IME_US: (
        ("Ctrl+Space", KeyAction.IME_TOGGLE),
        ("Ctrl+J", KeyAction.MODE_HIRAGANA),
        ("Ctrl+K", KeyAction.MODE_KATAKANA),
        ("Ctrl+L", KeyAction.MODE_ALPHANUMERIC),
        ("Space", KeyAction.CONVERT),
        ("Enter", KeyAction.COMMIT_RAW),
        ("Escape", KeyAction.CANCEL),
        ("Ctrl+Backspace", KeyAction.CANCEL_ALL),
        ("Backspace", KeyAction.BACKSPACE),
        ("F6", KeyAction.HIRAGANA),
        ("F7", KeyAction.KATAKANA),
        ("F8", KeyAction.HALF_KATAKANA),
        ("F9", KeyAction.FULL_LATIN),
        ("F10", KeyAction.HALF_LATIN),
        ("Shift+Space", KeyAction.FULL_WIDTH_SPACE),
        ("Down", KeyAction.CANDIDATE_NEXT),
        ("Up", KeyAction.CANDIDATE_PREV),
        ("Tab", KeyAction.CANDIDATE_PAGE_DOWN),
        ("Shift+Tab", KeyAction.CANDIDATE_PAGE_UP),
        ("PageDown", KeyAction.CANDIDATE_PAGE_DOWN),
        ("PageUp", KeyAction.CANDIDATE_PAGE_UP),
        ("Left", KeyAction.CURSOR_LEFT),
        ("Right", KeyAction.CURSOR_RIGHT),
        ("Shift+Left", KeyAction.SEGMENT_SHRINK),
        ("Shift+Right", KeyAction.SEGMENT_EXTEND),
    ),
    KeymapPreset.MS_IME_JIS: (
        ("Space", KeyAction.CONVERT),
        ("Enter", KeyAction.COMMIT_RAW),
        ("Henkan", KeyAction.CONVERT),
        ("Escape", KeyAction.CANCEL),
        ("Ctrl+Backspace", KeyAction.CANCEL_ALL),
        ("Backspace", KeyAction.BACKSPACE),
        ("F6", KeyAction.HIRAGANA),
        ("F7", KeyAction.KATAKANA),
        ("F8", KeyAction.HALF_KATAKANA),
        ("F9", KeyAction.FULL_LATIN),
        ("F10", KeyAction.HALF_LATIN),
        ("Muhenkan", KeyAction.CYCLE_KANA),
        ("Shift+Space", KeyAction.FULL_WIDTH_SPACE),
        ("Down", KeyAction.CANDIDATE_NEXT),
        ("Up", KeyAction.CANDIDATE_PREV),
        ("Tab", KeyAction.CANDIDATE_PAGE_DOWN),
        ("Shift+Tab", KeyAction.CANDIDATE_PAGE_UP),
        ("PageDown", KeyAction.CANDIDATE_PAGE_DOWN),
        ("PageUp", KeyAction.CANDIDATE_PAGE_UP),
        ("Zenkaku", KeyAction.IME_TOGGLE),
        ("Ctrl+Space", KeyAction.IME_TOGGLE),
        ("Hiragana_key", KeyAction.MODE_HIRAGANA),
        ("Ctrl+Caps", KeyAction.MODE_HIRAGANA),
        ("Katakana", KeyAction.MODE_KATAKANA),
        ("Alt+Caps", KeyAction.MODE_KATAKANA),
        ("Eisuu", KeyAction.MODE_ALPHANUMERIC),
        ("Left", KeyAction.CURSOR_LEFT),
        ("Right", KeyAction.CURSOR_RIGHT),
        ("Shift+Left", KeyAction.SEGMENT_SHRINK),
        ("Shift+Right", KeyAction.SEGMENT_EXTEND),
    ),
    KeymapPreset.CUSTOM: (),
}


def preset_bindings(preset: KeymapPreset) -> list[KeyBinding]:
    """The bindings a preset contributes, in order."""
    return [_bind(key, action) for key, action in _PRESETS[preset]]


def layout_preset(layout: KeyboardLayout) -> KeymapPreset:
    """Preset matching a keyboard layout; custom layouts use the JIS preset."""
    if layout is KeyboardLayout.US:
        return KeymapPreset.MS_IME_US
    return KeymapPreset.MS_IME_JIS


def resolve_keymap_config(
    cfg: KeymapConfig, layout: KeyboardLayout = KeyboardLayout.US
) -> KeymapConfig:
    """Prepend the preset's bindings to the user's unless inheritance is off."""
    preset = cfg.preset if cfg.preset is not None else layout_preset(layout)
    if not cfg.inherit_preset or preset is KeymapPreset.CUSTOM:
        return cfg
    return dataclasses.replace(cfg, bindings=[*preset_bindings(preset), *cfg.bindings])


def keymap_path(environ: Mapping[str, str] | None = None) -> Path:
    """Location of keymap.toml under the roaming application data folder."""
    env = os.environ if environ is None else environ
    appdata = env.get("APPDATA")
    if appdata is None:
        raise ConfigError("APPDATA not set")
    return Path(appdata) / "rakukan" / "keymap.toml"


class Keymap:
    """Lookup table from key specifications to bound actions."""

    def __init__(self, table: Mapping[KeySpec, Action] | None = None) -> None:
        self._table: dict[KeySpec, Action] = dict(table or {})

    def __len__(self) -> int:
        return len(self._table)

    @classmethod
    def build(cls, cfg: KeymapConfig) -> Keymap:
        """Build from bindings as given; later bindings override earlier ones."""
        table: dict[KeySpec, Action] = {}
        for binding in cfg.bindings:
            spec = KeySpec.parse(binding.key)
            if spec is None:
                logger.warning("keymap: cannot parse %r", binding.key)
                continue
            table[spec] = binding.action
        return cls(table)

    @classmethod
    def for_layout(cls, layout: KeyboardLayout = KeyboardLayout.US) -> Keymap:
        """The preset keymap for a keyboard layout."""
        cfg = KeymapConfig(preset=layout_preset(layout), inherit_preset=True, bindings=[])
        return cls.build(resolve_keymap_config(cfg, layout))

    @classmethod
    def load(
        cls,
        path: str | os.PathLike[str] | None = None,
        layout: KeyboardLayout = KeyboardLayout.US,
    ) -> Keymap:
        """Load keymap.toml; on any error fall back to the layout's preset."""
        try:
            target = keymap_path() if path is None else Path(path)
            data = tomllib.loads(target.read_text(encoding="utf-8"))
            cfg = KeymapConfig.from_dict(data)
        except (OSError, ValueError) as exc:
            logger.info("keymap default (%s)", exc)
            return cls.for_layout(layout)
        logger.info("keymap loaded")
        return cls.build(resolve_keymap_config(cfg, layout))

    def resolve(
        self, vk: int, ctrl: bool = False, shift: bool = False, alt: bool = False
    ) -> Action | None:
        """The action bound to exactly this key and modifier state."""
        return self._table.get(KeySpec(vk=vk, ctrl=ctrl, shift=shift, alt=alt))

    def resolve_action(
        self,
        vk: int,
        ctrl: bool = False,
        shift: bool = False,
        alt: bool = False,
        char: str | None = None,
        selecting: bool = False,
        mode: InputMode = InputMode.HIRAGANA,
    ) -> UserAction | None:
        """Turn a key press into a user action.

        ``char`` is the text the keyboard layout produces for the key,
        ``selecting`` whether the candidate window is active.
        """
        bound = self.resolve(vk, ctrl, shift, alt)
        if bound is not None:
            return to_user_action(bound)

        fallback = _FALLBACK_ACTIONS.get(vk)
        if fallback is not None:
            return UserAction(fallback)

        if not ctrl and not alt and selecting:
            if 0x31 <= vk <= 0x39:
                return UserAction.candidate_select(vk - 0x30)
            if 0x61 <= vk <= 0x69:
                return UserAction.candidate_select(vk - 0x60)

        if char:
            ch = char[0]
            code = ord(ch)
            printable = code >= 0x20 and not 0x7F <= code <= 0x9F
            if printable and not 0xD800 <= code <= 0xDFFF:
                if ch in _PUNCTUATION:
                    return UserAction.punctuate(ch)
                if shift and 0x21 <= code <= 0x7E and mode.is_kana():
                    return UserAction.input(chr(code - 0x21 + 0xFF01))
                return UserAction.input(ch)

        if vk == _VK_TAB:
            return UserAction(UserActionKind.TAB)
        return None


_DEFAULT_BINDINGS: tuple[tuple[str, str], ...] = (
    ("Space", "convert"),
    ("Enter", "commit_raw"),
    ("Henkan", "convert"),
    ("Escape", "cancel"),
    ("Ctrl+Backspace", "cancel_all"),
    ("Backspace", "backspace"),
    ("F6", "hiragana"),
    ("F7", "katakana"),
    ("F8", "half_katakana"),
    ("F9", "full_latin"),
    ("F10", "half_latin"),
    ("Muhenkan", "cycle_kana"),
    ("Shift+Space", "full_width_space"),
    ("Tab", "candidate_page_down"),
    ("Down", "candidate_next"),
    ("Shift+Tab", "candidate_page_up"),
    ("Up", "candidate_prev"),
    ("PageDown", "candidate_page_down"),
    ("PageUp", "candidate_page_up"),
    ("Zenkaku", "ime_toggle"),
    ("Ctrl+Space", "ime_toggle"),
    ("Hiragana_key", "mode_hiragana"),
    ("Ctrl+Caps", "mode_hiragana"),
    ("Katakana", "mode_katakana"),
    ("Alt+Caps", "mode_katakana"),
    ("Eisuu", "mode_alphanumeric"),
    ("Left", "cursor_left"),
    ("Right", "cursor_right"),
)

_DEFAULT_HEADER = """\
# rakukan key bindings
# Changes take effect when the IME is turned off and on again.
#
# Actions:
#   [preedit]
#     convert           -- start conversion (Space, Henkan)
#     commit_raw        -- commit the kana as typed (Enter)
#     backspace         -- delete one character
#     cancel            -- undo conversion / discard preedit (Escape)
#     cancel_all        -- discard the whole preedit (Ctrl+Backspace)
#     hiragana          -- to hiragana (F6)
#     katakana          -- to katakana (F7)
#     half_katakana     -- to half-width katakana (F8)
#     full_latin        -- to full-width latin (F9)
#     half_latin        -- to half-width latin (F10)
#     cycle_kana        -- cycle hiragana, katakana, half-width katakana (Muhenkan)
#     full_width_space  -- full-width space (Shift+Space)
#   [candidate window]
#     candidate_next      -- next candidate (Down)
#     candidate_prev      -- previous candidate (Up)
#     candidate_page_down -- next page (Tab, PageDown)
#     candidate_page_up   -- previous page (Shift+Tab, PageUp)
#   [IME on/off]
#     ime_toggle        -- toggle on and off (Zenkaku/Hankaku)
#     ime_off           -- turn off (alphanumeric pass-through)
#     ime_on            -- turn on (hiragana mode)
#   [input mode]
#     mode_hiragana     -- hiragana mode
#     mode_katakana     -- katakana mode (full-width)
#     mode_alphanumeric -- alphanumeric mode
#
# Key names:
#   plain keys : Enter, Space, Escape, Backspace, Tab, Delete
#   arrows     : Left, Up, Right, Down
#   function   : F1 - F12
#   paging     : PageUp, PageDown, Home, End
#   Japanese keyboard keys:
#     Zenkaku      -- Zenkaku/Hankaku
#     Henkan       -- Henkan
#     Muhenkan     -- Muhenkan
#     Hiragana_key -- Hiragana
#     Katakana     -- Katakana
#     Eisuu        -- Eisuu
#     Caps         -- Caps Lock
#   modifiers  : Ctrl+, Shift+, Alt+ (may be combined)
#   examples   : "Ctrl+Space", "Shift+Tab", "Alt+Caps"

"""


def default_keymap_text() -> str:
    """Contents written to a fresh keymap.toml."""
    blocks = "".join(
        f'[[bindings]]\nkey    = "{key}"\naction = "{action}"\n\n'
        for key, action in _DEFAULT_BINDINGS
    )
    return _DEFAULT_HEADER + blocks


def keymap_save_default(path: str | os.PathLike[str] | None = None) -> bool:
    """Write the default keymap unless the file exists; True if written."""
    target = keymap_path() if path is None else Path(path)
    if target.exists():
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(default_keymap_text(), encoding="utf-8")
    logger.info("keymap.toml created: %s", target)
    return True