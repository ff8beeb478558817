"""Application configuration stored in config.toml."""

from __future__ import annotations

import copy
import logging
import os
import threading
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_MIN_CANDIDATES = 1
_MAX_CANDIDATES = 9

_E = TypeVar("_E", bound=Enum)


class ConfigError(ValueError):
    """The configuration is missing or holds a value of the wrong kind."""


class KeyboardLayout(Enum):
    """Physical keyboard layout."""

    US = "us"
    JIS = "jis"
    CUSTOM = "custom"


class DefaultInputMode(Enum):
    """Input mode used when the IME starts."""

    HIRAGANA = "hiragana"
    KATAKANA = "katakana"
    ALPHANUMERIC = "alphanumeric"


class CancelBehavior(Enum):
    """What Escape does while converting."""

    MS_IME = "ms_ime"
    SIMPLE = "simple"


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _take_bool(table: Mapping[str, Any], key: str, default: bool, where: str) -> bool:
    if key not in table:
        return default
    value = table[key]
    if not isinstance(value, bool):
        raise ConfigError(f"{where}.{key} must be a boolean")
    return value


def _take_str(table: Mapping[str, Any], key: str, default: str, where: str) -> str:
    if key not in table:
        return default
    value = table[key]
    if not isinstance(value, str):
        raise ConfigError(f"{where}.{key} must be a string")
    return value


def _take_int(
    table: Mapping[str, Any], key: str, default: int, where: str, lo: int, hi: int
) -> int:
    if key not in table:
        return default
    value = table[key]
    if isinstance(value, bool) or not isinstance(value, int) or not lo <= value <= hi:
        raise ConfigError(f"{where}.{key} must be an integer in {lo}..{hi}")
    return value


def _take_enum(
    table: Mapping[str, Any], key: str, default: _E, where: str, enum_cls: type[_E]
) -> _E:
    if key not in table:
        return default
    value = table[key]
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(repr(m.value) for m in enum_cls)
        raise ConfigError(f"{where}.{key} must be one of {choices}") from None


@dataclass
class GeneralConfig:
    """[general] section."""

    log_level: str = "info"

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> GeneralConfig:
        return cls(log_level=_take_str(table, "log_level", "info", "general"))


@dataclass
class KeyboardConfig:
    """[keyboard] section."""

    layout: KeyboardLayout = KeyboardLayout.US
    enable_jis_keys: bool = False
    reload_on_mode_switch: bool = True

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> KeyboardConfig:
        where = "keyboard"
        return cls(
            layout=_take_enum(table, "layout", KeyboardLayout.US, where, KeyboardLayout),
            enable_jis_keys=_take_bool(table, "enable_jis_keys", False, where),
            reload_on_mode_switch=_take_bool(table, "reload_on_mode_switch", True, where),
        )


@dataclass
class InputConfig:
    """[input] section."""

    default_mode: DefaultInputMode = DefaultInputMode.HIRAGANA
    remember_last_kana_mode: bool = True

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> InputConfig:
        where = "input"
        return cls(
            default_mode=_take_enum(
                table, "default_mode", DefaultInputMode.HIRAGANA, where, DefaultInputMode
            ),
            remember_last_kana_mode=_take_bool(
                table, "remember_last_kana_mode", True, where
            ),
        )


@dataclass
class CandidateConfig:
    """[candidate] section."""

    page_size: int = 9
    use_number_selection: bool = True
    show_numbers: bool = True

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> CandidateConfig:
        where = "candidate"
        return cls(
            page_size=_take_int(table, "page_size", 9, where, 0, _U64_MAX),
            use_number_selection=_take_bool(table, "use_number_selection", True, where),
            show_numbers=_take_bool(table, "show_numbers", True, where),
        )


@dataclass
class ConversionConfig:
    """[conversion] section."""

    engine: str = "karukan"
    commit_raw_with_enter: bool = True
    cancel_behavior: CancelBehavior = CancelBehavior.MS_IME

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> ConversionConfig:
        where = "conversion"
        return cls(
            engine=_take_str(table, "engine", "karukan", where),
            commit_raw_with_enter=_take_bool(table, "commit_raw_with_enter", True, where),
            cancel_behavior=_take_enum(
                table, "cancel_behavior", CancelBehavior.MS_IME, where, CancelBehavior
            ),
        )


@dataclass
class LiveConversionConfig:
    """[live_conversion] section."""

    enabled: bool = False
    debounce_ms: int = 80
    use_llm: bool = False
    prefer_dictionary_first: bool = True

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> LiveConversionConfig:
        where = "live_conversion"
        return cls(
            enabled=_take_bool(table, "enabled", False, where),
            debounce_ms=_take_int(table, "debounce_ms", 80, where, 0, _U64_MAX),
            use_llm=_take_bool(table, "use_llm", False, where),
            prefer_dictionary_first=_take_bool(
                table, "prefer_dictionary_first", True, where
            ),
        )


@dataclass
class DiagnosticsConfig:
    """[diagnostics] section."""

    dump_active_config: bool = True
    warn_on_unknown_key: bool = True

    @classmethod
    def _from_table(cls, table: Mapping[str, Any]) -> DiagnosticsConfig:
        where = "diagnostics"
        return cls(
            dump_active_config=_take_bool(table, "dump_active_config", True, where),
            warn_on_unknown_key=_take_bool(table, "warn_on_unknown_key", True, where),
        )


@dataclass
class AppConfig:
    """The whole configuration file."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    keyboard: KeyboardConfig = field(default_factory=KeyboardConfig)
    input: InputConfig = field(default_factory=InputConfig)
    candidate: CandidateConfig = field(default_factory=CandidateConfig)
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    live_conversion: LiveConversionConfig = field(default_factory=LiveConversionConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    gpu_backend: str | None = None
    main_gpu: int = 0
    model_variant: str | None = None
    num_candidates: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AppConfig:
        """Build a configuration from parsed TOML; missing keys take defaults."""
        if not isinstance(data, Mapping):
            raise ConfigError("configuration must be a table")
        gpu_backend = (
            _take_str(data, "gpu_backend", "", "config") if "gpu_backend" in data else None
        )
        model_variant = (
            _take_str(data, "model_variant", "", "config")
            if "model_variant" in data
            else None
        )
        num_candidates = (
            _take_int(data, "num_candidates", 0, "config", 0, _U64_MAX)
            if "num_candidates" in data
            else None
        )
        return cls(
            general=GeneralConfig._from_table(_section(data, "general")),
            keyboard=KeyboardConfig._from_table(_section(data, "keyboard")),
            input=InputConfig._from_table(_section(data, "input")),
            candidate=CandidateConfig._from_table(_section(data, "candidate")),
            conversion=ConversionConfig._from_table(_section(data, "conversion")),
            live_conversion=LiveConversionConfig._from_table(
                _section(data, "live_conversion")
            ),
            diagnostics=DiagnosticsConfig._from_table(_section(data, "diagnostics")),
            gpu_backend=gpu_backend,
            main_gpu=_take_int(data, "main_gpu", 0, "config", _I32_MIN, _I32_MAX),
            model_variant=model_variant,
            num_candidates=num_candidates,
        )

    def effective_num_candidates(self) -> int:
        """Candidates per page: the legacy setting wins, clamped to 1..9."""
        n = self.num_candidates if self.num_candidates is not None else self.candidate.page_size
        return max(_MIN_CANDIDATES, min(_MAX_CANDIDATES, n))


def config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Location of config.toml under the roaming application data folder."""
    env = os.environ if environ is None else environ
    appdata = env.get("APPDATA")
    if appdata is None:
        raise ConfigError("APPDATA not set")
    return Path(appdata) / "rakukan" / "config.toml"


def load_app_config_from_path(path: str | os.PathLike[str]) -> AppConfig:
    """Read and parse a configuration file."""
    text = Path(path).read_text(encoding="utf-8")
    return AppConfig.from_dict(tomllib.loads(text))


_DEFAULT_CONFIG_TEXT = """\
# rakukan configuration
# Reloaded whenever the input mode changes.
# Settings that need a rebuild, such as gpu_backend, take effect after reinstalling.

[general]
log_level = "info"

[keyboard]
layout = "us"
enable_jis_keys = false
reload_on_mode_switch = true

[input]
default_mode = "hiragana"
remember_last_kana_mode = true

[candidate]
page_size = 9
use_number_selection = true
show_numbers = true

[conversion]
engine = "karukan"
commit_raw_with_enter = true
cancel_behavior = "ms_ime"

[live_conversion]
enabled = false
debounce_ms = 80
use_llm = false
prefer_dictionary_first = true

[diagnostics]
dump_active_config = true
warn_on_unknown_key = true

# Legacy setting; overrides candidate.page_size when present.
# num_candidates = 9

# GPU backend and model selection need a reinstall.
# gpu_backend = "cuda"
# main_gpu = 0
# model_variant = "small"
"""


def default_config_text() -> str:
    """Contents written to a fresh config.toml."""
    return _DEFAULT_CONFIG_TEXT


def config_save_default(path: str | os.PathLike[str] | None = None) -> bool:
    """Write the default configuration unless the file exists; True if written."""
    target = config_path() if path is None else Path(path)
    if target.exists():
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(default_config_text(), encoding="utf-8")
    logger.info("config.toml created: %s", target)
    return True


def _file_modified(path: Path) -> int | None:
    try:
        return os.stat(path).st_mtime_ns
    except OSError:
        return None


class ConfigManager:
    """Holds the active configuration and reloads it when the file changes."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        if path is None:
            try:
                path = config_path()
            except ConfigError:
                path = Path("config.toml")
        self.path = Path(path)
        self._lock = threading.RLock()
        try:
            self._current = load_app_config_from_path(self.path)
        except (OSError, ValueError):
            self._current = AppConfig()
        self._last_modified = _file_modified(self.path)

    @property
    def current(self) -> AppConfig:
        """A copy of the active configuration."""
        with self._lock:
            return copy.deepcopy(self._current)

    def reload_if_changed(self) -> bool:
        """Reload when the modification time changed; errors propagate."""
        with self._lock:
            modified = _file_modified(self.path)
            if modified == self._last_modified:
                return False
            self._current = load_app_config_from_path(self.path)
            self._last_modified = modified
            return True

    def maybe_reload_on_mode_switch(self) -> bool:
        """Reload if enabled and changed; a broken file keeps the old config."""
        with self._lock:
            if not self._current.keyboard.reload_on_mode_switch:
                return False
            try:
                changed = self.reload_if_changed()
            except (OSError, ValueError) as exc:
                logger.warning("config.toml reload failed; keeping previous config: %s", exc)
                return False
            if changed:
                logger.info(
                    "config.toml reloaded on mode switch: layout=%s num_candidates=%d "
                    "live_conversion=%s",
                    self._current.keyboard.layout.value,
                    self._current.effective_num_candidates(),
                    self._current.live_conversion.enabled,
                )
            return changed