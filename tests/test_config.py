import os
import tomllib
from pathlib import Path

import pytest

from rakukan.config import (
    AppConfig,
    CancelBehavior,
    CandidateConfig,
    ConfigError,
    ConfigManager,
    DefaultInputMode,
    KeyboardLayout,
    config_path,
    config_save_default,
    default_config_text,
    load_app_config_from_path,
)


def _write(path: Path, text: str, mtime_ns: int) -> None:
    path.write_text(text, encoding="utf-8")
    os.utime(path, ns=(mtime_ns, mtime_ns))


def test_defaults_match_documented_values():
    cfg = AppConfig()
    assert cfg.general.log_level == "info"
    assert cfg.keyboard.layout is KeyboardLayout.US
    assert cfg.keyboard.reload_on_mode_switch is True
    assert cfg.input.default_mode is DefaultInputMode.HIRAGANA
    assert cfg.candidate.page_size == 9
    assert cfg.conversion.engine == "karukan"
    assert cfg.conversion.cancel_behavior is CancelBehavior.MS_IME
    assert cfg.live_conversion.debounce_ms == 80
    assert cfg.live_conversion.enabled is False
    assert cfg.main_gpu == 0
    assert cfg.num_candidates is None


def test_empty_dict_gives_defaults():
    assert AppConfig.from_dict({}) == AppConfig()


def test_default_text_parses_to_defaults():
    assert AppConfig.from_dict(tomllib.loads(default_config_text())) == AppConfig()


def test_partial_section_keeps_other_defaults():
    cfg = AppConfig.from_dict({"candidate": {"page_size": 4}})
    assert cfg.candidate == CandidateConfig(page_size=4)
    assert cfg.candidate.show_numbers is True


def test_enum_and_optional_fields():
    cfg = AppConfig.from_dict(
        {
            "keyboard": {"layout": "jis"},
            "conversion": {"cancel_behavior": "simple"},
            "gpu_backend": "cuda",
            "model_variant": "small",
            "main_gpu": 2,
        }
    )
    assert cfg.keyboard.layout is KeyboardLayout.JIS
    assert cfg.conversion.cancel_behavior is CancelBehavior.SIMPLE
    assert cfg.gpu_backend == "cuda"
    assert cfg.model_variant == "small"
    assert cfg.main_gpu == 2


def test_unknown_keys_are_ignored():
    cfg = AppConfig.from_dict({"extra": 1, "general": {"other": True}})
    assert cfg == AppConfig()


@pytest.mark.parametrize(
    "data",
    [
        {"keyboard": {"layout": "dvorak"}},
        {"candidate": {"page_size": "nine"}},
        {"candidate": {"page_size": -1}},
        {"live_conversion": {"enabled": 1}},
        {"general": "info"},
        {"main_gpu": 2**40},
        {"num_candidates": True},
    ],
)
def test_invalid_values_raise(data):
    with pytest.raises(ConfigError):
        AppConfig.from_dict(data)


def test_effective_num_candidates_uses_page_size():
    assert AppConfig.from_dict({"candidate": {"page_size": 5}}).effective_num_candidates() == 5


def test_effective_num_candidates_legacy_overrides():
    cfg = AppConfig.from_dict({"num_candidates": 3, "candidate": {"page_size": 7}})
    assert cfg.effective_num_candidates() == 3


def test_effective_num_candidates_clamped():
    assert AppConfig.from_dict({"candidate": {"page_size": 20}}).effective_num_candidates() == 9
    assert AppConfig.from_dict({"num_candidates": 0}).effective_num_candidates() == 1


def test_config_path_from_environ(tmp_path):
    assert config_path({"APPDATA": str(tmp_path)}) == tmp_path / "rakukan" / "config.toml"


def test_config_path_without_appdata():
    with pytest.raises(ConfigError):
        config_path({})


def test_save_default_creates_once(tmp_path):
    path = tmp_path / "rakukan" / "config.toml"
    assert config_save_default(path) is True
    assert path.read_text(encoding="utf-8") == default_config_text()
    path.write_text("[general]\n", encoding="utf-8")
    assert config_save_default(path) is False
    assert path.read_text(encoding="utf-8") == "[general]\n"


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config_from_path(tmp_path / "missing.toml")


def test_load_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_app_config_from_path(path)


def test_manager_missing_file_uses_defaults(tmp_path):
    mgr = ConfigManager(tmp_path / "config.toml")
    assert mgr.current == AppConfig()
    assert mgr.reload_if_changed() is False


def test_manager_reloads_on_change(tmp_path):
    path = tmp_path / "config.toml"
    _write(path, "[candidate]\npage_size = 4\n", 1_000_000_000)
    mgr = ConfigManager(path)
    assert mgr.current.candidate.page_size == 4
    assert mgr.reload_if_changed() is False
    _write(path, "[candidate]\npage_size = 6\n", 2_000_000_000)
    assert mgr.maybe_reload_on_mode_switch() is True
    assert mgr.current.candidate.page_size == 6
    assert mgr.maybe_reload_on_mode_switch() is False


def test_manager_reload_disabled(tmp_path):
    path = tmp_path / "config.toml"
    _write(path, "[keyboard]\nreload_on_mode_switch = false\n", 1_000_000_000)
    mgr = ConfigManager(path)
    _write(path, "[keyboard]\nlayout = \"jis\"\n", 2_000_000_000)
    assert mgr.maybe_reload_on_mode_switch() is False
    assert mgr.current.keyboard.layout is KeyboardLayout.US


def test_manager_broken_file_keeps_previous(tmp_path):
    path = tmp_path / "config.toml"
    _write(path, "[candidate]\npage_size = 4\n", 1_000_000_000)
    mgr = ConfigManager(path)
    _write(path, "[candidate\n", 2_000_000_000)
    assert mgr.maybe_reload_on_mode_switch() is False
    assert mgr.current.candidate.page_size == 4
    with pytest.raises(ValueError):
        mgr.reload_if_changed()


def test_current_is_a_copy(tmp_path):
    mgr = ConfigManager(tmp_path / "config.toml")
    snapshot = mgr.current
    snapshot.candidate.page_size = 1
    assert mgr.current.candidate.page_size == 9