# rakukan

The input-method core of a Japanese IME, with no ties to any platform. It covers:

- **Input modes.** `InputMode` is hiragana, katakana or alphanumeric. Each mode has a short label for the indicator (`あ`, `ア`, `A`).
- **Text conversion.** `rakukan.text_util` converts hiragana to katakana and back, and ASCII to full-width Latin and back.
- **Configuration.** `rakukan.config` reads a TOML file (`config.toml`) into `AppConfig`, with defaults for every section. `ConfigManager` reloads the file when it changes, on an input-mode switch.
- **Key bindings.** `rakukan.keys` and `rakukan.keymap` parse key specifications such as `"Ctrl+Space"` or `"Shift+Tab"`. They build MS-IME style presets for US and JIS keyboards, merge them with user bindings from `keymap.toml`, and turn a virtual key together with its modifiers into a `UserAction`.
- **Conversion session.** `rakukan.session.SessionState` tracks the session: idle, preedit, waiting, split preedit or candidate selection. It handles paging, wrap-around, numbered selection, pending punctuation and segment shrink/extend.
- **Per-document modes.** `rakukan.ime_state.DocModeStore` remembers the input mode of each document. A terminal window starts in alphanumeric mode.

## Install

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Examples

Converting text:

```python
from rakukan.text_util import to_katakana, to_full_latin

to_katakana("あいう")   # "アイウ"
to_full_latin("abc")   # "ａｂｃ"
```

Resolving a key to an action:

```python
from rakukan.config import KeyboardLayout
from rakukan.keymap import Keymap

keymap = Keymap.for_layout(KeyboardLayout.US)
keymap.resolve(0x20, ctrl=True, shift=False, alt=False)   # the IME toggle action
```

Selecting a candidate:

```python
from rakukan.session import SessionState

session = SessionState()
session.activate_selecting(["漢字", "感じ", "幹事"], "かんじ", 0, 0, False, "")
session.next_with_page_wrap()
session.current_candidate()   # "感じ"
```

Writing the default files and loading the configuration:

```python
from pathlib import Path
from rakukan.config import config_save_default, load_app_config_from_path

path = Path("config.toml")
config_save_default(path)
cfg = load_app_config_from_path(path)
cfg.effective_num_candidates()   # 9
```

`config_path()` and `keymap_path()` give the standard locations, under `%APPDATA%\rakukan`.