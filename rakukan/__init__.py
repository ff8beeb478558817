"""Japanese input-method core: kana conversion, key bindings, configuration and session state."""

__version__ = "0.3.0"