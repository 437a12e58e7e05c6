from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

_LAZY_EXPORTS = {
    "ChatSettings": ("ochat.config", "ChatSettings"),
    "FileSettingsStore": ("ochat.config", "FileSettingsStore"),
    "run_tui": ("ochat.ui.tui", "run_tui"),
}

__all__ = ["__version__", "ChatSettings", "FileSettingsStore", "run_tui"]


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        module_name, attr_name = _LAZY_EXPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'ochat' has no attribute '{name}'")
