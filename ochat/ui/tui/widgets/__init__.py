"""
TUI Widget modules for ochat.

Contains the settings panel widgets:
- SettingsFieldList: Field rows with connection indicators
- SettingsHelp: Field help and key hints
- PromptPanel: Multi-line prompt viewer/editor
- OptionPanel: Remote option pick list
"""

from __future__ import annotations

__all__ = [
    "SettingsFieldList",
    "SettingsHelp",
    "PromptPanel",
    "OptionPanel",
]

# Lazy imports to avoid circular dependencies
def __getattr__(name: str):
    if name == "SettingsFieldList":
        from ochat.ui.tui.widgets.settings_fields import SettingsFieldList
        return SettingsFieldList
    elif name == "SettingsHelp":
        from ochat.ui.tui.widgets.settings_fields import SettingsHelp
        return SettingsHelp
    elif name == "PromptPanel":
        from ochat.ui.tui.widgets.editor_panels import PromptPanel
        return PromptPanel
    elif name == "OptionPanel":
        from ochat.ui.tui.widgets.editor_panels import OptionPanel
        return OptionPanel
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
