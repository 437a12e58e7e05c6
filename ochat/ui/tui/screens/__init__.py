"""
TUI Screen modules for ochat.

Contains the panel classes hosted by the app:
- SettingsScreen: Field editor for the settings document
- CollectionsScreen: ChromaDB collection selection for RAG
"""

from __future__ import annotations

__all__ = [
    "SettingsScreen",
    "CollectionsScreen",
]

# Lazy imports to avoid circular dependencies
def __getattr__(name: str):
    if name == "SettingsScreen":
        from ochat.ui.tui.screens.settings import SettingsScreen
        return SettingsScreen
    elif name == "CollectionsScreen":
        from ochat.ui.tui.screens.collections import CollectionsScreen
        return CollectionsScreen
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
