"""
Configuration management for ochat.

This package provides the typed settings model, its loader and the
persistence gateway used by the settings panel.
"""

from .errors import PersistenceError, ValidationError
from .loader import load_settings_from_file, save_settings_to_file
from .models import ChatSettings, MCPServerConfig
from .store import FileSettingsStore, MemorySettingsStore, SettingsStore

__all__ = [
    "ChatSettings",
    "FileSettingsStore",
    "MCPServerConfig",
    "MemorySettingsStore",
    "PersistenceError",
    "SettingsStore",
    "ValidationError",
    "load_settings_from_file",
    "save_settings_to_file",
]
