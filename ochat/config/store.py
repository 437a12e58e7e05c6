"""
Persistence gateway used by the settings editor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from ochat.logging import get_logger
from ochat.paths import get_settings_path

from .loader import clone_settings, load_settings_from_file, save_settings_to_file
from .models import ChatSettings

logger = get_logger(__name__)


class SettingsStore(Protocol):
    """Load/save gateway for the settings document."""

    def load(self) -> ChatSettings:
        ...

    def save(self, settings: ChatSettings) -> None:
        ...


class FileSettingsStore:
    """Settings store backed by a JSON or YAML file."""

    def __init__(self, path: Optional[Path | str] = None) -> None:
        self.path = Path(path) if path is not None else get_settings_path()

    def load(self) -> ChatSettings:
        """Load settings, returning defaults when the file is missing."""
        settings = load_settings_from_file(self.path)
        logger.info("Loaded settings from %s", self.path)
        return settings

    def save(self, settings: ChatSettings) -> None:
        """Validate and write settings.

        Raises:
            ValidationError: If the document is invalid.
            PersistenceError: If the file cannot be written.
        """
        settings.validate()
        save_settings_to_file(settings, self.path)
        logger.debug("Saved settings to %s", self.path)


class MemorySettingsStore:
    """In-memory store, used when no settings file should be touched."""

    def __init__(self, settings: Optional[ChatSettings] = None) -> None:
        self._settings = clone_settings(settings) if settings is not None else ChatSettings()
        self.save_count = 0

    def load(self) -> ChatSettings:
        return clone_settings(self._settings)

    def save(self, settings: ChatSettings) -> None:
        settings.validate()
        self._settings = clone_settings(settings)
        self.save_count += 1
