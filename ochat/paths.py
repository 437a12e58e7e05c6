"""
Settings and log path helpers for ochat.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional


CONFIG_DIR_ENV_VAR = "OCHAT_CONFIG_DIR"
APP_DIR_NAME = "ochat"
SETTINGS_FILE_NAME = "settings.json"


def get_config_dir(override: Optional[str | Path] = None) -> Path:
    """
    Resolve the ochat configuration folder.

    Priority:
    1. Explicit override argument
    2. OCHAT_CONFIG_DIR environment variable
    3. %APPDATA%/ochat on Windows
    4. $XDG_CONFIG_HOME/ochat, falling back to ~/.config/ochat

    Raises:
        RuntimeError: On Windows when APPDATA is not set.
    """
    candidate: str | Path | None = override
    if candidate is None:
        candidate = os.environ.get(CONFIG_DIR_ENV_VAR) or None
    if candidate is not None:
        return Path(candidate).expanduser().resolve()

    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        if not appdata:
            raise RuntimeError("APPDATA environment variable not set")
        return Path(appdata) / APP_DIR_NAME

    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base).expanduser() / APP_DIR_NAME


def get_settings_path(override_dir: Optional[str | Path] = None) -> Path:
    """Return the full path of the settings file."""
    return get_config_dir(override_dir) / SETTINGS_FILE_NAME


def get_log_dir(override_dir: Optional[str | Path] = None) -> Path:
    """Return the folder used for file logging."""
    return get_config_dir(override_dir) / "logs"
