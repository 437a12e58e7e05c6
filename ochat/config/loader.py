"""
Settings loader for ochat.

Handles loading settings from JSON/YAML files and converting them to the typed
``ChatSettings`` dataclass. The on-disk keys use the camelCase spelling shared
with the rest of the chat client (``chatModel``, ``ollamaURL``, ...).
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

from .errors import PersistenceError, ValidationError
from .models import ChatSettings, MCPServerConfig

# Python attribute -> on-disk key
_FIELD_KEYS: Dict[str, str] = {
    "chat_model": "chatModel",
    "embedding_model": "embeddingModel",
    "default_system_prompt": "defaultSystemPrompt",
    "rag_enabled": "ragEnabled",
    "ollama_url": "ollamaURL",
    "chromadb_url": "chromaDBURL",
    "chromadb_distance": "chromaDBDistance",
    "max_documents": "maxDocuments",
    "log_level": "logLevel",
    "enable_file_logging": "enableFileLogging",
    "agents_file_enabled": "agentsFileEnabled",
    "dark_mode": "darkMode",
    "selected_collections": "selectedCollections",
    "tool_trust_levels": "toolTrustLevels",
}

_STRING_FIELDS = {
    "chat_model",
    "embedding_model",
    "default_system_prompt",
    "ollama_url",
    "chromadb_url",
    "log_level",
}
_BOOL_FIELDS = {"rag_enabled", "enable_file_logging", "agents_file_enabled", "dark_mode"}


def parse_settings_text(content: str, path: Path | str) -> Dict[str, Any]:
    """
    Parse raw settings content from JSON or YAML.

    Args:
        content: Settings file content
        path: Path or filename used for extension detection

    Raises:
        ValueError: If the file format is unsupported
    """
    if isinstance(path, str):
        path = Path(path)

    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(content) or {}
    if suffix == ".json":
        return json.loads(content) if content.strip() else {}
    raise ValueError(
        f"Unsupported settings format: {suffix}. "
        f"Use .json, .yaml, or .yml"
    )


def load_raw_settings(path: Path) -> Dict[str, Any]:
    """
    Load raw settings from a JSON or YAML file.

    Also loads environment variables from a .env file if present.

    Args:
        path: Path to settings file (.json, .yaml, or .yml)

    Returns:
        Dictionary with raw settings

    Raises:
        FileNotFoundError: If the settings file doesn't exist
        ValueError: If the file format is unsupported
        json.JSONDecodeError: If JSON is invalid
        yaml.YAMLError: If YAML is invalid
    """
    load_dotenv()

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    raw = parse_settings_text(path.read_text(encoding="utf-8"), path)
    if not isinstance(raw, dict):
        raise ValueError(f"Settings file must contain an object: {path}")
    return raw


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on", "y"}:
            return True
        if lowered in {"0", "false", "no", "off", "n"}:
            return False
    raise ValueError("expected boolean value")


def build_mcp_server_config(raw: Dict[str, Any]) -> MCPServerConfig:
    """
    Build MCPServerConfig from one raw ``mcpServers[]`` entry.
    """
    if not isinstance(raw, dict):
        raise ValidationError("Each mcpServers[] entry must be an object", field="mcp_servers")
    try:
        enabled = _coerce_bool(raw.get("enabled", True))
    except ValueError as exc:
        raise ValidationError(
            f"invalid value for mcpServers[].enabled: {raw.get('enabled')!r}",
            field="mcp_servers",
        ) from exc
    return MCPServerConfig(
        name=raw.get("name", ""),
        command=raw.get("command", ""),
        args=list(raw.get("arguments") or []),
        enabled=enabled,
    )


def build_settings_from_raw(raw: Dict[str, Any]) -> ChatSettings:
    """
    Build ChatSettings from raw settings data.

    Missing keys take their defaults; values are coerced to the declared types.

    Raises:
        ValidationError: If a value cannot be coerced.
    """
    defaults = ChatSettings()
    values: Dict[str, Any] = {}
    for attr, key in _FIELD_KEYS.items():
        if key not in raw or raw[key] is None:
            values[attr] = copy.deepcopy(getattr(defaults, attr))
            continue
        value = raw[key]
        try:
            if attr in _STRING_FIELDS:
                values[attr] = str(value)
            elif attr in _BOOL_FIELDS:
                values[attr] = _coerce_bool(value)
            elif attr == "chromadb_distance":
                values[attr] = float(value)
            elif attr == "max_documents":
                values[attr] = int(value)
            elif attr == "selected_collections":
                values[attr] = {str(name): _coerce_bool(flag) for name, flag in dict(value).items()}
            else:
                values[attr] = dict(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"invalid value for {key}: {value!r}", field=attr) from exc

    values["mcp_servers"] = [build_mcp_server_config(item) for item in raw.get("mcpServers") or []]
    return ChatSettings(**values)


def settings_to_raw(settings: ChatSettings) -> Dict[str, Any]:
    """
    Serialize ChatSettings into a JSON/YAML-friendly dict.
    """
    raw: Dict[str, Any] = {}
    for attr, key in _FIELD_KEYS.items():
        raw[key] = copy.deepcopy(getattr(settings, attr))
    raw["mcpServers"] = [
        {
            "name": server.name,
            "command": server.command,
            "arguments": list(server.args),
            "enabled": server.enabled,
        }
        for server in settings.mcp_servers
    ]
    return raw


def clone_settings(settings: ChatSettings) -> ChatSettings:
    """Return an independent deep copy of a settings document."""
    return copy.deepcopy(settings)


def load_settings_from_file(path: Path | str) -> ChatSettings:
    """
    Load settings from file, falling back to defaults when it doesn't exist.

    Args:
        path: Path to settings file (.json, .yaml, or .yml)

    Returns:
        ChatSettings instance

    Raises:
        PersistenceError: If the file exists but cannot be read or parsed
        ValidationError: If a value has the wrong type

    Example:
        >>> settings = load_settings_from_file("settings.json")
        >>> print(settings.ollama_url)
        http://localhost:11434
    """
    if isinstance(path, str):
        path = Path(path)

    path = path.expanduser()
    if not path.exists():
        return ChatSettings()

    try:
        raw = load_raw_settings(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise PersistenceError(f"failed to read settings file {path}: {exc}") from exc
    return build_settings_from_raw(raw)


def save_settings_to_file(settings: ChatSettings, path: Path | str) -> None:
    """
    Serialize and save settings to a JSON/YAML file.

    Creates the parent directory when needed.

    Args:
        settings: ChatSettings instance to save
        path: Destination settings file path

    Raises:
        PersistenceError: If the file cannot be written
    """
    if isinstance(path, str):
        path = Path(path)

    path = path.expanduser()
    raw = settings_to_raw(settings)

    suffix = path.suffix.lower()
    if suffix == ".json":
        content = json.dumps(raw, indent=2)
    elif suffix in {".yaml", ".yml"}:
        content = yaml.safe_dump(raw, sort_keys=False, allow_unicode=True)
    else:
        raise PersistenceError(
            f"Unsupported settings format: {suffix}. "
            f"Use .json, .yaml, or .yml"
        )

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"failed to write settings file {path}: {exc}") from exc
