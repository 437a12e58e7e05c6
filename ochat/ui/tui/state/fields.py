"""Field descriptor table driving the settings editor.

Every editable setting is described once here; the field editor state machine
and the view model are generic over these descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ochat.config.errors import ValidationError
from ochat.config.models import ChatSettings, LOG_LEVELS
from ochat.config.models.constants import (
    DEFAULT_CHROMADB_URL,
    MAX_CHROMADB_DISTANCE,
    MIN_CHROMADB_DISTANCE,
    RAG_FALLBACK_EMBEDDING_MODEL,
)

PROMPT_SUMMARY_LENGTH = 100


class FieldKind(str, Enum):
    """How a field is edited."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    MULTILINE = "multiline"


Parser = Callable[[str], Any]
AfterSet = Callable[[ChatSettings], None]


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor of one editable settings field."""

    key: str
    label: str
    kind: FieldKind
    help: str
    parser: Optional[Parser] = None
    choices: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    """Companion fields that must be non-empty before a commit auto-saves."""
    probe: Optional[str] = None
    """Server to re-check after a successful commit."""
    options_source: Optional[str] = None
    """Remote option provider offering values for this field."""
    after_set: Optional[AfterSet] = None

    @property
    def opens_editor(self) -> bool:
        return self.kind in {FieldKind.STRING, FieldKind.NUMBER, FieldKind.INTEGER}

    def format_value(self, value: Any) -> str:
        if self.kind is FieldKind.NUMBER:
            return f"{float(value):.2f}"
        if self.kind is FieldKind.INTEGER:
            return str(int(value))
        if self.kind is FieldKind.BOOLEAN:
            return "true" if value else "false"
        return "" if value is None else str(value)

    def parse(self, text: str) -> Any:
        """Parse typed text into a field value.

        Raises:
            ValidationError: If the text is not acceptable for this field.
        """
        if self.parser is None:
            return text
        return self.parser(text)


# ----------------------------------------------------------------------
# Parsers
# ----------------------------------------------------------------------


def required_string(label: str) -> Parser:
    def _parse(text: str) -> str:
        value = text.strip()
        if not value:
            raise ValidationError(f"{label} cannot be empty")
        return value

    return _parse


def optional_string(text: str) -> str:
    return text.strip()


def float_in_range(label: str, low: float, high: float) -> Parser:
    def _parse(text: str) -> float:
        try:
            value = float(text.strip())
        except ValueError as exc:
            raise ValidationError(f"{label} must be a number") from exc
        if value != value or not low <= value <= high:
            raise ValidationError(f"{label} must be between {low:.1f} and {high:.1f}")
        return value

    return _parse


def non_negative_int(label: str) -> Parser:
    def _parse(text: str) -> int:
        try:
            value = int(text.strip())
        except ValueError as exc:
            raise ValidationError(f"{label} must be a number") from exc
        if value < 0:
            raise ValidationError(f"{label} must be 0 or greater")
        return value

    return _parse


def one_of(label: str, choices: tuple[str, ...]) -> Parser:
    def _parse(text: str) -> str:
        value = text.strip().lower()
        if value not in choices:
            raise ValidationError(f"{label} must be one of: {', '.join(choices)}")
        return value

    return _parse


def cycle_choice(choices: tuple[str, ...], current: str) -> str:
    """Return the choice after ``current``, wrapping to the first.

    An unknown current value cycles to the first choice.
    """
    try:
        index = choices.index(current)
    except ValueError:
        index = -1
    return choices[(index + 1) % len(choices)]


def summarize_prompt(prompt: str, max_length: int = PROMPT_SUMMARY_LENGTH) -> str:
    """One-line preview of a long prompt for the field list."""
    flat = " ".join(prompt.split())
    if len(flat) <= max_length:
        return flat
    truncated = flat[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length - 20:
        truncated = truncated[:last_space]
    return truncated + "..."


def _fill_rag_defaults(settings: ChatSettings) -> None:
    if not settings.rag_enabled:
        return
    if not settings.embedding_model.strip():
        settings.embedding_model = RAG_FALLBACK_EMBEDDING_MODEL
    if not settings.chromadb_url.strip():
        settings.chromadb_url = DEFAULT_CHROMADB_URL


SETTINGS_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        key="chat_model",
        label="Chat Model",
        kind=FieldKind.STRING,
        help="Model used for chat conversations (Enter: Edit, L: Select from list)",
        parser=required_string("chat model"),
        options_source="ollama_models",
    ),
    FieldSpec(
        key="embedding_model",
        label="Embedding Model",
        kind=FieldKind.STRING,
        help="Model for embeddings (Enter: Edit, L: Select from list)",
        parser=optional_string,
        options_source="ollama_models",
    ),
    FieldSpec(
        key="default_system_prompt",
        label="Default System Prompt",
        kind=FieldKind.MULTILINE,
        help="System prompt sent with each message (Enter: View/Edit in panel)",
    ),
    FieldSpec(
        key="rag_enabled",
        label="RAG Enabled",
        kind=FieldKind.BOOLEAN,
        help="Enable Retrieval Augmented Generation (Enter/Space: Toggle)",
        after_set=_fill_rag_defaults,
    ),
    FieldSpec(
        key="ollama_url",
        label="Ollama URL",
        kind=FieldKind.STRING,
        help="URL of the Ollama server",
        parser=required_string("Ollama URL"),
        requires=("chat_model",),
        probe="ollama",
    ),
    FieldSpec(
        key="chromadb_url",
        label="ChromaDB URL",
        kind=FieldKind.STRING,
        help="URL of the ChromaDB server",
        parser=required_string("ChromaDB URL"),
        requires=("chat_model",),
        probe="chromadb",
    ),
    FieldSpec(
        key="chromadb_distance",
        label="ChromaDB Distance",
        kind=FieldKind.NUMBER,
        help="Distance threshold for cosine similarity (0-2 range)",
        parser=float_in_range("ChromaDB distance", MIN_CHROMADB_DISTANCE, MAX_CHROMADB_DISTANCE),
    ),
    FieldSpec(
        key="max_documents",
        label="Max Documents",
        kind=FieldKind.INTEGER,
        help="Maximum documents for RAG",
        parser=non_negative_int("max documents"),
    ),
    FieldSpec(
        key="log_level",
        label="Log Level",
        kind=FieldKind.ENUM,
        help="Logging level (Enter/Space: Cycle through debug → info → warn → error)",
        parser=one_of("log level", LOG_LEVELS),
        choices=LOG_LEVELS,
    ),
    FieldSpec(
        key="enable_file_logging",
        label="Enable File Logging",
        kind=FieldKind.BOOLEAN,
        help="Enable logging to file (Enter/Space: Toggle)",
    ),
    FieldSpec(
        key="agents_file_enabled",
        label="AGENTS.md Detection",
        kind=FieldKind.BOOLEAN,
        help="Automatically detect and use AGENTS.md files from working directory (Enter/Space: Toggle)",
    ),
)

EDITOR_FIELD_KEYS: frozenset[str] = frozenset(spec.key for spec in SETTINGS_FIELDS)


def field_spec(key: str, fields: tuple[FieldSpec, ...] = SETTINGS_FIELDS) -> FieldSpec:
    """Look up a descriptor by key.

    Raises:
        KeyError: If no field has that key.
    """
    for spec in fields:
        if spec.key == key:
            return spec
    raise KeyError(key)
