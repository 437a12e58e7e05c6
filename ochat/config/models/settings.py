"""
Settings document model for ochat.

``ChatSettings`` is the single persisted document edited by the settings panel.
Scalar fields are owned by the settings panel; the collection fields at the end
are owned by other panels (collections, tools, MCP servers) and are only carried
through by the settings editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ochat.config.errors import ValidationError

from .constants import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_CHROMADB_DISTANCE,
    DEFAULT_CHROMADB_URL,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_DOCUMENTS,
    DEFAULT_OLLAMA_URL,
    DEFAULT_SYSTEM_PROMPT,
    LOG_LEVELS,
    MAX_CHROMADB_DISTANCE,
    MIN_CHROMADB_DISTANCE,
)


@dataclass
class MCPServerConfig:
    """
    Configuration for a single MCP server entry.
    """

    name: str
    """Server identifier used for tool names."""

    command: str
    """Command to launch the MCP server."""

    args: List[str] = field(default_factory=list)
    """Command arguments."""

    enabled: bool = True
    """Whether the server is started with the chat session."""

    def __post_init__(self) -> None:
        self.name = str(self.name or "").strip()
        self.command = str(self.command or "").strip()
        self.args = [str(arg).strip() for arg in (self.args or []) if str(arg).strip()]
        self.enabled = bool(self.enabled)

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("mcp_servers[].name is required", field="mcp_servers")
        if not self.command:
            raise ValidationError(
                f"mcp_servers[{self.name}].command is required",
                field="mcp_servers",
            )


@dataclass
class ChatSettings:
    """
    Persisted settings document.
    """

    chat_model: str = DEFAULT_CHAT_MODEL
    """Ollama model used for chat conversations."""

    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    """Ollama model used to embed RAG queries."""

    default_system_prompt: str = DEFAULT_SYSTEM_PROMPT
    """System prompt sent with each conversation."""

    rag_enabled: bool = True
    """Whether retrieval augmented generation is enabled."""

    ollama_url: str = DEFAULT_OLLAMA_URL
    """Base URL of the Ollama server."""

    chromadb_url: str = DEFAULT_CHROMADB_URL
    """Base URL of the ChromaDB server."""

    chromadb_distance: float = DEFAULT_CHROMADB_DISTANCE
    """Distance threshold for cosine similarity."""

    max_documents: int = DEFAULT_MAX_DOCUMENTS
    """Maximum retrieved documents added to a prompt."""

    log_level: str = DEFAULT_LOG_LEVEL
    """One of debug, info, warn, error."""

    enable_file_logging: bool = False
    """Whether logs are also written to a file."""

    agents_file_enabled: bool = True
    """Whether AGENTS.md files in the working directory are picked up."""

    dark_mode: bool = False
    """Theme flag owned by the chat view."""

    selected_collections: Dict[str, bool] = field(default_factory=dict)
    """ChromaDB collections selected in the RAG panel."""

    tool_trust_levels: Dict[str, int] = field(default_factory=dict)
    """Per-tool trust levels set in the tools panel."""

    mcp_servers: List[MCPServerConfig] = field(default_factory=list)
    """MCP servers managed by the MCP panel."""

    def __post_init__(self) -> None:
        self.log_level = str(self.log_level or DEFAULT_LOG_LEVEL).strip().lower()
        self.selected_collections = {
            str(name): bool(enabled) for name, enabled in (self.selected_collections or {}).items()
        }
        self.tool_trust_levels = {
            str(name): int(level) for name, level in (self.tool_trust_levels or {}).items()
        }
        self.mcp_servers = [
            server if isinstance(server, MCPServerConfig) else MCPServerConfig(**server)
            for server in (self.mcp_servers or [])
        ]

    def validate(self) -> None:
        """Validate the whole document.

        Raises:
            ValidationError: On the first failing constraint.
        """
        if not self.ollama_url.strip():
            raise ValidationError("ollama_url cannot be empty", field="ollama_url")
        if not self.chat_model.strip():
            raise ValidationError("chat_model cannot be empty", field="chat_model")
        if self.rag_enabled and not self.chromadb_url.strip():
            raise ValidationError(
                "chromadb_url cannot be empty when RAG is enabled",
                field="chromadb_url",
            )
        if not MIN_CHROMADB_DISTANCE <= self.chromadb_distance <= MAX_CHROMADB_DISTANCE:
            raise ValidationError(
                f"chromadb_distance must be between {MIN_CHROMADB_DISTANCE} and {MAX_CHROMADB_DISTANCE}",
                field="chromadb_distance",
            )
        if self.max_documents < 0:
            raise ValidationError("max_documents must be 0 or greater", field="max_documents")
        if self.log_level not in LOG_LEVELS:
            raise ValidationError(
                f"log_level must be one of: {', '.join(LOG_LEVELS)}",
                field="log_level",
            )
        seen: set[str] = set()
        for server in self.mcp_servers:
            server.validate()
            if server.name in seen:
                raise ValidationError(f"duplicate MCP server name: {server.name}", field="mcp_servers")
            seen.add(server.name)
