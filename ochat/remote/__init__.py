"""
Remote collaborators of the settings panel: connectivity probes and option lists.
"""

from .connection import ConnectionCheck, ConnectionStatus, check_chromadb, check_ollama
from .options import (
    OPTION_FETCHERS,
    ProviderError,
    RemoteOption,
    fetch_chroma_collections,
    fetch_ollama_models,
)

__all__ = [
    "ConnectionCheck",
    "ConnectionStatus",
    "OPTION_FETCHERS",
    "ProviderError",
    "RemoteOption",
    "check_chromadb",
    "check_ollama",
    "fetch_chroma_collections",
    "fetch_ollama_models",
]
