"""
Connectivity probes for the Ollama and ChromaDB servers.

The probes are blocking and are run from background workers; their results are
posted back to the settings screen as messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

from ochat.logging import format_exception_summary, get_logger

logger = get_logger(__name__)

PROBE_TIMEOUT_SECONDS = 5


class ConnectionStatus(str, Enum):
    """Reachability state of a server."""

    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CHECKING = "checking"


@dataclass(frozen=True)
class ConnectionCheck:
    """Result of one connectivity probe."""

    server: str
    status: ConnectionStatus
    url: str
    full_url: str
    error: Optional[str] = None


def _probe(server: str, url: str, path: str) -> ConnectionCheck:
    base_url = (url or "").rstrip("/")
    full_url = f"{base_url}{path}"
    logger.info("Starting %s connection check: %s", server, full_url)
    try:
        response = requests.get(full_url, timeout=PROBE_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as exc:
        logger.warning("%s connection failed: %s (%s)", server, full_url, exc)
        return ConnectionCheck(
            server=server,
            status=ConnectionStatus.DISCONNECTED,
            url=url,
            full_url=full_url,
            error=format_exception_summary(exc),
        )

    if response.status_code == 200:
        logger.info("%s connection successful: %s", server, full_url)
        return ConnectionCheck(server=server, status=ConnectionStatus.CONNECTED, url=url, full_url=full_url)

    logger.warning("%s returned HTTP %s: %s", server, response.status_code, full_url)
    return ConnectionCheck(
        server=server,
        status=ConnectionStatus.DISCONNECTED,
        url=url,
        full_url=full_url,
        error=f"HTTP {response.status_code}",
    )


def check_ollama(url: str) -> ConnectionCheck:
    """Probe the Ollama tags endpoint."""
    return _probe("ollama", url, "/api/tags")


def check_chromadb(url: str) -> ConnectionCheck:
    """Probe the ChromaDB v2 healthcheck endpoint."""
    return _probe("chromadb", url, "/api/v2/healthcheck")
