"""
Remote option providers for pick-list fields.

Each provider returns ``RemoteOption`` entries or raises ``ProviderError``;
callers render a failure as a status message with an empty option list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

import requests

from ochat.logging import get_logger

logger = get_logger(__name__)

FETCH_TIMEOUT_SECONDS = 10
CHROMA_TENANT = "default_tenant"
CHROMA_DATABASE = "default_database"


class ProviderError(RuntimeError):
    """A remote option list could not be fetched."""


@dataclass(frozen=True)
class RemoteOption:
    """Single selectable option returned by a remote provider."""

    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)


OptionFetcher = Callable[[str], List[RemoteOption]]


def _get_json(url: str) -> Any:
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as exc:
        raise ProviderError(f"request failed: {exc}") from exc
    if response.status_code != 200:
        raise ProviderError(f"HTTP {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(f"failed to decode response: {exc}") from exc


def fetch_ollama_models(base_url: str) -> List[RemoteOption]:
    """
    List models installed on an Ollama server.

    Args:
        base_url: Ollama base URL, e.g. ``http://localhost:11434``

    Returns:
        Options named after the models, with ``size`` and ``modified``
        attributes when the server reports them.

    Raises:
        ProviderError: If the server is unreachable or answers unexpectedly.
    """
    url = f"{(base_url or '').rstrip('/')}/api/tags"
    payload = _get_json(url)
    models = payload.get("models") if isinstance(payload, dict) else None
    if not isinstance(models, list):
        raise ProviderError("unexpected response: missing 'models'")

    options: List[RemoteOption] = []
    for item in models:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        options.append(
            RemoteOption(
                name=str(item["name"]),
                attributes={
                    key: item[key]
                    for key in ("size", "modified_at", "modified")
                    if key in item
                },
            )
        )
    logger.debug("Fetched %d Ollama models from %s", len(options), url)
    return options


def fetch_chroma_collections(base_url: str) -> List[RemoteOption]:
    """
    List collections of the default ChromaDB tenant/database.

    Raises:
        ProviderError: If the server is unreachable or answers unexpectedly.
    """
    url = (
        f"{(base_url or '').rstrip('/')}/api/v2/tenants/{CHROMA_TENANT}"
        f"/databases/{CHROMA_DATABASE}/collections"
    )
    payload = _get_json(url)
    if not isinstance(payload, list):
        raise ProviderError("unexpected response: expected a list of collections")

    options = [
        RemoteOption(
            name=str(item["name"]),
            attributes={"id": item.get("id"), "metadata": item.get("metadata") or {}},
        )
        for item in payload
        if isinstance(item, dict) and item.get("name")
    ]
    logger.debug("Fetched %d ChromaDB collections from %s", len(options), url)
    return options


OPTION_FETCHERS: Dict[str, OptionFetcher] = {
    "ollama_models": fetch_ollama_models,
    "chroma_collections": fetch_chroma_collections,
}
