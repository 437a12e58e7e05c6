"""
Tests for the remote option providers.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from ochat.remote import ProviderError, fetch_chroma_collections, fetch_ollama_models


def _response(payload, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def test_fetch_ollama_models_returns_names_and_attributes():
    payload = {
        "models": [
            {"name": "llama3.3:latest", "size": 42, "modified_at": "2024-01-01T00:00:00Z"},
            {"name": "nomic-embed-text:latest"},
            {"size": 1},
        ]
    }
    with patch("ochat.remote.options.requests.get") as mock_get:
        mock_get.return_value = _response(payload)

        options = fetch_ollama_models("http://localhost:11434/")

    mock_get.assert_called_once_with("http://localhost:11434/api/tags", timeout=10)
    assert [option.name for option in options] == ["llama3.3:latest", "nomic-embed-text:latest"]
    assert options[0].attributes == {"size": 42, "modified_at": "2024-01-01T00:00:00Z"}


def test_fetch_ollama_models_requires_models_key():
    with patch("ochat.remote.options.requests.get") as mock_get:
        mock_get.return_value = _response({"unexpected": []})

        with pytest.raises(ProviderError, match="models"):
            fetch_ollama_models("http://localhost:11434")


def test_fetch_raises_provider_error_on_http_error():
    with patch("ochat.remote.options.requests.get") as mock_get:
        mock_get.return_value = _response({}, status_code=500)

        with pytest.raises(ProviderError, match="HTTP 500"):
            fetch_ollama_models("http://localhost:11434")


def test_fetch_raises_provider_error_on_connection_error():
    with patch("ochat.remote.options.requests.get") as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(ProviderError, match="refused"):
            fetch_chroma_collections("http://localhost:8000")


def test_fetch_raises_provider_error_on_bad_json():
    response = _response(None)
    response.json.side_effect = ValueError("not json")
    with patch("ochat.remote.options.requests.get", return_value=response):
        with pytest.raises(ProviderError, match="decode"):
            fetch_ollama_models("http://localhost:11434")


def test_fetch_chroma_collections_lists_default_database():
    payload = [
        {"name": "notes", "id": "1", "metadata": {"hnsw:space": "cosine"}},
        {"name": "papers", "id": "2", "metadata": None},
    ]
    with patch("ochat.remote.options.requests.get") as mock_get:
        mock_get.return_value = _response(payload)

        options = fetch_chroma_collections("http://localhost:8000")

    url = mock_get.call_args.args[0]
    assert url == (
        "http://localhost:8000/api/v2/tenants/default_tenant/databases/default_database/collections"
    )
    assert [option.name for option in options] == ["notes", "papers"]
    assert options[1].attributes == {"id": "2", "metadata": {}}
