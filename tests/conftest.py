"""
Shared pytest fixtures for ochat tests.
"""

import logging

import pytest

from ochat.config import ChatSettings, MemorySettingsStore


@pytest.fixture
def settings() -> ChatSettings:
    """Default settings document with a known chat model."""
    return ChatSettings(chat_model="llama3.3:latest")


@pytest.fixture
def memory_store(settings: ChatSettings) -> MemorySettingsStore:
    return MemorySettingsStore(settings)


@pytest.fixture(autouse=True)
def _reset_ochat_logger():
    """Drop handlers installed by tests that configure logging."""
    root_logger = logging.getLogger("ochat")
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in original_handlers:
            handler.close()
    root_logger.handlers = original_handlers
    root_logger.setLevel(original_level)
