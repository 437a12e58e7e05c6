"""
Configuration models for ochat.
"""

from .constants import LOG_LEVELS
from .settings import ChatSettings, MCPServerConfig

__all__ = [
    "ChatSettings",
    "LOG_LEVELS",
    "MCPServerConfig",
]
