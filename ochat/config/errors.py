"""
Error types raised by the ochat configuration layer.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """A settings value or document failed a constraint check."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceError(RuntimeError):
    """Settings could not be read from or written to storage."""
