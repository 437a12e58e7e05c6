"""ochat UI module - the Textual terminal interface lives in ``tui``."""

from __future__ import annotations

__all__ = ["tui"]
