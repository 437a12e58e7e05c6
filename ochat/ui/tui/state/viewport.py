"""Vertical scroll window for wrapped multi-line content."""

from __future__ import annotations

PAGE_STEP = 5


class Viewport:
    """Visible window ``[offset, offset + height)`` over display lines.

    After :meth:`follow` the cursor line is inside the window and
    ``0 <= offset <= max(0, line_count - height)``.
    """

    def __init__(self, height: int, offset: int = 0) -> None:
        self.height = max(height, 1)
        self.offset = max(offset, 0)

    def max_offset(self, line_count: int) -> int:
        return max(0, line_count - self.height)

    def clamp(self, line_count: int) -> None:
        self.offset = min(max(self.offset, 0), self.max_offset(line_count))

    def follow(self, cursor_line: int, line_count: int) -> None:
        """Scroll the minimum amount needed to show ``cursor_line``."""
        if cursor_line < self.offset:
            self.offset = cursor_line
        elif cursor_line >= self.offset + self.height:
            self.offset = cursor_line - self.height + 1
        self.clamp(line_count)

    def resize(self, height: int, cursor_line: int, line_count: int) -> None:
        self.height = max(height, 1)
        self.follow(cursor_line, line_count)

    def page_up(self, line_count: int) -> None:
        self.offset -= PAGE_STEP
        self.clamp(line_count)

    def page_down(self, line_count: int) -> None:
        self.offset += PAGE_STEP
        self.clamp(line_count)

    def visible_range(self, line_count: int) -> tuple[int, int]:
        """Return ``(start, end)`` line indices currently on screen."""
        start = min(self.offset, line_count)
        return start, min(start + self.height, line_count)
