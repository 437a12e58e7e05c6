"""Scroll-synchronized multi-line editor used for the system prompt field.

Combines a :class:`TextBuffer` with soft wrapping, cursor-to-display mapping
and a :class:`Viewport`. Every buffer mutation or cursor move is followed by a
re-wrap and a scroll-into-view pass, so the cursor line is always visible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .line_wrap import DisplayLine, display_offset, locate_display_line, render_visible_chars, wrap
from .text_buffer import TextBuffer
from .viewport import Viewport

CURSOR_GLYPH = "█"
MIN_TEXT_WIDTH = 20
MIN_TEXT_HEIGHT = 5

PAGE_UP_KEYS = frozenset({"pageup", "ctrl+u"})
PAGE_DOWN_KEYS = frozenset({"pagedown", "ctrl+d"})


@dataclass(frozen=True)
class RenderedText:
    """Visible slice of the wrapped content, ready for a widget to draw."""

    lines: list[str]
    first_line: int
    total_lines: int
    cursor_line: int
    cursor_column: int

    @property
    def last_line(self) -> int:
        return self.first_line + len(self.lines)

    @property
    def scroll_hint(self) -> str:
        if self.total_lines <= len(self.lines):
            return ""
        return f"lines {self.first_line + 1}-{self.last_line} of {self.total_lines}"


class MultilineEditor:
    """Text buffer plus wrap state for one multi-line field."""

    def __init__(
        self,
        text: str = "",
        *,
        width: int = MIN_TEXT_WIDTH,
        height: int = MIN_TEXT_HEIGHT,
        editable: bool = False,
        show_control_chars: bool = True,
    ) -> None:
        self.buffer = TextBuffer(text, cursor=0)
        self.width = max(width, 1)
        self.viewport = Viewport(height)
        self.editable = editable
        self.show_control_chars = show_control_chars
        self._lines: list[DisplayLine] = []
        self._rewrap()

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def display_lines(self) -> list[DisplayLine]:
        return list(self._lines)

    def begin_editing(self) -> None:
        """Switch to editing with the cursor and scroll at the top."""
        self.editable = True
        self.buffer.set_cursor(0)
        self.viewport.offset = 0
        self._after_change()

    def cursor_location(self) -> tuple[int, int]:
        """Return ``(display_line, column)`` of the cursor."""
        offset = display_offset(
            self.buffer.text,
            self.buffer.cursor,
            show_control_chars=self.show_control_chars,
        )
        return locate_display_line(self._lines, offset)

    def resize(self, width: int, height: int) -> None:
        self.width = max(width, 1)
        self._rewrap()
        if not self.editable:
            self.viewport.height = max(height, 1)
            self.viewport.clamp(len(self._lines))
            return
        cursor_line, _ = self.cursor_location()
        self.viewport.resize(height, cursor_line, len(self._lines))

    def page_up(self) -> None:
        self.viewport.page_up(len(self._lines))

    def page_down(self) -> None:
        self.viewport.page_down(len(self._lines))

    def handle_key(self, key: str, character: Optional[str] = None) -> bool:
        """Apply one key. Returns True when the key was consumed.

        Paging works in both viewing and editing; all other keys are ignored
        while the editor is read-only.
        """
        if key in PAGE_UP_KEYS:
            self.page_up()
            return True
        if key in PAGE_DOWN_KEYS:
            self.page_down()
            return True
        if not self.editable:
            return False

        buffer = self.buffer
        if key == "left":
            buffer.move_left()
        elif key == "right":
            buffer.move_right()
        elif key == "up":
            buffer.move_up()
        elif key == "down":
            buffer.move_down()
        elif key == "home":
            buffer.move_to_line_start()
        elif key == "end":
            buffer.move_to_line_end()
        elif key == "ctrl+home":
            buffer.move_to_buffer_start()
        elif key == "ctrl+end":
            buffer.move_to_buffer_end()
        elif key == "backspace":
            buffer.backspace()
        elif key == "delete":
            buffer.delete_forward()
        elif key == "enter":
            buffer.insert_newline()
        elif key == "tab":
            buffer.insert_tab()
        else:
            text = printable_text(key, character)
            if text is None:
                return False
            buffer.insert(text)
        self._after_change()
        return True

    def render(self, cursor_glyph: str = CURSOR_GLYPH) -> RenderedText:
        """Return the visible lines, with the cursor drawn when editable."""
        cursor_line, cursor_column = self.cursor_location()
        start, end = self.viewport.visible_range(len(self._lines))
        visible = []
        for index in range(start, end):
            text = self._lines[index].text
            if self.editable and index == cursor_line:
                text = text[:cursor_column] + cursor_glyph + text[cursor_column + 1:]
            visible.append(text)
        return RenderedText(
            lines=visible,
            first_line=start,
            total_lines=len(self._lines),
            cursor_line=cursor_line,
            cursor_column=cursor_column,
        )

    def _rewrap(self) -> None:
        content = self.buffer.text
        if self.show_control_chars:
            content = render_visible_chars(content)
        self._lines = wrap(content, self.width)

    def _after_change(self) -> None:
        self._rewrap()
        cursor_line, _ = self.cursor_location()
        self.viewport.follow(cursor_line, len(self._lines))


def printable_text(key: str, character: Optional[str]) -> Optional[str]:
    """Return the text a key types, or None for non-printing keys."""
    if key == "space":
        return " "
    if character is None and len(key) == 1:
        character = key
    if character and len(character) == 1 and character.isprintable():
        return character
    return None


def panel_text_size(panel_width: int, panel_height: int) -> tuple[int, int]:
    """Text area of the prompt panel, after borders, padding and help rows."""
    return max(panel_width - 6, MIN_TEXT_WIDTH), max(panel_height - 12, MIN_TEXT_HEIGHT)
