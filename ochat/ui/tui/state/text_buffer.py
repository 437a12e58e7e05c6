"""Code-point text buffer with a cursor, used by the settings field editors."""

from __future__ import annotations

TAB_SPACES = "    "


class InvariantViolation(AssertionError):
    """A buffer operation was called with a position outside the buffer."""


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


class TextBuffer:
    """Editable text plus a cursor index in ``[0, len(text)]``.

    All offsets count code points (Python ``str`` indices), so multi-byte
    characters are never split. Vertical motion works on raw lines, the
    ``\\n``-delimited lines of the text, not on wrapped display lines.
    """

    def __init__(self, text: str = "", cursor: int | None = None) -> None:
        self._text = _normalize_newlines(text)
        self._cursor = len(self._text) if cursor is None else cursor
        self._check_position(self._cursor)

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._text)

    def set_text(self, text: str, cursor: int | None = None) -> None:
        """Replace the whole content; the cursor defaults to the end."""
        self._text = _normalize_newlines(text)
        self._cursor = len(self._text) if cursor is None else cursor
        self._check_position(self._cursor)

    def set_cursor(self, cursor: int) -> None:
        self._check_position(cursor)
        self._cursor = cursor

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert_at(self, pos: int, text: str) -> None:
        """Insert ``text`` at code-point offset ``pos``.

        A cursor at or after ``pos`` shifts right by the inserted length.
        """
        self._check_position(pos)
        text = _normalize_newlines(text)
        if not text:
            return
        self._text = self._text[:pos] + text + self._text[pos:]
        if self._cursor >= pos:
            self._cursor += len(text)

    def delete_range(self, pos: int, length: int) -> None:
        """Delete ``length`` code points starting at ``pos``."""
        if length < 0:
            raise InvariantViolation(f"negative delete length: {length}")
        self._check_position(pos)
        self._check_position(pos + length)
        if length == 0:
            return
        self._text = self._text[:pos] + self._text[pos + length:]
        if self._cursor >= pos + length:
            self._cursor -= length
        elif self._cursor > pos:
            self._cursor = pos

    def insert(self, text: str) -> None:
        """Insert at the cursor."""
        self.insert_at(self._cursor, text)

    def insert_newline(self) -> None:
        self.insert("\n")

    def insert_tab(self) -> None:
        """Insert four spaces; literal tabs are never typed into the buffer."""
        self.insert(TAB_SPACES)

    def backspace(self) -> bool:
        if self._cursor == 0:
            return False
        self.delete_range(self._cursor - 1, 1)
        return True

    def delete_forward(self) -> bool:
        if self._cursor >= len(self._text):
            return False
        self.delete_range(self._cursor, 1)
        return True

    # ------------------------------------------------------------------
    # Cursor motion
    # ------------------------------------------------------------------

    def move_left(self) -> None:
        if self._cursor > 0:
            self._cursor -= 1

    def move_right(self) -> None:
        if self._cursor < len(self._text):
            self._cursor += 1

    def move_to_buffer_start(self) -> None:
        self._cursor = 0

    def move_to_buffer_end(self) -> None:
        self._cursor = len(self._text)

    def move_to_line_start(self) -> None:
        _, _, line_start = self.cursor_line_position()
        self._cursor = line_start

    def move_to_line_end(self) -> None:
        line_index, _, line_start = self.cursor_line_position()
        self._cursor = line_start + len(self.raw_lines()[line_index])

    def move_up(self) -> None:
        """Move to the previous raw line, keeping the column where possible.

        On the first raw line the cursor goes to the start of the buffer.
        """
        lines = self.raw_lines()
        line_index, column, line_start = self.cursor_line_position()
        if line_index == 0:
            self._cursor = 0
            return
        previous = lines[line_index - 1]
        previous_start = line_start - len(previous) - 1
        self._cursor = previous_start + min(column, len(previous))

    def move_down(self) -> None:
        """Move to the next raw line, keeping the column where possible.

        On the last raw line the cursor goes to the end of the buffer.
        """
        lines = self.raw_lines()
        line_index, column, line_start = self.cursor_line_position()
        if line_index >= len(lines) - 1:
            self._cursor = len(self._text)
            return
        next_start = line_start + len(lines[line_index]) + 1
        self._cursor = next_start + min(column, len(lines[line_index + 1]))

    # ------------------------------------------------------------------
    # Raw line helpers
    # ------------------------------------------------------------------

    def raw_lines(self) -> list[str]:
        return self._text.split("\n")

    def cursor_line_position(self) -> tuple[int, int, int]:
        """Return ``(line_index, column, line_start)`` of the cursor."""
        position = 0
        lines = self.raw_lines()
        for index, line in enumerate(lines):
            if position + len(line) >= self._cursor:
                return index, self._cursor - position, position
            position += len(line) + 1
        # Unreachable while the cursor invariant holds.
        raise InvariantViolation(f"cursor {self._cursor} beyond buffer length {len(self._text)}")

    def _check_position(self, pos: int) -> None:
        if not 0 <= pos <= len(self._text):
            raise InvariantViolation(f"position {pos} outside [0, {len(self._text)}]")
