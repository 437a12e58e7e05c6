"""Soft line wrapping and cursor-to-display mapping for multi-line fields.

The wrapped view of a field is computed from its *display-transformed* content:
control characters are prefixed with a visible indicator glyph before
wrapping, while the logical buffer is left untouched. Cursor positions are
mapped into that space by transforming the text before the cursor the same way.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

NEWLINE_INDICATOR = "↵"
TAB_INDICATOR = "→"

_WORD_RE = re.compile(r"\S+")


@dataclass(frozen=True)
class DisplayLine:
    """One soft-wrapped row: a slice of the display content and its offset."""

    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def render_visible_chars(text: str) -> str:
    """Prefix newlines and tabs with indicator glyphs; both keep working."""
    result = text.replace("\n", NEWLINE_INDICATOR + "\n")
    return result.replace("\t", TAB_INDICATOR + "\t")


def display_offset(text: str, cursor: int, *, show_control_chars: bool = True) -> int:
    """Map a logical cursor offset to an offset in the display content.

    The transform is not a 1:1 offset map, so the prefix ending at the cursor
    is transformed with the same substitution and measured.
    """
    if cursor <= 0:
        return 0
    prefix = text[:cursor]
    if not show_control_chars:
        return len(prefix)
    return len(render_visible_chars(prefix))


def _wrap_raw_line(line: str, width: int) -> list[tuple[int, int]]:
    if len(line) <= width:
        return [(0, len(line))]

    words = [(m.start(), m.end()) for m in _WORD_RE.finditer(line)]
    if not words:
        return [(start, min(start + width, len(line))) for start in range(0, len(line), width)]

    # Leading indentation stays attached to the first word.
    words[0] = (0, words[0][1])

    spans: list[tuple[int, int]] = []
    line_start: int | None = None
    line_end = 0
    for word_start, word_end in words:
        if line_start is not None and word_end - line_start <= width:
            line_end = word_end
            continue
        if line_start is not None:
            spans.append((line_start, line_end))
        line_start = word_start
        # Hard split a word longer than the width, no hyphenation.
        while word_end - line_start > width:
            spans.append((line_start, line_start + width))
            line_start += width
        line_end = word_end

    if line_start is not None:
        spans.append((line_start, line_end))
    return spans


def wrap(content: str, width: int) -> list[DisplayLine]:
    """Soft-wrap ``content`` into display lines no longer than ``width``.

    Raw lines (split on ``\\n``) that fit are kept unchanged. Longer lines are
    packed greedily word by word; a word longer than ``width`` is hard-split
    every ``width`` characters. An empty raw line yields one empty display
    line. ``width <= 0`` is treated as one character per line.
    """
    width = max(width, 1)
    lines: list[DisplayLine] = []
    offset = 0
    for raw_line in content.split("\n"):
        for start, end in _wrap_raw_line(raw_line, width):
            lines.append(DisplayLine(text=raw_line[start:end], start=offset + start))
        offset += len(raw_line) + 1
    return lines


def wrap_text(content: str, width: int) -> list[str]:
    """Return only the text of ``wrap(content, width)``."""
    return [line.text for line in wrap(content, width)]


def locate_display_line(lines: list[DisplayLine], offset: int) -> tuple[int, int]:
    """Find the display line owning a display offset.

    Returns ``(line_index, column)``; the column is clamped to the line length,
    so an offset inside whitespace dropped at a wrap point lands at the end of
    the preceding line.
    """
    if not lines:
        return 0, 0
    index = 0
    for candidate, line in enumerate(lines):
        if line.start > offset:
            break
        index = candidate
    line = lines[index]
    column = min(max(offset - line.start, 0), len(line.text))
    return index, column
