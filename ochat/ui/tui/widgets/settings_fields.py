"""
Field list and help line of the settings panel.
"""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import Static

from ochat.remote.connection import ConnectionStatus
from ochat.ui.tui.state import EditorMode, FieldEditor, TextBuffer
from ochat.ui.tui.state.field_editor import SERVER_URL_FIELDS
from ochat.ui.tui.state.multiline_editor import CURSOR_GLYPH

LABEL_WIDTH = 24

STATUS_INDICATORS = {
    ConnectionStatus.CONNECTED: "[green]✓[/green]",
    ConnectionStatus.DISCONNECTED: "[red]✗[/red]",
    ConnectionStatus.CHECKING: "[yellow]⟳[/yellow]",
    ConnectionStatus.UNKNOWN: "[dim]?[/dim]",
}

_URL_FIELD_SERVERS = {url_field: server for server, url_field in SERVER_URL_FIELDS.items()}

_MODE_HINTS = {
    EditorMode.BROWSING: "↑/↓ j/k: Navigate • Enter/Space: Edit • L: Pick from list • S: Save • R: Reset to defaults",
    EditorMode.EDITING_SCALAR: "Enter: Save • Esc: Cancel",
    EditorMode.VIEWING_MULTILINE: "Ctrl+E: Edit • PgUp/PgDn: Scroll • Esc: Close",
    EditorMode.EDITING_MULTILINE: "Ctrl+S: Save • Esc: Cancel • PgUp/PgDn: Scroll • Ctrl+Home/End: Top/Bottom",
    EditorMode.SELECTING_OPTION: "↑/↓: Move • Enter: Select • R: Refresh • Esc: Cancel",
}


def render_input(buffer: TextBuffer) -> str:
    """Single-line input with the cursor drawn at its position."""
    text = buffer.text
    cursor = buffer.cursor
    return f"[reverse]{escape(text[:cursor])}{CURSOR_GLYPH}{escape(text[cursor:])}[/reverse]"


def render_field_rows(editor: FieldEditor) -> str:
    """Render every field as ``marker label value [indicator] [*]``."""
    dirty = editor.view_model.dirty_fields
    errors = editor.view_model.validation_errors
    rows: list[str] = []
    for index, spec in enumerate(editor.fields):
        active = index == editor.active_index
        label = escape(f"{spec.label}:".ljust(LABEL_WIDTH))
        if active and editor.mode is EditorMode.EDITING_SCALAR and editor.input is not None:
            value = render_input(editor.input)
        else:
            value = escape(editor.value_text(spec)) or "[dim](not set)[/dim]"

        row = f"> [b]{label}[/b]{value}" if active else f"  {label}{value}"
        server = _URL_FIELD_SERVERS.get(spec.key)
        if server is not None:
            row += " " + STATUS_INDICATORS[editor.connections[server]]
        if spec.key in dirty:
            row += " [yellow]*[/yellow]"
        if spec.key in errors:
            row += f" [red]{escape(errors[spec.key])}[/red]"
        rows.append(row)
    return "\n".join(rows)


def render_help(editor: FieldEditor) -> str:
    """Active field help text followed by key hints for the current mode."""
    return f"{escape(editor.active_field.help)}\n[dim]{escape(_MODE_HINTS[editor.mode])}[/dim]"


class SettingsFieldList(Static):
    """Static view of the settings fields."""

    def show_editor(self, editor: FieldEditor) -> None:
        self.update(render_field_rows(editor))


class SettingsHelp(Static):
    """Help line under the field list."""

    def show_editor(self, editor: FieldEditor) -> None:
        self.update(render_help(editor))
