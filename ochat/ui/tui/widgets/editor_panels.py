"""
Panels shown below the field list: multi-line prompt editor and option picker.
"""

from __future__ import annotations

from typing import Any, Optional

from rich.markup import escape
from textual.widgets import Static

from ochat.ui.tui.state import MultilineEditor, OptionPicker, PickerStatus


def _human_size(size: Any) -> str:
    try:
        value = float(size)
    except (TypeError, ValueError):
        return ""
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return ""


def render_prompt_panel(editor: MultilineEditor, label: str) -> str:
    """Title, visible wrapped lines and a scroll hint."""
    title = "Editing" if editor.editable else "Viewing"
    rendered = editor.render()
    lines = [f"[b]{title}: {escape(label)}[/b]"]
    lines.extend(escape(line) for line in rendered.lines)
    if rendered.scroll_hint:
        lines.append(f"[dim]{rendered.scroll_hint}[/dim]")
    return "\n".join(lines)


def render_option_panel(picker: OptionPicker, label: str) -> str:
    lines = [f"[b]Select {escape(label)}[/b]"]
    if picker.status is PickerStatus.LOADING:
        lines.append("[yellow]Loading...[/yellow]")
        return "\n".join(lines)
    if picker.status is PickerStatus.ERROR:
        lines.append(f"[red]{escape(picker.error or 'Failed to load options')}[/red]")
        return "\n".join(lines)
    if not picker.options:
        lines.append("[dim]No options available[/dim]")
        return "\n".join(lines)

    for index, option in picker.visible_options():
        size = _human_size(option.attributes.get("size"))
        text = escape(option.name) + (f" [dim]({size})[/dim]" if size else "")
        lines.append(f"> [b]{text}[/b]" if index == picker.cursor else f"  {text}")
    start, end = picker.viewport.visible_range(len(picker.options))
    if end - start < len(picker.options):
        lines.append(f"[dim]{start + 1}-{end} of {len(picker.options)}[/dim]")
    return "\n".join(lines)


class PromptPanel(Static):
    """Multi-line prompt viewer/editor; hidden while no prompt is open."""

    def show_editor(self, editor: Optional[MultilineEditor], label: str) -> None:
        self.display = editor is not None
        if editor is not None:
            self.update(render_prompt_panel(editor, label))


class OptionPanel(Static):
    """Remote option pick list; hidden while no picker is open."""

    def show_picker(self, picker: Optional[OptionPicker], label: str) -> None:
        self.display = picker is not None
        if picker is not None:
            self.update(render_option_panel(picker, label))
