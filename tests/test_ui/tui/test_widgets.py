from __future__ import annotations

from ochat.config import ChatSettings, MemorySettingsStore
from ochat.remote import RemoteOption
from ochat.ui.tui.state import FieldEditor, MultilineEditor, OptionPicker, SettingsViewModel, TextBuffer
from ochat.ui.tui.widgets.editor_panels import _human_size, render_option_panel, render_prompt_panel
from ochat.ui.tui.widgets.settings_fields import render_field_rows, render_help, render_input


def _editor(settings: ChatSettings) -> FieldEditor:
    return FieldEditor(SettingsViewModel(settings, store=MemorySettingsStore(settings)))


def test_field_rows_mark_active_dirty_and_unset(settings: ChatSettings) -> None:
    settings.embedding_model = ""
    editor = _editor(settings)
    editor.view_model.update_field("max_documents", 9)

    rows = render_field_rows(editor).splitlines()

    assert len(rows) == len(editor.fields)
    assert rows[0].startswith("> [b]Chat Model:")
    assert rows[0].endswith("llama3.3:latest")
    assert "(not set)" in rows[1]
    assert rows[4].endswith("[dim]?[/dim]")
    assert rows[7].endswith("[yellow]*[/yellow]")


def test_field_rows_show_input_while_editing(settings: ChatSettings) -> None:
    editor = _editor(settings)
    editor.handle_key("enter")
    assert "[reverse]" in render_field_rows(editor).splitlines()[0]


def test_render_input_draws_cursor() -> None:
    assert render_input(TextBuffer("abc", cursor=1)) == "[reverse]a█bc[/reverse]"


def test_help_follows_mode(settings: ChatSettings) -> None:
    editor = _editor(settings)
    assert "Enter/Space: Edit" in render_help(editor)
    editor.handle_key("enter")
    assert "Esc: Cancel" in render_help(editor)


def test_prompt_panel_title_and_hint() -> None:
    editor = MultilineEditor("hello")
    assert render_prompt_panel(editor, "Default System Prompt") == "[b]Viewing: Default System Prompt[/b]\nhello"
    editor.begin_editing()
    assert render_prompt_panel(editor, "Prompt").startswith("[b]Editing: Prompt[/b]")

    long = MultilineEditor("\n".join("x" * 3 for _ in range(9)), height=5)
    assert render_prompt_panel(long, "Prompt").endswith("[dim]lines 1-5 of 9[/dim]")


def test_option_panel_states() -> None:
    picker = OptionPicker(field_key="chat_model", source="ollama_models", request_id=1)
    assert "Loading..." in render_option_panel(picker, "Chat Model")

    picker.accept(1, [], "boom")
    assert "[red]boom[/red]" in render_option_panel(picker, "Chat Model")

    picker.restart(2)
    picker.accept(2, [])
    assert "No options available" in render_option_panel(picker, "Chat Model")

    picker.restart(3)
    picker.accept(3, [RemoteOption("llama3", {"size": 2048}), RemoteOption("qwen")])
    lines = render_option_panel(picker, "Chat Model").splitlines()
    assert lines[1] == "> [b]llama3 [dim](2.0 KB)[/dim][/b]"
    assert lines[2] == "  qwen"


def test_human_size() -> None:
    assert _human_size(None) == ""
    assert _human_size(512) == "512 B"
    assert _human_size(3 * 1024 ** 3) == "3.0 GB"
