"""Field-by-field settings panel for the ochat TUI."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from rich.markup import escape
from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from ochat.config.models import ChatSettings
from ochat.config.store import SettingsStore
from ochat.logging import get_logger
from ochat.remote import OPTION_FETCHERS, ConnectionCheck, ProviderError, RemoteOption, check_chromadb, check_ollama
from ochat.ui.tui.screens.base import ManagedScreenMixin, SettingsChanged
from ochat.ui.tui.state import (
    EditorMode,
    EditorOutcome,
    FieldEditor,
    OptionRequest,
    SettingsViewModel,
    StatusMessage,
)
from ochat.ui.tui.state.field_editor import SERVER_URL_FIELDS
from ochat.ui.tui.widgets.editor_panels import OptionPanel, PromptPanel
from ochat.ui.tui.widgets.settings_fields import SettingsFieldList, SettingsHelp

PROBES = {
    "ollama": check_ollama,
    "chromadb": check_chromadb,
}

_SEVERITY_MARKUP = {
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


class SettingsScreen(ManagedScreenMixin, Widget):
    """Controller for the settings field editor.

    Key events are forwarded to a :class:`FieldEditor`; its outcomes drive
    persistence broadcasts, connectivity probes and option fetches, which run
    as workers and report back through messages.
    """

    can_focus = True

    class ConnectionChecked(Message):
        """A connectivity probe finished."""

        def __init__(self, check: ConnectionCheck) -> None:
            super().__init__()
            self.check = check

    class OptionsLoaded(Message):
        """A remote option fetch finished."""

        def __init__(
            self,
            request_id: int,
            options: list[RemoteOption],
            error: Optional[str] = None,
        ) -> None:
            super().__init__()
            self.request_id = request_id
            self.options = options
            self.error = error

    def __init__(
        self,
        *args: Any,
        store: Optional[SettingsStore] = None,
        settings: Optional[ChatSettings] = None,
        logger: Optional[logging.Logger] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._store = store
        self._initial_settings = settings
        self._logger = logger or get_logger(__name__)
        self._editor: Optional[FieldEditor] = None

    @property
    def editor(self) -> Optional[FieldEditor]:
        return self._ensure_editor()

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-layout"):
            yield Static("Configuration", classes="panel-title")
            yield SettingsFieldList("", id="settings-fields")
            yield PromptPanel("", id="settings-prompt")
            yield OptionPanel("", id="settings-options")
            yield SettingsHelp("", id="settings-help")
            yield Static("", id="settings-status")

    def on_mount(self) -> None:
        app_settings = getattr(self.app, "settings", None)
        if self._editor is not None and app_settings is not None:
            self._editor.reload(app_settings)
        editor = self._ensure_editor()
        if editor is None:
            self._set_status(StatusMessage("No settings available.", "error"))
            return
        self._refresh_view()
        self._start_probes(tuple(SERVER_URL_FIELDS))

    def on_unmount(self) -> None:
        self._cancel_managed_workers(reason="settings-unmount")
        if self._editor is not None:
            self._editor.deactivate()

    def on_resize(self, event: events.Resize) -> None:
        editor = self._ensure_editor()
        if editor is None:
            return
        editor.resize_panel(event.size.width, event.size.height)
        self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        editor = self._ensure_editor()
        if editor is None:
            return
        outcome = editor.handle_key(event.key, event.character)
        if not outcome.handled:
            return
        event.stop()
        event.prevent_default()
        self._apply_outcome(outcome)

    def on_settings_changed(self, message: SettingsChanged) -> None:
        if message.source == self._worker_owner_token():
            return
        editor = self._ensure_editor()
        if editor is None:
            return
        self._logger.debug("Merging settings update from %s", message.source)
        self._apply_outcome(editor.handle_external_update(message.settings))

    def on_settings_screen_connection_checked(self, message: ConnectionChecked) -> None:
        editor = self._ensure_editor()
        if editor is not None and editor.apply_connection_check(message.check):
            self._refresh_view()

    def on_settings_screen_options_loaded(self, message: OptionsLoaded) -> None:
        editor = self._ensure_editor()
        if editor is None:
            return
        outcome = editor.apply_options(message.request_id, message.options, message.error)
        if outcome.handled:
            self._apply_outcome(outcome)

    # ------------------------------------------------------------------
    # Outcome handling
    # ------------------------------------------------------------------

    def _ensure_editor(self) -> Optional[FieldEditor]:
        if self._editor is not None:
            return self._editor
        store = self._store or getattr(self.app, "store", None)
        settings = self._initial_settings or getattr(self.app, "settings", None)
        if store is None or settings is None:
            return None
        view_model = SettingsViewModel(settings, store=store, logger=self._logger)
        self._editor = FieldEditor(view_model, logger=self._logger)
        return self._editor

    def _apply_outcome(self, outcome: EditorOutcome) -> None:
        if outcome.status is not None:
            self._set_status(outcome.status)
        if outcome.saved_settings is not None:
            self._publish_settings(outcome.saved_settings)
        if outcome.probes:
            self._start_probes(outcome.probes)
        if outcome.fetch is not None:
            self._start_fetch(outcome.fetch)
        self._refresh_view()

    def _start_probes(self, servers: tuple[str, ...]) -> None:
        editor = self._ensure_editor()
        if editor is None:
            return
        for server in servers:
            url = getattr(editor.view_model.draft_settings, SERVER_URL_FIELDS[server])
            editor.mark_checking(server)
            self._start_managed_worker(
                worker_key=f"probe-{server}",
                work_factory=lambda server=server, url=url: self._run_probe(server, url),
                exclusive=True,
            )

    async def _run_probe(self, server: str, url: str) -> None:
        check = await asyncio.to_thread(PROBES[server], url)
        self.post_message(self.ConnectionChecked(check))

    def _start_fetch(self, request: OptionRequest) -> None:
        self._start_managed_worker(
            worker_key="options",
            work_factory=lambda: self._run_fetch(request),
            exclusive=True,
        )

    async def _run_fetch(self, request: OptionRequest) -> None:
        fetcher = OPTION_FETCHERS[request.source]
        try:
            options = await asyncio.to_thread(fetcher, request.base_url)
        except ProviderError as exc:
            self._logger.warning("Option fetch from %s failed: %s", request.base_url, exc)
            self.post_message(self.OptionsLoaded(request.request_id, [], str(exc)))
            return
        self.post_message(self.OptionsLoaded(request.request_id, options))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _refresh_view(self) -> None:
        editor = self._ensure_editor()
        if editor is None:
            return
        label = editor.active_field.label
        try:
            self.query_one("#settings-fields", SettingsFieldList).show_editor(editor)
            self.query_one("#settings-help", SettingsHelp).show_editor(editor)
            self.query_one("#settings-prompt", PromptPanel).show_editor(editor.prompt, label)
            self.query_one("#settings-options", OptionPanel).show_picker(editor.picker, label)
        except NoMatches:
            return
        self.set_class(editor.mode is not EditorMode.BROWSING, "-editing")

    def _set_status(self, status: StatusMessage) -> None:
        color = _SEVERITY_MARKUP.get(status.severity)
        text = escape(status.text)
        if color:
            text = f"[{color}]{text}[/{color}]"
        try:
            self.query_one("#settings-status", Static).update(text)
        except NoMatches:
            self._logger.info(status.text)
