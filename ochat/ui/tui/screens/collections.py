"""
Collections panel for the ochat TUI.

Lists the ChromaDB collections and toggles which of them are used for RAG.
Each toggle saves the settings document and is broadcast to the settings
panel as an external update.
"""

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

from ochat.config.errors import PersistenceError, ValidationError
from ochat.config.loader import clone_settings
from ochat.config.models import ChatSettings
from ochat.config.store import SettingsStore
from ochat.logging import exception_exc_info, get_logger
from ochat.remote import ProviderError, fetch_chroma_collections
from ochat.ui.tui.screens.base import ManagedScreenMixin, SettingsChanged


class CollectionsScreen(ManagedScreenMixin, Widget):
    """Sibling panel owning the ``selected_collections`` sub-state."""

    can_focus = True

    class CollectionsLoaded(Message):
        """A collection list fetch finished."""

        def __init__(self, request_id: int, names: list[str], error: Optional[str] = None) -> None:
            super().__init__()
            self.request_id = request_id
            self.names = names
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
        self._settings = clone_settings(settings) if settings is not None else None
        self._logger = logger or get_logger(__name__)
        self.names: list[str] = []
        self.cursor = 0
        self.request_id = 0
        self.status = ""

    @property
    def settings(self) -> Optional[ChatSettings]:
        if self._settings is None:
            app_settings = getattr(self.app, "settings", None)
            if app_settings is not None:
                self._settings = clone_settings(app_settings)
        return self._settings

    def compose(self) -> ComposeResult:
        with Vertical(id="collections-layout"):
            yield Static("Collections", classes="panel-title")
            yield Static("", id="collections-list")
            yield Static(
                "[dim]↑/↓: Move • Space/Enter: Toggle • R: Refresh[/dim]",
                id="collections-help",
            )
            yield Static("", id="collections-status")

    def on_mount(self) -> None:
        self.refresh_collections()

    def on_unmount(self) -> None:
        self._cancel_managed_workers(reason="collections-unmount")

    def on_key(self, event: events.Key) -> None:
        if self.handle_key(event.key):
            event.stop()
            event.prevent_default()

    def on_settings_changed(self, message: SettingsChanged) -> None:
        if message.source == self._worker_owner_token():
            return
        self._settings = clone_settings(message.settings)
        self._refresh_view()

    def on_collections_screen_collections_loaded(self, message: CollectionsLoaded) -> None:
        self.apply_collections(message.request_id, message.names, message.error)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        if key in {"up", "k"}:
            self.cursor = max(self.cursor - 1, 0)
        elif key in {"down", "j"}:
            self.cursor = min(self.cursor + 1, max(len(self.names) - 1, 0))
        elif key in {"space", "enter"}:
            self.toggle_current()
        elif key == "r":
            self.refresh_collections()
        else:
            return False
        self._refresh_view()
        return True

    def refresh_collections(self) -> None:
        settings = self.settings
        if settings is None:
            return
        self.request_id += 1
        request_id = self.request_id
        url = settings.chromadb_url
        self.status = "Loading collections..."
        self._start_managed_worker(
            worker_key="collections",
            work_factory=lambda: self._run_fetch(request_id, url),
            exclusive=True,
        )
        self._refresh_view()

    async def _run_fetch(self, request_id: int, url: str) -> None:
        try:
            options = await asyncio.to_thread(fetch_chroma_collections, url)
        except ProviderError as exc:
            self.post_message(self.CollectionsLoaded(request_id, [], str(exc)))
            return
        self.post_message(self.CollectionsLoaded(request_id, [option.name for option in options]))

    def apply_collections(self, request_id: int, names: list[str], error: Optional[str] = None) -> bool:
        """Store a fetched collection list; stale results are ignored."""
        if request_id != self.request_id:
            return False
        if error is not None:
            self.names = []
            self.status = f"Failed to load collections: {error}"
        else:
            self.names = sorted(names)
            self.status = f"{len(self.names)} collections"
        self.cursor = min(self.cursor, max(len(self.names) - 1, 0))
        self._refresh_view()
        return True

    def toggle_current(self) -> None:
        """Flip the selection of the highlighted collection and save."""
        settings = self.settings
        if settings is None or not self.names:
            return
        name = self.names[self.cursor]
        updated = clone_settings(settings)
        updated.selected_collections[name] = not updated.selected_collections.get(name, False)
        store = self._store or getattr(self.app, "store", None)
        if store is None:
            self.status = "No settings store available"
            return
        try:
            store.save(updated)
        except (ValidationError, PersistenceError) as exc:
            self._logger.warning(
                "Failed to save collection selection for %s",
                name,
                exc_info=exception_exc_info(exc),
            )
            self.status = f"Save failed: {exc}"
            return
        self._settings = updated
        state = "selected" if updated.selected_collections[name] else "deselected"
        self._logger.info("Collection %s %s", name, state)
        self.status = f"{name} {state}"
        self._publish_settings(clone_settings(updated))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_rows(self) -> str:
        settings = self.settings
        selected = settings.selected_collections if settings is not None else {}
        if not self.names:
            return "[dim]No collections[/dim]"
        rows = []
        for index, name in enumerate(self.names):
            box = "[x]" if selected.get(name) else "[ ]"
            text = f"{escape(box)} {escape(name)}"
            rows.append(f"> [b]{text}[/b]" if index == self.cursor else f"  {text}")
        return "\n".join(rows)

    def _refresh_view(self) -> None:
        try:
            self.query_one("#collections-list", Static).update(self.render_rows())
            self.query_one("#collections-status", Static).update(escape(self.status))
        except NoMatches:
            return
