"""
Main TUI application for ochat.

Hosts the settings and collections panels in tabs, owns the persisted
settings document and relays saved settings between panels.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, TabbedContent, TabPane

from ochat.config.loader import clone_settings
from ochat.config.models import ChatSettings
from ochat.config.store import SettingsStore
from ochat.logging import get_logger, setup_logging
from ochat.paths import get_log_dir
from ochat.ui.tui.screens.base import SettingsChanged

logger = get_logger(__name__)

LOG_FILE_NAME = "ochat.log"
PANEL_CLASS = "settings-panel"


def configure_logging_for_settings(
    settings: ChatSettings,
    *,
    log_file: Optional[Path] = None,
    console: bool = False,
) -> Optional[Path]:
    """Apply ``log_level`` and ``enable_file_logging`` from the settings.

    Returns:
        The log file in use, or None when file logging is off.
    """
    if log_file is None and settings.enable_file_logging:
        log_file = get_log_dir() / LOG_FILE_NAME
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    setup_logging(
        level=settings.log_level,
        log_file=str(log_file) if log_file is not None else None,
        console=console,
    )
    return log_file


@dataclass
class _ManagedWorker:
    """Lifecycle metadata for an app-managed worker object."""

    owner: str
    key: str
    worker: Any
    started_at: float = field(default_factory=time.monotonic)


class SettingsApp(App):
    """
    ochat settings TUI application.

    Panels share one persisted settings document; whenever a panel saves,
    :meth:`publish_settings` forwards the new document to the other panels.
    """

    TITLE = "ochat"
    SUB_TITLE = "Settings"

    CSS = """
    .settings-panel {
        height: 1fr;
        padding: 0 1;
    }
    .panel-title {
        text-style: bold;
        margin-bottom: 1;
    }
    #settings-prompt, #settings-options {
        border: round $accent;
        padding: 0 1;
        margin-top: 1;
        height: auto;
    }
    #settings-help, #collections-help {
        margin-top: 1;
    }
    #settings-status, #collections-status {
        margin-top: 1;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("f2", "show_tab('settings')", "Settings", show=True),
        Binding("f3", "show_tab('collections')", "Collections", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        store: SettingsStore,
        settings: Optional[ChatSettings] = None,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.store = store
        self.settings = settings if settings is not None else store.load()
        self._managed_workers: dict[tuple[str, str], _ManagedWorker] = {}

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Header(show_clock=True, icon="")

        with TabbedContent(initial="settings", id="main-tabs"):
            with TabPane("Settings (F2)", id="settings"):
                from ochat.ui.tui.screens.settings import SettingsScreen
                yield SettingsScreen(id="settings-screen", classes=PANEL_CLASS)

            with TabPane("Collections (F3)", id="collections"):
                from ochat.ui.tui.screens.collections import CollectionsScreen
                yield CollectionsScreen(id="collections-screen", classes=PANEL_CLASS)

        yield Footer()

    def on_mount(self) -> None:
        logger.info("ochat TUI application mounted")
        self._setup_tui_logging()
        self.query_one("#settings-screen").focus()

    def _setup_tui_logging(self) -> None:
        """Keep console log handlers from drawing over the screen."""
        root_logger = logging.getLogger("ochat")
        streams_to_remove = {sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__}
        for handler in list(root_logger.handlers):
            if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) in streams_to_remove:
                root_logger.removeHandler(handler)
        if not root_logger.handlers:
            root_logger.addHandler(logging.NullHandler())

    def action_show_tab(self, tab_id: str) -> None:
        self.query_one("#main-tabs", TabbedContent).active = tab_id
        self.query_one(f"#{tab_id}-screen").focus()

    # ------------------------------------------------------------------
    # Settings broadcast
    # ------------------------------------------------------------------

    def publish_settings(self, settings: ChatSettings, *, source: str) -> None:
        """Adopt a saved document and forward it to every other panel."""
        previous = self.settings
        self.settings = clone_settings(settings)
        if (previous.log_level, previous.enable_file_logging) != (
            settings.log_level,
            settings.enable_file_logging,
        ):
            log_file = configure_logging_for_settings(settings)
            self._setup_tui_logging()
            logger.info(
                "Logging reconfigured: level=%s file=%s",
                settings.log_level,
                log_file or "off",
            )

        for panel in self.query(f".{PANEL_CLASS}"):
            if panel.id == source:
                continue
            panel.post_message(SettingsChanged(clone_settings(settings), source))

    # ------------------------------------------------------------------
    # Managed workers
    # ------------------------------------------------------------------

    def start_managed_worker(
        self,
        *,
        owner: str,
        key: str,
        start: Callable[[], Any],
    ) -> Any:
        """Start and register a worker, cancelling one already under the key."""
        self.cancel_managed_worker(owner=owner, key=key, reason="replaced")
        worker = start()
        if worker is not None:
            self._managed_workers[(owner, key)] = _ManagedWorker(owner=owner, key=key, worker=worker)
        return worker

    def cancel_managed_worker(self, *, owner: str, key: str, reason: str = "") -> bool:
        """Cancel a managed worker; returns True when one was registered."""
        record = self._managed_workers.pop((owner, key), None)
        if record is None:
            return False
        cancel_fn = getattr(record.worker, "cancel", None)
        if callable(cancel_fn):
            cancel_fn()
        logger.debug("Cancelled worker %s:%s (%s)", owner, key, reason or "no reason")
        return True

    def cancel_managed_workers_for_owner(self, *, owner: str, reason: str) -> int:
        keys = [key for (worker_owner, key) in self._managed_workers if worker_owner == owner]
        return sum(
            1 for key in keys if self.cancel_managed_worker(owner=owner, key=key, reason=reason)
        )

    def shutdown_managed_workers(self, *, reason: str) -> None:
        for owner, key in list(self._managed_workers):
            self.cancel_managed_worker(owner=owner, key=key, reason=reason)

    async def action_quit(self) -> None:
        self.shutdown_managed_workers(reason="app-quit")
        self.exit()


def run_tui(store: SettingsStore, settings: Optional[ChatSettings] = None) -> int:
    """
    Run the TUI application.

    Args:
        store: Persistence gateway for the settings document
        settings: Already loaded settings; loaded from ``store`` when omitted

    Returns:
        Exit code (0 for success)
    """
    app = SettingsApp(store, settings)
    app.run()
    return 0
