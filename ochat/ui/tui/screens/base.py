"""Shared base for settings panels: worker lifecycle, status and broadcasts.

Panels register their background workers through the app's managed lifecycle
API and publish saved settings through the app so sibling panels can merge
them.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from textual.message import Message

from ochat.config.models import ChatSettings
from ochat.logging import get_logger

logger = get_logger(__name__)


class SettingsChanged(Message):
    """A panel saved the settings document.

    Posted by the app to every panel except ``source``.
    """

    def __init__(self, settings: ChatSettings, source: str) -> None:
        super().__init__()
        self.settings = settings
        self.source = source


class ManagedScreenMixin:
    """Mixin providing worker lifecycle delegation for panel widgets.

    Concrete panels inherit from both ``Widget`` and this mixin:

        class MyPanel(ManagedScreenMixin, Widget):
            ...

    The mixin assumes the host object has ``self.app`` and
    ``self.run_worker`` (provided by ``Widget``).
    """

    def _worker_owner_token(self) -> str:
        """Return a stable owner identifier for this panel."""
        widget_id = str(getattr(self, "id", "") or "").strip()
        if widget_id:
            return widget_id
        return self.__class__.__name__

    def _start_managed_worker(
        self,
        *,
        worker_key: str,
        work_factory: Callable[[], Awaitable[Any]],
        exclusive: bool = False,
    ) -> None:
        """Start a background worker registered with the app lifecycle.

        A worker already registered under the same key is cancelled first.
        Falls back to an unmanaged ``run_worker`` when the app does not
        expose the managed API.
        """
        app_obj = getattr(self, "app", None)
        starter = getattr(app_obj, "start_managed_worker", None)
        run_worker_fn = getattr(self, "run_worker", None)
        if not callable(run_worker_fn):
            return
        if callable(starter):
            starter(
                owner=self._worker_owner_token(),
                key=worker_key,
                start=lambda: run_worker_fn(
                    work_factory(), group=worker_key, exclusive=exclusive
                ),
            )
            return
        run_worker_fn(work_factory(), group=worker_key, exclusive=exclusive)

    def _cancel_managed_workers(self, *, reason: str) -> None:
        """Cancel all workers owned by this panel."""
        app_obj = getattr(self, "app", None)
        cancel_owner = getattr(app_obj, "cancel_managed_workers_for_owner", None)
        if not callable(cancel_owner):
            return
        cancelled = cancel_owner(owner=self._worker_owner_token(), reason=reason)
        if cancelled:
            logger.debug(
                "Cancelled %d worker(s) for %s (%s)",
                cancelled,
                self._worker_owner_token(),
                reason,
            )

    def _publish_settings(self, settings: ChatSettings) -> None:
        """Hand saved settings to the app for broadcasting to siblings."""
        publish = getattr(getattr(self, "app", None), "publish_settings", None)
        if callable(publish):
            publish(settings, source=self._worker_owner_token())
