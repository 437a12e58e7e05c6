"""Tests for ManagedScreenMixin shared lifecycle helpers."""

from __future__ import annotations

from ochat.config import ChatSettings
from ochat.ui.tui.screens.base import ManagedScreenMixin


class _FakeApp:
    """Minimal app double with managed lifecycle API stubs."""

    def __init__(self, cancel_result: int = 0) -> None:
        self.started_workers: list[dict] = []
        self.cancelled_owners: list[tuple[str, str]] = []
        self.published: list[tuple[ChatSettings, str]] = []
        self._cancel_result = cancel_result

    def start_managed_worker(self, *, owner, key, start):
        self.started_workers.append({"owner": owner, "key": key})
        return start()

    def cancel_managed_workers_for_owner(self, *, owner, reason):
        self.cancelled_owners.append((owner, reason))
        return self._cancel_result

    def publish_settings(self, settings, *, source):
        self.published.append((settings, source))


class _FakeScreen(ManagedScreenMixin):
    """Test double combining mixin with minimal widget-like interface."""

    def __init__(self, app=None, widget_id: str = "") -> None:
        self._test_app = app
        self.id = widget_id
        self.run_worker_calls: list[tuple] = []

    @property
    def app(self):
        return self._test_app

    def run_worker(self, coro, group="default", exclusive=False):
        self.run_worker_calls.append((group, exclusive))
        if hasattr(coro, "close"):
            coro.close()


async def _noop_coro() -> None:
    return None


class TestWorkerOwnerToken:
    def test_uses_widget_id_when_set(self) -> None:
        screen = _FakeScreen(widget_id="settings-screen")
        assert screen._worker_owner_token() == "settings-screen"

    def test_falls_back_to_class_name(self) -> None:
        screen = _FakeScreen(widget_id="")
        assert screen._worker_owner_token() == "_FakeScreen"


class TestStartManagedWorker:
    def test_delegates_to_app(self) -> None:
        app = _FakeApp()
        screen = _FakeScreen(app=app, widget_id="settings-screen")

        screen._start_managed_worker(
            worker_key="probe-ollama",
            work_factory=lambda: _noop_coro(),
            exclusive=True,
        )

        assert app.started_workers == [{"owner": "settings-screen", "key": "probe-ollama"}]
        assert screen.run_worker_calls == [("probe-ollama", True)]

    def test_falls_back_without_app(self) -> None:
        screen = _FakeScreen(app=None)
        screen._start_managed_worker(
            worker_key="options",
            work_factory=lambda: _noop_coro(),
        )
        assert screen.run_worker_calls == [("options", False)]


class TestCancelManagedWorkers:
    def test_delegates_to_app(self) -> None:
        app = _FakeApp(cancel_result=2)
        screen = _FakeScreen(app=app, widget_id="collections-screen")
        screen._cancel_managed_workers(reason="unmount")
        assert app.cancelled_owners == [("collections-screen", "unmount")]

    def test_noop_without_app(self) -> None:
        screen = _FakeScreen(app=None)
        screen._cancel_managed_workers(reason="unmount")


class TestPublishSettings:
    def test_publishes_with_owner_as_source(self) -> None:
        app = _FakeApp()
        screen = _FakeScreen(app=app, widget_id="settings-screen")
        settings = ChatSettings()
        screen._publish_settings(settings)
        assert app.published == [(settings, "settings-screen")]

    def test_noop_without_app(self) -> None:
        _FakeScreen(app=None)._publish_settings(ChatSettings())
