from __future__ import annotations

import asyncio

from textual.css.query import NoMatches

from ochat.config import ChatSettings, MemorySettingsStore
from ochat.config.errors import PersistenceError
from ochat.remote import ProviderError, RemoteOption
from ochat.ui.tui.screens import collections as collections_module
from ochat.ui.tui.screens.base import SettingsChanged
from ochat.ui.tui.screens.collections import CollectionsScreen


class _FakeApp:
    def __init__(self, settings: ChatSettings, store) -> None:
        self.settings = settings
        self.store = store
        self.published: list[tuple[ChatSettings, str]] = []
        self.started: list[tuple[str, str]] = []

    def publish_settings(self, settings, *, source):
        self.published.append((settings, source))

    def start_managed_worker(self, *, owner, key, start):
        self.started.append((owner, key))
        return start()


class _ReadOnlyStore:
    def load(self) -> ChatSettings:
        return ChatSettings()

    def save(self, settings: ChatSettings) -> None:
        raise PersistenceError("permission denied")


class _TestableCollectionsScreen(CollectionsScreen):
    def __init__(self, app: _FakeApp) -> None:
        super().__init__(id="collections-screen")
        self._test_app = app
        self.posted: list = []

    @property
    def app(self):  # type: ignore[override]
        return self._test_app

    def query_one(self, selector, expect_type=None):  # type: ignore[override]
        raise NoMatches(f"No nodes match {selector!r}")

    def run_worker(self, work, *, group="default", exclusive=False, **kwargs):  # type: ignore[override]
        if hasattr(work, "close"):
            work.close()

    def post_message(self, message) -> bool:  # type: ignore[override]
        self.posted.append(message)
        return True


def _screen(settings: ChatSettings, store=None) -> tuple[_TestableCollectionsScreen, _FakeApp]:
    app = _FakeApp(settings, store or MemorySettingsStore(settings))
    return _TestableCollectionsScreen(app), app


def _loaded(settings: ChatSettings, names: list[str], store=None):
    screen, app = _screen(settings, store)
    screen.refresh_collections()
    screen.apply_collections(screen.request_id, names)
    return screen, app


def test_refresh_starts_worker_with_new_request(settings: ChatSettings) -> None:
    screen, app = _screen(settings)
    screen.refresh_collections()
    screen.refresh_collections()
    assert screen.request_id == 2
    assert app.started == [("collections-screen", "collections")] * 2
    assert screen.status == "Loading collections..."


def test_results_are_sorted_and_stale_results_dropped(settings: ChatSettings) -> None:
    screen, _ = _screen(settings)
    screen.refresh_collections()
    screen.refresh_collections()
    assert screen.apply_collections(1, ["old"]) is False
    assert screen.apply_collections(2, ["zeta", "alpha"]) is True
    assert screen.names == ["alpha", "zeta"]
    assert screen.status == "2 collections"


def test_fetch_error_clears_list(settings: ChatSettings) -> None:
    screen, _ = _loaded(settings, ["alpha"])
    screen.refresh_collections()
    screen.apply_collections(screen.request_id, [], "timed out")
    assert screen.names == []
    assert screen.status == "Failed to load collections: timed out"


def test_cursor_moves_within_list(settings: ChatSettings) -> None:
    screen, _ = _loaded(settings, ["a", "b", "c"])
    assert screen.handle_key("k") is True
    assert screen.cursor == 0
    screen.handle_key("down")
    screen.handle_key("j")
    screen.handle_key("j")
    assert screen.cursor == 2
    assert screen.handle_key("x") is False


def test_toggle_saves_and_publishes(settings: ChatSettings) -> None:
    screen, app = _loaded(settings, ["docs", "notes"])
    screen.handle_key("down")
    screen.handle_key("space")

    assert app.store.load().selected_collections == {"notes": True}
    published, source = app.published[0]
    assert source == "collections-screen"
    assert published.selected_collections == {"notes": True}
    assert screen.status == "notes selected"

    screen.handle_key("enter")
    assert app.store.load().selected_collections == {"notes": False}
    assert screen.status == "notes deselected"


def test_toggle_save_failure_is_not_published(settings: ChatSettings) -> None:
    screen, app = _loaded(settings, ["docs"], _ReadOnlyStore())
    screen.toggle_current()
    assert app.published == []
    assert screen.status == "Save failed: permission denied"
    assert screen.settings.selected_collections == {}


def test_toggle_without_collections_is_noop(settings: ChatSettings) -> None:
    screen, app = _screen(settings)
    screen.toggle_current()
    assert app.published == []


def test_render_rows_marks_selection(settings: ChatSettings) -> None:
    settings.selected_collections = {"docs": True}
    screen, _ = _loaded(settings, ["docs", "notes"])
    rows = screen.render_rows().splitlines()
    assert rows[0] == "> [b]\\[x] docs[/b]"
    assert rows[1] == "  [ ] notes"


def test_render_rows_empty(settings: ChatSettings) -> None:
    screen, _ = _screen(settings)
    assert screen.render_rows() == "[dim]No collections[/dim]"


def test_settings_changed_adopts_document(settings: ChatSettings) -> None:
    screen, _ = _screen(settings)
    external = ChatSettings(selected_collections={"docs": True})
    screen.on_settings_changed(SettingsChanged(external, "settings-screen"))
    assert screen.settings.selected_collections == {"docs": True}
    external.selected_collections["docs"] = False
    assert screen.settings.selected_collections == {"docs": True}


def test_run_fetch_posts_names(settings: ChatSettings, monkeypatch) -> None:
    screen, _ = _screen(settings)
    monkeypatch.setattr(
        collections_module,
        "fetch_chroma_collections",
        lambda url: [RemoteOption("notes"), RemoteOption("docs")],
    )
    asyncio.run(screen._run_fetch(7, settings.chromadb_url))
    (message,) = screen.posted
    assert message.request_id == 7
    assert message.names == ["notes", "docs"]
    assert message.error is None


def test_run_fetch_reports_errors(settings: ChatSettings, monkeypatch) -> None:
    screen, _ = _screen(settings)

    def _fail(url: str):
        raise ProviderError("ChromaDB unreachable")

    monkeypatch.setattr(collections_module, "fetch_chroma_collections", _fail)
    asyncio.run(screen._run_fetch(1, settings.chromadb_url))
    (message,) = screen.posted
    assert message.names == []
    assert message.error == "ChromaDB unreachable"
