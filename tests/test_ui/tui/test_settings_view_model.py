from __future__ import annotations

import logging

from ochat.config import ChatSettings, MemorySettingsStore
from ochat.config.errors import PersistenceError
from ochat.config.models.constants import DEFAULT_MAX_DOCUMENTS, DEFAULT_SYSTEM_PROMPT
from ochat.ui.tui.state.settings_view_model import SettingsViewModel


class FailingStore:
    def __init__(self) -> None:
        self.attempts = 0

    def load(self) -> ChatSettings:
        return ChatSettings()

    def save(self, settings: ChatSettings) -> None:
        self.attempts += 1
        raise PersistenceError("disk full")


def _view_model(settings: ChatSettings, store=None) -> SettingsViewModel:
    return SettingsViewModel(settings, store=store or MemorySettingsStore(settings))


def test_draft_is_independent_copy(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    view_model.update_field("max_documents", 9)
    assert settings.max_documents == DEFAULT_MAX_DOCUMENTS
    assert view_model.persisted_settings.max_documents == DEFAULT_MAX_DOCUMENTS
    assert view_model.draft_settings.max_documents == 9


def test_update_marks_dirty_until_value_restored(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    result = view_model.update_field("max_documents", 9)
    assert result.changed_fields == ("max_documents",)
    assert view_model.dirty_fields == {"max_documents"}

    view_model.update_field("max_documents", DEFAULT_MAX_DOCUMENTS)
    assert view_model.dirty_fields == frozenset()


def test_update_unknown_field_is_not_handled(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    assert view_model.update_field("dark_mode", True).handled is False
    assert view_model.draft_settings.dark_mode is False


def test_update_runs_field_side_effects(settings: ChatSettings) -> None:
    settings.rag_enabled = False
    settings.embedding_model = ""
    view_model = _view_model(settings)
    result = view_model.update_field("rag_enabled", True)
    assert set(result.changed_fields) == {"rag_enabled", "embedding_model"}
    assert view_model.dirty_fields == {"rag_enabled", "embedding_model"}
    assert view_model.draft_settings.embedding_model


def test_commit_text_error_leaves_draft_unchanged(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    result = view_model.commit_text("chromadb_distance", "3.5")
    assert result.handled is True
    assert result.error
    assert view_model.draft_settings.chromadb_distance == settings.chromadb_distance
    assert "chromadb_distance" in view_model.validation_errors
    assert view_model.dirty_fields == frozenset()

    view_model.commit_text("chromadb_distance", "1.25")
    assert view_model.draft_settings.chromadb_distance == 1.25
    assert "chromadb_distance" not in view_model.validation_errors


def test_save_persists_and_clears_dirty(settings: ChatSettings) -> None:
    store = MemorySettingsStore(settings)
    view_model = _view_model(settings, store)
    view_model.update_field("log_level", "debug")
    result = view_model.save()
    assert result.saved is True
    assert result.changed_fields == ("log_level",)
    assert store.save_count == 1
    assert store.load().log_level == "debug"
    assert view_model.persisted_settings.log_level == "debug"
    assert view_model.dirty_fields == frozenset()


def test_save_rejects_invalid_document(settings: ChatSettings) -> None:
    store = MemorySettingsStore(settings)
    view_model = _view_model(settings, store)
    view_model.update_field("chat_model", "")
    result = view_model.save()
    assert result.saved is False
    assert "chat_model" in (result.error or "")
    assert store.save_count == 0
    assert view_model.dirty_fields == {"chat_model"}


def test_save_failure_keeps_draft(settings: ChatSettings, caplog) -> None:
    store = FailingStore()
    view_model = _view_model(settings, store)
    view_model.update_field("max_documents", 2)
    with caplog.at_level(logging.WARNING, logger="ochat"):
        result = view_model.save()
    assert result.error == "disk full"
    assert store.attempts == 1
    assert view_model.draft_settings.max_documents == 2
    assert view_model.persisted_settings.max_documents == DEFAULT_MAX_DOCUMENTS
    assert view_model.validation_errors["_save"] == "disk full"
    assert "Settings save failed" in caplog.text


def test_missing_companions(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    assert view_model.missing_companions("ollama_url") == ()
    view_model.update_field("chat_model", "  ")
    assert view_model.missing_companions("ollama_url") == ("chat_model",)
    assert view_model.missing_companions("max_documents") == ()


def test_reset_all_restores_persisted(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    view_model.update_field("max_documents", 1)
    view_model.commit_text("chromadb_distance", "x")
    view_model.reset_all()
    assert view_model.draft_settings == view_model.persisted_settings
    assert view_model.dirty_fields == frozenset()
    assert view_model.validation_errors == {}


def test_reset_to_defaults_keeps_collection_state() -> None:
    settings = ChatSettings(
        chat_model="qwen",
        default_system_prompt="custom",
        selected_collections={"notes": True},
        tool_trust_levels={"shell": 2},
        dark_mode=True,
    )
    view_model = _view_model(settings)
    result = view_model.reset_to_defaults()
    draft = view_model.draft_settings
    assert draft.chat_model == ChatSettings().chat_model
    assert draft.default_system_prompt == DEFAULT_SYSTEM_PROMPT
    assert draft.selected_collections == {"notes": True}
    assert draft.tool_trust_levels == {"shell": 2}
    assert draft.dark_mode is True
    assert set(result.changed_fields) == {"chat_model", "default_system_prompt"}
    assert view_model.dirty_fields == {"chat_model", "default_system_prompt"}


def test_merge_keeps_dirty_fields_and_adopts_the_rest(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    view_model.update_field("max_documents", 8)

    external = ChatSettings(
        chat_model="mistral",
        max_documents=3,
        selected_collections={"docs": True},
        dark_mode=True,
    )
    result = view_model.merge_external(external)

    draft = view_model.draft_settings
    assert draft.max_documents == 8
    assert draft.chat_model == "mistral"
    assert draft.selected_collections == {"docs": True}
    assert draft.dark_mode is True
    assert "chat_model" in result.changed_fields
    assert "max_documents" not in result.changed_fields
    assert view_model.persisted_settings == external
    assert view_model.dirty_fields == {"max_documents"}


def test_merge_drops_dirty_flag_when_snapshot_matches(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    view_model.update_field("max_documents", 8)
    external = ChatSettings(chat_model=settings.chat_model, max_documents=8)
    view_model.merge_external(external)
    assert view_model.draft_settings.max_documents == 8
    assert view_model.dirty_fields == frozenset()


def test_merge_keeps_active_field(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    external = ChatSettings(chat_model="mistral", ollama_url="http://other:11434")
    view_model.merge_external(external, active_field="ollama_url")
    assert view_model.draft_settings.ollama_url == settings.ollama_url
    assert view_model.draft_settings.chat_model == "mistral"
    assert view_model.dirty_fields == {"ollama_url"}


def test_merge_does_not_share_state_with_snapshot(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    external = ChatSettings(selected_collections={"docs": True})
    view_model.merge_external(external)
    external.selected_collections["docs"] = False
    assert view_model.draft_settings.selected_collections == {"docs": True}
    assert view_model.persisted_settings.selected_collections == {"docs": True}


def test_snapshot_is_detached(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    snapshot = view_model.snapshot()
    snapshot.draft_settings.max_documents = 99
    assert view_model.draft_settings.max_documents == DEFAULT_MAX_DOCUMENTS


def test_load_replaces_both_copies(settings: ChatSettings) -> None:
    view_model = _view_model(settings)
    view_model.update_field("max_documents", 1)
    view_model.load(ChatSettings(chat_model="phi"))
    assert view_model.draft_settings.chat_model == "phi"
    assert view_model.persisted_settings.chat_model == "phi"
    assert view_model.dirty_fields == frozenset()
