"""Field navigation state machine for the settings panel.

``FieldEditor`` owns the editing mode, the active field and the transient
editing buffers. The screen feeds it one event at a time (a key, an external
settings update, a probe or fetch result) and acts on the returned
:class:`EditorOutcome`: show the status, broadcast saved settings, start
probes and option fetches.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ochat.config.models import ChatSettings
from ochat.logging import get_logger
from ochat.remote.connection import ConnectionCheck, ConnectionStatus
from ochat.remote.options import RemoteOption

from .fields import SETTINGS_FIELDS, FieldKind, FieldSpec, cycle_choice, summarize_prompt
from .multiline_editor import MultilineEditor, panel_text_size, printable_text
from .option_picker import OptionPicker, OptionRequest, PickerStatus
from .settings_view_model import SettingsActionResult, SettingsViewModel
from .text_buffer import TextBuffer

# Settings attribute holding the base URL of each option source and server.
SOURCE_URL_FIELDS = {
    "ollama_models": "ollama_url",
    "chroma_collections": "chromadb_url",
}
SERVER_URL_FIELDS = {
    "ollama": "ollama_url",
    "chromadb": "chromadb_url",
}


class EditorMode(str, Enum):
    BROWSING = "browsing"
    EDITING_SCALAR = "editing_scalar"
    VIEWING_MULTILINE = "viewing_multiline"
    EDITING_MULTILINE = "editing_multiline"
    SELECTING_OPTION = "selecting_option"


@dataclass(frozen=True)
class StatusMessage:
    """One-line status shown under the field list."""

    text: str
    severity: str = "info"


@dataclass(frozen=True)
class EditorOutcome:
    """What the screen should do after an event was handled."""

    handled: bool = True
    status: Optional[StatusMessage] = None
    saved_settings: Optional[ChatSettings] = None
    probes: tuple[str, ...] = ()
    fetch: Optional[OptionRequest] = None


IGNORED = EditorOutcome(handled=False)


class FieldEditor:
    """Single-writer state machine driving the settings panel."""

    def __init__(
        self,
        view_model: SettingsViewModel,
        *,
        fields: tuple[FieldSpec, ...] = SETTINGS_FIELDS,
        panel_width: int = 80,
        panel_height: int = 24,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.view_model = view_model
        self.fields = fields
        self.panel_width = panel_width
        self.panel_height = panel_height
        self._logger = logger or get_logger(__name__)
        self.mode = EditorMode.BROWSING
        self.active_index = 0
        self.input: Optional[TextBuffer] = None
        self.prompt: Optional[MultilineEditor] = None
        self.picker: Optional[OptionPicker] = None
        self.status: Optional[StatusMessage] = None
        self.connections: dict[str, ConnectionStatus] = {
            server: ConnectionStatus.UNKNOWN for server in SERVER_URL_FIELDS
        }
        self._request_ids = itertools.count(1)

    @property
    def active_field(self) -> FieldSpec:
        return self.fields[self.active_index]

    @property
    def editing_field(self) -> Optional[str]:
        """Key of the field whose value is being edited, if any."""
        if self.mode in {
            EditorMode.EDITING_SCALAR,
            EditorMode.EDITING_MULTILINE,
            EditorMode.SELECTING_OPTION,
        }:
            return self.active_field.key
        return None

    def value_text(self, spec: FieldSpec) -> str:
        """Current draft value of a field as shown in the list."""
        value = getattr(self.view_model.draft_settings, spec.key)
        if spec.kind is FieldKind.MULTILINE:
            return summarize_prompt(value or "")
        return spec.format_value(value)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle_key(self, key: str, character: Optional[str] = None) -> EditorOutcome:
        """Handle one key press in the current mode."""
        if key == " ":
            key = "space"
        if self.mode is EditorMode.BROWSING:
            outcome = self._handle_browsing(key)
        elif self.mode is EditorMode.EDITING_SCALAR:
            outcome = self._handle_scalar(key, character)
        elif self.mode is EditorMode.VIEWING_MULTILINE:
            outcome = self._handle_viewing(key)
        elif self.mode is EditorMode.EDITING_MULTILINE:
            outcome = self._handle_multiline(key, character)
        else:
            outcome = self._handle_picker(key)
        if outcome.status is not None:
            self.status = outcome.status
        return outcome

    def handle_external_update(self, settings: ChatSettings) -> EditorOutcome:
        """Merge a document saved by another panel into the draft."""
        result = self.view_model.merge_external(settings, active_field=self.editing_field)
        if self.mode is EditorMode.VIEWING_MULTILINE and self.prompt is not None:
            text = getattr(self.view_model.draft_settings, self.active_field.key) or ""
            if text != self.prompt.text:
                self._open_prompt(text)
        probes = self._probes_for(result.changed_fields)
        for server in probes:
            self.connections[server] = ConnectionStatus.CHECKING
        return EditorOutcome(probes=probes)

    def apply_options(
        self,
        request_id: int,
        options: list[RemoteOption],
        error: Optional[str] = None,
    ) -> EditorOutcome:
        """Deliver a finished option fetch; stale results are dropped."""
        picker = self.picker
        if picker is None or self.mode is not EditorMode.SELECTING_OPTION:
            self._logger.debug("Dropping option results for closed picker (request %s)", request_id)
            return IGNORED
        if not picker.accept(request_id, options, error):
            self._logger.debug(
                "Dropping stale option results (request %s, expected %s)",
                request_id,
                picker.request_id,
            )
            return IGNORED

        if error is not None:
            status = StatusMessage(f"Failed to fetch options: {error}", "error")
        elif not options:
            status = StatusMessage("No options available", "warning")
        else:
            picker.select_current(getattr(self.view_model.draft_settings, picker.field_key) or "")
            status = StatusMessage(f"{len(options)} options loaded", "info")
        self.status = status
        return EditorOutcome(status=status)

    def apply_connection_check(self, check: ConnectionCheck) -> bool:
        """Record a probe result unless the URL changed since it started."""
        url_field = SERVER_URL_FIELDS.get(check.server)
        if url_field is None:
            return False
        if check.url != getattr(self.view_model.draft_settings, url_field):
            self._logger.debug("Ignoring %s check for outdated URL %s", check.server, check.url)
            return False
        self.connections[check.server] = check.status
        return True

    def deactivate(self) -> None:
        """Close any open editor and discard unsaved draft edits."""
        discarded = sorted(self.view_model.dirty_fields)
        self._close_editors()
        self.view_model.reset_all()
        if discarded:
            self._logger.info("Discarded unsaved settings: %s", ", ".join(discarded))

    def reload(self, settings: ChatSettings) -> None:
        """Re-seed the draft from the current persisted document."""
        self._close_editors()
        self.view_model.load(settings)
        self.status = None

    def mark_checking(self, server: str) -> None:
        self.connections[server] = ConnectionStatus.CHECKING

    def resize_panel(self, width: int, height: int) -> None:
        self.panel_width = width
        self.panel_height = height
        if self.prompt is not None:
            self.prompt.resize(*panel_text_size(width, height))
        if self.picker is not None:
            self.picker.viewport.resize(
                self._picker_height(), self.picker.cursor, len(self.picker.options)
            )

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def _handle_browsing(self, key: str) -> EditorOutcome:
        last = len(self.fields) - 1
        if key in {"up", "k"}:
            self.active_index = max(self.active_index - 1, 0)
        elif key in {"down", "j"}:
            self.active_index = min(self.active_index + 1, last)
        elif key == "home":
            self.active_index = 0
        elif key == "end":
            self.active_index = last
        elif key in {"enter", "space"}:
            return self._activate(self.active_field, key)
        elif key == "s":
            return self._save_all("Configuration saved")
        elif key == "r":
            self.view_model.reset_to_defaults()
            return self._save_all("Configuration reset to defaults")
        elif key == "l":
            return self._open_picker(self.active_field)
        else:
            return IGNORED
        return EditorOutcome()

    def _activate(self, spec: FieldSpec, key: str) -> EditorOutcome:
        value = getattr(self.view_model.draft_settings, spec.key)
        if spec.kind is FieldKind.BOOLEAN:
            self.view_model.update_field(spec.key, not value)
            return self._persist(spec)
        if spec.kind is FieldKind.ENUM:
            self.view_model.update_field(spec.key, cycle_choice(spec.choices, value))
            return self._persist(spec)
        if spec.kind is FieldKind.MULTILINE:
            if key != "enter":
                return IGNORED
            self._open_prompt(value or "")
            self.mode = EditorMode.VIEWING_MULTILINE
            return EditorOutcome(
                status=StatusMessage(f"Viewing {spec.label}: Ctrl+E to edit, Esc to close")
            )

        self.input = TextBuffer(spec.format_value(value))
        self.mode = EditorMode.EDITING_SCALAR
        return EditorOutcome(
            status=StatusMessage(f"Editing {spec.label}: Enter to save, Esc to cancel")
        )

    # ------------------------------------------------------------------
    # Scalar editing
    # ------------------------------------------------------------------

    def _handle_scalar(self, key: str, character: Optional[str]) -> EditorOutcome:
        buffer = self.input
        if buffer is None:
            self.mode = EditorMode.BROWSING
            return IGNORED
        if key == "escape":
            self._close_editors()
            return EditorOutcome(status=StatusMessage("Edit cancelled"))
        if key == "enter":
            return self._commit_scalar(self.active_field, buffer.text)

        if key == "left":
            buffer.move_left()
        elif key == "right":
            buffer.move_right()
        elif key == "home":
            buffer.move_to_buffer_start()
        elif key == "end":
            buffer.move_to_buffer_end()
        elif key == "backspace":
            buffer.backspace()
        elif key == "delete":
            buffer.delete_forward()
        else:
            text = printable_text(key, character)
            if text is None:
                return IGNORED
            buffer.insert(text)
        return EditorOutcome()

    def _commit_scalar(self, spec: FieldSpec, text: str) -> EditorOutcome:
        result = self.view_model.commit_text(spec.key, text)
        self._close_editors()
        if result.error is not None:
            return EditorOutcome(status=StatusMessage(f"Error: {result.error}", "error"))
        outcome = self._persist(spec)
        if spec.probe is None or spec.probe in outcome.probes:
            return outcome
        self.connections[spec.probe] = ConnectionStatus.CHECKING
        return replace(outcome, probes=outcome.probes + (spec.probe,))

    # ------------------------------------------------------------------
    # Multi-line panel
    # ------------------------------------------------------------------

    def _open_prompt(self, text: str) -> None:
        width, height = panel_text_size(self.panel_width, self.panel_height)
        self.prompt = MultilineEditor(text, width=width, height=height)

    def _handle_viewing(self, key: str) -> EditorOutcome:
        prompt = self.prompt
        if prompt is None or key == "escape":
            self._close_editors()
            return EditorOutcome()
        if key == "ctrl+e":
            prompt.begin_editing()
            self.mode = EditorMode.EDITING_MULTILINE
            return EditorOutcome(
                status=StatusMessage(
                    f"Editing {self.active_field.label}: Ctrl+S to save, Esc to cancel"
                )
            )
        return EditorOutcome() if prompt.handle_key(key) else IGNORED

    def _handle_multiline(self, key: str, character: Optional[str]) -> EditorOutcome:
        prompt = self.prompt
        if prompt is None:
            self.mode = EditorMode.BROWSING
            return IGNORED
        if key == "escape":
            self._close_editors()
            return EditorOutcome(status=StatusMessage("Edit cancelled"))
        if key == "ctrl+s":
            spec = self.active_field
            text = prompt.text
            self._close_editors()
            self.view_model.update_field(spec.key, text)
            return self._persist(spec)
        return EditorOutcome() if prompt.handle_key(key, character) else IGNORED

    # ------------------------------------------------------------------
    # Option picker
    # ------------------------------------------------------------------

    def _picker_height(self) -> int:
        return max(self.panel_height - 10, 3)

    def _option_request(self, source: str, request_id: int) -> OptionRequest:
        base_url = getattr(self.view_model.draft_settings, SOURCE_URL_FIELDS[source])
        return OptionRequest(request_id=request_id, source=source, base_url=base_url)

    def _open_picker(self, spec: FieldSpec) -> EditorOutcome:
        if spec.options_source is None:
            return IGNORED
        request_id = next(self._request_ids)
        self.picker = OptionPicker(
            field_key=spec.key,
            source=spec.options_source,
            request_id=request_id,
            height=self._picker_height(),
        )
        self.mode = EditorMode.SELECTING_OPTION
        return EditorOutcome(
            status=StatusMessage(f"Loading options for {spec.label}..."),
            fetch=self._option_request(spec.options_source, request_id),
        )

    def _handle_picker(self, key: str) -> EditorOutcome:
        picker = self.picker
        if picker is None or key == "escape":
            self._close_editors()
            return EditorOutcome()
        if key in {"up", "k"}:
            picker.move(-1)
        elif key in {"down", "j"}:
            picker.move(1)
        elif key == "r":
            request_id = next(self._request_ids)
            picker.restart(request_id)
            return EditorOutcome(
                status=StatusMessage("Refreshing options..."),
                fetch=self._option_request(picker.source, request_id),
            )
        elif key == "enter":
            option = picker.selected
            if option is None:
                if picker.status is PickerStatus.LOADING:
                    return EditorOutcome(status=StatusMessage("Options are still loading", "warning"))
                return EditorOutcome(status=StatusMessage("No option to select", "warning"))
            spec = self.active_field
            self._close_editors()
            self.view_model.update_field(spec.key, option.name)
            return self._persist(spec)
        else:
            return IGNORED
        return EditorOutcome()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _close_editors(self) -> None:
        self.mode = EditorMode.BROWSING
        self.input = None
        self.prompt = None
        self.picker = None

    def _persist(self, spec: FieldSpec) -> EditorOutcome:
        """Auto-save after a committed field change."""
        missing = self.view_model.missing_companions(spec.key)
        if missing:
            self._logger.debug(
                "Skipping auto-save for %s: missing %s", spec.key, ", ".join(missing)
            )
            return EditorOutcome(
                status=StatusMessage(
                    f"{spec.label} updated (not saved until {', '.join(missing)} is set)",
                    "warning",
                )
            )

        result = self.view_model.save()
        if result.error is not None:
            return EditorOutcome(
                status=StatusMessage(f"{spec.label} updated but save failed: {result.error}", "warning")
            )
        return self._saved_outcome(result, f"{spec.label} saved")

    def _save_all(self, message: str) -> EditorOutcome:
        result = self.view_model.save()
        if result.error is not None:
            return EditorOutcome(status=StatusMessage(f"Save failed: {result.error}", "error"))
        return self._saved_outcome(result, message)

    def _saved_outcome(self, result: SettingsActionResult, message: str) -> EditorOutcome:
        probes = self._probes_for(result.changed_fields)
        for server in probes:
            self.connections[server] = ConnectionStatus.CHECKING
        return EditorOutcome(
            status=StatusMessage(message, "success"),
            saved_settings=self.view_model.snapshot().persisted_settings,
            probes=probes,
        )

    def _probes_for(self, changed_fields: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(
            server for server, url_field in SERVER_URL_FIELDS.items() if url_field in changed_fields
        )
