"""State models for the settings panel: field editor, draft and text editing."""

from __future__ import annotations

from .field_editor import EditorMode, EditorOutcome, FieldEditor, StatusMessage
from .fields import SETTINGS_FIELDS, FieldKind, FieldSpec
from .line_wrap import DisplayLine, wrap
from .multiline_editor import MultilineEditor, RenderedText
from .option_picker import OptionPicker, OptionRequest, PickerStatus
from .settings_view_model import SettingsActionResult, SettingsSnapshot, SettingsViewModel
from .text_buffer import InvariantViolation, TextBuffer
from .viewport import Viewport

__all__ = [
    "DisplayLine",
    "EditorMode",
    "EditorOutcome",
    "FieldEditor",
    "FieldKind",
    "FieldSpec",
    "InvariantViolation",
    "MultilineEditor",
    "OptionPicker",
    "OptionRequest",
    "PickerStatus",
    "RenderedText",
    "SETTINGS_FIELDS",
    "SettingsActionResult",
    "SettingsSnapshot",
    "SettingsViewModel",
    "StatusMessage",
    "TextBuffer",
    "Viewport",
    "wrap",
]
