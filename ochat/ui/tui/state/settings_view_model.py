"""Settings view model: persisted/draft separation and external merges."""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ochat.config.errors import PersistenceError, ValidationError
from ochat.config.loader import clone_settings
from ochat.config.models import ChatSettings
from ochat.config.store import SettingsStore
from ochat.logging import get_logger

from .fields import SETTINGS_FIELDS, FieldKind, FieldSpec


@dataclass(frozen=True)
class SettingsSnapshot:
    """Immutable snapshot of settings editor state."""

    persisted_settings: ChatSettings
    draft_settings: ChatSettings
    dirty_fields: frozenset[str]
    validation_errors: dict[str, str]


@dataclass(frozen=True)
class SettingsActionResult:
    """Result value for view model actions."""

    handled: bool
    changed_fields: tuple[str, ...] = ()
    error: Optional[str] = None
    saved: bool = False


class SettingsViewModel:
    """ViewModel for settings editing with draft/persisted state separation.

    The draft is a deep copy of the persisted document. Field updates touch
    only the draft; :meth:`save` validates the whole draft, writes it through
    the store and makes it the new persisted baseline.
    """

    def __init__(
        self,
        settings: ChatSettings,
        *,
        store: SettingsStore,
        fields: tuple[FieldSpec, ...] = SETTINGS_FIELDS,
        clone_func: Callable[[ChatSettings], ChatSettings] = clone_settings,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._clone = clone_func
        self._store = store
        self._fields = {spec.key: spec for spec in fields}
        self._logger = logger or get_logger(__name__)
        self._persisted_settings = self._clone(settings)
        self._draft_settings = self._clone(settings)
        self._dirty_fields: set[str] = set()
        self._validation_errors: dict[str, str] = {}

    @property
    def persisted_settings(self) -> ChatSettings:
        """Last saved/loaded settings snapshot."""
        return self._persisted_settings

    @property
    def draft_settings(self) -> ChatSettings:
        """Editable draft settings."""
        return self._draft_settings

    @property
    def dirty_fields(self) -> frozenset[str]:
        """Field keys that have unsaved draft edits."""
        return frozenset(self._dirty_fields)

    @property
    def validation_errors(self) -> dict[str, str]:
        """Current validation errors indexed by field key."""
        return dict(self._validation_errors)

    def snapshot(self) -> SettingsSnapshot:
        """Return an immutable copy of current editor state."""
        return SettingsSnapshot(
            persisted_settings=self._clone(self._persisted_settings),
            draft_settings=self._clone(self._draft_settings),
            dirty_fields=frozenset(self._dirty_fields),
            validation_errors=dict(self._validation_errors),
        )

    def load(self, settings: ChatSettings) -> SettingsActionResult:
        """Load a new persisted document and reset draft state."""
        self._persisted_settings = self._clone(settings)
        self._draft_settings = self._clone(settings)
        self._dirty_fields.clear()
        self._validation_errors.clear()
        return SettingsActionResult(handled=True, changed_fields=tuple(self._fields))

    def update_field(self, key: str, value: Any) -> SettingsActionResult:
        """Apply a single field change to the draft.

        Field side effects (``after_set``) run on the draft and any fields they
        touch are reported and marked dirty as well.
        """
        spec = self._fields.get(key)
        if spec is None:
            return SettingsActionResult(handled=False)

        before = {name: getattr(self._draft_settings, name) for name in self._fields}
        setattr(self._draft_settings, key, value)
        if spec.after_set is not None:
            spec.after_set(self._draft_settings)

        changed = tuple(
            name for name in self._fields if getattr(self._draft_settings, name) != before[name]
        )
        for name in changed:
            self._log_change(name, before[name], getattr(self._draft_settings, name))
        for name in set(changed) | {key}:
            self._refresh_dirty(name)
        self._validation_errors.pop(key, None)
        return SettingsActionResult(handled=True, changed_fields=changed)

    def commit_text(self, key: str, text: str) -> SettingsActionResult:
        """Parse typed text for a field and apply it to the draft.

        A parse failure leaves the draft untouched and records the error.
        """
        spec = self._fields.get(key)
        if spec is None:
            return SettingsActionResult(handled=False)
        try:
            value = spec.parse(text)
        except ValidationError as exc:
            self._validation_errors[key] = str(exc)
            self._logger.warning("Rejected value for %s: %s", key, exc)
            return SettingsActionResult(handled=True, error=str(exc))
        return self.update_field(key, value)

    def missing_companions(self, key: str) -> tuple[str, ...]:
        """Companion fields of ``key`` that are still empty in the draft."""
        spec = self._fields.get(key)
        if spec is None:
            return ()
        return tuple(
            name
            for name in spec.requires
            if not str(getattr(self._draft_settings, name) or "").strip()
        )

    def save(self) -> SettingsActionResult:
        """Validate draft state and persist it through the store."""
        try:
            self._draft_settings.validate()
            self._store.save(self._clone(self._draft_settings))
        except (ValidationError, PersistenceError) as exc:
            self._validation_errors["_save"] = str(exc)
            self._logger.warning("Settings save failed: %s", exc)
            return SettingsActionResult(handled=True, error=str(exc))

        changed = tuple(sorted(self._dirty_fields))
        self._persisted_settings = self._clone(self._draft_settings)
        self._dirty_fields.clear()
        self._validation_errors.clear()
        self._logger.info("Settings saved")
        return SettingsActionResult(handled=True, changed_fields=changed, saved=True)

    def reset_all(self) -> SettingsActionResult:
        """Reset full draft state back to persisted state."""
        self._draft_settings = self._clone(self._persisted_settings)
        self._dirty_fields.clear()
        self._validation_errors.clear()
        return SettingsActionResult(handled=True, changed_fields=tuple(self._fields))

    def reset_to_defaults(self) -> SettingsActionResult:
        """Reset editor-owned fields of the draft to their defaults.

        Collection sub-state owned by other panels is left alone.
        """
        defaults = ChatSettings()
        changed = []
        for name in self._fields:
            value = deepcopy(getattr(defaults, name))
            if getattr(self._draft_settings, name) != value:
                changed.append(name)
            setattr(self._draft_settings, name, value)
            self._refresh_dirty(name)
        self._validation_errors.clear()
        self._logger.info("Settings reset to defaults (%d fields changed)", len(changed))
        return SettingsActionResult(handled=True, changed_fields=tuple(changed))

    def merge_external(
        self,
        snapshot: ChatSettings,
        active_field: Optional[str] = None,
    ) -> SettingsActionResult:
        """Reconcile the draft with a document saved by another panel.

        Editor-owned fields that are dirty or under active edit keep their
        draft value; every other field, including collection sub-state, is
        taken from ``snapshot``. The snapshot becomes the persisted baseline.
        """
        previous = self._draft_settings
        merged = self._clone(snapshot)
        kept = set(self._dirty_fields)
        if active_field in self._fields:
            kept.add(active_field)
        for name in kept:
            setattr(merged, name, deepcopy(getattr(previous, name)))

        changed = tuple(
            name for name in self._fields if getattr(merged, name) != getattr(previous, name)
        )
        self._persisted_settings = self._clone(snapshot)
        self._draft_settings = merged
        for name in kept:
            self._refresh_dirty(name)
        if changed:
            self._logger.debug("Merged external settings update: %s", ", ".join(changed))
        return SettingsActionResult(handled=True, changed_fields=changed)

    def _refresh_dirty(self, name: str) -> None:
        if getattr(self._draft_settings, name) != getattr(self._persisted_settings, name):
            self._dirty_fields.add(name)
        else:
            self._dirty_fields.discard(name)

    def _log_change(self, name: str, old: Any, new: Any) -> None:
        spec = self._fields[name]
        if spec.kind is FieldKind.MULTILINE:
            self._logger.info(
                "Setting %s changed (%d -> %d characters)", name, len(old or ""), len(new or "")
            )
        else:
            self._logger.info("Setting %s changed: %r -> %r", name, old, new)
