"""Pick-list state for choosing a field value from a remote option list."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ochat.remote.options import RemoteOption

from .viewport import Viewport


class PickerStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class OptionRequest:
    """A fetch the screen should run in a worker."""

    request_id: int
    source: str
    base_url: str


@dataclass
class OptionPicker:
    """Cursor and scroll state over a list of remote options.

    Results are accepted only for the outstanding ``request_id``.
    """

    field_key: str
    source: str
    request_id: int
    height: int = 10
    status: PickerStatus = PickerStatus.LOADING
    options: list[RemoteOption] = field(default_factory=list)
    error: Optional[str] = None
    cursor: int = 0
    viewport: Viewport = field(init=False)

    def __post_init__(self) -> None:
        self.viewport = Viewport(self.height)

    def restart(self, request_id: int) -> None:
        self.request_id = request_id
        self.status = PickerStatus.LOADING
        self.options = []
        self.error = None
        self.cursor = 0
        self.viewport.offset = 0

    def accept(self, request_id: int, options: list[RemoteOption], error: Optional[str] = None) -> bool:
        """Store fetch results; returns False for a stale request."""
        if request_id != self.request_id:
            return False
        if error is not None:
            self.status = PickerStatus.ERROR
            self.options = []
            self.error = error
        else:
            self.status = PickerStatus.LOADED
            self.options = list(options)
            self.error = None
        self.cursor = 0
        self.viewport.offset = 0
        return True

    def select_current(self, current_value: str) -> None:
        """Place the cursor on ``current_value`` when it is in the list."""
        for index, option in enumerate(self.options):
            if option.name == current_value:
                self.cursor = index
                self.viewport.follow(index, len(self.options))
                return

    def move(self, delta: int) -> None:
        if not self.options:
            return
        self.cursor = min(max(self.cursor + delta, 0), len(self.options) - 1)
        self.viewport.follow(self.cursor, len(self.options))

    @property
    def selected(self) -> Optional[RemoteOption]:
        if self.status is not PickerStatus.LOADED or not self.options:
            return None
        return self.options[self.cursor]

    def visible_options(self) -> list[tuple[int, RemoteOption]]:
        start, end = self.viewport.visible_range(len(self.options))
        return [(index, self.options[index]) for index in range(start, end)]
