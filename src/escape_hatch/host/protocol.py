"""Editor host surface consumed by the classifier, effects and binder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence


@dataclass(frozen=True, slots=True)
class BufferInfo:
    """Snapshot of the focused buffer."""

    name: str = ""
    buftype: str = ""
    filetype: str = ""
    modified: bool = False

    @property
    def special(self) -> bool:
        return bool(self.buftype)


@dataclass(frozen=True, slots=True)
class WindowInfo:
    """Snapshot of a window; ``floating`` marks popups and overlays."""

    id: int
    buffer: BufferInfo = BufferInfo()
    floating: bool = False


KeymapCallback = Callable[[], object]


class EditorHost(Protocol):
    """Everything escape_hatch needs from the host editor.

    ``execute`` is fire-and-forget: a command blocked by the editor (unsaved
    changes, for instance) may raise, and callers treat that as a failed effect.
    """

    def execute(self, command: str) -> None:
        ...

    def send_keys(self, keys: str) -> None:
        ...

    def mode(self) -> str:
        ...

    def current_buffer(self) -> BufferInfo:
        ...

    def overlay_open(self) -> bool:
        ...

    def close_overlay(self) -> bool:
        ...

    def floating_windows(self) -> Sequence[WindowInfo]:
        ...

    def close_window(self, window_id: int) -> None:
        ...

    def search_highlight_active(self) -> bool:
        ...

    def completion_visible(self, engine: str) -> bool:
        ...

    def set_keymap(
        self,
        modes: Sequence[str],
        lhs: str,
        callback: KeymapCallback,
        description: str = "",
    ) -> None:
        ...

    def del_keymap(self, modes: Sequence[str], lhs: str) -> None:
        ...


__all__ = ["BufferInfo", "WindowInfo", "EditorHost", "KeymapCallback"]
