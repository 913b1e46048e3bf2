"""In-memory editor host used by tests and the Textual demo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .protocol import BufferInfo, KeymapCallback, WindowInfo

TERMINAL_EXIT_KEYS = "<C-\\><C-n>"
_VISUAL_MODES = {"v", "V", "\x16", "s", "S", "\x13"}


class HostCommandError(RuntimeError):
    """Raised by ``InMemoryHost.execute`` for commands configured to fail."""


@dataclass(slots=True)
class KeymapEntry:
    callback: KeymapCallback
    description: str = ""


@dataclass
class InMemoryHost:
    """Mutable editor model that records every side effect it receives.

    The model is deliberately small: one focused buffer, a stack of floating
    windows, an optional overlay, and per-engine completion popup flags.
    """

    current_mode: str = "n"
    buffer: BufferInfo = field(default_factory=BufferInfo)
    overlay: bool = False
    floats: List[WindowInfo] = field(default_factory=list)
    hlsearch: bool = False
    completion: Dict[str, bool] = field(default_factory=dict)
    failing_commands: Set[str] = field(default_factory=set)
    executed: List[str] = field(default_factory=list)
    keys: List[str] = field(default_factory=list)
    closed_windows: List[int] = field(default_factory=list)
    keymaps: Dict[Tuple[str, str], KeymapEntry] = field(default_factory=dict)
    quit: bool = False

    # -- EditorHost -----------------------------------------------------
    def execute(self, command: str) -> None:
        self.executed.append(command)
        if command in self.failing_commands:
            raise HostCommandError(f"E37: command '{command}' refused")
        verb = command.rstrip("!")
        if verb == "nohlsearch":
            self.hlsearch = False
        elif verb in {"q", "wq", "qa", "wqa"}:
            self.quit = True
        elif verb == "bdelete":
            self.buffer = BufferInfo()

    def send_keys(self, keys: str) -> None:
        self.keys.append(keys)
        if keys == TERMINAL_EXIT_KEYS and self.current_mode == "t":
            self.current_mode = "n"
        elif keys in {"<Esc>", "<C-c>"}:
            self.current_mode = "n"
        elif keys == "<C-e>":
            self.completion = {engine: False for engine in self.completion}

    def mode(self) -> str:
        return self.current_mode

    def current_buffer(self) -> BufferInfo:
        return self.buffer

    def overlay_open(self) -> bool:
        return self.overlay

    def close_overlay(self) -> bool:
        if not self.overlay:
            return False
        self.overlay = False
        return True

    def floating_windows(self) -> Sequence[WindowInfo]:
        return tuple(self.floats)

    def close_window(self, window_id: int) -> None:
        self.closed_windows.append(window_id)
        self.floats = [window for window in self.floats if window.id != window_id]

    def search_highlight_active(self) -> bool:
        return self.hlsearch

    def completion_visible(self, engine: str) -> bool:
        if engine not in self.completion:
            raise LookupError(f"completion engine '{engine}' is not loaded")
        return self.completion[engine]

    def set_keymap(
        self,
        modes: Sequence[str],
        lhs: str,
        callback: KeymapCallback,
        description: str = "",
    ) -> None:
        for mode in modes:
            self.keymaps[(mode, lhs)] = KeymapEntry(callback, description)

    def del_keymap(self, modes: Sequence[str], lhs: str) -> None:
        for mode in modes:
            self.keymaps.pop((mode, lhs), None)

    # -- helpers ----------------------------------------------------------
    def keymap_mode(self) -> str:
        if self.current_mode in _VISUAL_MODES:
            return "v"
        return self.current_mode[:1] or "n"

    def press(self, lhs: str) -> Optional[object]:
        """Simulate typing ``lhs`` in the current mode.

        Returns the mapped callback's result, or ``None`` when unmapped.
        """

        entry = self.keymaps.get((self.keymap_mode(), lhs))
        if entry is None:
            return None
        return entry.callback()


__all__ = ["InMemoryHost", "HostCommandError", "KeymapEntry", "TERMINAL_EXIT_KEYS"]
