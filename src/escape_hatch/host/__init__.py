"""Host editor collaborators: the protocol and an in-memory model."""

from .memory import TERMINAL_EXIT_KEYS, HostCommandError, InMemoryHost, KeymapEntry
from .protocol import BufferInfo, EditorHost, KeymapCallback, WindowInfo

__all__ = [
    "BufferInfo",
    "WindowInfo",
    "EditorHost",
    "KeymapCallback",
    "InMemoryHost",
    "HostCommandError",
    "KeymapEntry",
    "TERMINAL_EXIT_KEYS",
]
