"""Built-in paths, command strings and descriptions."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from escape_hatch.host import TERMINAL_EXIT_KEYS

DEFAULT_DEBOUNCE_MS = 400

DEFAULT_COMMANDS: Mapping[str, str] = {
    "save": "w",
    "save_quit": "wq",
    "quit": "q",
    "force_quit": "q!",
    "quit_all": "qa",
    "force_quit_all": "qa!",
    "delete_buffer": "bdelete",
    "close_buffer": "q",
    "clear_search": "nohlsearch",
    "exit_terminal": TERMINAL_EXIT_KEYS,
    "leave_mode": "<Esc>",
    "dismiss_completion": "<C-e>",
}

DEFAULT_DESCRIPTIONS: Mapping[str, str] = {
    "smart_close": "Clear UI / leave mode",
    "save": "Save",
    "save_quit": "Save & Quit",
    "quit": "Quit",
    "force_quit": "Quit without saving",
    "quit_all": "Quit All",
    "force_quit_all": "Force Quit All",
    "delete_buffer": "Delete buffer",
    "exit_overlay": "Close picker / overlay",
    "exit_terminal": "Exit terminal mode",
    "noop": "Nothing",
}

NUCLEAR_ACTION = "force_quit_all"

DEFAULT_PATHS: tuple[Mapping[str, Any], ...] = (
    {
        "name": "primary",
        "keys": ("<Esc>",),
        "modes": ("n", "i", "v", "t"),
        "ladder": ("smart_close", "save", "save_quit", "quit", "quit_all"),
        "nuclear_action": NUCLEAR_ACTION,
        "description": "Escalating escape",
    },
    {
        "name": "secondary",
        "keys": ("<C-Esc>",),
        "modes": ("n", "i", "v", "t"),
        "ladder": ("smart_close", "delete_buffer", "force_quit"),
        "nuclear_action": NUCLEAR_ACTION,
        "description": "Escalating escape without saving",
    },
)

DEFAULT_PRESERVED_BUFFER_PATTERNS: tuple[str, ...] = (
    r"Telescope",
    r"^NvimTree_",
    r"neo-tree",
)


def default_options() -> Dict[str, Any]:
    """Fresh mutable copy of every default option."""

    return {
        "paths": [dict(spec) for spec in DEFAULT_PATHS],
        "debounce_ms": DEFAULT_DEBOUNCE_MS,
        "preserved_buffer_patterns": list(DEFAULT_PRESERVED_BUFFER_PATTERNS),
        "completion_engine": "auto",
        "custom_actions": {},
        "on_overflow": "noop",
        "commands": dict(DEFAULT_COMMANDS),
        "descriptions": dict(DEFAULT_DESCRIPTIONS),
        "nuclear": False,
    }


__all__ = [
    "DEFAULT_COMMANDS",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_DESCRIPTIONS",
    "DEFAULT_PATHS",
    "DEFAULT_PRESERVED_BUFFER_PATTERNS",
    "NUCLEAR_ACTION",
    "default_options",
]
