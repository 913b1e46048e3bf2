"""Enumerated editing situations the classifier reduces host state to."""

from __future__ import annotations

from enum import Enum


class Situation(str, Enum):
    COMMAND_LINE_PENDING = "command_line_pending"
    OVERLAY_ACTIVE = "overlay_active"
    COMPLETION_POPUP_ACTIVE = "completion_popup_active"
    TERMINAL_MODE = "terminal_mode"
    VISUAL_MODE = "visual_mode"
    INSERT_MODE = "insert_mode"
    SPECIAL_BUFFER = "special_buffer"
    NORMAL_EDITABLE_BUFFER = "normal_editable_buffer"

    @property
    def leaves_mode(self) -> bool:
        """Situations cleared by dropping back to normal mode."""

        return self in _MODE_SITUATIONS


_MODE_SITUATIONS = frozenset(
    {
        Situation.COMMAND_LINE_PENDING,
        Situation.VISUAL_MODE,
        Situation.INSERT_MODE,
    }
)

__all__ = ["Situation"]
