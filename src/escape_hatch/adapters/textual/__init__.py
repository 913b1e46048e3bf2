"""Textual adapter for escape_hatch."""

from .controller import (
    TextualEscalationAdapter,
    TextualTimerFacility,
    TextualUIHooks,
    textual_key_for,
)

__all__ = [
    "TextualEscalationAdapter",
    "TextualTimerFacility",
    "TextualUIHooks",
    "textual_key_for",
]
