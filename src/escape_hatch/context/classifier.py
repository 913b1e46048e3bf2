"""Reduce host editor state to a ``Situation``."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from escape_hatch.errors import ClassifierProbeError
from escape_hatch.host import BufferInfo, EditorHost
from escape_hatch.runtime import telemetry

from .completion import CompletionPredicate
from .situation import Situation

PROMPT_FILETYPES: FrozenSet[str] = frozenset(
    {"TelescopePrompt", "TelescopeResults", "fzf", "snacks_picker_input"}
)

_VISUAL_MODES = frozenset({"v", "V", "\x16", "s", "S", "\x13"})


def _never(host: EditorHost) -> bool:
    del host
    return False


class ContextClassifier:
    """Stateless classifier; ``classify`` re-reads the host on every call."""

    def __init__(
        self,
        host: EditorHost,
        *,
        completion_predicate: Optional[CompletionPredicate] = None,
        prompt_filetypes: Iterable[str] = PROMPT_FILETYPES,
    ) -> None:
        self.host = host
        self._completion = completion_predicate or _never
        self._prompt_filetypes = frozenset(prompt_filetypes)

    def classify(self) -> Situation:
        mode = self.host.mode() or "n"
        if mode.startswith("c"):
            return Situation.COMMAND_LINE_PENDING

        buffer = self.host.current_buffer()
        if self.host.overlay_open() or self.is_prompt(buffer):
            return Situation.OVERLAY_ACTIVE

        if self.completion_popup_visible():
            return Situation.COMPLETION_POPUP_ACTIVE

        if mode.startswith("t"):
            return Situation.TERMINAL_MODE
        if mode[:1] in _VISUAL_MODES:
            return Situation.VISUAL_MODE
        if mode[:1] in {"i", "R"}:
            return Situation.INSERT_MODE

        if buffer.special:
            return Situation.SPECIAL_BUFFER
        return Situation.NORMAL_EDITABLE_BUFFER

    def is_prompt(self, buffer: BufferInfo) -> bool:
        return buffer.filetype in self._prompt_filetypes or "Telescope" in buffer.name

    def completion_popup_visible(self) -> bool:
        """Run the pluggable predicate; any failure counts as "not visible"."""

        try:
            return bool(self._completion(self.host))
        except Exception as exc:
            error = ClassifierProbeError(
                getattr(self._completion, "__name__", "completion"), exc
            )
            telemetry.record_event(
                "classifier.probe_failed",
                level="warning",
                data={"probe": error.probe, "error": str(exc)},
                logger_name="escape_hatch.context",
            )
            return False


__all__ = ["ContextClassifier", "PROMPT_FILETYPES"]
