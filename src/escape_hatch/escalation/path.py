"""Mutable per-path escalation state."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Hashable, Optional

from .ladder import EscalationLadder


@dataclass(frozen=True, slots=True)
class PathSnapshot:
    name: str
    level: int
    presses: int
    timer_pending: bool
    ladder: tuple[str, ...]

    @property
    def active(self) -> bool:
        return self.level > 0


@dataclass(eq=False)
class EscalationPath:
    """One independent escalation track.

    ``presses`` counts triggers since the path was last idle and may run past
    the ladder length; ``current_level`` is always clamped to ``[0, L]``.
    Only the repeat counter mutates these fields, under ``lock``.
    """

    name: str
    ladder: EscalationLadder
    presses: int = 0
    timer_handle: Optional[Hashable] = None
    generation: int = 0
    queued: int = 0
    dispatching: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def current_level(self) -> int:
        return self.ladder.level_for(self.presses)

    @property
    def active(self) -> bool:
        return self.presses > 0

    def snapshot(self) -> PathSnapshot:
        with self.lock:
            return PathSnapshot(
                name=self.name,
                level=self.current_level,
                presses=self.presses,
                timer_pending=self.timer_handle is not None,
                ladder=self.ladder.actions,
            )


__all__ = ["EscalationPath", "PathSnapshot"]
