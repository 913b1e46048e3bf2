"""Repeat counter and debounce timer: the per-path state machine.

Each path is either idle (no presses, no timer) or active (one live timer).
A trigger cancels the live timer, advances the press count, dispatches the
ladder action synchronously and only then arms a fresh timer. The timer
callback carries the path name and a generation token and looks the path up
again when it fires, so a cancelled or superseded timer can never reset a
newer activation.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional

from escape_hatch.actions.models import ActionName, EffectResult
from escape_hatch.errors import EffectExecutionError
from escape_hatch.runtime import telemetry
from escape_hatch.runtime.timers import TimerFacility

from .path import EscalationPath

DispatchFn = Callable[[EscalationPath, int, ActionName], EffectResult]
PathLookup = Callable[[str], Optional[EscalationPath]]
IdleHook = Callable[[EscalationPath, str], None]

# Tokens are unique across counters so a timer armed before a reconfiguration
# never matches a path built after it.
_GENERATIONS = itertools.count(1)


@dataclass(frozen=True, slots=True)
class TriggerOutcome:
    """What a single trigger did to its path."""

    path: str
    level: int
    presses: int
    action: Optional[ActionName] = None
    result: Optional[EffectResult] = None
    queued: bool = False

    @property
    def dispatched(self) -> bool:
        return self.action is not None


def _ignore_idle(path: EscalationPath, reason: str) -> None:
    del path, reason


class RepeatCounter:
    """Drives ``EscalationPath`` state for every path sharing one clock."""

    def __init__(
        self,
        timers: TimerFacility,
        *,
        debounce_ms: int,
        dispatch: DispatchFn,
        lookup: PathLookup,
        on_idle: IdleHook = _ignore_idle,
        logger_name: str | None = "escape_hatch.escalation",
    ) -> None:
        self.timers = timers
        self.debounce_ms = debounce_ms
        self._dispatch = dispatch
        self._lookup = lookup
        self._on_idle = on_idle
        self._logger_name = logger_name

    def trigger(self, path: EscalationPath) -> TriggerOutcome:
        """Handle one trigger press on ``path``.

        A trigger that arrives while the same path is mid-dispatch (an effect
        re-entering, or another thread) is queued and drained by the outer
        call, so increment, dispatch and rearm stay one unit per press.
        """

        with path.lock:
            if path.dispatching:
                path.queued += 1
                return TriggerOutcome(
                    path.name, path.current_level, path.presses, queued=True
                )
            path.dispatching = True

        try:
            first = self._step(path)
            while self._claim_queued(path):
                self._step(path)
        except BaseException:
            with path.lock:
                path.queued = 0
                path.dispatching = False
            raise
        return first

    def _claim_queued(self, path: EscalationPath) -> bool:
        # Cleared under the same lock as the empty check: a concurrent trigger
        # either lands in the queue or dispatches on its own.
        with path.lock:
            if path.queued == 0:
                path.dispatching = False
                return False
            path.queued -= 1
            return True

    def _step(self, path: EscalationPath) -> TriggerOutcome:
        with path.lock:
            self._cancel(path)
            path.presses, action = path.ladder.advance(path.presses)
            level = path.current_level
            presses = path.presses

        result = self._run(path, level, action) if action is not None else None

        with path.lock:
            if self.debounce_ms <= 0:
                self._go_idle(path, "solo")
            elif path.queued == 0 and path.presses > 0:
                # Queued presses cancel and rearm on their own step.
                self._arm(path)

        return TriggerOutcome(path.name, level, presses, action, result)

    def _run(self, path: EscalationPath, level: int, action: ActionName) -> EffectResult:
        try:
            return self._dispatch(path, level, action)
        except Exception as exc:
            telemetry.record_event(
                "trigger.dispatch_failed",
                level="error",
                data={"path": path.name, "level": level, "action": action, "error": str(exc)},
                logger_name=self._logger_name,
            )
            return EffectExecutionError(action, exc)

    def reset(self, path: EscalationPath) -> bool:
        """Force ``path`` idle; returns ``False`` when it already was."""

        with path.lock:
            if not path.active and path.timer_handle is None:
                return False
            self._go_idle(path, "reset")
            return True

    def _arm(self, path: EscalationPath) -> None:
        path.generation = next(_GENERATIONS)
        path.timer_handle = self.timers.start(
            self.debounce_ms, partial(self._on_timeout, path.name, path.generation)
        )

    def _cancel(self, path: EscalationPath) -> None:
        handle = path.timer_handle
        path.timer_handle = None
        path.generation = next(_GENERATIONS)
        if handle is not None:
            self.timers.stop(handle)

    def _go_idle(self, path: EscalationPath, reason: str) -> None:
        self._cancel(path)
        path.presses = 0
        self._on_idle(path, reason)

    def _on_timeout(self, name: str, generation: int) -> None:
        path = self._lookup(name)
        if path is None:
            self._ghost(name, generation, "unknown_path")
            return
        with path.lock:
            if path.generation != generation or path.timer_handle is None:
                self._ghost(name, generation, "stale")
                return
            path.timer_handle = None
            path.presses = 0
            self._on_idle(path, "timeout")

    def _ghost(self, name: str, generation: int, reason: str) -> None:
        telemetry.record_event(
            "path.ghost_fire",
            level="debug",
            data={"path": name, "generation": generation, "reason": reason},
            logger_name=self._logger_name,
        )


__all__ = ["RepeatCounter", "TriggerOutcome", "DispatchFn", "PathLookup", "IdleHook"]
