"""Textual adapter: routes Textual key events into ``EscapeHatch``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Mapping, Optional

from escape_hatch.dispatcher import EscapeHatch
from escape_hatch.escalation import TriggerOutcome
from escape_hatch.runtime.timers import TimerCallback


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


_SPECIAL_KEYS: Mapping[str, str] = {
    "esc": "escape",
    "cr": "enter",
    "enter": "enter",
    "tab": "tab",
    "bs": "backspace",
    "space": "space",
}

_NOTATION = re.compile(r"^<(?:(?P<mods>(?:[CcAaMmSs]-)+))?(?P<key>[^>]+)>$")


def textual_key_for(lhs: str) -> str:
    """Translate Vim key notation (``<C-Esc>``) to a Textual key (``ctrl+escape``)."""

    match = _NOTATION.match(lhs)
    if match is None:
        return lhs
    key = match.group("key")
    key = _SPECIAL_KEYS.get(key.lower(), key.lower() if len(key) > 1 else key)
    prefixes = {"c": "ctrl", "a": "alt", "m": "alt", "s": "shift"}
    mods = [prefixes[m.lower()] for m in (match.group("mods") or "").split("-") if m]
    return "+".join(mods + [key])


class TextualTimerFacility:
    """``TimerFacility`` on top of ``App.set_timer``.

    ``after_fire`` runs once each timer callback returns, letting the UI
    refresh after a path drops back to idle.
    """

    def __init__(self, app: Any, *, after_fire: Callable[[], None] = _noop) -> None:
        self.app = app
        self._after_fire = after_fire

    def start(self, duration_ms: int, callback: TimerCallback) -> Hashable:
        def fire() -> None:
            callback()
            self._after_fire()

        return self.app.set_timer(duration_ms / 1000.0, fire)

    def stop(self, handle: Hashable) -> None:
        stop = getattr(handle, "stop", None)
        if stop is not None:
            stop()


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the adapter uses to update Textual widgets."""

    update_status: Callable[[str], None] = _noop
    update_levels: Callable[[Dict[str, int]], None] = _noop
    log: Callable[[str], None] = _noop


class TextualEscalationAdapter:
    """Maps Textual key names to escalation paths."""

    def __init__(
        self,
        hatch: EscapeHatch,
        hooks: TextualUIHooks,
        *,
        key_paths: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.hatch = hatch
        self.hooks = hooks
        self.key_paths: Dict[str, str] = dict(key_paths or self._configured_keys())
        self.refresh()

    def _configured_keys(self) -> Dict[str, str]:
        keys: Dict[str, str] = {}
        for spec in self.hatch.config.paths:
            for lhs in spec.keys:
                keys.setdefault(textual_key_for(lhs), spec.name)
        return keys

    def handle_textual_key(self, key: str) -> Optional[TriggerOutcome]:
        path = self.key_paths.get(key)
        if path is None:
            return None
        outcome = self.hatch.on_trigger(path)
        if outcome is not None:
            self._log_outcome(key, outcome)
            self.hooks.update_status(self._status_for(outcome))
        self.refresh()
        return outcome

    def refresh(self) -> None:
        self.hooks.update_levels(
            {name: self.hatch.get_level(name) for name in self.hatch.path_names}
        )

    def _status_for(self, outcome: TriggerOutcome) -> str:
        if outcome.queued:
            return f"{outcome.path}: queued"
        action = outcome.action or "-"
        if outcome.result is not None and not getattr(outcome.result, "changed", True):
            action = f"{action} (nothing to do)"
        return f"{outcome.path} L{outcome.level}: {action}"

    def _log_outcome(self, key: str, outcome: TriggerOutcome) -> None:
        fields = {
            "key": key,
            "path": outcome.path,
            "level": outcome.level,
            "presses": outcome.presses,
            "action": outcome.action,
            "result": outcome.result,
        }
        line = " ".join(
            f"{name}={value!r}" for name, value in fields.items() if value is not None
        )
        self.hooks.log(f"trigger -> {line}")


__all__ = [
    "TextualEscalationAdapter",
    "TextualTimerFacility",
    "TextualUIHooks",
    "textual_key_for",
]
