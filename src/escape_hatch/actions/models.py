"""Action names, effect results and the context effects run with."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping, Optional, Sequence, Union

from escape_hatch.errors import EffectExecutionError
from escape_hatch.host import BufferInfo, EditorHost

if TYPE_CHECKING:
    from escape_hatch.context import ContextClassifier

ActionName = str


def normalize_action_name(name: str) -> ActionName:
    """``"Quit-All "`` and ``"quit_all"`` name the same action."""

    return name.strip().lower().replace("-", "_")


class BuiltinAction(str, Enum):
    """Closed set of actions shipped with escape_hatch."""

    SMART_CLOSE = "smart_close"
    SAVE = "save"
    SAVE_QUIT = "save_quit"
    QUIT = "quit"
    FORCE_QUIT = "force_quit"
    QUIT_ALL = "quit_all"
    FORCE_QUIT_ALL = "force_quit_all"
    DELETE_BUFFER = "delete_buffer"
    EXIT_OVERLAY = "exit_overlay"
    EXIT_TERMINAL = "exit_terminal"
    NOOP = "noop"

    @classmethod
    def lookup(cls, name: str) -> Optional["BuiltinAction"]:
        try:
            return cls(normalize_action_name(name))
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class Ran:
    """Effect completed; ``changed`` tells composites whether to stop."""

    changed: bool = True
    detail: str = ""


EffectResult = Union[Ran, EffectExecutionError]


@dataclass(frozen=True)
class EffectContext:
    """Services handed to every effect invocation."""

    host: EditorHost
    classifier: "ContextClassifier"
    commands: Mapping[str, str] = field(default_factory=dict)
    preserved_patterns: Sequence[re.Pattern[str]] = ()
    path: str = ""
    level: int = 0

    def command(self, key: str) -> str:
        try:
            return self.commands[key]
        except KeyError as exc:
            raise KeyError(f"No command configured for '{key}'") from exc

    def is_preserved(self, buffer: BufferInfo) -> bool:
        return any(pattern.search(buffer.name) for pattern in self.preserved_patterns)


Effect = Callable[[EffectContext], Optional[Ran]]


@dataclass(frozen=True, slots=True)
class ActionRef:
    """A named effect plus the metadata used in descriptions and telemetry."""

    name: ActionName
    effect: Effect
    description: str = ""
    builtin: bool = False
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("ActionRef name cannot be empty")
        if not callable(self.effect):
            raise TypeError("effect must be callable")
        object.__setattr__(self, "name", normalize_action_name(self.name))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def __call__(self, context: EffectContext) -> Optional[Ran]:
        return self.effect(context)


__all__ = [
    "ActionName",
    "ActionRef",
    "BuiltinAction",
    "Effect",
    "EffectContext",
    "EffectResult",
    "Ran",
    "normalize_action_name",
]
