"""Frozen configuration objects produced by the loader."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from escape_hatch.actions.models import ActionName, Effect
from escape_hatch.context import CompletionEngine
from escape_hatch.errors import ConfigurationError
from escape_hatch.escalation.ladder import EscalationLadder, OverflowPolicy, validate_ladder


@dataclass(frozen=True, slots=True)
class PathSpec:
    """Declarative description of one escalation path and its trigger keys."""

    name: str
    ladder: Tuple[ActionName, ...]
    keys: Tuple[str, ...] = ()
    modes: Tuple[str, ...] = ("n", "i", "v", "t")
    nuclear_action: Optional[ActionName] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("Path name cannot be empty")
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "ladder", validate_ladder(self.ladder, path=self.name))
        object.__setattr__(self, "keys", tuple(self.keys))
        object.__setattr__(self, "modes", tuple(self.modes))


def _frozen_map(value: Mapping) -> Mapping:
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class EscapeHatchConfig:
    """Process-wide, read-only configuration.

    Only ``toggle_nuclear`` derives a new instance after setup.
    """

    paths: Tuple[PathSpec, ...]
    debounce_ms: int = 400
    preserved_buffer_patterns: Tuple[str, ...] = ()
    completion_engine: CompletionEngine = "auto"
    custom_actions: Mapping[str, Effect] = field(default_factory=dict)
    on_overflow: OverflowPolicy = "noop"
    commands: Mapping[str, str] = field(default_factory=dict)
    descriptions: Mapping[str, str] = field(default_factory=dict)
    nuclear: bool = False

    def __post_init__(self) -> None:
        names = [spec.name for spec in self.paths]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate path names: {duplicates}")
        if not self.paths:
            raise ConfigurationError("At least one escalation path is required")
        for attr in ("custom_actions", "commands", "descriptions"):
            object.__setattr__(self, attr, _frozen_map(getattr(self, attr)))

    @property
    def path_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.paths)

    def path(self, name: str) -> PathSpec:
        for spec in self.paths:
            if spec.name == name:
                return spec
        raise ConfigurationError(f"Unknown escalation path '{name}'")

    def effective_ladder(self, spec: PathSpec) -> EscalationLadder:
        actions = spec.ladder
        if self.nuclear and spec.nuclear_action:
            actions = actions + (spec.nuclear_action,)
        return EscalationLadder(actions, self.on_overflow)

    def compiled_patterns(self) -> Tuple[re.Pattern[str], ...]:
        compiled = []
        for pattern in self.preserved_buffer_patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                raise ConfigurationError(
                    f"Invalid preserved buffer pattern {pattern!r}: {exc}"
                ) from exc
        return tuple(compiled)

    def with_nuclear(self, enabled: bool) -> "EscapeHatchConfig":
        return replace(self, nuclear=enabled)


__all__ = ["PathSpec", "EscapeHatchConfig"]
