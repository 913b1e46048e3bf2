"""Per-path ordered action lists and the overflow policy beyond their end."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Tuple, cast

from escape_hatch.actions.models import ActionName, normalize_action_name
from escape_hatch.errors import ConfigurationError

OverflowPolicy = Literal["noop", "repeat_last", "clamp"]
OVERFLOW_POLICIES: Tuple[str, ...] = ("noop", "repeat_last", "clamp")


def normalize_overflow(value: object) -> OverflowPolicy:
    """Accept ``repeatLast`` / ``repeat-last`` spellings as ``repeat_last``."""

    if not isinstance(value, str):
        raise ConfigurationError(f"on_overflow must be a string, got {value!r}")
    key = value.strip().replace("-", "_")
    if key == "repeatLast":
        key = "repeat_last"
    key = key.lower()
    if key not in OVERFLOW_POLICIES:
        raise ConfigurationError(
            f"Unknown on_overflow '{value}' (expected one of {OVERFLOW_POLICIES})"
        )
    return cast(OverflowPolicy, key)


def validate_ladder(entries: Iterable[object], *, path: str = "") -> Tuple[ActionName, ...]:
    label = f" for path '{path}'" if path else ""
    if isinstance(entries, (str, bytes)):
        raise ConfigurationError(f"Ladder{label} must be a sequence of action names")
    actions: list[ActionName] = []
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, str):
            raise ConfigurationError(
                f"Ladder{label} level {position} must be an action name, got {entry!r}"
            )
        if not entry.strip():
            raise ConfigurationError(f"Ladder{label} level {position} is blank")
        actions.append(normalize_action_name(entry))
    if not actions:
        raise ConfigurationError(f"Ladder{label} needs at least one action")
    return tuple(actions)


@dataclass(frozen=True, slots=True)
class EscalationLadder:
    """1-indexed action lookup; level 0 is idle and maps to nothing."""

    actions: Tuple[ActionName, ...]
    on_overflow: OverflowPolicy = "noop"

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", validate_ladder(self.actions))
        object.__setattr__(self, "on_overflow", normalize_overflow(self.on_overflow))

    @classmethod
    def of(cls, *actions: str, on_overflow: str = "noop") -> "EscalationLadder":
        return cls(tuple(actions), cast(OverflowPolicy, on_overflow))

    def __len__(self) -> int:
        return len(self.actions)

    @property
    def final(self) -> ActionName:
        return self.actions[-1]

    def action_at(self, level: int) -> Optional[ActionName]:
        if level < 1:
            return None
        if level <= len(self.actions):
            return self.actions[level - 1]
        if self.on_overflow == "repeat_last":
            return self.final
        return None

    def level_for(self, presses: int) -> int:
        return max(0, min(presses, len(self.actions)))

    def advance(self, presses: int) -> Tuple[int, Optional[ActionName]]:
        """Return the press count and action for the next press."""

        following = presses + 1
        action = self.action_at(following)
        if self.on_overflow == "clamp":
            following = min(following, len(self.actions))
        return following, action


__all__ = [
    "EscalationLadder",
    "OverflowPolicy",
    "OVERFLOW_POLICIES",
    "normalize_overflow",
    "validate_ladder",
]
