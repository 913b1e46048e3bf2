"""Escalation ladders, per-path state and the repeat counter."""

from .counter import RepeatCounter, TriggerOutcome
from .ladder import (
    OVERFLOW_POLICIES,
    EscalationLadder,
    OverflowPolicy,
    normalize_overflow,
    validate_ladder,
)
from .path import EscalationPath, PathSnapshot

__all__ = [
    "EscalationLadder",
    "EscalationPath",
    "OverflowPolicy",
    "OVERFLOW_POLICIES",
    "PathSnapshot",
    "RepeatCounter",
    "TriggerOutcome",
    "normalize_overflow",
    "validate_ladder",
]
