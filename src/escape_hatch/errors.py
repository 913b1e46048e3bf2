"""Exception types shared across the escalation engine."""

from __future__ import annotations

from typing import Optional


class EscapeHatchError(Exception):
    """Base class for every error raised by escape_hatch."""


class ConfigurationError(EscapeHatchError, ValueError):
    """Raised during setup when paths, ladders or options are malformed."""


class EffectExecutionError(EscapeHatchError):
    """Failure of a single action effect.

    Returned as a value from ``ActionRegistry.run`` rather than raised, so the
    escalation state machine keeps advancing regardless of the outcome.
    """

    def __init__(self, action: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Action '{action}' failed{detail}")
        self.action = action
        self.cause = cause


class ClassifierProbeError(EscapeHatchError):
    """A pluggable context probe (e.g. completion popup detection) failed."""

    def __init__(self, probe: str, cause: BaseException) -> None:
        super().__init__(f"Probe '{probe}' failed: {cause}")
        self.probe = probe
        self.cause = cause


__all__ = [
    "EscapeHatchError",
    "ConfigurationError",
    "EffectExecutionError",
    "ClassifierProbeError",
]
