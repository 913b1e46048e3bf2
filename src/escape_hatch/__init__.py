"""Escalating escape: repeated trigger presses map to ever stronger actions."""

from .dispatcher import EscapeHatch
from .errors import (
    ClassifierProbeError,
    ConfigurationError,
    EffectExecutionError,
    EscapeHatchError,
)

__all__ = [
    "EscapeHatch",
    "EscapeHatchError",
    "ConfigurationError",
    "EffectExecutionError",
    "ClassifierProbeError",
    "actions",
    "adapters",
    "config",
    "context",
    "escalation",
    "host",
    "runtime",
]

__version__ = "0.1.0"
