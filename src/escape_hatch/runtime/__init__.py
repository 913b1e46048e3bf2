"""Telemetry and timer services shared by the engine."""

from . import telemetry
from .timers import AsyncioTimerFacility, ManualTimerFacility, TimerCallback, TimerFacility

__all__ = [
    "telemetry",
    "TimerCallback",
    "TimerFacility",
    "AsyncioTimerFacility",
    "ManualTimerFacility",
]
