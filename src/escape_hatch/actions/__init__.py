"""Action registry, built-in effects and the smart-close composite."""

from .builtin import BUILTIN_EFFECTS, register_builtins
from .models import (
    ActionName,
    ActionRef,
    BuiltinAction,
    Effect,
    EffectContext,
    EffectResult,
    Ran,
    normalize_action_name,
)
from .registry import ActionRegistry
from .smart_close import SUB_EFFECTS, smart_close

__all__ = [
    "ActionName",
    "ActionRef",
    "ActionRegistry",
    "BuiltinAction",
    "BUILTIN_EFFECTS",
    "Effect",
    "EffectContext",
    "EffectResult",
    "Ran",
    "SUB_EFFECTS",
    "normalize_action_name",
    "register_builtins",
    "smart_close",
]
