"""Configuration defaults, loading and summaries."""

from .defaults import (
    DEFAULT_COMMANDS,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_DESCRIPTIONS,
    DEFAULT_PATHS,
    NUCLEAR_ACTION,
    default_options,
)
from .loader import build_config, deep_merge, load_config, merge_paths, options_from_env
from .models import EscapeHatchConfig, PathSpec
from .summary import describe

__all__ = [
    "DEFAULT_COMMANDS",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_DESCRIPTIONS",
    "DEFAULT_PATHS",
    "NUCLEAR_ACTION",
    "EscapeHatchConfig",
    "PathSpec",
    "build_config",
    "deep_merge",
    "default_options",
    "describe",
    "load_config",
    "merge_paths",
    "options_from_env",
]
