"""Merge defaults, environment and user overrides into ``EscapeHatchConfig``."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping, Optional

from escape_hatch.context import build_completion_predicate
from escape_hatch.errors import ConfigurationError
from escape_hatch.escalation.ladder import normalize_overflow
from escape_hatch.runtime.telemetry import ENV_PREFIX

from .defaults import default_options
from .models import EscapeHatchConfig, PathSpec

OPTION_ALIASES: Mapping[str, str] = {
    "debounceMs": "debounce_ms",
    "preservedBufferPatterns": "preserved_buffer_patterns",
    "completionEngine": "completion_engine",
    "customActions": "custom_actions",
    "onOverflow": "on_overflow",
}

_PATH_FIELDS = frozenset(
    {"name", "ladder", "keys", "modes", "nuclear_action", "description", "enabled"}
)


def _parse_int(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Expected an integer, got {raw!r}") from exc


def _parse_flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


ENV_OPTIONS: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "DEBOUNCE_MS": ("debounce_ms", _parse_int),
    "ON_OVERFLOW": ("on_overflow", str),
    "NUCLEAR": ("nuclear", _parse_flag),
}


def options_from_env(env: Mapping[str, str]) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    for suffix, (option, parse) in ENV_OPTIONS.items():
        raw = env.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw.strip():
            options[option] = parse(raw)
    return options


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Nested mappings merge key by key; everything else is replaced."""

    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_paths(
    base: Iterable[Mapping[str, Any]], overrides: Iterable[Mapping[str, Any]]
) -> List[Dict[str, Any]]:
    """Overrides update same-named paths, append new ones, or drop a path
    when they set ``enabled: False``."""

    if isinstance(overrides, Mapping) or isinstance(overrides, (str, bytes)):
        raise ConfigurationError("paths must be a list of path tables")
    merged: List[Dict[str, Any]] = [dict(spec) for spec in base]
    for override in overrides:
        if not isinstance(override, Mapping):
            raise ConfigurationError(f"Path entry must be a table, got {override!r}")
        unknown = set(override) - _PATH_FIELDS
        if unknown:
            raise ConfigurationError(f"Unknown path option(s): {sorted(unknown)}")
        name = override.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("Every path needs a non-empty name")
        existing = next((spec for spec in merged if spec["name"] == name), None)
        if existing is None:
            if "ladder" not in override:
                raise ConfigurationError(f"New path '{name}' needs a ladder")
            merged.append(dict(override))
        else:
            existing.update(override)
    return [spec for spec in merged if spec.pop("enabled", True)]


def _normalize_keys(options: Mapping[str, Any]) -> Dict[str, Any]:
    known = set(default_options())
    normalized: Dict[str, Any] = {}
    for key, value in options.items():
        target = OPTION_ALIASES.get(key, key)
        if target not in known:
            raise ConfigurationError(f"Unknown option '{key}'")
        normalized[target] = value
    return normalized


def _string_map(name: str, value: Any) -> Dict[str, str]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{name} must be a table of strings")
    for key, item in value.items():
        if not isinstance(item, str):
            raise ConfigurationError(f"{name}.{key} must be a string, got {item!r}")
    return dict(value)


def _path_spec(options: Mapping[str, Any]) -> PathSpec:
    fields = {key: value for key, value in options.items() if key != "enabled"}
    for key in ("ladder", "keys", "modes"):
        if key in fields and isinstance(fields[key], (str, bytes)):
            raise ConfigurationError(
                f"Path '{fields.get('name')}' option '{key}' must be a list"
            )
    fields["ladder"] = tuple(fields.get("ladder") or ())
    for key in ("keys", "modes"):
        if key in fields:
            fields[key] = tuple(fields[key])
    return PathSpec(**fields)


def build_config(options: Mapping[str, Any]) -> EscapeHatchConfig:
    """Validate a fully merged option table."""

    debounce = options["debounce_ms"]
    if isinstance(debounce, bool) or not isinstance(debounce, int):
        raise ConfigurationError(f"debounce_ms must be an integer, got {debounce!r}")

    patterns = options["preserved_buffer_patterns"]
    if isinstance(patterns, (str, bytes)) or not all(isinstance(p, str) for p in patterns):
        raise ConfigurationError("preserved_buffer_patterns must be a list of strings")

    custom = options["custom_actions"]
    if not isinstance(custom, Mapping):
        raise ConfigurationError("custom_actions must be a table of callables")
    for name, effect in custom.items():
        if not callable(effect):
            raise ConfigurationError(f"custom action '{name}' is not callable")

    engine = options["completion_engine"]
    build_completion_predicate(engine)

    config = EscapeHatchConfig(
        paths=tuple(_path_spec(spec) for spec in options["paths"]),
        debounce_ms=debounce,
        preserved_buffer_patterns=tuple(patterns),
        completion_engine=engine,
        custom_actions=dict(custom),
        on_overflow=normalize_overflow(options["on_overflow"]),
        commands=_string_map("commands", options["commands"]),
        descriptions=_string_map("descriptions", options["descriptions"]),
        nuclear=bool(options["nuclear"]),
    )
    config.compiled_patterns()
    return config


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> EscapeHatchConfig:
    """Defaults, then ``ESCAPE_HATCH_*`` environment values, then ``overrides``."""

    options: MutableMapping[str, Any] = default_options()
    options = deep_merge(options, options_from_env(os.environ if env is None else env))

    user = _normalize_keys(overrides or {})
    path_overrides = user.pop("paths", None)
    options = deep_merge(options, user)
    if path_overrides is not None:
        options["paths"] = merge_paths(options["paths"], path_overrides)
    return build_config(options)


__all__ = [
    "ENV_OPTIONS",
    "OPTION_ALIASES",
    "build_config",
    "deep_merge",
    "load_config",
    "merge_paths",
    "options_from_env",
]
