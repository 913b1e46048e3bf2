"""Human-readable configuration summary."""

from __future__ import annotations

from typing import List

from .models import EscapeHatchConfig, PathSpec


def _label(config: EscapeHatchConfig, action: str) -> str:
    description = config.descriptions.get(action)
    return f"{action} ({description})" if description else action


def describe_path(config: EscapeHatchConfig, spec: PathSpec) -> List[str]:
    keys = ", ".join(spec.keys) or "unbound"
    lines = [f"  {spec.name} [{keys}] {spec.description}".rstrip()]
    for level, action in enumerate(spec.ladder, start=1):
        lines.append(f"    Level {level}: [x] {_label(config, action)}")
    if spec.nuclear_action:
        marker = "x" if config.nuclear else " "
        level = len(spec.ladder) + 1
        lines.append(f"    Level {level}: [{marker}] {_label(config, spec.nuclear_action)}")
    return lines


def describe(config: EscapeHatchConfig) -> List[str]:
    lines = [
        "escape-hatch configuration:",
        f"  debounce: {config.debounce_ms}ms, overflow: {config.on_overflow}, "
        f"nuclear: {'enabled' if config.nuclear else 'disabled'}",
    ]
    for spec in config.paths:
        lines.extend(describe_path(config, spec))
    return lines


__all__ = ["describe", "describe_path"]
