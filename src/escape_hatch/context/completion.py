"""Completion popup predicates selected by ``completion_engine``."""

from __future__ import annotations

from typing import Callable, Union

from escape_hatch.errors import ConfigurationError
from escape_hatch.host import EditorHost
from escape_hatch.runtime import telemetry

CompletionPredicate = Callable[[EditorHost], bool]
CompletionEngine = Union[str, CompletionPredicate]

KNOWN_ENGINES: tuple[str, ...] = ("nvim-cmp", "blink.cmp", "coq", "native")
AUTO = "auto"


def _engine_probe(engine: str) -> CompletionPredicate:
    def probe(host: EditorHost) -> bool:
        return bool(host.completion_visible(engine))

    probe.__name__ = f"completion_visible[{engine}]"
    return probe


def _auto_probe(host: EditorHost) -> bool:
    # Engines that are not loaded raise; skip them and keep probing.
    for engine in KNOWN_ENGINES:
        try:
            if host.completion_visible(engine):
                return True
        except Exception as exc:
            telemetry.record_event(
                "classifier.probe_failed",
                level="debug",
                data={"probe": f"completion_visible[{engine}]", "error": str(exc)},
                logger_name="escape_hatch.context",
            )
    return False


def build_completion_predicate(engine: CompletionEngine) -> CompletionPredicate:
    """Turn a ``completion_engine`` option into a predicate over the host."""

    if callable(engine):
        return engine
    if not isinstance(engine, str):
        raise ConfigurationError(
            f"completion_engine must be 'auto', an engine name or a callable, got {engine!r}"
        )
    name = engine.strip().lower()
    if name == AUTO:
        return _auto_probe
    if name in KNOWN_ENGINES:
        return _engine_probe(name)
    raise ConfigurationError(
        f"Unknown completion engine '{engine}' (expected one of {(AUTO,) + KNOWN_ENGINES})"
    )


__all__ = [
    "AUTO",
    "KNOWN_ENGINES",
    "CompletionEngine",
    "CompletionPredicate",
    "build_completion_predicate",
]
