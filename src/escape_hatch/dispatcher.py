"""Entry point wiring configuration, paths, counter and actions together."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from escape_hatch.actions import ActionRegistry, EffectContext, EffectResult, register_builtins
from escape_hatch.bindings import TriggerBinder, TriggerBinding
from escape_hatch.config import EscapeHatchConfig, describe, load_config
from escape_hatch.context import ContextClassifier, build_completion_predicate
from escape_hatch.errors import ConfigurationError, EffectExecutionError
from escape_hatch.escalation import EscalationPath, PathSnapshot, RepeatCounter, TriggerOutcome
from escape_hatch.host import EditorHost
from escape_hatch.runtime import telemetry
from escape_hatch.runtime.timers import AsyncioTimerFacility, TimerFacility

ConfigSource = Union[EscapeHatchConfig, Mapping[str, Any], None]


class EscapeHatch:
    """Owns every escalation path for one host.

    ``setup`` may be called repeatedly; each call validates the new
    configuration fully before tearing down the previous one, so a rejected
    configuration leaves the running state untouched.
    """

    def __init__(
        self,
        host: EditorHost,
        *,
        timers: Optional[TimerFacility] = None,
        logger_name: str = "escape_hatch.dispatch",
    ) -> None:
        self.host = host
        self.timers: TimerFacility = timers or AsyncioTimerFacility()
        self._logger_name = logger_name
        self._binder = TriggerBinder(host)
        self._extra_bindings: tuple[TriggerBinding, ...] = ()
        self._paths: Dict[str, EscalationPath] = {}
        self._config: Optional[EscapeHatchConfig] = None
        self._registry = ActionRegistry()
        self._classifier = ContextClassifier(host)
        self._patterns: tuple = ()
        self._counter = self._build_counter(0)

    # -- configuration ----------------------------------------------------
    @property
    def config(self) -> EscapeHatchConfig:
        if self._config is None:
            raise ConfigurationError("EscapeHatch.setup() has not been called")
        return self._config

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    @property
    def classifier(self) -> ContextClassifier:
        return self._classifier

    @property
    def path_names(self) -> tuple[str, ...]:
        return tuple(self._paths)

    def setup(
        self,
        config: ConfigSource = None,
        *,
        extra_bindings: Iterable[TriggerBinding] = (),
        **overrides: Any,
    ) -> EscapeHatchConfig:
        """Install ``config`` (or defaults merged with ``overrides``).

        ``extra_bindings`` are kept for later re-binds such as ``toggle_nuclear``.
        """

        with telemetry.span(
            "dispatch::setup", logger_name=self._logger_name, component="dispatch"
        ) as handle:
            extra = tuple(extra_bindings)
            resolved = self._resolve_config(config, overrides)
            paths = {
                spec.name: EscalationPath(spec.name, resolved.effective_ladder(spec))
                for spec in resolved.paths
            }
            classifier = ContextClassifier(
                self.host,
                completion_predicate=build_completion_predicate(resolved.completion_engine),
            )
            patterns = resolved.compiled_patterns()
            registry = self._build_registry(resolved)
            bindings = self._bindings_for(resolved) + list(extra)
            for binding in bindings:
                if binding.path not in paths:
                    raise ConfigurationError(
                        f"Binding '{binding.lhs}' targets unknown path '{binding.path}'"
                    )
            self._warn_unknown_actions(paths.values(), registry)

            self.teardown()
            self._config = resolved
            self._paths = paths
            self._classifier = classifier
            self._patterns = patterns
            self._registry = registry
            self._counter = self._build_counter(resolved.debounce_ms)
            self._extra_bindings = extra
            self._binder.bind(bindings, self.on_trigger)

            handle.add_metadata("paths", ",".join(paths))
            telemetry.record_event(
                "setup.complete",
                data={
                    "paths": list(paths),
                    "debounce_ms": resolved.debounce_ms,
                    "nuclear": resolved.nuclear,
                },
                logger_name=self._logger_name,
            )
            return resolved

    def teardown(self) -> None:
        """Cancel live timers and remove installed trigger keymaps."""

        for path in self._paths.values():
            self._counter.reset(path)
        self._binder.unbind_all()

    def toggle_nuclear(self) -> bool:
        enabled = not self.config.nuclear
        self.setup(
            self.config.with_nuclear(enabled), extra_bindings=self._extra_bindings
        )
        telemetry.record_event(
            "nuclear.toggle",
            data={"enabled": enabled},
            logger_name=self._logger_name,
        )
        return enabled

    def describe(self) -> List[str]:
        return describe(self.config)

    # -- dispatch ---------------------------------------------------------
    def on_trigger(self, path_name: str) -> Optional[TriggerOutcome]:
        """Handle one raw trigger press; never raises into the host loop."""

        path = self._paths.get(path_name)
        if path is None:
            telemetry.record_event(
                "trigger.unknown_path",
                level="error",
                data={"path": path_name, "known": list(self._paths)},
                logger_name=self._logger_name,
            )
            return None
        with telemetry.span(
            "dispatch::trigger",
            logger_name=self._logger_name,
            component="dispatch",
            metadata={"path": path_name},
        ) as handle:
            outcome = self._counter.trigger(path)
            handle.add_metadata("level", outcome.level)
            return outcome

    def reset_path(self, path_name: str) -> bool:
        return self._counter.reset(self._require(path_name))

    def get_level(self, path_name: str) -> int:
        path = self._require(path_name)
        with path.lock:
            return path.current_level

    def snapshot(self, path_name: str) -> PathSnapshot:
        return self._require(path_name).snapshot()

    def _require(self, path_name: str) -> EscalationPath:
        try:
            return self._paths[path_name]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown escalation path '{path_name}'") from exc

    def _dispatch(self, path: EscalationPath, level: int, action: str) -> EffectResult:
        context = EffectContext(
            host=self.host,
            classifier=self._classifier,
            commands=self.config.commands,
            preserved_patterns=self._patterns,
            path=path.name,
            level=level,
        )
        result = self._registry.run(action, context)
        telemetry.record_event(
            "trigger.dispatch",
            data={
                "path": path.name,
                "level": level,
                "action": action,
                "ok": not isinstance(result, EffectExecutionError),
            },
            logger_name=self._logger_name,
        )
        return result

    def _lookup_path(self, path_name: str) -> Optional[EscalationPath]:
        return self._paths.get(path_name)

    def _on_idle(self, path: EscalationPath, reason: str) -> None:
        telemetry.record_event(
            "path.idle",
            level="debug",
            data={"path": path.name, "reason": reason},
            logger_name=self._logger_name,
        )

    # -- construction helpers --------------------------------------------
    def _build_counter(self, debounce_ms: int) -> RepeatCounter:
        return RepeatCounter(
            self.timers,
            debounce_ms=debounce_ms,
            dispatch=self._dispatch,
            lookup=self._lookup_path,
            on_idle=self._on_idle,
        )

    def _resolve_config(
        self, config: ConfigSource, overrides: Mapping[str, Any]
    ) -> EscapeHatchConfig:
        if isinstance(config, EscapeHatchConfig):
            if overrides:
                raise ConfigurationError(
                    "Pass either an EscapeHatchConfig or option overrides, not both"
                )
            return config
        options = dict(config or {})
        options.update(overrides)
        return load_config(options)

    @staticmethod
    def _build_registry(config: EscapeHatchConfig) -> ActionRegistry:
        registry = ActionRegistry()
        register_builtins(registry, config.descriptions)
        for name, effect in config.custom_actions.items():
            registry.register(
                name,
                effect,
                description=config.descriptions.get(name, ""),
                replace=True,
            )
        registry.freeze()
        return registry

    @staticmethod
    def _bindings_for(config: EscapeHatchConfig) -> List[TriggerBinding]:
        bindings: List[TriggerBinding] = []
        for spec in config.paths:
            ladder = config.effective_ladder(spec)
            description = spec.description or " > ".join(ladder.actions)
            for lhs in spec.keys:
                bindings.append(
                    TriggerBinding(spec.name, lhs, tuple(spec.modes), description)
                )
        return bindings

    def _warn_unknown_actions(
        self, paths: Iterable[EscalationPath], registry: ActionRegistry
    ) -> None:
        for path in paths:
            missing: Sequence[str] = [
                action for action in path.ladder.actions if action not in registry
            ]
            if missing:
                telemetry.record_event(
                    "setup.unknown_action",
                    level="warning",
                    data={"path": path.name, "actions": missing},
                    logger_name=self._logger_name,
                )


__all__ = ["EscapeHatch", "ConfigSource"]
