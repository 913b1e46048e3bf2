"""Action registry: name -> effect, with the never-raise run boundary."""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from escape_hatch.errors import ConfigurationError, EffectExecutionError
from escape_hatch.runtime.telemetry import record_event, span

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


class ActionRegistry:
    """Built-in actions plus an open map of user effects.

    Registration is only allowed until ``freeze`` is called; the dispatcher
    freezes the registry at the end of setup.
    """

    def __init__(self, *, logger_name: str | None = "escape_hatch.actions") -> None:
        self._builtins: Dict[BuiltinAction, ActionRef] = {}
        self._custom: Dict[ActionName, ActionRef] = {}
        self._logger_name = logger_name
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register_builtin(self, action: BuiltinAction, ref: ActionRef) -> ActionRef:
        self._ensure_open(ref.name)
        self._builtins[action] = ref
        return ref

    def register(
        self,
        name: ActionName,
        effect: Effect | ActionRef,
        *,
        description: str = "",
        replace: bool = False,
    ) -> ActionRef:
        key = normalize_action_name(name)
        with span(
            "actions::register",
            logger_name=self._logger_name,
            component="actions",
            metadata={"action": key},
        ):
            self._ensure_open(key)
            if not replace and (key in self._custom or BuiltinAction.lookup(key)):
                raise ConfigurationError(f"Action '{key}' already registered")
            if isinstance(effect, ActionRef):
                ref = ActionRef(
                    name=key,
                    effect=effect.effect,
                    description=description or effect.description,
                    metadata=effect.metadata,
                )
            else:
                ref = ActionRef(name=key, effect=effect, description=description)
            self._custom[key] = ref
            return ref

    def resolve(self, name: ActionName) -> Optional[ActionRef]:
        key = normalize_action_name(name)
        custom = self._custom.get(key)
        if custom is not None:
            return custom
        builtin = BuiltinAction.lookup(key)
        if builtin is None:
            return None
        return self._builtins.get(builtin)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __iter__(self) -> Iterator[ActionRef]:
        yield from self._builtins.values()
        yield from self._custom.values()

    def run(self, name: ActionName, context: EffectContext) -> EffectResult:
        """Execute ``name``; unknown actions are a no-op, failures are values."""

        ref = self.resolve(name)
        if ref is None:
            record_event(
                "action.unknown",
                level="warning",
                data={"action": name, "path": context.path, "level": context.level},
                logger_name=self._logger_name,
            )
            return Ran(changed=False, detail="unknown")

        with span(
            "actions::run",
            logger_name=self._logger_name,
            component="actions",
            metadata={"action": ref.name, "path": context.path, "level": context.level},
        ) as handle:
            try:
                outcome = ref(context)
            except Exception as exc:
                error = EffectExecutionError(ref.name, exc)
                handle.add_metadata("error", str(exc))
                record_event(
                    "action.failed",
                    level="warning",
                    data={"action": ref.name, "path": context.path, "error": str(exc)},
                    logger_name=self._logger_name,
                )
                return error
            if isinstance(outcome, Ran):
                handle.add_metadata("changed", outcome.changed)
                return outcome
            return Ran()

    def _ensure_open(self, name: str) -> None:
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register '{name}': actions are registered during setup only"
            )


__all__ = ["ActionRegistry"]
