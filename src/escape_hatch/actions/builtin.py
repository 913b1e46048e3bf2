"""Built-in effects, each wrapping a single host call."""

from __future__ import annotations

from typing import Dict, Mapping

from .models import ActionRef, BuiltinAction, Effect, EffectContext, Ran
from .registry import ActionRegistry
from .smart_close import smart_close


def _run_command(key: str, *, skip_special: bool = False) -> Effect:
    def effect(context: EffectContext) -> Ran:
        if skip_special:
            buffer = context.host.current_buffer()
            if buffer.special or context.classifier.is_prompt(buffer):
                return Ran(changed=False, detail="special_buffer")
        command = context.command(key)
        context.host.execute(command)
        return Ran(detail=command)

    effect.__name__ = f"run_{key}"
    return effect


def delete_buffer(context: EffectContext) -> Ran:
    if context.is_preserved(context.host.current_buffer()):
        return Ran(changed=False, detail="preserved")
    context.host.execute(context.command("delete_buffer"))
    return Ran()


def exit_overlay(context: EffectContext) -> Ran:
    return Ran(changed=context.host.close_overlay())


def exit_terminal(context: EffectContext) -> Ran:
    if not context.host.mode().startswith("t"):
        return Ran(changed=False)
    context.host.send_keys(context.command("exit_terminal"))
    return Ran()


def noop(context: EffectContext) -> Ran:
    del context
    return Ran(changed=False)


BUILTIN_EFFECTS: Mapping[BuiltinAction, Effect] = {
    BuiltinAction.SMART_CLOSE: smart_close,
    BuiltinAction.SAVE: _run_command("save", skip_special=True),
    BuiltinAction.SAVE_QUIT: _run_command("save_quit", skip_special=True),
    BuiltinAction.QUIT: _run_command("quit"),
    BuiltinAction.FORCE_QUIT: _run_command("force_quit"),
    BuiltinAction.QUIT_ALL: _run_command("quit_all"),
    BuiltinAction.FORCE_QUIT_ALL: _run_command("force_quit_all"),
    BuiltinAction.DELETE_BUFFER: delete_buffer,
    BuiltinAction.EXIT_OVERLAY: exit_overlay,
    BuiltinAction.EXIT_TERMINAL: exit_terminal,
    BuiltinAction.NOOP: noop,
}


def register_builtins(
    registry: ActionRegistry, descriptions: Mapping[str, str] | None = None
) -> Dict[BuiltinAction, ActionRef]:
    """Seed ``registry`` with every ``BuiltinAction``."""

    labels = descriptions or {}
    registered: Dict[BuiltinAction, ActionRef] = {}
    for action, effect in BUILTIN_EFFECTS.items():
        ref = ActionRef(
            name=action.value,
            effect=effect,
            description=labels.get(action.value, action.value.replace("_", " ")),
            builtin=True,
        )
        registered[action] = registry.register_builtin(action, ref)
    return registered


__all__ = ["BUILTIN_EFFECTS", "register_builtins"]
