"""Composite cleanup effect driven by the classified situation.

Sub-effects run in priority order; the first one that reports a change wins:
close overlay, dismiss completion, close floats, exit terminal, leave mode,
close special buffer, clear search highlight.
"""

from __future__ import annotations

from typing import Callable, Tuple

from escape_hatch.context import Situation

from .models import EffectContext, Ran

SubEffect = Callable[[EffectContext, Situation], bool]


def close_overlay(context: EffectContext, situation: Situation) -> bool:
    if situation is not Situation.OVERLAY_ACTIVE:
        return False
    if context.host.close_overlay():
        return True
    # Prompt buffers (Telescope and friends) close from insert mode with <Esc>.
    context.host.send_keys(context.command("leave_mode"))
    return True


def dismiss_completion(context: EffectContext, situation: Situation) -> bool:
    if situation is not Situation.COMPLETION_POPUP_ACTIVE:
        return False
    context.host.send_keys(context.command("dismiss_completion"))
    return True


def close_floating_windows(context: EffectContext, situation: Situation) -> bool:
    del situation
    windows = [
        window
        for window in context.host.floating_windows()
        if window.floating and not context.is_preserved(window.buffer)
    ]
    for window in windows:
        context.host.close_window(window.id)
    return bool(windows)


def exit_terminal(context: EffectContext, situation: Situation) -> bool:
    if situation is not Situation.TERMINAL_MODE:
        return False
    context.host.send_keys(context.command("exit_terminal"))
    return True


def leave_mode(context: EffectContext, situation: Situation) -> bool:
    if not situation.leaves_mode:
        return False
    context.host.send_keys(context.command("leave_mode"))
    return True


def close_special_buffer(context: EffectContext, situation: Situation) -> bool:
    if situation is not Situation.SPECIAL_BUFFER:
        return False
    if context.is_preserved(context.host.current_buffer()):
        return False
    context.host.execute(context.command("close_buffer"))
    return True


def clear_search(context: EffectContext, situation: Situation) -> bool:
    if situation is not Situation.NORMAL_EDITABLE_BUFFER:
        return False
    if not context.host.search_highlight_active():
        return False
    context.host.execute(context.command("clear_search"))
    return True


SUB_EFFECTS: Tuple[SubEffect, ...] = (
    close_overlay,
    dismiss_completion,
    close_floating_windows,
    exit_terminal,
    leave_mode,
    close_special_buffer,
    clear_search,
)


def smart_close(context: EffectContext) -> Ran:
    situation = context.classifier.classify()
    for sub_effect in SUB_EFFECTS:
        if sub_effect(context, situation):
            return Ran(changed=True, detail=f"{situation.value}:{sub_effect.__name__}")
    return Ran(changed=False, detail=situation.value)


__all__ = ["SUB_EFFECTS", "SubEffect", "smart_close"]
