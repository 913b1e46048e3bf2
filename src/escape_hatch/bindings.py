"""Install trigger keymaps on the host that route into ``on_trigger``."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, List

from escape_hatch.host import EditorHost


@dataclass(frozen=True, slots=True)
class TriggerBinding:
    """One trigger key, in a set of modes, feeding one path."""

    path: str
    lhs: str
    modes: tuple[str, ...]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.lhs:
            raise ValueError("binding lhs cannot be empty")
        if not self.modes:
            raise ValueError(f"binding '{self.lhs}' needs at least one mode")


class TriggerBinder:
    """Tracks what it installed so a re-setup can remove it again."""

    def __init__(self, host: EditorHost) -> None:
        self.host = host
        self._installed: List[TriggerBinding] = []

    @property
    def installed(self) -> tuple[TriggerBinding, ...]:
        return tuple(self._installed)

    def bind(
        self,
        bindings: Iterable[TriggerBinding],
        on_trigger: Callable[[str], object],
    ) -> None:
        for binding in bindings:
            self.host.set_keymap(
                binding.modes,
                binding.lhs,
                partial(on_trigger, binding.path),
                binding.description,
            )
            self._installed.append(binding)

    def unbind_all(self) -> None:
        while self._installed:
            binding = self._installed.pop()
            self.host.del_keymap(binding.modes, binding.lhs)


__all__ = ["TriggerBinding", "TriggerBinder"]
