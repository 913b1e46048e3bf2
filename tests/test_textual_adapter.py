from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

import pytest

from escape_hatch import EscapeHatch
from escape_hatch.adapters.textual import (
    TextualEscalationAdapter,
    TextualTimerFacility,
    TextualUIHooks,
    textual_key_for,
)
from escape_hatch.host import BufferInfo, InMemoryHost


@dataclass
class FakeTimer:
    delay: float
    callback: Callable[[], None]
    stopped: bool = False

    def stop(self) -> None:
        self.stopped = True


@dataclass
class FakeApp:
    timers: List[FakeTimer] = field(default_factory=list)

    def set_timer(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire_live(self) -> None:
        for timer in [t for t in self.timers if not t.stopped]:
            timer.stopped = True
            timer.callback()


@dataclass
class Recorder:
    statuses: List[str] = field(default_factory=list)
    levels: List[Dict[str, int]] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)

    def hooks(self) -> TextualUIHooks:
        return TextualUIHooks(
            update_status=self.statuses.append,
            update_levels=self.levels.append,
            log=self.lines.append,
        )


def make_adapter(**options) -> Tuple[FakeApp, Recorder, TextualEscalationAdapter]:
    app = FakeApp()
    recorder = Recorder()
    holder: List[TextualEscalationAdapter] = []
    timers = TextualTimerFacility(app, after_fire=lambda: holder[0].refresh())
    hatch = EscapeHatch(InMemoryHost(buffer=BufferInfo(name="notes.txt")), timers=timers)
    hatch.setup(options)
    adapter = TextualEscalationAdapter(hatch, recorder.hooks())
    holder.append(adapter)
    return app, recorder, adapter


@pytest.mark.parametrize(
    ("lhs", "key"),
    [
        ("<Esc>", "escape"),
        ("<C-Esc>", "ctrl+escape"),
        ("<C-q>", "ctrl+q"),
        ("<A-CR>", "alt+enter"),
        ("q", "q"),
    ],
)
def test_textual_key_for(lhs: str, key: str) -> None:
    assert textual_key_for(lhs) == key


def test_adapter_maps_configured_keys_to_paths() -> None:
    _, recorder, adapter = make_adapter()

    assert adapter.key_paths == {"escape": "primary", "ctrl+escape": "secondary"}
    assert recorder.levels == [{"primary": 0, "secondary": 0}]


def test_adapter_reports_each_level() -> None:
    _, recorder, adapter = make_adapter()

    adapter.handle_textual_key("escape")
    adapter.handle_textual_key("escape")

    assert recorder.statuses == [
        "primary L1: smart_close (nothing to do)",
        "primary L2: save",
    ]
    assert recorder.levels[-1] == {"primary": 2, "secondary": 0}
    assert recorder.lines[0].startswith(
        "trigger -> key='escape' path='primary' level=1 presses=1 action='smart_close'"
    )


def test_unmapped_key_is_ignored() -> None:
    _, recorder, adapter = make_adapter()

    assert adapter.handle_textual_key("x") is None
    assert recorder.statuses == []


def test_textual_timer_resets_level_and_refreshes() -> None:
    app, recorder, adapter = make_adapter(debounce_ms=250)

    adapter.handle_textual_key("escape")
    adapter.handle_textual_key("escape")

    assert [timer.delay for timer in app.timers] == [0.25, 0.25]
    assert app.timers[0].stopped is True

    app.fire_live()

    assert adapter.hatch.get_level("primary") == 0
    assert recorder.levels[-1] == {"primary": 0, "secondary": 0}
