"""Executable Textual demo hosting escape_hatch on an in-memory editor."""

from __future__ import annotations

import argparse
import os
from typing import Any, Dict, Optional, Sequence

try:  # pragma: no cover - imported only when the demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.widgets import Footer, Header, Log, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use escape_hatch.adapters.textual.app"
    ) from exc

from escape_hatch.dispatcher import EscapeHatch
from escape_hatch.host import BufferInfo, InMemoryHost, WindowInfo
from escape_hatch.runtime import telemetry

from .controller import TextualEscalationAdapter, TextualTimerFacility, TextualUIHooks

# Keys that change the simulated editor state instead of escalating.
_DEMO_KEYS: Dict[str, str] = {
    "i": "insert mode",
    "v": "visual mode",
    "t": "terminal mode",
    "o": "toggle overlay",
    "f": "open floating window",
    "slash": "search highlight",
    "b": "toggle special buffer",
    "n": "toggle nuclear level",
}


class EscapeHatchApp(App[None]):
    """Press Esc repeatedly and watch the escalation ladder climb."""

    CSS = """
    #levels {
        height: 3;
        border: round $accent;
        padding: 0 1;
    }

    #editor {
        height: 3;
        padding: 0 1;
    }

    #status-line {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #commands {
        height: 1fr;
        border: round $primary;
    }
    """

    BINDINGS = [("ctrl+c", "quit", "Quit")]

    def __init__(self, *, options: Optional[Dict[str, Any]] = None) -> None:
        super().__init__()
        self._options = options or {}
        self.host = InMemoryHost(buffer=BufferInfo(name="notes.txt"))
        self.hatch: EscapeHatch | None = None
        self.adapter: TextualEscalationAdapter | None = None
        self._levels_widget = Static("", id="levels")
        self._editor_widget = Static("", id="editor")
        self._status_widget = Static("", id="status-line")
        self._log_widget = Log(id="commands")
        self._seen_effects = 0
        self._next_window = 1000

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield self._levels_widget
        yield self._editor_widget
        yield self._status_widget
        yield self._log_widget
        yield Footer()

    def on_mount(self) -> None:
        timers = TextualTimerFacility(self, after_fire=self._after_timer)
        self.hatch = EscapeHatch(self.host, timers=timers)
        self.hatch.setup(self._options)
        hooks = TextualUIHooks(
            update_status=self._update_status,
            update_levels=self._update_levels,
            log=self._log_line,
        )
        self.adapter = TextualEscalationAdapter(self.hatch, hooks)
        for line in self.hatch.describe():
            self._log_line(line)
        self._render_editor()

    def on_key(self, event: events.Key) -> None:
        if not self.adapter or not self.hatch:
            return
        if self.adapter.handle_textual_key(event.key) is not None:
            event.stop()
        elif event.key in _DEMO_KEYS:
            self._apply_demo_key(event.key, self.hatch)
            event.stop()
        self._flush_effects()
        self._render_editor()
        if self.host.quit:
            self.exit()

    def _apply_demo_key(self, key: str, hatch: EscapeHatch) -> None:
        host = self.host
        if key == "i":
            host.current_mode = "i"
        elif key == "v":
            host.current_mode = "v"
        elif key == "t":
            host.current_mode = "t"
            host.buffer = BufferInfo(name="term://bash", buftype="terminal")
        elif key == "o":
            host.overlay = not host.overlay
        elif key == "f":
            self._next_window += 1
            host.floats.append(WindowInfo(id=self._next_window, floating=True))
        elif key == "slash":
            host.hlsearch = True
        elif key == "b":
            special = not host.buffer.special
            host.buffer = BufferInfo(
                name="[Quickfix List]" if special else "notes.txt",
                buftype="quickfix" if special else "",
            )
        elif key == "n":
            enabled = hatch.toggle_nuclear()
            self._update_status(f"nuclear level {'enabled' if enabled else 'disabled'}")
            if self.adapter:
                self.adapter.refresh()
        self._log_line(f"demo -> {_DEMO_KEYS[key]}")

    def _after_timer(self) -> None:
        if self.adapter:
            self.adapter.refresh()

    def _flush_effects(self) -> None:
        effects = [f":{command}" for command in self.host.executed]
        effects += [f"keys {keys}" for keys in self.host.keys]
        for line in effects[self._seen_effects :]:
            self._log_line(f"host -> {line}")
        self._seen_effects = len(effects)

    def _update_levels(self, levels: Dict[str, int]) -> None:
        text = "   ".join(f"{name}: level {level}" for name, level in levels.items())
        self._levels_widget.update(text)

    def _update_status(self, status: str) -> None:
        self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        self._log_widget.write_line(line)

    def _render_editor(self) -> None:
        host = self.host
        buffer = host.buffer
        self._editor_widget.update(
            f"mode={host.current_mode} buffer={buffer.name or '[No Name]'} "
            f"buftype={buffer.buftype or '-'} overlay={host.overlay} "
            f"floats={len(host.floats)} hlsearch={host.hlsearch}"
        )


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the escape-hatch Textual demo.")
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Quiet period before a path resets (default: 400)",
    )
    parser.add_argument(
        "--on-overflow",
        choices=("noop", "repeat_last", "clamp"),
        default=None,
        help="Behaviour past the end of a ladder",
    )
    parser.add_argument(
        "--nuclear",
        action="store_true",
        help="Enable the force-quit-all level",
    )
    parser.add_argument(
        "--telemetry-preset",
        default=os.environ.get("ESCAPE_HATCH_TELEMETRY_PRESET"),
        help="telelog preset: development, production or performance",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.telemetry_preset:
        telemetry.configure(preset=args.telemetry_preset)
    options: Dict[str, Any] = {}
    if args.debounce_ms is not None:
        options["debounce_ms"] = args.debounce_ms
    if args.on_overflow:
        options["on_overflow"] = args.on_overflow
    if args.nuclear:
        options["nuclear"] = True
    EscapeHatchApp(options=options).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
