from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from escape_hatch.actions import Ran
from escape_hatch.errors import EffectExecutionError
from escape_hatch.escalation import EscalationLadder, EscalationPath, RepeatCounter
from escape_hatch.runtime.timers import ManualTimerFacility


@dataclass
class Harness:
    timers: ManualTimerFacility
    counter: RepeatCounter
    paths: Dict[str, EscalationPath]
    calls: List[Tuple[str, int, str]] = field(default_factory=list)
    idles: List[Tuple[str, str]] = field(default_factory=list)

    def add(self, name: str, *actions: str, on_overflow: str = "noop") -> EscalationPath:
        ladder = EscalationLadder.of(*(actions or ("a", "b", "c")), on_overflow=on_overflow)
        self.paths[name] = EscalationPath(name, ladder)
        return self.paths[name]


def make_harness(debounce_ms: int = 400, timers: ManualTimerFacility | None = None) -> Harness:
    clock = timers or ManualTimerFacility()
    paths: Dict[str, EscalationPath] = {}
    harness = Harness(timers=clock, counter=None, paths=paths)  # type: ignore[arg-type]

    def dispatch(path: EscalationPath, level: int, action: str) -> Ran:
        harness.calls.append((path.name, level, action))
        return Ran()

    harness.counter = RepeatCounter(
        clock,
        debounce_ms=debounce_ms,
        dispatch=dispatch,
        lookup=paths.get,
        on_idle=lambda path, reason: harness.idles.append((path.name, reason)),
    )
    return harness


def test_levels_climb_then_hold_beyond_ladder() -> None:
    harness = make_harness()
    path = harness.add("p")

    outcomes = [harness.counter.trigger(path) for _ in range(5)]

    assert [o.level for o in outcomes] == [1, 2, 3, 3, 3]
    assert [o.action for o in outcomes] == ["a", "b", "c", None, None]
    assert path.presses == 5
    assert harness.calls == [("p", 1, "a"), ("p", 2, "b"), ("p", 3, "c")]


def test_quiet_period_resets_to_idle() -> None:
    harness = make_harness()
    path = harness.add("p")

    harness.counter.trigger(path)
    harness.counter.trigger(path)
    harness.timers.advance(400)

    assert path.current_level == 0
    assert path.timer_handle is None
    assert harness.counter.trigger(path).level == 1


def test_press_inside_window_rearms_timer() -> None:
    harness = make_harness()
    path = harness.add("p")

    harness.counter.trigger(path)
    harness.timers.advance(399)
    assert harness.counter.trigger(path).level == 2

    harness.timers.advance(399)
    assert path.current_level == 2
    harness.timers.advance(1)
    assert path.current_level == 0


def test_debounce_scenario_from_smart_close_to_fresh_start() -> None:
    harness = make_harness(400)
    path = harness.add("p", "smart_close", "save", "quit", "quit_all")

    assert harness.counter.trigger(path).action == "smart_close"
    harness.timers.advance_to(100)
    assert harness.counter.trigger(path).action == "save"

    harness.timers.advance_to(499)
    assert path.current_level == 2
    harness.timers.advance_to(500)
    assert path.current_level == 0

    harness.timers.advance_to(600)
    outcome = harness.counter.trigger(path)
    assert (outcome.level, outcome.action) == (1, "smart_close")


def test_paths_do_not_share_levels() -> None:
    harness = make_harness()
    first = harness.add("a")
    second = harness.add("b")

    for path in (first, second, first, second, first):
        harness.counter.trigger(path)

    assert first.current_level == 3
    assert second.current_level == 2
    assert harness.timers.pending == 2


def test_one_idle_transition_per_active_period() -> None:
    harness = make_harness()
    path = harness.add("p")

    for _ in range(3):
        harness.counter.trigger(path)
        harness.timers.advance(100)
    harness.timers.advance(1000)

    assert harness.idles == [("p", "timeout")]
    assert harness.timers.fired == 1


def test_reset_cancels_pending_timer() -> None:
    harness = make_harness()
    path = harness.add("p")
    harness.counter.trigger(path)

    assert harness.counter.reset(path) is True
    assert path.current_level == 0
    assert harness.timers.pending == 0

    harness.timers.advance(1000)
    assert harness.idles == [("p", "reset")]


def test_reset_on_idle_path_is_a_noop() -> None:
    harness = make_harness()
    path = harness.add("p")

    assert harness.counter.reset(path) is False
    assert harness.idles == []


def test_zero_debounce_treats_every_press_as_solo() -> None:
    harness = make_harness(debounce_ms=0)
    path = harness.add("p")

    outcomes = [harness.counter.trigger(path) for _ in range(2)]

    assert [o.level for o in outcomes] == [1, 1]
    assert [o.action for o in outcomes] == ["a", "a"]
    assert path.current_level == 0
    assert harness.timers.pending == 0


def test_negative_debounce_behaves_like_zero() -> None:
    harness = make_harness(debounce_ms=-50)
    path = harness.add("p")

    harness.counter.trigger(path)

    assert path.current_level == 0
    assert harness.timers.pending == 0


def test_reentrant_trigger_is_queued_and_drained_in_order() -> None:
    timers = ManualTimerFacility()
    paths: Dict[str, EscalationPath] = {}
    calls: List[Tuple[int, str]] = []
    inner = []

    def dispatch(path: EscalationPath, level: int, action: str) -> Ran:
        calls.append((level, action))
        if level == 1:
            inner.append(counter.trigger(path))
        return Ran()

    counter = RepeatCounter(timers, debounce_ms=400, dispatch=dispatch, lookup=paths.get)
    path = paths["p"] = EscalationPath("p", EscalationLadder.of("a", "b", "c"))

    outcome = counter.trigger(path)

    assert outcome.level == 1
    assert inner[0].queued is True
    assert calls == [(1, "a"), (2, "b")]
    assert path.current_level == 2
    assert timers.pending == 1
    assert path.dispatching is False


def test_failing_dispatch_still_advances() -> None:
    timers = ManualTimerFacility()
    paths: Dict[str, EscalationPath] = {}

    def dispatch(path: EscalationPath, level: int, action: str) -> Ran:
        raise RuntimeError("boom")

    counter = RepeatCounter(timers, debounce_ms=400, dispatch=dispatch, lookup=paths.get)
    path = paths["p"] = EscalationPath("p", EscalationLadder.of("a", "b"))

    outcome = counter.trigger(path)

    assert isinstance(outcome.result, EffectExecutionError)
    assert outcome.result.action == "a"
    assert counter.trigger(path).level == 2
    assert timers.pending == 1


class LeakyTimers(ManualTimerFacility):
    """A timer facility whose ``stop`` never takes effect."""

    def stop(self, handle) -> None:
        del handle


def test_stale_timer_cannot_reset_newer_activation() -> None:
    harness = make_harness(timers=LeakyTimers())
    path = harness.add("p")

    harness.counter.trigger(path)
    harness.timers.advance_to(100)
    harness.counter.trigger(path)

    harness.timers.advance_to(450)
    assert path.current_level == 2
    assert harness.idles == []

    harness.timers.advance_to(500)
    assert path.current_level == 0
    assert harness.idles == [("p", "timeout")]


def test_timer_for_removed_path_is_ignored() -> None:
    harness = make_harness()
    path = harness.add("p")
    harness.counter.trigger(path)

    del harness.paths["p"]
    harness.timers.advance(1000)

    assert path.current_level == 1
    assert harness.idles == []


def test_repeat_last_policy_reruns_final_action_when_held() -> None:
    harness = make_harness()
    path = harness.add("p", "a", "b", on_overflow="repeat_last")

    actions = [harness.counter.trigger(path).action for _ in range(4)]

    assert actions == ["a", "b", "b", "b"]
    assert path.current_level == 2


def test_clamp_policy_stops_counting() -> None:
    harness = make_harness()
    path = harness.add("p", "a", "b", on_overflow="clamp")

    actions = [harness.counter.trigger(path).action for _ in range(4)]

    assert actions == ["a", "b", None, None]
    assert path.presses == 2


class ReleaseHookLock:
    """Re-entrant lock that runs ``callback`` once, right after its Nth release."""

    def __init__(self, after_releases: int, callback) -> None:
        self._lock = threading.RLock()
        self._remaining = after_releases
        self._callback = callback

    def __enter__(self) -> "ReleaseHookLock":
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()
        self._remaining -= 1
        if self._remaining == 0:
            callback, self._callback = self._callback, None
            callback()


def test_trigger_from_other_thread_after_queue_drained_is_not_lost() -> None:
    timers = ManualTimerFacility()
    paths: Dict[str, EscalationPath] = {}
    calls: List[Tuple[int, str]] = []
    other: List = []

    def dispatch(path: EscalationPath, level: int, action: str) -> Ran:
        calls.append((level, action))
        return Ran()

    counter = RepeatCounter(timers, debounce_ms=400, dispatch=dispatch, lookup=paths.get)

    def press_from_other_thread() -> None:
        worker = threading.Thread(target=lambda: other.append(counter.trigger(path)))
        worker.start()
        worker.join(timeout=5)

    # Releases of one trigger: claim, pre-dispatch, post-dispatch, queue check.
    lock = ReleaseHookLock(4, press_from_other_thread)
    path = paths["p"] = EscalationPath("p", EscalationLadder.of("a", "b", "c"), lock=lock)

    counter.trigger(path)

    assert calls == [(1, "a"), (2, "b")]
    assert other[0].queued is False
    assert other[0].level == 2
    assert path.current_level == 2
    assert path.dispatching is False
    assert timers.pending == 1


def test_trigger_from_other_thread_during_dispatch_is_queued() -> None:
    timers = ManualTimerFacility()
    paths: Dict[str, EscalationPath] = {}
    calls: List[Tuple[int, str]] = []
    other: List = []

    def dispatch(path: EscalationPath, level: int, action: str) -> Ran:
        calls.append((level, action))
        if level == 1:
            worker = threading.Thread(target=lambda: other.append(counter.trigger(path)))
            worker.start()
            worker.join(timeout=5)
        return Ran()

    counter = RepeatCounter(timers, debounce_ms=400, dispatch=dispatch, lookup=paths.get)
    path = paths["p"] = EscalationPath("p", EscalationLadder.of("a", "b", "c"))

    counter.trigger(path)

    assert other[0].queued is True
    assert calls == [(1, "a"), (2, "b")]
    assert path.queued == 0
    assert timers.pending == 1


def test_effects_see_no_pending_timer_while_running() -> None:
    timers = ManualTimerFacility()
    paths: Dict[str, EscalationPath] = {}
    pending: List[bool] = []

    def dispatch(path: EscalationPath, level: int, action: str) -> Ran:
        pending.append(path.snapshot().timer_pending)
        return Ran()

    counter = RepeatCounter(timers, debounce_ms=400, dispatch=dispatch, lookup=paths.get)
    path = paths["p"] = EscalationPath("p", EscalationLadder.of("a", "b", "c"))

    counter.trigger(path)
    assert path.snapshot().timer_pending is True
    timers.advance(100)
    counter.trigger(path)

    assert pending == [False, False]
    assert timers.pending == 1
