from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from chart_toolkit.debouncing import (
    FrameDebouncer,
    ManualFrameScheduler,
    ManualIntervalTimer,
    ResizePoller,
    TimerFrameScheduler,
)


class _FakeThreadTimer:
    created: list["_FakeThreadTimer"] = []

    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.daemon = False
        self.started = False
        self.cancelled = False
        _FakeThreadTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True


class _FakeLoopHandle:
    def __init__(self, callback):
        self._callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self._callback()


class _FakeAsyncLoop:
    def __init__(self) -> None:
        self.handles: list[_FakeLoopHandle] = []

    def call_later(self, _delay: float, callback):
        handle = _FakeLoopHandle(callback)
        self.handles.append(handle)
        return handle


def test_debouncer_collapses_burst_into_one_call_threading() -> None:
    calls = []
    _FakeThreadTimer.created.clear()

    with patch("chart_toolkit.debouncing.threading.Timer", _FakeThreadTimer):
        debouncer = FrameDebouncer(calls.append, TimerFrameScheduler(interval_ms=16))
        debouncer("first")
        debouncer("second")
        debouncer("third")

    assert len(_FakeThreadTimer.created) == 3
    assert [t.cancelled for t in _FakeThreadTimer.created] == [True, True, False]
    assert all(t.started for t in _FakeThreadTimer.created)
    assert _FakeThreadTimer.created[-1].delay == pytest.approx(0.016)

    _FakeThreadTimer.created[-1].callback()
    assert calls == ["third"]
    assert not debouncer.pending


def test_debouncer_ignores_late_callback_of_replaced_request() -> None:
    calls = []
    _FakeThreadTimer.created.clear()

    with patch("chart_toolkit.debouncing.threading.Timer", _FakeThreadTimer):
        debouncer = FrameDebouncer(calls.append, TimerFrameScheduler(interval_ms=16))
        debouncer("a")
        late = _FakeThreadTimer.created[0].callback
        debouncer("b")
        # the first timer fired before its cancel took effect
        late()
        debouncer("c")
        debouncer("d")

    assert calls == []
    live = [t for t in _FakeThreadTimer.created if not t.cancelled]
    assert len(live) == 1
    assert debouncer.pending

    live[0].callback()
    assert calls == ["d"]
    assert not debouncer.pending


def test_debouncer_uses_running_loop_when_available() -> None:
    calls = []
    fake_loop = _FakeAsyncLoop()

    with patch("chart_toolkit.debouncing.asyncio.get_running_loop", return_value=fake_loop):
        debouncer = FrameDebouncer(calls.append, TimerFrameScheduler())
        debouncer(1)
        debouncer(2)

    for handle in fake_loop.handles:
        handle.fire()
    assert calls == [2]


def test_debouncer_logs_and_keeps_working_after_callback_error(caplog) -> None:
    state = {"n": 0}

    def _callback():
        state["n"] += 1
        if state["n"] == 1:
            raise RuntimeError("boom")

    frames = ManualFrameScheduler()
    debouncer = FrameDebouncer(_callback, frames)
    with caplog.at_level(logging.ERROR, logger="chart_toolkit.debouncing"):
        debouncer()
        frames.run_pending()
        debouncer()
        frames.run_pending()

    assert state["n"] == 2
    assert "FrameDebouncer callback failed" in caplog.text


def test_debouncer_cancel_drops_pending_call() -> None:
    calls = []
    frames = ManualFrameScheduler()
    debouncer = FrameDebouncer(lambda: calls.append(1), frames)
    debouncer()
    debouncer.cancel()
    assert frames.run_pending() == 0
    assert calls == []


def test_timer_scheduler_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        TimerFrameScheduler(interval_ms=0)


def test_resize_poller_reports_only_changes() -> None:
    size = {"value": (800, 600)}
    changes = []
    timer = ManualIntervalTimer()
    poller = ResizePoller(lambda: size["value"], lambda: changes.append(size["value"]), timer=timer, interval_ms=300)

    poller.start()
    assert timer.running
    assert timer.interval_s == pytest.approx(0.3)

    timer.tick()
    timer.tick()
    size["value"] = (1024, 768)
    timer.tick()

    assert changes == [(800, 600), (1024, 768)]

    poller.stop()
    size["value"] = (10, 10)
    timer.tick()
    assert len(changes) == 2
    assert not poller.active


def test_resize_poller_ignores_missing_size() -> None:
    changes = []
    poller = ResizePoller(lambda: None, lambda: changes.append(1), timer=ManualIntervalTimer())
    assert poller.check() is False
    assert changes == []
