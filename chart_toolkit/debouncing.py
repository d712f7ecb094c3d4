"""Frame scheduling, redraw coalescing and resize polling.

Two small timer contracts keep the chart independent of any host event loop:

- :class:`FrameScheduler` requests a callback "before the next repaint" and can
  cancel a pending request.
- :class:`IntervalTimer` fires a callback at a fixed interval until stopped.

Each has a real implementation (``asyncio`` when a loop is running, otherwise
``threading``) and a manual one that only fires when told to, for tests.
"""

from __future__ import annotations

import asyncio
import functools
import itertools
import logging
import threading
from typing import Any, Callable, Dict, Hashable, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DEFAULT_FRAME_INTERVAL_MS = 16
DEFAULT_RESIZE_POLL_MS = 300


class FrameScheduler(Protocol):
    def request(self, callback: Callable[[], Any]) -> Hashable: ...

    def cancel(self, handle: Hashable) -> None: ...


class IntervalTimer(Protocol):
    def start(self, interval_s: float, callback: Callable[[], Any]) -> None: ...

    def stop(self) -> None: ...


# SECTION: Frame schedulers [id: FrameSchedulers]
# =============================================================================


class TimerFrameScheduler:
    """Run frame callbacks after ``interval_ms`` on the running loop or a thread.

    Parameters
    ----------
    interval_ms:
        Delay standing in for the host refresh interval.
    """

    def __init__(self, interval_ms: int = DEFAULT_FRAME_INTERVAL_MS) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._interval_s = interval_ms / 1000.0

    def request(self, callback: Callable[[], Any]) -> Any:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(self._interval_s, callback)
            timer.daemon = True
            timer.start()
            return timer

        return loop.call_later(self._interval_s, callback)

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()


class ManualFrameScheduler:
    """Frame scheduler that fires pending callbacks only on :meth:`run_pending`."""

    def __init__(self) -> None:
        self._pending: Dict[int, Callable[[], Any]] = {}
        self._counter = 0

    def request(self, callback: Callable[[], Any]) -> int:
        self._counter += 1
        self._pending[self._counter] = callback
        return self._counter

    def cancel(self, handle: Hashable) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """Fire every pending callback once and return how many ran."""
        callbacks = list(self._pending.values())
        self._pending.clear()
        for callback in callbacks:
            callback()
        return len(callbacks)


class FrameDebouncer:
    """Coalesce calls so only the latest one runs on the next frame.

    Every call cancels the not-yet-fired previous request before scheduling a
    new one, so a burst of calls within one frame interval runs ``callback``
    exactly once, with the arguments of the last call.

    Parameters
    ----------
    callback:
        Callable executed on the frame.
    scheduler:
        :class:`FrameScheduler` used to request frames.
    """

    def __init__(self, callback: Callable[..., Any], scheduler: FrameScheduler) -> None:
        self._callback = callback
        self._scheduler = scheduler
        self._handle: Optional[Hashable] = None
        self._token: Optional[int] = None
        self._tokens = itertools.count(1)
        self._call: Tuple[Tuple[Any, ...], Dict[str, Any]] = ((), {})
        self._lock = threading.Lock()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._handle is not None:
                self._scheduler.cancel(self._handle)
            self._call = (args, dict(kwargs))
            self._token = next(self._tokens)
            self._handle = self._scheduler.request(functools.partial(self._on_frame, self._token))

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._scheduler.cancel(self._handle)
            self._handle = None
            self._token = None

    def _on_frame(self, token: int) -> None:
        with self._lock:
            # A cancelled request that had already fired must not run or clear
            # the handle of the request that replaced it.
            if token != self._token:
                return
            self._handle = None
            self._token = None
            args, kwargs = self._call

        try:
            self._callback(*args, **kwargs)
        except Exception:
            logger.exception("FrameDebouncer callback failed")


# SECTION: Interval timers and resize polling [id: ResizePolling]
# =============================================================================


class ThreadingIntervalTimer:
    """Repeating timer built from chained ``threading.Timer`` objects."""

    def __init__(self) -> None:
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._running = False

    def start(self, interval_s: float, callback: Callable[[], Any]) -> None:
        with self._lock:
            self._running = True
            self._schedule_locked(interval_s, callback)

    def _schedule_locked(self, interval_s: float, callback: Callable[[], Any]) -> None:
        timer = threading.Timer(interval_s, self._on_tick, args=(interval_s, callback))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _on_tick(self, interval_s: float, callback: Callable[[], Any]) -> None:
        try:
            callback()
        finally:
            with self._lock:
                if self._running:
                    self._schedule_locked(interval_s, callback)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None


class ManualIntervalTimer:
    """Interval timer that only fires on :meth:`tick`."""

    def __init__(self) -> None:
        self.interval_s: Optional[float] = None
        self._callback: Optional[Callable[[], Any]] = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, interval_s: float, callback: Callable[[], Any]) -> None:
        self.interval_s = interval_s
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def tick(self) -> None:
        if self._callback is not None:
            self._callback()


class ResizePoller:
    """Poll a size source and report changes.

    Fallback for hosts without a native resize notification: every
    ``interval_ms`` the current ``(width, height)`` is compared with the last
    observed one and ``on_change`` runs when they differ.
    """

    def __init__(
        self,
        size_source: Callable[[], Optional[Tuple[int, int]]],
        on_change: Callable[[], Any],
        *,
        timer: Optional[IntervalTimer] = None,
        interval_ms: int = DEFAULT_RESIZE_POLL_MS,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._size_source = size_source
        self._on_change = on_change
        self._timer: IntervalTimer = timer if timer is not None else ThreadingIntervalTimer()
        self._interval_s = interval_ms / 1000.0
        self._last_size: Optional[Tuple[int, int]] = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._timer.start(self._interval_s, self.check)

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._timer.stop()

    def check(self) -> bool:
        """Compare the current size with the last one; return ``True`` on change."""
        size = self._size_source()
        if size is None or size == self._last_size:
            return False
        logger.debug("size changed %s -> %s", self._last_size, size)
        self._last_size = size
        self._on_change()
        return True


__all__ = [
    "DEFAULT_FRAME_INTERVAL_MS",
    "DEFAULT_RESIZE_POLL_MS",
    "FrameDebouncer",
    "FrameScheduler",
    "IntervalTimer",
    "ManualFrameScheduler",
    "ManualIntervalTimer",
    "ResizePoller",
    "ThreadingIntervalTimer",
    "TimerFrameScheduler",
]
