"""Chart orchestrator.

Purpose
-------
``Chart`` ties the pieces together. It owns

- the drawing surface reference (between :meth:`Chart.attach` and
  :meth:`Chart.release`),
- the :class:`~chart_toolkit.chart_data.ChartData` store,
- the scale map (``"default"`` is a :class:`LinearScale` over the store),
- the ordered list of :class:`~chart_toolkit.chart_area.ChartArea`.

Redraw scheduling
-----------------
Data changes, resize notifications (native via :meth:`Chart.notify_resize`
or the polled fallback) and explicit :meth:`Chart.draw` calls all go through
one :class:`~chart_toolkit.debouncing.FrameDebouncer`. Every request cancels
the pending one, so a burst of triggers before the next frame renders once,
with whatever the store holds at that time.

Logging
-------
Render passes are logged at INFO/DEBUG level, rate-limited. By default a
``NullHandler`` is installed, so nothing is printed unless logging is
configured::

    import logging
    logging.getLogger("chart_toolkit.chart").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Hashable, Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple

from .average_lines import AverageLines
from .chart_area import DEFAULT_SCALE, ChartArea, ScaleAware
from .chart_config import ChartConfig
from .chart_data import ChangeEvent, ChartData
from .chart_elements import Axis, CircleLines, Grid, LinearAxisNumbers, LinearTrend, Targets
from .chart_scale import LinearScale, ScaleProvider
from .debouncing import FrameDebouncer, FrameScheduler, IntervalTimer, ResizePoller, TimerFrameScheduler
from .surface import Surface

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class Chart:
    """Owner of surface, data, scales and areas; schedules redraws.

    Parameters
    ----------
    data : ChartData or mapping, optional
        Initial store. A mapping is passed to ``ChartData(**data)``.
    scheduler : FrameScheduler, optional
        Source of "before next repaint" callbacks. Defaults to a
        :class:`TimerFrameScheduler` with ``config.frame_interval_ms``.
    resize_timer : IntervalTimer, optional
        Timer driving the polled resize fallback.
    config : ChartConfig, optional
        Scheduling options.

    Examples
    --------
    >>> from chart_toolkit import Chart, ChartArea, ManualFrameScheduler, RecordingSurface  # doctest: +SKIP
    >>> frames = ManualFrameScheduler()  # doctest: +SKIP
    >>> chart = Chart(scheduler=frames)  # doctest: +SKIP
    >>> chart.attach(RecordingSurface(800, 600))  # doctest: +SKIP
    >>> frames.run_pending()  # doctest: +SKIP
    1
    """

    def __init__(
        self,
        data: Any = None,
        *,
        scheduler: Optional[FrameScheduler] = None,
        resize_timer: Optional[IntervalTimer] = None,
        config: Optional[ChartConfig] = None,
    ) -> None:
        self.config = config if config is not None else ChartConfig()
        self._surface: Optional[Surface] = None
        self._areas: List[ChartArea] = []
        self._scales: Dict[str, ScaleProvider] = {DEFAULT_SCALE: LinearScale(lambda: self.data)}

        self._data: Optional[ChartData] = None
        self._data_listener: Optional[Hashable] = None
        self._change_listeners: Dict[Hashable, Callable[[ChangeEvent], Any]] = {}
        self._listener_counter = 0

        self._scheduler = scheduler if scheduler is not None else TimerFrameScheduler(self.config.frame_interval_ms)
        self._redraw = FrameDebouncer(self.render_now, self._scheduler)
        self._poller = ResizePoller(
            self._surface_size,
            self.draw,
            timer=resize_timer,
            interval_ms=self.config.resize_poll_ms,
        )

        self.render_count = 0
        self._render_info_last_log_t = 0.0
        self._render_debug_last_log_t = 0.0

        self.data = data if data is not None else ChartData()

    # SECTION: Data [id: ChartDataWiring]
    # =========================================================================

    @property
    def data(self) -> ChartData:
        return self._data

    @data.setter
    def data(self, data: Any) -> None:
        if not isinstance(data, ChartData):
            if not isinstance(data, Mapping):
                raise TypeError(f"Chart data must be a ChartData or a mapping, got {type(data).__name__}.")
            data = ChartData(**data)

        if self._data is not None and self._data_listener is not None:
            self._data.remove_listener(self._data_listener)
        self._data_listener = data.add_listener(self._on_data_change)
        self._data = data
        self._on_data_change(ChangeEvent(chart_data=data, reason="replace"))

    def add_data_change_listener(self, callback: Callable[[ChangeEvent], Any], *, run_now: bool = True) -> Hashable:
        """Call ``callback`` after every data change, before the redraw is scheduled.

        With ``run_now`` the callback also runs immediately for the current store.
        """
        self._listener_counter += 1
        listener_id = f"data_change:{self._listener_counter}"
        self._change_listeners[listener_id] = callback
        if run_now:
            callback(ChangeEvent(chart_data=self.data, reason="listener_added"))
        return listener_id

    def remove_data_change_listener(self, listener_id: Hashable) -> None:
        self._change_listeners.pop(listener_id, None)

    def _on_data_change(self, event: ChangeEvent) -> None:
        for l_id, callback in list(self._change_listeners.items()):
            try:
                callback(event)
            except Exception:
                logger.exception("Data change listener %s failed", l_id)
        self.draw()

    # SECTION: Render tree and scales [id: ChartTree]
    # =========================================================================

    @property
    def scales(self) -> Dict[str, ScaleProvider]:
        """The chart's scale map; elements hold it by reference."""
        return self._scales

    def scale_aware(self, scale_name: str = DEFAULT_SCALE) -> ScaleAware:
        return ScaleAware(self._scales, scale_name)

    @property
    def areas(self) -> Tuple[ChartArea, ...]:
        return tuple(self._areas)

    def add_area(self, area: ChartArea) -> ChartArea:
        self._areas.append(area)
        return area

    # SECTION: Surface lifecycle [id: ChartSurface]
    # =========================================================================

    @property
    def surface(self) -> Optional[Surface]:
        return self._surface

    def attach(self, surface: Surface) -> None:
        self._surface = surface
        if self.config.resize_check:
            self.resize_check = True
        self.draw()

    def release(self) -> None:
        self.resize_check = False
        self._redraw.cancel()
        if self._surface is not None:
            self.clear()
        self._surface = None

    def _surface_size(self) -> Optional[Tuple[int, int]]:
        if self._surface is None:
            return None
        return (self._surface.width, self._surface.height)

    @property
    def resize_check(self) -> bool:
        return self._poller.active

    @resize_check.setter
    def resize_check(self, enabled: bool) -> None:
        if enabled:
            self._poller.start()
        else:
            self._poller.stop()

    def check_resize(self) -> bool:
        """Run one resize poll now; ``True`` if a redraw was requested."""
        return self._poller.check()

    def notify_resize(self) -> None:
        """Native resize notification from the host."""
        if self.config.update_on_resize:
            self.draw()

    # SECTION: Drawing [id: ChartDrawing]
    # =========================================================================

    def draw(self, *_: Any) -> None:
        """Schedule a redraw on the next frame, replacing any pending one."""
        if self._surface is None:
            return
        self._redraw()

    @property
    def redraw_pending(self) -> bool:
        return self._redraw.pending

    def clear(self) -> None:
        surface = self._surface
        surface.clear_rect(0, 0, surface.width, surface.height)

    def calibrate(self) -> None:
        calibrate = getattr(self._surface, "calibrate", None)
        if callable(calibrate):
            calibrate()

    def render_now(self) -> None:
        """Run one render pass synchronously."""
        if self._surface is None:
            return

        self.calibrate()
        self.clear()
        for area in self._areas:
            area.render(self._surface, self._data)
        self.render_count += 1
        self._log_render()

    def _log_render(self) -> None:
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info("render #%d areas=%d series=%d", self.render_count, len(self._areas), len(self._data.ids))
        if logger.isEnabledFor(logging.DEBUG) and (now - self._render_debug_last_log_t) > 0.5:
            self._render_debug_last_log_t = now
            logger.debug("bounds=%s surface=%s", self._data.bounds, self._surface_size())


def linear_chart(
    data: Any = None,
    *,
    axes: Optional[Mapping[str, Mapping[str, Any]]] = None,
    average_steps: Optional[int] = None,
    **chart_kwargs: Any,
) -> Chart:
    """Build the standard linear chart layout.

    Three areas: the plot (grid, targets, trend, raw points and, with
    ``average_steps``, smoothed averages), an x-axis strip below it and a
    y-axis strip on its left.

    Parameters
    ----------
    data : ChartData or mapping, optional
        Initial store.
    axes : mapping, optional
        ``{"x": {...}, "y": {...}}`` keyword overrides for the
        :class:`LinearAxisNumbers` of each axis (``stepsize``, ``formatter``).
    average_steps : int, optional
        Block size for an :class:`AverageLines` element; omitted by default.
    **chart_kwargs :
        Forwarded to :class:`Chart`.
    """
    chart = Chart(data, **chart_kwargs)
    axes = axes or {}
    scale = chart.scale_aware()

    plot_elements: List[Any] = [Grid(scale), Targets(scale), LinearTrend(scale), CircleLines(scale)]
    if average_steps is not None:
        averages = AverageLines(scale, steps=average_steps)
        chart.add_data_change_listener(averages.on_data_change)
        plot_elements.append(averages)

    chart.add_area(ChartArea(top=0.05, height=0.85, left=0.05, width=0.925, elements=plot_elements))
    chart.add_area(
        ChartArea(
            top=0.9,
            height=0.1,
            left=0.05,
            width=0.925,
            elements=[Axis("x"), LinearAxisNumbers("x", **dict(axes.get("x", {})))],
        )
    )
    chart.add_area(
        ChartArea(
            top=0.05,
            height=0.85,
            left=0.0,
            width=0.05,
            elements=[Axis("y"), LinearAxisNumbers("y", **{"stepsize": 1, **dict(axes.get("y", {}))})],
        )
    )
    return chart


__all__ = ["Chart", "linear_chart"]
