"""Chart configuration and style constants.

``ChartConfig`` holds the scheduling knobs of a :class:`~chart_toolkit.chart.Chart`.
``ChartStyle`` holds the size divisors elements use to derive line widths,
marker sizes and fonts from the surface size, so drawings scale with the
surface instead of using fixed pixel values.
"""

from __future__ import annotations

from dataclasses import dataclass

from .debouncing import DEFAULT_FRAME_INTERVAL_MS, DEFAULT_RESIZE_POLL_MS


@dataclass(frozen=True)
class ChartConfig:
    """Scheduling options for a chart.

    Parameters
    ----------
    frame_interval_ms : int
        Delay used by the default frame scheduler.
    resize_poll_ms : int
        Interval of the polled resize fallback.
    update_on_resize : bool
        Redraw when :meth:`Chart.notify_resize` reports a native resize.
    resize_check : bool
        Start the polled resize fallback when a surface is attached.
    """

    frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS
    resize_poll_ms: int = DEFAULT_RESIZE_POLL_MS
    update_on_resize: bool = True
    resize_check: bool = False

    def __post_init__(self) -> None:
        if self.frame_interval_ms <= 0:
            raise ValueError("frame_interval_ms must be > 0")
        if self.resize_poll_ms <= 0:
            raise ValueError("resize_poll_ms must be > 0")


@dataclass(frozen=True)
class ChartStyle:
    """Divisors applied to ``surface.width + surface.height``."""

    line_divisor: float = 1200.0
    marker_divisor: float = 300.0
    font_divisor: float = 150.0
    arrow_length_divisor: float = 150.0
    arrow_width_divisor: float = 425.0

    def line_width(self, surface_size: float) -> float:
        return surface_size / self.line_divisor

    def marker_size(self, surface_size: float) -> float:
        return surface_size / self.marker_divisor

    def font_size(self, surface_size: float) -> float:
        return surface_size / self.font_divisor

    def arrow_size(self, surface_size: float) -> tuple[float, float]:
        return (surface_size / self.arrow_length_divisor, surface_size / self.arrow_width_divisor)


DEFAULT_STYLE = ChartStyle()

__all__ = ["ChartConfig", "ChartStyle", "DEFAULT_STYLE"]
