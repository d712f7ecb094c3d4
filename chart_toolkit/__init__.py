"""Top-level public API for the ``chart_toolkit`` package.

This module re-exports the chart building blocks so users can import from a
single namespace, for example:

>>> from chart_toolkit import ChartData, RecordingSurface, linear_chart  # doctest: +SKIP

It exposes both the high-level ``linear_chart`` builder and the lower-level
pieces (data store, scales, spline engine, areas, elements, schedulers and
surfaces) for custom layouts.
"""

from .average_lines import AverageLines, block_averages
from .chart import Chart, linear_chart
from .chart_area import ChartArea, Renderable, ScaleAware
from .chart_config import ChartConfig, ChartStyle
from .chart_data import Bounds, ChangeEvent, ChartData, SeriesValues
from .chart_elements import Axis, CircleLines, Grid, LinearAxisNumbers, LinearTrend, Rectangle, Targets
from .chart_scale import LinearScale, ScaleProvider
from .debouncing import (
    FrameDebouncer,
    ManualFrameScheduler,
    ManualIntervalTimer,
    ResizePoller,
    ThreadingIntervalTimer,
    TimerFrameScheduler,
)
from .errors import ChartError, DegenerateDomainError, DomainError, ValidationWarning
from .spline import Spline
from .surface import PlotlySurface, RecordingSurface, Surface

__all__ = [
    "AverageLines",
    "Axis",
    "Bounds",
    "ChangeEvent",
    "Chart",
    "ChartArea",
    "ChartConfig",
    "ChartData",
    "ChartError",
    "ChartStyle",
    "CircleLines",
    "DegenerateDomainError",
    "DomainError",
    "FrameDebouncer",
    "Grid",
    "LinearAxisNumbers",
    "LinearScale",
    "LinearTrend",
    "ManualFrameScheduler",
    "ManualIntervalTimer",
    "PlotlySurface",
    "Rectangle",
    "RecordingSurface",
    "Renderable",
    "ResizePoller",
    "ScaleAware",
    "ScaleProvider",
    "SeriesValues",
    "Spline",
    "Surface",
    "Targets",
    "ThreadingIntervalTimer",
    "TimerFrameScheduler",
    "ValidationWarning",
    "block_averages",
    "linear_chart",
]
