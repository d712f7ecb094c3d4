"""Smoothed trend lines through block averages of each series."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .chart_area import ScaleAware
from .chart_config import DEFAULT_STYLE, ChartStyle
from .chart_data import ChangeEvent, ChartData, SeriesValues
from .draw_util import rgb, series_color
from .errors import DomainError
from .spline import DEFAULT_FACTOR, Spline
from .surface import Surface

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def block_averages(values: SeriesValues, steps: int) -> List[Tuple[float, float]]:
    """Average consecutive blocks of ``steps`` points.

    The first block is placed at the first x of the series and the last
    block (which may be shorter) at the last x, so the smoothed line spans the
    same x range as the raw data.
    """
    averages: List[Tuple[float, float]] = []
    sum_x = sum_y = 0.0
    count = 0
    last_index = values.length - 1

    for i, (vx, vy) in enumerate(zip(values.x, values.y)):
        sum_x += vx
        sum_y += vy
        count += 1
        if count < steps and i != last_index:
            continue

        ax, ay = sum_x / count, sum_y / count
        if not averages:
            ax = values.x[0]
        elif i == last_index:
            ax = values.x[i]
        averages.append((ax, ay))
        sum_x = sum_y = 0.0
        count = 0

    return averages


class AverageLines:
    """Draw a spline through block averages of every series.

    Splines are rebuilt whenever the store has changed since the last build:
    eagerly through :meth:`on_data_change` when registered with
    :meth:`Chart.add_data_change_listener`, otherwise at render time by
    comparing :attr:`ChartData.revision`. A series whose averages
    cannot be splined (duplicate x values) is logged and left out instead of
    failing the frame.

    Parameters
    ----------
    scale : ScaleAware
        Scale capability used to map spline entries to pixels.
    steps : int
        Number of raw points per averaged block.
    color : sequence of int, optional
        Fixed RGB color; defaults to each series' color.
    factor : int
        Spline density/curvature factor.
    """

    def __init__(
        self,
        scale: ScaleAware,
        *,
        steps: int = 7,
        color: Optional[Sequence[int]] = None,
        factor: int = DEFAULT_FACTOR,
        style: ChartStyle = DEFAULT_STYLE,
    ) -> None:
        if steps < 1:
            raise ValueError("steps must be >= 1")
        self.scale = scale
        self.steps = steps
        self.color = color
        self.factor = factor
        self.style = style
        self._splines: Dict[str, Spline] = {}
        self._source: Optional[ChartData] = None
        self._source_revision = -1

    @property
    def splines(self) -> Dict[str, Spline]:
        return dict(self._splines)

    def on_data_change(self, event: Any) -> None:
        data = event.chart_data if isinstance(event, ChangeEvent) else event
        self.rebuild(data)

    def rebuild(self, data: ChartData) -> None:
        splines: Dict[str, Spline] = {}
        for series_id in data.ids:
            values = data.get_values(series_id)
            if not values:
                continue
            try:
                splines[series_id] = Spline(block_averages(values, self.steps), factor=self.factor)
            except DomainError as exc:
                logger.warning("AverageLines: skipping series %r: %s", series_id, exc)
        self._splines = splines
        self._source = data
        self._source_revision = data.revision

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        if self._source is not data or self._source_revision != data.revision:
            self.rebuild(data)

        cs = surface.width + surface.height
        surface.save()
        surface.line_width = self.style.line_width(cs)

        for series_id, spline in self._splines.items():
            color = self.color if self.color is not None else series_color(data, series_id)
            surface.stroke_style = rgb(color)

            last = None
            for ex, ey in spline.entries:
                coords = self.scale.to_pixel(ex, ey, x, y, w, h)
                if last is not None:
                    surface.begin_path()
                    surface.move_to(*last)
                    surface.line_to(*coords)
                    surface.stroke()
                last = coords

        surface.restore()


__all__ = ["AverageLines", "block_averages"]
