"""Concrete chart elements: background, grid, axes, labels, points, trend, targets."""

from __future__ import annotations

import math
from typing import Any, Callable, Optional

from .chart_area import ScaleAware
from .chart_config import DEFAULT_STYLE, ChartStyle
from .chart_data import ChartData
from .draw_util import draw_arrow, draw_line, rgb, rgba, series_color
from .surface import Surface


def _finite_range(low: float, high: float) -> bool:
    return math.isfinite(low) and math.isfinite(high) and high > low


def _surface_size(surface: Surface) -> float:
    return surface.width + surface.height


class Rectangle:
    """Fill the whole area with a solid color."""

    def __init__(self, color: Any = "white") -> None:
        self.color = color

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        surface.save()
        surface.fill_style = self.color
        surface.fill_rect(x, y, w, h)
        surface.restore()


class Grid:
    """Grid lines every ``options["grid"]["stepsize"]`` domain units.

    The step sizes come from the global option ``grid``, e.g.
    ``data.set_options("grid", {"stepsize": {"x": 1, "y": 5}})``. Missing or
    zero step sizes skip that direction.
    """

    def __init__(self, scale: ScaleAware, *, color: Any = "lightgrey", style: ChartStyle = DEFAULT_STYLE) -> None:
        self.scale = scale
        self.color = color
        self.style = style

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        stepsize = (data.get_option("grid") or {}).get("stepsize") or {}
        scale = self.scale.scale
        bounds = data.bounds

        surface.save()
        surface.line_width = (w + h) / self.style.line_divisor
        surface.stroke_style = self.color

        step_x = stepsize.get("x")
        if step_x and step_x > 0 and _finite_range(*bounds.x):
            value = bounds.x[0]
            while value <= bounds.x[1]:
                lx = x + scale.scale_x(value) * w
                surface.begin_path()
                surface.move_to(lx, y)
                surface.line_to(lx, y + h)
                surface.stroke()
                value += step_x

        step_y = stepsize.get("y")
        if step_y and step_y > 0 and _finite_range(*bounds.y):
            value = bounds.y[0]
            while value <= bounds.y[1]:
                ly = y + h * (1 - scale.scale_y(value))
                surface.begin_path()
                surface.move_to(x, ly)
                surface.line_to(x + w, ly)
                surface.stroke()
                value += step_y

        surface.restore()


class Axis:
    """Axis line with an arrow head.

    ``position="top-right"`` draws the x axis along the top edge of the area
    and the y axis along its right edge; any other value uses the bottom and
    left edges.
    """

    def __init__(self, type: str = "x", *, position: str = "top-right", color: Any = "black", style: ChartStyle = DEFAULT_STYLE) -> None:
        if type not in ("x", "y"):
            raise ValueError(f"Axis type must be 'x' or 'y', got {type!r}")
        self.type = type
        self.position = position
        self.color = color
        self.style = style

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        cs = _surface_size(surface)
        lw = self.style.line_width(cs)
        length, half = self.style.arrow_size(cs)

        if self.type == "x":
            ly = y if self.position == "top-right" else y + h
            draw_line(surface, (x - length, ly), (x + w, ly), lw, self.color)
            draw_arrow(surface, (x + w, ly), (length, half), "right", self.color)
        else:
            lx = x + w if self.position == "top-right" else x
            draw_line(surface, (lx, y + h + length), (lx, y), lw, self.color)
            draw_arrow(surface, (lx, y), (length, half), "top", self.color)


class LinearAxisNumbers:
    """Axis labels every ``stepsize`` units across the visible bounds.

    x labels are rotated by 90 degrees and centered in the area height; y
    labels are left aligned at the horizontal middle of the area.
    """

    def __init__(
        self,
        type: str = "x",
        *,
        stepsize: float = 1,
        formatter: Optional[Callable[[float], Any]] = None,
        color: Any = "black",
        style: ChartStyle = DEFAULT_STYLE,
    ) -> None:
        if type not in ("x", "y"):
            raise ValueError(f"Axis type must be 'x' or 'y', got {type!r}")
        if stepsize <= 0:
            raise ValueError("stepsize must be > 0")
        self.type = type
        self.stepsize = stepsize
        self.formatter = formatter or (lambda value: value)
        self.color = color
        self.style = style

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        start, end = data.bounds.axis(self.type)
        if not _finite_range(start, end):
            return
        steps = (end - start) / self.stepsize
        count = int(math.floor(steps))

        surface.save()
        surface.text_baseline = "middle"
        surface.font = f"{self.style.font_size(_surface_size(surface)):g}px sans-serif"
        surface.fill_style = self.color

        if self.type == "x":
            surface.text_align = "center"
            for i in range(count + 1):
                surface.save()
                surface.translate(x + w * (i / steps), y)
                surface.rotate(math.pi / 2)
                surface.fill_text(str(self.formatter(start + i * self.stepsize)), h / 2, 0, h)
                surface.restore()
        else:
            surface.text_align = "left"
            for i in range(count + 1):
                surface.fill_text(
                    str(self.formatter(start + i * self.stepsize)),
                    x + w / 2,
                    y + h * (1 - i / steps),
                    w,
                )

        surface.restore()


class CircleLines:
    """Raw series points as circles joined by straight segments."""

    def __init__(self, scale: ScaleAware, *, style: ChartStyle = DEFAULT_STYLE) -> None:
        self.scale = scale
        self.style = style

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        cs = _surface_size(surface)
        radius = self.style.marker_size(cs)

        surface.save()
        surface.line_width = self.style.line_width(cs)
        for series_id in data.ids:
            values = data.get_values(series_id)
            if not values:
                continue
            color = series_color(data, series_id)
            surface.stroke_style = rgb(color)
            surface.fill_style = rgba(color, 0.5)

            last = None
            for vx, vy in zip(values.x, values.y):
                coords = self.scale.to_pixel(vx, vy, x, y, w, h)
                if last is not None:
                    surface.begin_path()
                    surface.move_to(*last)
                    surface.line_to(*coords)
                    surface.stroke()

                surface.begin_path()
                surface.arc(coords[0], coords[1], radius, 0, 2 * math.pi)
                surface.fill()
                last = coords
        surface.restore()


class LinearTrend:
    """Dashed straight line through the first and last point of each series.

    The line is extended across the full visible x range and clipped to the
    area. Series with fewer than two points or a zero x span are skipped.
    """

    def __init__(self, scale: ScaleAware, *, alpha: float = 0.25, style: ChartStyle = DEFAULT_STYLE) -> None:
        self.scale = scale
        self.alpha = alpha
        self.style = style

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        cs = _surface_size(surface)
        dash = self.style.marker_size(cs)
        bounds_x = data.bounds.x

        surface.save()
        surface.line_width = self.style.line_width(cs)
        surface.set_line_dash([dash, dash])
        surface.begin_path()
        surface.rect(x, y, w, h)
        surface.clip()

        for series_id in data.ids:
            values = data.get_values(series_id)
            if values is None or values.length < 2:
                continue
            span = values.x[-1] - values.x[0]
            if span == 0:
                continue
            slope = (values.y[-1] - values.y[0]) / span

            def fx(value: float) -> float:
                return (value - values.x[0]) * slope + values.y[0]

            surface.stroke_style = rgba(series_color(data, series_id), self.alpha)
            surface.begin_path()
            surface.move_to(*self.scale.to_pixel(bounds_x[0], fx(bounds_x[0]), x, y, w, h))
            surface.line_to(*self.scale.to_pixel(bounds_x[1], fx(bounds_x[1]), x, y, w, h))
            surface.stroke()

        surface.restore()


class Targets:
    """Horizontal line at each series' ``target`` info entry.

    Series without a ``target`` entry are skipped.
    """

    def __init__(self, scale: ScaleAware, *, alpha: float = 0.75) -> None:
        self.scale = scale
        self.alpha = alpha

    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None:
        surface.save()
        for series_id in data.ids:
            target = data.get_info(series_id, "target")
            if target is None:
                continue
            ly = y + h * (1 - self.scale.scale.scale_y(target))

            surface.stroke_style = rgba(series_color(data, series_id), self.alpha)
            surface.begin_path()
            surface.move_to(x, ly)
            surface.line_to(x + w, ly)
            surface.stroke()
        surface.restore()


__all__ = ["Axis", "CircleLines", "Grid", "LinearAxisNumbers", "LinearTrend", "Rectangle", "Targets"]
