"""Small drawing helpers shared by chart elements."""

from __future__ import annotations

from typing import Any, Sequence, Tuple

from .surface import Surface

Color = Tuple[int, int, int]

PALETTE: Tuple[Color, ...] = (
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (0, 255, 255),
    (180, 180, 0),
    (255, 0, 255),
)


def color_from_string(text: str) -> Color:
    """Pick a stable palette color for ``text`` (sum of code points modulo palette)."""
    index = 0
    for ch in text:
        index = (index + ord(ch)) % len(PALETTE)
    return PALETTE[index]


def series_color(data: Any, series_id: str) -> Color:
    """Info ``color`` of the series, else the palette color for its ID."""
    return tuple(data.get_info(series_id, "color") or color_from_string(series_id))


def rgb(color: Sequence[int]) -> str:
    return "rgb(" + ",".join(str(c) for c in color) + ")"


def rgba(color: Sequence[int], alpha: float) -> str:
    return "rgba(" + ",".join(str(c) for c in color) + f",{alpha:g})"


def draw_line(surface: Surface, start: Sequence[float], end: Sequence[float], line_width: float, color: Any) -> None:
    surface.save()
    surface.line_width = line_width
    surface.stroke_style = color
    surface.fill_style = color

    surface.begin_path()
    surface.move_to(*start)
    surface.line_to(*end)
    surface.stroke()

    surface.restore()


def draw_arrow(surface: Surface, tip: Sequence[float], sizes: Sequence[float], direction: str, color: Any) -> None:
    """Fill a triangular arrow head at ``tip``.

    ``sizes`` is ``(length, half_width)``; ``direction`` one of ``"top"``,
    ``"left"``, ``"bottom"``, ``"right"`` (unknown values point up).
    """
    length, half = sizes
    x, y = tip
    if direction == "left":
        points = [(x - length, y), (x, y + half), (x, y - half)]
    elif direction == "bottom":
        points = [(x, y + length), (x + half, y), (x - half, y)]
    elif direction == "right":
        points = [(x + length, y), (x, y + half), (x, y - half)]
    else:
        points = [(x, y - length), (x + half, y), (x - half, y)]

    surface.save()
    surface.stroke_style = color
    surface.fill_style = color

    surface.begin_path()
    surface.move_to(*points[0])
    surface.line_to(*points[1])
    surface.line_to(*points[2])
    surface.close_path()
    surface.fill()

    surface.restore()


__all__ = ["PALETTE", "color_from_string", "draw_arrow", "draw_line", "rgb", "rgba", "series_color"]
