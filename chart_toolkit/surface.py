"""Drawing surfaces.

Purpose
-------
Chart elements draw through a small canvas-like contract, :class:`Surface`:
path construction (``begin_path``/``move_to``/``line_to``/``arc``/``rect``),
``stroke``/``fill``, clipping, state ``save``/``restore``, transforms, text,
and the current pixel ``width``/``height``.

Two implementations ship with the toolkit:

- :class:`RecordingSurface` records every call. It is headless and is what
  the tests render into.
- :class:`PlotlySurface` turns paths into Plotly layout shapes and text into
  annotations, so a rendered chart can be shown as a ``plotly`` figure.

Elements receive the surface only for the duration of a render call and must
not keep a reference to it.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
import plotly.graph_objects as go

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@runtime_checkable
class Surface(Protocol):
    width: int
    height: int
    line_width: float
    stroke_style: Any
    fill_style: Any
    font: str
    text_align: str
    text_baseline: str

    def save(self) -> None: ...
    def restore(self) -> None: ...
    def begin_path(self) -> None: ...
    def close_path(self) -> None: ...
    def move_to(self, x: float, y: float) -> None: ...
    def line_to(self, x: float, y: float) -> None: ...
    def arc(self, x: float, y: float, radius: float, start: float, end: float) -> None: ...
    def rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def stroke(self) -> None: ...
    def fill(self) -> None: ...
    def clip(self) -> None: ...
    def clear_rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def fill_rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def fill_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None: ...
    def translate(self, x: float, y: float) -> None: ...
    def rotate(self, angle: float) -> None: ...
    def set_line_dash(self, segments: Sequence[float]) -> None: ...


@dataclass
class _DrawState:
    line_width: float = 1.0
    stroke_style: Any = "black"
    fill_style: Any = "black"
    font: str = "10px sans-serif"
    text_align: str = "start"
    text_baseline: str = "alphabetic"
    line_dash: Tuple[float, ...] = ()
    transform: np.ndarray = field(default_factory=lambda: np.eye(3))
    clip_rect: Optional[Tuple[float, float, float, float]] = None


def _state_attr(name: str) -> property:
    """Style attribute proxied to the current draw state."""
    return property(
        lambda self: getattr(self._state, name),
        lambda self, value: setattr(self._state, name, value),
    )


class _StatefulSurface:
    """Shared state handling: style attributes, save/restore and transforms."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self._state = _DrawState()
        self._stack: List[_DrawState] = []

    line_width = _state_attr("line_width")
    stroke_style = _state_attr("stroke_style")
    fill_style = _state_attr("fill_style")
    font = _state_attr("font")
    text_align = _state_attr("text_align")
    text_baseline = _state_attr("text_baseline")

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def resize(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)

    def save(self) -> None:
        self._stack.append(copy.deepcopy(self._state))

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()

    def set_line_dash(self, segments: Sequence[float]) -> None:
        self._state.line_dash = tuple(float(s) for s in segments)

    def translate(self, x: float, y: float) -> None:
        self._state.transform = self._state.transform @ np.array(
            [[1.0, 0.0, x], [0.0, 1.0, y], [0.0, 0.0, 1.0]]
        )

    def rotate(self, angle: float) -> None:
        c, s = math.cos(angle), math.sin(angle)
        self._state.transform = self._state.transform @ np.array(
            [[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]
        )

    def _to_device(self, x: float, y: float) -> Tuple[float, float]:
        px, py, _ = self._state.transform @ np.array([x, y, 1.0])
        return float(px), float(py)

    @property
    def _rotation(self) -> float:
        t = self._state.transform
        return math.atan2(t[1, 0], t[0, 0])


# SECTION: RecordingSurface [id: RecordingSurface]
# =============================================================================


class RecordingSurface(_StatefulSurface):
    """Headless surface that records primitive calls.

    Each call is appended to :attr:`calls` as ``(name, args)``; ``stroke`` and
    ``fill`` also record the style that was active, so tests can assert what
    a render would have looked like.

    Examples
    --------
    >>> surface = RecordingSurface(800, 600)
    >>> surface.move_to(0, 0)
    >>> surface.calls
    [('move_to', (0, 0))]
    """

    def __init__(self, width: int = 300, height: int = 150) -> None:
        super().__init__(width, height)
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def calls_named(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def reset(self) -> None:
        self.calls.clear()

    def save(self) -> None:
        super().save()
        self._record("save")

    def restore(self) -> None:
        super().restore()
        self._record("restore")

    def begin_path(self) -> None:
        self._record("begin_path")

    def close_path(self) -> None:
        self._record("close_path")

    def move_to(self, x: float, y: float) -> None:
        self._record("move_to", x, y)

    def line_to(self, x: float, y: float) -> None:
        self._record("line_to", x, y)

    def arc(self, x: float, y: float, radius: float, start: float, end: float) -> None:
        self._record("arc", x, y, radius, start, end)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("rect", x, y, w, h)

    def stroke(self) -> None:
        self._record("stroke", self.stroke_style, self.line_width, self._state.line_dash)

    def fill(self) -> None:
        self._record("fill", self.fill_style)

    def clip(self) -> None:
        self._record("clip")

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("clear_rect", x, y, w, h)

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._record("fill_rect", x, y, w, h, self.fill_style)

    def fill_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None:
        self._record("fill_text", text, x, y, max_width)

    def translate(self, x: float, y: float) -> None:
        super().translate(x, y)
        self._record("translate", x, y)

    def rotate(self, angle: float) -> None:
        super().rotate(angle)
        self._record("rotate", angle)

    def set_line_dash(self, segments: Sequence[float]) -> None:
        super().set_line_dash(segments)
        self._record("set_line_dash", tuple(segments))


# SECTION: PlotlySurface [id: PlotlySurface]
# =============================================================================

_ARC_SEGMENTS = 24

Point = Tuple[float, float]
ClipRect = Tuple[float, float, float, float]


def _clip_segment(p0: Point, p1: Point, rect: ClipRect) -> Optional[Tuple[Point, Point]]:
    """Liang-Barsky clip of segment ``p0 -> p1`` to ``(x0, y0, x1, y1)``."""
    x0, y0, x1, y1 = rect
    dx, dy = p1[0] - p0[0], p1[1] - p0[1]
    t0, t1 = 0.0, 1.0
    for p, q in (
        (-dx, p0[0] - x0),
        (dx, x1 - p0[0]),
        (-dy, p0[1] - y0),
        (dy, y1 - p0[1]),
    ):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return (
        (p0[0] + t0 * dx, p0[1] + t0 * dy),
        (p0[0] + t1 * dx, p0[1] + t1 * dy),
    )


def _format_path(commands: Sequence[Tuple[str, Optional[Point]]]) -> str:
    parts = []
    for cmd, point in commands:
        if point is None:
            parts.append(cmd)
        else:
            parts.append(f"{cmd} {point[0]:.3f},{point[1]:.3f}")
    return " ".join(parts)


class PlotlySurface(_StatefulSurface):
    """Surface that accumulates Plotly layout shapes and annotations.

    Pixel coordinates map 1:1 onto a figure whose x axis spans ``[0, width]``
    and whose y axis spans ``[height, 0]`` (top-left origin, as on a canvas).
    Arcs are approximated with line segments because Plotly path shapes do
    not support SVG arc commands.

    ``clip()`` clips to the bounding box of the current path. Stroked
    segments are cut at the box edges and filled outlines are clamped into
    it; the clip region is part of the draw state, so ``restore()`` lifts it.

    Examples
    --------
    >>> surface = PlotlySurface(400, 300)  # doctest: +SKIP
    >>> chart.attach(surface); chart.render_now()  # doctest: +SKIP
    >>> surface.to_figure().show()  # doctest: +SKIP
    """

    def __init__(self, width: int = 800, height: int = 600) -> None:
        super().__init__(width, height)
        self.shapes: List[Dict[str, Any]] = []
        self.annotations: List[Dict[str, Any]] = []
        self._path: List[Tuple[str, Optional[Point]]] = []

    @property
    def clip_rect(self) -> Optional[ClipRect]:
        """Active clip box as ``(x0, y0, x1, y1)`` in device pixels."""
        return self._state.clip_rect

    def begin_path(self) -> None:
        self._path = []

    def close_path(self) -> None:
        if self._path:
            self._path.append(("Z", None))

    def move_to(self, x: float, y: float) -> None:
        self._path.append(("M", self._to_device(x, y)))

    def line_to(self, x: float, y: float) -> None:
        cmd = "L" if self._path else "M"
        self._path.append((cmd, self._to_device(x, y)))

    def arc(self, x: float, y: float, radius: float, start: float, end: float) -> None:
        for i, angle in enumerate(np.linspace(start, end, _ARC_SEGMENTS + 1)):
            point = self._to_device(x + radius * math.cos(angle), y + radius * math.sin(angle))
            cmd = "L" if (self._path and i > 0) else "M"
            self._path.append((cmd, point))

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self.move_to(x, y)
        self.line_to(x + w, y)
        self.line_to(x + w, y + h)
        self.line_to(x, y + h)
        self.close_path()

    def _line_dash(self) -> str:
        dash = self._state.line_dash
        return ",".join(f"{d:g}px" for d in dash) if dash else "solid"

    def _clipped_stroke_path(self, rect: ClipRect) -> List[Tuple[str, Optional[Point]]]:
        out: List[Tuple[str, Optional[Point]]] = []
        current: Optional[Point] = None
        start: Optional[Point] = None
        pen: Optional[Point] = None

        for cmd, point in self._path:
            if cmd == "M":
                current = start = point
                continue
            target = start if cmd == "Z" else point
            if current is None or target is None:
                current = target
                continue
            piece = _clip_segment(current, target, rect)
            if piece is not None:
                a, b = piece
                if pen is None or not np.allclose(pen, a):
                    out.append(("M", a))
                out.append(("L", b))
                pen = b
            current = target
        return out

    def stroke(self) -> None:
        if not self._path:
            return
        rect = self._state.clip_rect
        commands = self._path if rect is None else self._clipped_stroke_path(rect)
        if not commands:
            return
        self.shapes.append(
            dict(
                type="path",
                path=_format_path(commands),
                xref="x",
                yref="y",
                line=dict(color=self.stroke_style, width=self.line_width, dash=self._line_dash()),
                fillcolor="rgba(0,0,0,0)",
            )
        )

    def fill(self) -> None:
        if not self._path:
            return
        commands = self._path
        rect = self._state.clip_rect
        if rect is not None:
            x0, y0, x1, y1 = rect
            commands = [
                (cmd, None if p is None else (min(max(p[0], x0), x1), min(max(p[1], y0), y1)))
                for cmd, p in commands
            ]
        self.shapes.append(
            dict(
                type="path",
                path=_format_path(commands),
                xref="x",
                yref="y",
                line=dict(width=0),
                fillcolor=self.fill_style,
            )
        )

    def clip(self) -> None:
        points = [p for _, p in self._path if p is not None]
        if not points:
            return
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        rect = (min(xs), min(ys), max(xs), max(ys))
        current = self._state.clip_rect
        if current is not None:
            rect = (
                max(rect[0], current[0]),
                max(rect[1], current[1]),
                min(rect[2], current[2]),
                min(rect[3], current[3]),
            )
        logger.debug("PlotlySurface clip to %s", rect)
        self._state.clip_rect = rect

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        if x <= 0 and y <= 0 and x + w >= self.width and y + h >= self.height:
            self.shapes.clear()
            self.annotations.clear()
            return
        self.save()
        self.fill_style = "white"
        self.fill_rect(x, y, w, h)
        self.restore()

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        self.begin_path()
        self.rect(x, y, w, h)
        self.fill()

    def fill_text(self, text: str, x: float, y: float, max_width: Optional[float] = None) -> None:
        px, py = self._to_device(x, y)
        xanchor = {"center": "center", "right": "right", "end": "right"}.get(self.text_align, "left")
        yanchor = {"middle": "middle", "top": "top", "hanging": "top"}.get(self.text_baseline, "bottom")
        self.annotations.append(
            dict(
                text=str(text),
                x=px,
                y=py,
                xref="x",
                yref="y",
                xanchor=xanchor,
                yanchor=yanchor,
                showarrow=False,
                textangle=math.degrees(self._rotation),
                font=dict(color=self.fill_style, size=_font_size(self.font)),
            )
        )

    def to_figure(self) -> go.Figure:
        """Build a ``go.Figure`` showing the accumulated drawing."""
        fig = go.Figure()
        fig.update_layout(
            width=self.width,
            height=self.height,
            margin=dict(l=0, r=0, t=0, b=0),
            plot_bgcolor="white",
            shapes=self.shapes,
            annotations=self.annotations,
            showlegend=False,
        )
        fig.update_xaxes(range=[0, self.width], visible=False, fixedrange=True)
        fig.update_yaxes(range=[self.height, 0], visible=False, fixedrange=True)
        return fig


def _font_size(font: str) -> Optional[float]:
    for token in font.split():
        if token.endswith("px"):
            try:
                return float(token[:-2])
            except ValueError:
                return None
    return None


__all__ = ["PlotlySurface", "RecordingSurface", "Surface"]
