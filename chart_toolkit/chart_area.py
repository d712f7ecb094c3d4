"""Render tree: normalized areas holding ordered elements.

An element is anything with a ``render(surface, x, y, w, h, data)`` method.
Elements that need domain-to-pixel conversion take a :class:`ScaleAware`
capability at construction instead of reaching into the chart for a scale.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Tuple, runtime_checkable

from .chart_data import ChartData
from .chart_scale import ScaleProvider
from .errors import DegenerateDomainError, DomainError
from .surface import Surface

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DEFAULT_SCALE = "default"


@runtime_checkable
class Renderable(Protocol):
    def render(self, surface: Surface, x: float, y: float, w: float, h: float, data: ChartData) -> None: ...


@dataclass(frozen=True)
class ScaleAware:
    """Resolve a named scale from a chart-owned scale map.

    Parameters
    ----------
    scales : mapping
        The chart's scale map, shared by reference so scales registered
        after element construction are still found.
    scale_name : str
        Key into ``scales``.
    """

    scales: Mapping[str, ScaleProvider]
    scale_name: str = DEFAULT_SCALE

    @property
    def scale(self) -> ScaleProvider:
        try:
            return self.scales[self.scale_name]
        except KeyError:
            raise KeyError(f"No scale registered under {self.scale_name!r}.") from None

    def to_pixel(self, value_x: float, value_y: float, x: float, y: float, w: float, h: float) -> Tuple[float, float]:
        """Map a domain point into the pixel rectangle (y grows downward)."""
        scale = self.scale
        return (x + w * scale.scale_x(value_x), y + h * (1 - scale.scale_y(value_y)))


class ChartArea:
    """Rectangular viewport region, in fractions of the surface size.

    Parameters
    ----------
    top, left, width, height : float
        Normalized rectangle, defaults cover the whole surface.
    elements : iterable of Renderable
        Elements drawn in insertion order.

    Examples
    --------
    >>> area = ChartArea(top=0.25, height=0.5)
    >>> area.pixel_rect(800, 600)
    (0.0, 150.0, 800.0, 300.0)
    """

    def __init__(
        self,
        *,
        top: float = 0.0,
        left: float = 0.0,
        width: float = 1.0,
        height: float = 1.0,
        elements: Iterable[Renderable] = (),
    ) -> None:
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self._elements: List[Renderable] = list(elements)

    @property
    def elements(self) -> Tuple[Renderable, ...]:
        return tuple(self._elements)

    def add_element(self, element: Renderable) -> Renderable:
        self._elements.append(element)
        return element

    def pixel_rect(self, surface_width: float, surface_height: float) -> Tuple[float, float, float, float]:
        return (
            float(surface_width * self.left),
            float(surface_height * self.top),
            float(surface_width * self.width),
            float(surface_height * self.height),
        )

    def render(self, surface: Surface, data: ChartData) -> None:
        x, y, w, h = self.pixel_rect(surface.width, surface.height)
        for element in self._elements:
            try:
                element.render(surface, x, y, w, h, data)
            except (DomainError, DegenerateDomainError) as exc:
                logger.warning("Skipping %s: %s", type(element).__name__, exc)

    def __repr__(self) -> str:
        return (
            f"ChartArea(top={self.top}, left={self.left}, width={self.width}, "
            f"height={self.height}, elements={len(self._elements)})"
        )


__all__ = ["ChartArea", "DEFAULT_SCALE", "Renderable", "ScaleAware"]
