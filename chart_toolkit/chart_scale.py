"""Linear domain-to-unit scaling shared by chart elements."""

from __future__ import annotations

import logging
import math
from typing import Callable, Protocol, runtime_checkable

from .chart_data import ChartData

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

NEUTRAL_POSITION = 0.5


@runtime_checkable
class ScaleProvider(Protocol):
    def scale_x(self, value: float) -> float: ...

    def scale_y(self, value: float) -> float: ...


class LinearScale:
    """Map domain values to ``[0, 1]`` using the current bounds of a store.

    Parameters
    ----------
    data_source : callable
        Zero-argument callable returning the :class:`ChartData` to read
        bounds from. The chart passes a getter so a replaced store is picked
        up without rebuilding the scale.

    Notes
    -----
    A degenerate axis (``max == min``, or no data yet so the bounds are still
    infinite) maps every value to the midpoint ``0.5`` instead of producing
    NaN or infinite drawing coordinates.
    """

    def __init__(self, data_source: Callable[[], ChartData]) -> None:
        self._data_source = data_source

    def scale_x(self, value: float) -> float:
        return self._scale(value, "x")

    def scale_y(self, value: float) -> float:
        return self._scale(value, "y")

    def _scale(self, value: float, axis: str) -> float:
        low, high = self._data_source().bounds.axis(axis)
        if not (math.isfinite(low) and math.isfinite(high)) or high == low:
            logger.debug("degenerate %s domain (%s, %s); using midpoint", axis, low, high)
            return NEUTRAL_POSITION
        return (value - low) / (high - low)


__all__ = ["LinearScale", "NEUTRAL_POSITION", "ScaleProvider"]
