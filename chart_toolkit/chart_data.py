"""Series store with incrementally maintained bounds.

Purpose
-------
``ChartData`` is the single source of truth for everything a chart draws:

- named series of ``(x, y)`` points, sorted by x,
- a per-series side channel of named info entries (``color``, ``target``...),
- global free-form options,
- value bounds, composed of a *calculated* part (running min/max of every
  value ever supplied) and a *manual* override per axis endpoint.

Every mutating call fires exactly one :class:`ChangeEvent` to the registered
listeners, synchronously, at the end of the call. Notifications are not
batched here; redraw coalescing is the job of the chart's frame scheduler.

Notes
-----
Calculated bounds are cumulative. Replacing a series with a narrower range
does not shrink them; use :meth:`ChartData.set_bounds` to pin the visible
range explicitly.
"""

from __future__ import annotations

import logging
import math
import warnings
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import DegenerateDomainError, ValidationWarning

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

Formatter = Callable[[Any], Any]
Range = Tuple[Optional[float], Optional[float]]

_AXES = ("x", "y")


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class Bounds:
    """Per-axis ``(min, max)`` ranges."""

    x: Range
    y: Range

    def axis(self, name: str) -> Range:
        if name not in _AXES:
            raise KeyError(f"Unknown axis {name!r}; expected 'x' or 'y'.")
        return getattr(self, name)


@dataclass
class SeriesValues:
    """Points and side-channel info stored for one series ID.

    Parameters
    ----------
    data : Any
        The raw points exactly as supplied to :meth:`ChartData.set_values`.
    x, y : list[float]
        Formatted coordinates, sorted ascending by ``x``.
    info : dict
        Side-channel entries. These survive :meth:`ChartData.set_values`.
    """

    data: Any = None
    x: List[Any] = field(default_factory=list)
    y: List[Any] = field(default_factory=list)
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return len(self.x)

    def __len__(self) -> int:
        return len(self.x)

    def points(self) -> List[Tuple[Any, Any]]:
        """Return the sorted series as a list of ``(x, y)`` pairs."""
        return list(zip(self.x, self.y))


@dataclass(frozen=True)
class ChangeEvent:
    """Notification emitted after every mutating :class:`ChartData` call.

    Parameters
    ----------
    chart_data : ChartData
        The store that changed.
    reason : str
        Name of the mutating operation (``"set_values"``, ``"set_info"``...).
    series_id : str, optional
        Affected series, when the mutation targeted one.
    """

    chart_data: "ChartData"
    reason: str
    series_id: Optional[str] = None


def _iter_points(points: Any) -> Iterable[Tuple[Any, Any]]:
    if points is None:
        return ()
    if isinstance(points, Mapping):
        return points.items()
    return points


class ChartData:
    """Store of named series, global options and bounds.

    Parameters
    ----------
    values : mapping, optional
        Initial series as ``{series_id: points}``.
    infos : mapping, optional
        Initial side-channel info keyed by series, ``{series_id: {key: value}}``;
        each entry is merged with :meth:`set_info`.
    options : mapping, optional
        Initial global options.
    bounds : mapping, optional
        Initial manual bounds, see :meth:`set_bounds`.
    key_formatter, value_formatter : callable, optional
        Default formatters converting raw keys/values into numbers.
    type : str
        Data type tag, used to tell stores apart when a chart shows several.

    Examples
    --------
    >>> data = ChartData()
    >>> data.set_values("a", {1: 10, 0: 5})
    >>> data.get_values("a").x
    [0, 1]
    >>> data.bounds.y
    (5, 10)
    """

    def __init__(
        self,
        *,
        values: Optional[Mapping[str, Any]] = None,
        infos: Optional[Mapping[str, Mapping[str, Any]]] = None,
        options: Optional[Mapping[str, Any]] = None,
        bounds: Any = None,
        key_formatter: Optional[Formatter] = None,
        value_formatter: Optional[Formatter] = None,
        type: str = "default",
    ) -> None:
        self.type = type
        self.key_formatter: Formatter = key_formatter or _identity
        self.value_formatter: Formatter = value_formatter or _identity

        self._values: Dict[str, SeriesValues] = {}
        self._options: Dict[str, Any] = {}
        self._calculated: Dict[str, List[float]] = {
            "x": [math.inf, -math.inf],
            "y": [math.inf, -math.inf],
        }
        self._manual: Dict[str, List[Optional[float]]] = {
            "x": [None, None],
            "y": [None, None],
        }
        self._listeners: Dict[Hashable, Callable[[ChangeEvent], Any]] = {}
        self._listener_counter = 0
        self._revision = 0

        for series_id, points in (values or {}).items():
            self.set_values(series_id, points)
        for series_id, info in (infos or {}).items():
            self.set_info(series_id, info)
        if options:
            self.set_options(options)
        if bounds:
            self.set_bounds(bounds)

    # SECTION: Listeners [id: ChartDataListeners]
    # =========================================================================

    def add_listener(self, callback: Callable[[ChangeEvent], Any], *, listener_id: Optional[Hashable] = None) -> Hashable:
        """Register ``callback`` for change notifications and return its ID."""
        if listener_id is None:
            self._listener_counter += 1
            listener_id = f"listener:{self._listener_counter}"
        self._listeners[listener_id] = callback
        return listener_id

    def remove_listener(self, listener_id: Hashable) -> None:
        self._listeners.pop(listener_id, None)

    @property
    def revision(self) -> int:
        """Number of change notifications emitted so far."""
        return self._revision

    def _emit(self, reason: str, series_id: Optional[str] = None) -> None:
        self._revision += 1
        event = ChangeEvent(chart_data=self, reason=reason, series_id=series_id)
        for l_id, callback in list(self._listeners.items()):
            try:
                callback(event)
            except Exception:
                logger.exception("ChartData listener %s failed on %s", l_id, reason)

    # SECTION: Series [id: ChartDataSeries]
    # =========================================================================

    @property
    def ids(self) -> List[str]:
        """Series IDs in insertion order."""
        return list(self._values.keys())

    def set_values(
        self,
        series_id: str,
        points: Any,
        key_formatter: Optional[Formatter] = None,
        value_formatter: Optional[Formatter] = None,
    ) -> None:
        """Replace the points of ``series_id``.

        Parameters
        ----------
        series_id : str
            Series identifier.
        points : mapping or iterable of pairs
            ``{x: y}`` or ``[(x, y), ...]``. The previous points are discarded,
            not merged.
        key_formatter, value_formatter : callable, optional
            Per-call overrides of the store formatters.

        Notes
        -----
        Existing info for ``series_id`` is preserved. Calculated bounds only
        ever grow; empty input leaves them untouched.
        """
        fmt_key = key_formatter or self.key_formatter
        fmt_value = value_formatter or self.value_formatter

        pairs = [(fmt_key(k), fmt_value(v)) for k, v in _iter_points(points)]
        pairs.sort(key=lambda p: p[0])

        series = self._values.get(series_id)
        if series is None:
            series = self._values[series_id] = SeriesValues()
        series.data = points
        series.x = [p[0] for p in pairs]
        series.y = [p[1] for p in pairs]

        if pairs:
            self._fold_calculated("x", series.x[0], series.x[-1])
            self._fold_calculated("y", min(series.y), max(series.y))

        logger.debug("set_values(%s) points=%d", series_id, len(pairs))
        self._emit("set_values", series_id)

    def get_values(self, series_id: str) -> Optional[SeriesValues]:
        return self._values.get(series_id)

    def _fold_calculated(self, axis: str, low: float, high: float) -> None:
        calc = self._calculated[axis]
        if low < calc[0]:
            calc[0] = low
        if high > calc[1]:
            calc[1] = high

    # SECTION: Info and options [id: ChartDataInfo]
    # =========================================================================

    def set_info(self, series_id: str, key: Any, info: Any = None) -> None:
        """Set side-channel info for ``series_id``.

        ``key`` is either a string (stored with ``info``) or a mapping merged
        into the existing info. Any other shape is reported as a
        :class:`~chart_toolkit.errors.ValidationWarning` and ignored.
        """
        update = _normalize_payload(key, info, where=f"set_info({series_id!r})")
        if update is None:
            return

        series = self._values.get(series_id)
        if series is None:
            series = self._values[series_id] = SeriesValues()
        series.info.update(update)
        self._emit("set_info", series_id)

    def get_info(self, series_id: str, key: str, default: Any = None) -> Any:
        series = self._values.get(series_id)
        if series is None:
            return default
        return series.info.get(key, default)

    def set_options(self, key: Any, value: Any = None) -> None:
        """Set global options; same payload shapes as :meth:`set_info`."""
        update = _normalize_payload(key, value, where="set_options")
        if update is None:
            return
        self._options.update(update)
        self._emit("set_options")

    def get_option(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    @property
    def options(self) -> Mapping[str, Any]:
        """Read-only view of the global options."""
        return MappingProxyType(self._options)

    # SECTION: Bounds [id: ChartDataBounds]
    # =========================================================================

    def set_bounds(self, bounds: Any) -> None:
        """Merge manual bound overrides.

        Parameters
        ----------
        bounds : mapping or Bounds
            ``{"x": (min, max), "y": (min, max)}``; either axis may be omitted
            and ``None`` endpoints leave the current override unchanged.

        Raises
        ------
        DegenerateDomainError
            If an axis would end up with equal manual min and max. The store
            is left unchanged in that case.
        """
        merged = {axis: list(self._manual[axis]) for axis in _AXES}
        for axis in _AXES:
            if isinstance(bounds, Mapping):
                rng = bounds.get(axis)
            else:
                rng = getattr(bounds, axis, None)
            if rng is None:
                continue
            low, high = rng
            if low is not None:
                merged[axis][0] = low
            if high is not None:
                merged[axis][1] = high

        for axis in _AXES:
            low, high = merged[axis]
            if low is not None and high is not None and low == high:
                raise DegenerateDomainError(
                    f"Manual {axis} bounds must span a non-zero range, got ({low}, {high})."
                )

        self._manual = merged
        self._emit("set_bounds")

    def clear_bounds(self, axis: Optional[str] = None) -> None:
        """Drop manual overrides for ``axis`` (or both axes)."""
        for name in _AXES if axis is None else (axis,):
            if name not in _AXES:
                raise KeyError(f"Unknown axis {name!r}; expected 'x' or 'y'.")
            self._manual[name] = [None, None]
        self._emit("clear_bounds")

    @property
    def bounds(self) -> Bounds:
        """Visible bounds: manual endpoint where set, else calculated."""
        resolved = {}
        for axis in _AXES:
            m, c = self._manual[axis], self._calculated[axis]
            resolved[axis] = (
                m[0] if m[0] is not None else c[0],
                m[1] if m[1] is not None else c[1],
            )
        return Bounds(**resolved)

    @property
    def calculated_bounds(self) -> Bounds:
        return Bounds(x=tuple(self._calculated["x"]), y=tuple(self._calculated["y"]))

    @property
    def manual_bounds(self) -> Bounds:
        return Bounds(x=tuple(self._manual["x"]), y=tuple(self._manual["y"]))

    def __repr__(self) -> str:
        return f"ChartData(type={self.type!r}, ids={self.ids!r}, bounds={self.bounds!r})"


def _normalize_payload(key: Any, value: Any, *, where: str) -> Optional[Dict[str, Any]]:
    if isinstance(key, str):
        return {key: value}
    if isinstance(key, Mapping):
        return dict(key)

    message = f"{where}: invalid info format {type(key).__name__}; expected a string key or a mapping."
    logger.warning(message)
    warnings.warn(message, ValidationWarning, stacklevel=3)
    return None


__all__ = ["Bounds", "ChangeEvent", "ChartData", "SeriesValues"]
