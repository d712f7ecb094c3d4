"""Cubic-spline smoothing with a tunable resampling factor.

The engine is a natural cubic spline (second derivative fixed to zero at both
ends) with one twist: the constant that weights the curvature terms in the
textbook formulation is replaced by the integer ``factor``. The same factor
also sets the output density, ``len(points) * factor`` resampled entries.

Resampling walks evenly spaced x values from the first input x with an
*integer* step (the rounded span divided by ``count - 1``), so the last entry
does not necessarily land on the last input x.

Examples
--------
>>> s = Spline({0: 0, 1: 10, 2: 0}.items(), factor=1)  # doctest: +SKIP
>>> s.entries  # doctest: +SKIP
[(0.0, 0.0), (1.0, 10.0), (2.0, 0.0)]
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .errors import DomainError

DEFAULT_FACTOR = 10

_NOT_CONSECUTIVE = "X data values must be consecutive."


def _validate_factor(factor: Any) -> int:
    if isinstance(factor, bool) or not isinstance(factor, numbers.Integral):
        raise DomainError(f"Factor must be an integer, got {factor!r}.")
    if factor < 1:
        raise DomainError(f"Factor must be >= 1, got {factor!r}.")
    return int(factor)


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


class Spline:
    """Resampled natural cubic spline through a set of points.

    Parameters
    ----------
    entries : iterable of (x, y), optional
        Input points in any order.
    data : mapping, optional
        Input points as ``{x: y}``. Ignored when ``entries`` is given.
    factor : int
        Density and curvature factor, default 10.

    Raises
    ------
    DomainError
        If two input points share an x value, or ``factor`` is not a positive
        integer.
    """

    def __init__(
        self,
        entries: Optional[Iterable[Tuple[Any, Any]]] = None,
        *,
        data: Optional[Mapping[Any, Any]] = None,
        factor: int = DEFAULT_FACTOR,
    ) -> None:
        self._factor = _validate_factor(factor)
        self._x = np.empty(0, dtype=float)
        self._y = np.empty(0, dtype=float)
        self._second = np.empty(0, dtype=float)
        self._entries: List[Tuple[float, float]] = []

        if entries is not None:
            self.entries = entries
        elif data is not None:
            self.entries = data.items()

    @property
    def factor(self) -> int:
        return self._factor

    @factor.setter
    def factor(self, factor: int) -> None:
        factor = _validate_factor(factor)
        if factor == self._factor:
            return
        # The curvature system is linear in the forcing term, so a new factor
        # rescales the second derivatives instead of solving again.
        self._second = self._second * (factor / self._factor)
        self._factor = factor
        self._resample()

    @property
    def entries(self) -> List[Tuple[float, float]]:
        """Resampled ``(x, y)`` pairs."""
        return list(self._entries)

    @entries.setter
    def entries(self, entries: Iterable[Tuple[Any, Any]]) -> None:
        pairs = [(float(x), float(y)) for x, y in entries]
        xs = np.array([p[0] for p in pairs], dtype=float)
        ys = np.array([p[1] for p in pairs], dtype=float)
        order = np.argsort(xs, kind="stable")
        self._x = xs[order]
        self._y = ys[order]
        self._second = np.zeros_like(self._x)
        self._entries = []
        self._calculate()

    @property
    def values(self) -> Dict[float, float]:
        """Resampled entries as ``{x: y}``."""
        return dict(self._entries)

    @property
    def data(self) -> Dict[float, float]:
        """The sorted input points as ``{x: y}``."""
        return dict(zip(self._x.tolist(), self._y.tolist()))

    @property
    def second_derivatives(self) -> np.ndarray:
        return self._second.copy()

    def __len__(self) -> int:
        return len(self._entries)

    def _calculate(self) -> None:
        if self._x.size == 0:
            return
        if np.any(np.diff(self._x) == 0):
            raise DomainError(_NOT_CONSECUTIVE)
        self._initialize_second_derivatives()
        self._resample()

    def _initialize_second_derivatives(self) -> None:
        x, y = self._x, self._y
        n = x.size
        second = np.zeros(n, dtype=float)
        deltas = np.zeros(n, dtype=float)

        # Forward sweep; second[i] temporarily holds the elimination coefficient.
        for i in range(1, n - 1):
            two_step = x[i + 1] - x[i - 1]
            if two_step == 0:
                raise DomainError(_NOT_CONSECUTIVE)
            step = (x[i] - x[i - 1]) / two_step
            p = step * second[i - 1] + 2.0
            second[i] = (step - 1.0) / p

            delta = (y[i + 1] - y[i]) / (x[i + 1] - x[i]) - (y[i] - y[i - 1]) / (x[i] - x[i - 1])
            deltas[i] = (self._factor * delta / two_step - step * deltas[i - 1]) / p

        for i in range(n - 2, -1, -1):
            second[i] = second[i] * second[i + 1] + deltas[i]

        self._second = second

    def _resample(self) -> None:
        n = self._x.size
        if n == 0:
            self._entries = []
            return

        x0, y0 = float(self._x[0]), float(self._y[0])
        count = n * self._factor
        if n == 1:
            self._entries = [(x0, y0)]
            return

        step = _round_half_up((self._x[-1] - self._x[0]) / (count - 1))
        entries = [(x0, y0)]
        for i in range(1, count):
            xi = x0 + i * step
            entries.append((xi, self.interpolate(xi)))
        self._entries = entries

    def interpolate(self, x: float) -> float:
        """Evaluate the spline at ``x``.

        Values outside the input range extrapolate from the nearest interval.
        """
        n = self._x.size
        if n == 0:
            raise DomainError("Cannot interpolate an empty spline.")
        if n == 1:
            return float(self._y[0])

        # Bracketing window of size one: xs[lo] <= x < xs[hi], clamped to the ends.
        lo = int(np.searchsorted(self._x, x, side="right")) - 1
        lo = min(max(lo, 0), n - 2)
        hi = lo + 1

        h = self._x[hi] - self._x[lo]
        if h == 0:
            raise DomainError(_NOT_CONSECUTIVE)

        a = (self._x[hi] - x) / h
        b = (x - self._x[lo]) / h
        linear = a * self._y[lo] + b * self._y[hi]
        curvature = (a ** 3 - a) * self._second[lo] + (b ** 3 - b) * self._second[hi]
        return float(linear + curvature * h * h / self._factor)

    def __repr__(self) -> str:
        return f"Spline(points={self._x.size}, factor={self._factor}, entries={len(self._entries)})"


__all__ = ["DEFAULT_FACTOR", "Spline"]
