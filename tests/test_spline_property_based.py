"""Property-based checks for the spline engine and bounds bookkeeping."""

from __future__ import annotations

import math

import pytest

from chart_toolkit import ChartData, Spline

try:
    from hypothesis import given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


DISTINCT_XS = st.lists(st.integers(min_value=-1000, max_value=1000), min_size=2, max_size=12, unique=True)
FINITE_YS = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)


@given(xs=DISTINCT_XS, data=st.data(), factor=st.integers(min_value=1, max_value=12))
def test_spline_count_and_start(xs, data, factor) -> None:
    ys = data.draw(st.lists(FINITE_YS, min_size=len(xs), max_size=len(xs)))
    spline = Spline(list(zip(xs, ys)), factor=factor)

    entries = spline.entries
    assert len(entries) == len(xs) * factor
    first_x = min(xs)
    assert entries[0] == (float(first_x), float(ys[xs.index(first_x)]))
    assert all(math.isfinite(y) for _, y in entries)


@given(xs=DISTINCT_XS, data=st.data())
def test_spline_hits_every_knot(xs, data) -> None:
    ys = data.draw(st.lists(FINITE_YS, min_size=len(xs), max_size=len(xs)))
    spline = Spline(list(zip(xs, ys)), factor=3)
    for x, y in zip(xs, ys):
        assert spline.interpolate(x) == pytest.approx(y, rel=1e-9, abs=1e-6)


@given(batches=st.lists(st.lists(st.tuples(FINITE_YS, FINITE_YS), max_size=6), min_size=1, max_size=8))
def test_calculated_bounds_match_cumulative_extremes(batches) -> None:
    store = ChartData()
    xs: list[float] = []
    ys: list[float] = []
    for i, points in enumerate(batches):
        store.set_values(f"s{i % 3}", points)
        xs.extend(p[0] for p in points)
        ys.extend(p[1] for p in points)
        if xs:
            assert store.calculated_bounds.x == (min(xs), max(xs))
            assert store.calculated_bounds.y == (min(ys), max(ys))
