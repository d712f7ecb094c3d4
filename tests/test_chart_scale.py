from __future__ import annotations

import math

import pytest

from chart_toolkit import ChartData, LinearScale


def _scale(store: ChartData) -> LinearScale:
    return LinearScale(lambda: store)


def test_scale_maps_bounds_to_unit_interval() -> None:
    store = ChartData(values={"a": {0: 10, 4: 30}})
    scale = _scale(store)

    assert scale.scale_x(0) == 0.0
    assert scale.scale_x(4) == 1.0
    assert scale.scale_x(1) == pytest.approx(0.25)
    assert scale.scale_y(20) == pytest.approx(0.5)


def test_scale_follows_manual_bounds() -> None:
    store = ChartData(values={"a": {0: 10, 4: 30}})
    scale = _scale(store)
    store.set_bounds({"x": (2, 8)})

    assert scale.scale_x(5) == pytest.approx(0.5)
    assert scale.scale_x(0) == pytest.approx(-1 / 3)


def test_degenerate_domain_maps_to_midpoint() -> None:
    store = ChartData(values={"a": {3: 7}})
    scale = _scale(store)

    assert scale.scale_x(3) == 0.5
    assert scale.scale_y(100) == 0.5


def test_empty_store_maps_to_midpoint_without_nan() -> None:
    scale = _scale(ChartData())
    value = scale.scale_x(1.0)
    assert value == 0.5
    assert math.isfinite(value)


def test_scale_picks_up_replaced_store() -> None:
    holder = {"store": ChartData(values={"a": {0: 0, 10: 10}})}
    scale = LinearScale(lambda: holder["store"])
    assert scale.scale_x(5) == pytest.approx(0.5)

    holder["store"] = ChartData(values={"a": {0: 0, 100: 10}})
    assert scale.scale_x(5) == pytest.approx(0.05)
