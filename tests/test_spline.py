from __future__ import annotations

import numpy as np
import pytest

from chart_toolkit import DomainError, Spline


def test_factor_one_reproduces_input_points() -> None:
    spline = Spline(data={0: 0, 1: 10, 2: 0}, factor=1)

    assert spline.entries == [(0.0, 0.0), (1.0, 10.0), (2.0, 0.0)]
    assert spline.values == {0.0: 0.0, 1.0: 10.0, 2.0: 0.0}


def test_entries_are_sorted_before_fitting() -> None:
    spline = Spline([(2, 0), (0, 0), (1, 10)], factor=1)
    assert spline.data == {0.0: 0.0, 1.0: 10.0, 2.0: 0.0}
    assert [x for x, _ in spline.entries] == [0.0, 1.0, 2.0]


def test_duplicate_x_fails() -> None:
    with pytest.raises(DomainError, match="consecutive"):
        Spline([(0, 0), (0, 5)])


def test_duplicate_interior_x_fails() -> None:
    with pytest.raises(DomainError):
        Spline([(0, 0), (1, 1), (1, 2), (3, 0)])


def test_empty_input_has_no_entries() -> None:
    spline = Spline([])
    assert spline.entries == []
    assert len(spline) == 0


def test_single_point_resamples_to_itself() -> None:
    spline = Spline([(4, 2)])
    assert spline.entries == [(4.0, 2.0)]


def test_output_count_is_points_times_factor() -> None:
    spline = Spline(data={0: 1, 100: 5, 200: 3, 300: 8}, factor=10)
    assert len(spline.entries) == 40
    assert spline.entries[0] == (0.0, 1.0)


def test_step_is_rounded_span_over_count() -> None:
    spline = Spline(data={0: 0, 10: 5, 20: 0}, factor=2)
    xs = [x for x, _ in spline.entries]
    # span 20 over 5 gaps is 4
    assert xs == [0.0, 4.0, 8.0, 12.0, 16.0, 20.0]


def test_step_rounding_may_miss_last_x() -> None:
    spline = Spline(data={0: 0, 5: 1, 10: 0}, factor=3)
    xs = [x for x, _ in spline.entries]
    # 10 / 8 rounds to 1, so the walk stops at 8
    assert xs[-1] == 8.0


def test_collinear_points_stay_on_the_line() -> None:
    spline = Spline(data={0: 0, 10: 5, 20: 10}, factor=10)

    xs = np.array([x for x, _ in spline.entries])
    ys = np.array([y for _, y in spline.entries])
    np.testing.assert_allclose(ys, xs / 2, atol=1e-9)
    np.testing.assert_allclose(spline.second_derivatives, 0.0, atol=1e-12)


def test_natural_boundary_second_derivatives_are_zero() -> None:
    spline = Spline(data={0: 0, 1: 3, 2: -1, 3: 4}, factor=5)
    second = spline.second_derivatives
    assert second[0] == 0.0
    assert second[-1] == 0.0
    assert np.any(second[1:-1] != 0.0)


def test_interpolation_passes_through_knots() -> None:
    points = {0: 1.0, 2: 4.0, 5: -2.0, 9: 3.0}
    spline = Spline(data=points, factor=4)
    for x, y in points.items():
        assert spline.interpolate(x) == pytest.approx(y)


def test_factor_must_be_integer() -> None:
    spline = Spline(data={0: 0, 1: 1}, factor=2)
    with pytest.raises(DomainError):
        spline.factor = 2.5
    with pytest.raises(DomainError):
        spline.factor = True
    with pytest.raises(DomainError):
        spline.factor = 0
    assert spline.factor == 2


def test_constructor_rejects_non_integer_factor() -> None:
    with pytest.raises(DomainError):
        Spline(data={0: 0, 1: 1}, factor="10")


def test_changing_factor_resamples_consistently() -> None:
    points = {0: 0, 10: 8, 20: 2, 30: 6}
    spline = Spline(data=points, factor=2)
    spline.factor = 5

    fresh = Spline(data=points, factor=5)
    assert len(spline.entries) == 20
    np.testing.assert_allclose(spline.entries, fresh.entries)
    np.testing.assert_allclose(spline.second_derivatives, fresh.second_derivatives)


def test_setting_entries_recomputes() -> None:
    spline = Spline(data={0: 0, 1: 10, 2: 0}, factor=1)
    spline.entries = [(0, 1), (1, 1), (2, 1)]
    assert spline.entries == [(0.0, 1.0), (1.0, 1.0), (2.0, 1.0)]
