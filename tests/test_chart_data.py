from __future__ import annotations

import logging
import math

import pytest

from chart_toolkit import ChartData, DegenerateDomainError, ValidationWarning


def test_set_values_sorts_by_formatted_key() -> None:
    store = ChartData()
    store.set_values("a", {"3": "30", "1": "10", "2": "20"}, key_formatter=int, value_formatter=float)

    series = store.get_values("a")
    assert series.x == [1, 2, 3]
    assert series.y == [10.0, 20.0, 30.0]
    assert series.length == 3
    assert series.data == {"3": "30", "1": "10", "2": "20"}


def test_set_values_accepts_pairs_and_keeps_duplicate_x() -> None:
    store = ChartData()
    store.set_values("a", [(2, 1), (0, 5), (2, 3)])

    series = store.get_values("a")
    assert series.x == [0, 2, 2]
    assert series.y == [5, 1, 3]


def test_store_formatters_apply_when_no_override() -> None:
    store = ChartData(key_formatter=float, value_formatter=lambda v: v * 2)
    store.set_values("a", {"1": 1, "0": 4})
    assert store.get_values("a").points() == [(0.0, 8), (1.0, 2)]


def test_set_values_replaces_instead_of_merging() -> None:
    store = ChartData()
    store.set_values("a", {0: 1, 1: 2})
    store.set_values("a", {5: 9})
    assert store.get_values("a").x == [5]


def test_get_values_unknown_id_is_none() -> None:
    assert ChartData().get_values("missing") is None


def test_calculated_bounds_are_cumulative_and_never_shrink() -> None:
    store = ChartData()
    supplied_x: list[float] = []
    supplied_y: list[float] = []

    batches = [
        ("a", {0: 5, 10: 7}),
        ("b", {-3: 2, 4: 20}),
        ("a", {2: 6, 3: 6}),  # narrower replacement of "a"
        ("c", {}),
    ]
    for series_id, points in batches:
        store.set_values(series_id, points)
        supplied_x.extend(points.keys())
        supplied_y.extend(points.values())
        assert store.bounds.x == (min(supplied_x), max(supplied_x))
        assert store.bounds.y == (min(supplied_y), max(supplied_y))

    assert store.bounds.x == (-3, 10)
    assert store.bounds.y == (2, 20)


def test_empty_store_bounds_are_infinite() -> None:
    store = ChartData()
    store.set_values("a", [])
    assert store.bounds.x == (math.inf, -math.inf)


def test_manual_bounds_override_per_axis() -> None:
    store = ChartData()
    store.set_values("a", {0: 1, 10: 4})
    store.set_bounds({"x": [2, 8]})

    assert store.bounds.x == (2, 8)
    assert store.bounds.y == (1, 4)


def test_manual_bounds_none_endpoint_keeps_previous_override() -> None:
    store = ChartData()
    store.set_values("a", {0: 1, 10: 4})
    store.set_bounds({"y": (0, 100)})
    store.set_bounds({"y": (None, 50)})

    assert store.bounds.y == (0, 50)
    assert store.manual_bounds.x == (None, None)


def test_manual_bounds_single_endpoint_falls_back_to_calculated() -> None:
    store = ChartData()
    store.set_values("a", {0: 1, 10: 4})
    store.set_bounds({"x": (None, 20)})
    assert store.bounds.x == (0, 20)


def test_zero_width_manual_bounds_are_rejected_without_change() -> None:
    store = ChartData()
    store.set_bounds({"x": (0, 10)})
    with pytest.raises(DegenerateDomainError):
        store.set_bounds({"x": (5, 5)})
    assert store.bounds.x == (0, 10)


def test_clear_bounds_restores_calculated() -> None:
    store = ChartData()
    store.set_values("a", {0: 1, 10: 4})
    store.set_bounds({"x": (2, 8), "y": (0, 5)})
    store.clear_bounds("x")
    assert store.bounds.x == (0, 10)
    assert store.bounds.y == (0, 5)


def test_info_survives_series_replacement() -> None:
    store = ChartData()
    store.set_info("a", "color", (1, 2, 3))
    store.set_values("a", {0: 1})
    store.set_info("a", {"target": 5, "label": "A"})
    store.set_values("a", {1: 2})

    assert store.get_info("a", "color") == (1, 2, 3)
    assert store.get_info("a", "target") == 5
    assert store.get_info("a", "label") == "A"
    assert store.get_info("missing", "color") is None


def test_malformed_info_is_reported_and_ignored(caplog) -> None:
    store = ChartData()
    store.set_info("a", "color", (1, 2, 3))
    events = []
    store.add_listener(events.append)

    with caplog.at_level(logging.WARNING, logger="chart_toolkit.chart_data"):
        with pytest.warns(ValidationWarning):
            store.set_info("a", 42)

    assert store.get_info("a", "color") == (1, 2, 3)
    assert events == []
    assert "invalid info format" in caplog.text


def test_malformed_options_are_ignored() -> None:
    store = ChartData(options={"grid": {"stepsize": {"x": 1}}})
    with pytest.warns(ValidationWarning):
        store.set_options(["not", "a", "mapping"])
    assert dict(store.options) == {"grid": {"stepsize": {"x": 1}}}


def test_options_single_and_bulk() -> None:
    store = ChartData()
    store.set_options("title", "Weight")
    store.set_options({"unit": "kg", "title": "Mass"})
    assert store.get_option("title") == "Mass"
    assert store.get_option("unit") == "kg"
    assert store.get_option("missing", 3) == 3


def test_each_mutation_emits_exactly_one_event() -> None:
    store = ChartData()
    events = []
    store.add_listener(events.append)

    store.set_values("a", {0: 1})
    store.set_info("a", "color", (0, 0, 0))
    store.set_options("k", 1)
    store.set_bounds({"x": (0, 1)})

    assert [e.reason for e in events] == ["set_values", "set_info", "set_options", "set_bounds"]
    assert all(e.chart_data is store for e in events)
    assert events[0].series_id == "a"


def test_failing_listener_does_not_block_others(caplog) -> None:
    store = ChartData()
    seen = []

    def _boom(_event):
        raise RuntimeError("boom")

    store.add_listener(_boom)
    store.add_listener(seen.append)
    with caplog.at_level(logging.ERROR, logger="chart_toolkit.chart_data"):
        store.set_values("a", {0: 1})

    assert len(seen) == 1
    assert "listener" in caplog.text


def test_remove_listener() -> None:
    store = ChartData()
    seen = []
    handle = store.add_listener(seen.append)
    store.remove_listener(handle)
    store.set_values("a", {0: 1})
    assert seen == []


def test_constructor_options() -> None:
    store = ChartData(
        values={"a": {0: 1, 2: 3}},
        infos={"a": {"target": 2}},
        options={"grid": {}},
        bounds={"y": (0, 10)},
        type="weights",
    )
    assert store.ids == ["a"]
    assert store.get_info("a", "target") == 2
    assert store.bounds.y == (0, 10)
    assert store.type == "weights"


def test_constructor_infos_are_keyed_by_series() -> None:
    store = ChartData(infos={"a": {"target": 2, "color": (1, 2, 3)}, "b": {"target": 7}})
    assert store.ids == ["a", "b"]
    assert store.get_info("a", "color") == (1, 2, 3)
    assert store.get_info("b", "target") == 7
    assert store.get_info("target", "a") is None


def test_revision_counts_change_notifications() -> None:
    store = ChartData()
    assert store.revision == 0
    store.set_values("a", {0: 1})
    store.set_values("a", {0: 1, 1: 2})
    store.set_info("a", "target", 3)
    assert store.revision == 3

    with pytest.warns(ValidationWarning):
        store.set_info("a", 42)
    assert store.revision == 3
