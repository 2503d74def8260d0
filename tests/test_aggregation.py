from datetime import date

import pytest

from playawards.aggregation import (
    aggregate,
    best_single_session,
    first_played,
    lifetime_hours,
    sorted_in_window_entries,
)
from playawards.periods import window_for


def test_aggregate_sums_hours_and_sessions_in_month(make_item):
    item = make_item("Nova Quest", [("2024-01-05", 3), ("2024-01-20", 1)])

    (row,) = aggregate([item], window_for("month", 2024, 1))

    assert row.item is item
    assert row.total_hours == pytest.approx(4.0)
    assert row.session_count == 2


def test_aggregate_window_bounds_are_inclusive(make_item):
    item = make_item(
        "Echo Runner",
        [
            ("2023-12-31", 10),
            ("2024-01-01", 1.5),
            ("2024-01-31", 2.5),
            ("2024-02-01", 20),
        ],
    )

    (row,) = aggregate([item], window_for("month", 2024, 1))

    assert row.total_hours == pytest.approx(4.0)
    assert row.session_count == 2


def test_aggregate_skips_items_without_window_activity(make_item):
    idle = make_item("Idle", [("2023-06-01", 4)])
    unplayed = make_item("Unplayed")
    first = make_item("First", [("2024-01-02", 1)])
    second = make_item("Second", [("2024-01-03", 9)])

    rows = aggregate([first, idle, unplayed, second], window_for("month", 2024, 1))

    assert [row.name for row in rows] == ["First", "Second"]
    assert aggregate([], window_for("month", 2024, 1)) == []


def test_best_single_session(make_item):
    item = make_item("Skyline", [("2024-01-02", 1), ("2024-01-09", 4.5), ("2024-02-01", 8)])
    january = window_for("month", 2024, 1)

    assert best_single_session(item, january) == pytest.approx(4.5)
    assert best_single_session(item, window_for("month", 2024, 3)) == 0.0


def test_sorted_entries_are_stable_for_same_day(make_item):
    item = make_item(
        "Lagoon Archive",
        [("2024-01-10", 2), ("2024-01-05", 1), ("2024-01-10", 3), ("2024-02-10", 7)],
    )

    entries = sorted_in_window_entries(item, window_for("month", 2024, 1))

    assert [(entry.day, entry.hours) for entry in entries] == [
        (date(2024, 1, 5), 1),
        (date(2024, 1, 10), 2),
        (date(2024, 1, 10), 3),
    ]
    # Input history keeps its insertion order.
    assert item.history[0].day == date(2024, 1, 10)


def test_lifetime_helpers(make_item):
    item = make_item("Veteran", [("2023-05-01", 2), ("2022-01-01", 3)], base_hours=10)

    assert lifetime_hours(item) == pytest.approx(15.0)
    assert first_played(item) == date(2022, 1, 1)
    assert first_played(make_item("Fresh")) is None
