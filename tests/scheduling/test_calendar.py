"""Tests for day bucketing and history date selection."""

import datetime as dt

from salon.scheduling.calendar import filter_by_selection, filter_same_day, group_by_date

TODAY = dt.date(2024, 6, 10)
YESTERDAY = dt.date(2024, 6, 9)
NEXT_WEEK = dt.date(2024, 6, 15)


def test_selecting_today_shows_today_and_future(make_record) -> None:
    """Today or later lists everything from today onward."""
    records = [
        make_record(date=YESTERDAY),
        make_record(date=TODAY),
        make_record(date=NEXT_WEEK),
    ]

    selected = filter_by_selection(records, TODAY, TODAY)

    assert [record.date for record in selected] == [TODAY, NEXT_WEEK]


def test_selecting_future_day_still_starts_at_today(make_record) -> None:
    """A future pick is not narrowed to the picked day."""
    records = [make_record(date=TODAY), make_record(date=NEXT_WEEK)]

    selected = filter_by_selection(records, NEXT_WEEK, TODAY)

    assert [record.date for record in selected] == [TODAY, NEXT_WEEK]


def test_selecting_past_day_shows_that_day_only(make_record) -> None:
    """A past pick shows exactly that day."""
    records = [
        make_record(date=YESTERDAY),
        make_record(date=TODAY),
        make_record(date=dt.date(2024, 6, 8)),
    ]

    selected = filter_by_selection(records, YESTERDAY, TODAY)

    assert [record.date for record in selected] == [YESTERDAY]


def test_group_by_date_sorts_days_and_keeps_item_order(make_record) -> None:
    """Buckets are ascending by day and keep input order inside."""
    records = [
        make_record(date=NEXT_WEEK, time=dt.time(12, 0)),
        make_record(date=TODAY, time=dt.time(15, 0)),
        make_record(date=NEXT_WEEK, time=dt.time(9, 0)),
        make_record(date=TODAY, time=dt.time(8, 0)),
    ]

    days = group_by_date(records)

    assert list(days) == ["2024-06-10", "2024-06-15"]
    assert [record.id for record in days["2024-06-10"]] == [2, 4]
    assert [record.id for record in days["2024-06-15"]] == [1, 3]


def test_group_by_date_accepts_key(make_record) -> None:
    """A custom key picks the date to bucket by."""
    records = [make_record(date=TODAY)]

    days = group_by_date(records, key=lambda record: YESTERDAY)

    assert list(days) == ["2024-06-09"]


def test_filter_same_day(make_record) -> None:
    """Only exact matches survive."""
    records = [make_record(date=TODAY), make_record(date=NEXT_WEEK)]

    assert [record.date for record in filter_same_day(records, NEXT_WEEK)] == [NEXT_WEEK]


def test_empty_inputs() -> None:
    """Nothing in, nothing out."""
    assert group_by_date([]) == {}
    assert filter_by_selection([], TODAY, TODAY) == []
