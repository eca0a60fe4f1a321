"""Day bucketing and date selection for list views."""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Iterable
from typing import Protocol, TypeVar


class Dated(Protocol):
    date: dt.date


T = TypeVar("T", bound=Dated)


def _date_of(item: Dated) -> dt.date:
    return item.date


def group_by_date(
    items: Iterable[T], key: Callable[[T], dt.date] = _date_of
) -> dict[str, list[T]]:
    """Bucket items by calendar day.

    Returns:
        Mapping of `YYYY-MM-DD` to items on that day. Days are in ascending
        order and each bucket keeps the input order of its items.
    """
    buckets: dict[str, list[T]] = {}
    for item in items:
        buckets.setdefault(key(item).isoformat(), []).append(item)
    return {day: buckets[day] for day in sorted(buckets)}


def filter_by_selection(
    items: Iterable[T], selected_date: dt.date, today: dt.date
) -> list[T]:
    """Filter items for a date picked in the history and list views.

    Picking today or a future day shows everything from today onward, not
    only the picked day. Picking a past day shows that day alone.
    """
    if selected_date >= today:
        return [item for item in items if item.date >= today]
    return [item for item in items if item.date == selected_date]


def filter_same_day(items: Iterable[T], day: dt.date) -> list[T]:
    """Keep items dated exactly `day`."""
    return [item for item in items if item.date == day]
