"""
Temporal Bucketing

Resolves a lookback window into calendar-aligned, non-overlapping periods:
- <= 90 days: weeks starting Monday
- > 90 days: calendar months starting on the 1st

Only periods that lie entirely inside the window are kept. Partial periods
at either edge are dropped so averages are never computed on incomplete data.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

from app.models.enums import Granularity


@dataclass(frozen=True)
class Period:
    """Inclusive date range [start, end]"""
    start: date
    end: date

    def contains(self, value: Union[date, datetime, None]) -> bool:
        if value is None:
            return False
        if isinstance(value, datetime):
            value = value.date()
        return self.start <= value <= self.end

    def label(self, granularity: Granularity) -> str:
        if granularity == Granularity.WEEK:
            return f"Week of {self.start.isoformat()}"
        return self.start.strftime("%Y-%m")


def lookback_window(range_days: int, today: date) -> Tuple[date, date]:
    """Window [today - range_days, today], both ends inclusive"""
    return today - timedelta(days=range_days), today


def week_start(d: date) -> date:
    """Monday of the week containing d"""
    return d - timedelta(days=d.weekday())


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def next_month_start(d: date) -> date:
    return month_end(d) + timedelta(days=1)


def bucket_bounds(cursor: date, granularity: Granularity) -> Tuple[date, date]:
    """Calendar bucket containing cursor"""
    if granularity == Granularity.WEEK:
        start = week_start(cursor)
        return start, start + timedelta(days=6)
    return month_start(cursor), month_end(cursor)


def build_periods(range_days: int, today: date) -> Tuple[List[Period], Granularity]:
    """
    Walk the lookback window in bucket-sized strides.

    Returns the ascending list of fully-contained periods and the
    granularity used. A window shorter than one bucket yields no periods.
    """
    granularity = Granularity.for_range(range_days)
    window_start, window_end = lookback_window(range_days, today)

    periods: List[Period] = []
    cursor = window_start
    while cursor <= window_end:
        start, end = bucket_bounds(cursor, granularity)
        if start >= window_start and end <= window_end:
            periods.append(Period(start=start, end=end))

        if granularity == Granularity.WEEK:
            cursor += timedelta(days=7)
        else:
            cursor = next_month_start(cursor)

    return periods, granularity
