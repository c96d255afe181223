"""Calendar bucketing shared by the time-series aggregators."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Sequence

from storefront_analytics.services.date_range import DateRange


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class Bucket:
    """Half-open span ``[start, end)``."""
    label: str
    start: datetime
    end: datetime


def period_start(d: date, granularity: Granularity) -> date:
    if granularity == Granularity.WEEKLY:
        return d - timedelta(days=d.weekday())  # ISO week starts Monday
    if granularity == Granularity.MONTHLY:
        return d.replace(day=1)
    return d


def next_period_start(start: date, granularity: Granularity) -> date:
    if granularity == Granularity.WEEKLY:
        return start + timedelta(days=7)
    if granularity == Granularity.MONTHLY:
        if start.month == 12:
            return start.replace(year=start.year + 1, month=1, day=1)
        return start.replace(month=start.month + 1, day=1)
    return start + timedelta(days=1)


def bucket_label(start: date, granularity: Granularity) -> str:
    if granularity == Granularity.MONTHLY:
        return start.strftime("%Y-%m")
    return start.isoformat()


def calendar_buckets(date_range: DateRange, granularity: Granularity) -> tuple[Bucket, ...]:
    """One bucket per calendar period touching the range, in order."""
    granularity = Granularity(granularity)
    current = period_start(date_range.start.date(), granularity)
    last = date_range.end.date()
    buckets = []
    while current <= last:
        nxt = next_period_start(current, granularity)
        buckets.append(Bucket(
            label=bucket_label(current, granularity),
            start=_midnight(current),
            end=_midnight(nxt),
        ))
        current = nxt
    return tuple(buckets)


def bucket_index(
    buckets: Sequence[Bucket],
    starts: Sequence[datetime],
    date_range: DateRange,
    ts: datetime,
) -> Optional[int]:
    """Index of the bucket holding ``ts``; None when ``ts`` is outside the range.

    ``starts`` must be the precomputed bucket start instants.
    """
    if not date_range.contains(ts):
        return None
    idx = bisect.bisect_right(starts, ts) - 1
    if idx < 0 or ts >= buckets[idx].end:
        return None
    return idx


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)
