"""Reporting windows: preset/custom resolution and the comparison period."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from storefront_analytics.services.records import as_utc, parse_timestamp


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class InvalidRangeError(AnalyticsError, ValueError):
    """A date range request cannot be resolved to a valid window."""


class DatePreset(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    CUSTOM = "custom"


PRESET_DAYS = {
    DatePreset.LAST_7_DAYS: 7,
    DatePreset.LAST_30_DAYS: 30,
    DatePreset.LAST_90_DAYS: 90,
}

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateRange:
    """Inclusive window ``[start, end]`` in UTC."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRangeError(
                f"Range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts <= self.end

    @property
    def days(self) -> int:
        """Whole days covered, rounded up."""
        return math.ceil((self.end - self.start) / ONE_DAY)


def start_of_day(dt: datetime) -> datetime:
    return datetime.combine(as_utc(dt).date(), time.min, tzinfo=timezone.utc)


def end_of_day(dt: datetime) -> datetime:
    return datetime.combine(as_utc(dt).date(), time.max, tzinfo=timezone.utc)


def resolve_date_range(
    preset: Union[DatePreset, str],
    custom_start: Optional[Union[datetime, str]] = None,
    custom_end: Optional[Union[datetime, str]] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Turn a preset or custom request into a normalized window."""
    try:
        preset = DatePreset(preset)
    except ValueError:
        raise InvalidRangeError(f"Unknown period preset: {preset!r}") from None

    if preset == DatePreset.CUSTOM:
        if custom_start is None or custom_end is None:
            raise InvalidRangeError("Custom date range requires start and end dates")
        try:
            start = parse_timestamp(custom_start)
            end = parse_timestamp(custom_end)
        except ValueError as e:
            raise InvalidRangeError(str(e)) from None
        if start is None or end is None:
            raise InvalidRangeError("Custom date range requires start and end dates")
        return DateRange(start=start_of_day(start), end=end_of_day(end))

    now = as_utc(now) if now else datetime.now(timezone.utc)
    return DateRange(
        start=start_of_day(now - timedelta(days=PRESET_DAYS[preset])),
        end=end_of_day(now),
    )


def previous_period(current: DateRange) -> DateRange:
    """The equal-length window immediately preceding ``current``."""
    shift = timedelta(days=current.days)
    return DateRange(
        start=start_of_day(current.start - shift),
        end=end_of_day(current.end - shift),
    )
