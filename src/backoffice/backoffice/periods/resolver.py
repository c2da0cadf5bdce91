"""Period resolution: (year, month), explicit ranges or "MM-YYYY" strings to
canonical half-open intervals [start, end).

Pure functions only; nothing here touches storage.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, Union

from ..common.datetime_utils import add_months, coerce_date, now_local, start_of_day
from ..core.constants import MAX_TREND_MONTHS, MAX_YEAR, MIN_YEAR
from ..core.exceptions import ValidationError

_PERIOD = re.compile(r"^\s*(\d{1,2})-(\d{4})\s*$")

DateLike = Union[str, date, datetime]


@dataclass(frozen=True)
class DateInterval:
    """Half-open interval: start inclusive, end exclusive."""

    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, value: Union[date, datetime]) -> bool:
        if not isinstance(value, datetime):
            value = start_of_day(value)
        return self.start <= value < self.end


def parse_year(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Invalid year value", field="year")
    try:
        year = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid year value", field="year")
    if year < MIN_YEAR or year > MAX_YEAR:
        raise ValidationError("Invalid year value", field="year")
    return year


def parse_month(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Invalid month value (1-12)", field="month")
    try:
        month = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid month value (1-12)", field="month")
    if month < 1 or month > 12:
        raise ValidationError("Invalid month value (1-12)", field="month")
    return month


def month_interval(year: int, month: int) -> DateInterval:
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return DateInterval(start=start, end=end)


def year_interval(year: int) -> DateInterval:
    return DateInterval(start=datetime(year, 1, 1), end=datetime(year + 1, 1, 1))


def day_interval(value: DateLike) -> DateInterval:
    start = start_of_day(coerce_date(value))
    return DateInterval(start=start, end=start + timedelta(days=1))


def range_interval(start: DateLike, end: DateLike) -> DateInterval:
    """Inclusive calendar-day range [start, end] as [start 00:00, end+1 00:00)."""
    start_d = coerce_date(start, "start_date")
    end_d = coerce_date(end, "end_date")
    if end_d < start_d:
        raise ValidationError("end_date cannot be before start_date", field="end_date")
    return DateInterval(start=start_of_day(start_d), end=start_of_day(end_d) + timedelta(days=1))


def resolve_interval(
    *,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    year: Any = None,
    month: Any = None,
    today: Optional[date] = None,
) -> Optional[DateInterval]:
    """Translate filter inputs into an interval, or None when nothing is given.

    An explicit start/end pair wins over year/month. A month without a year
    falls back to the current year.
    """
    if start not in (None, "") and end not in (None, ""):
        return range_interval(start, end)

    has_year = year not in (None, "")
    has_month = month not in (None, "")

    if has_month:
        m = parse_month(month)
        if has_year:
            y = parse_year(year)
        else:
            y = (today or now_local().date()).year
        return month_interval(y, m)

    if has_year:
        return year_interval(parse_year(year))

    return None


def parse_period(period: Any) -> DateInterval:
    """Interval of a pay period string "MM-YYYY"."""
    year, month = split_period(period)
    return month_interval(year, month)


def split_period(period: Any) -> tuple[int, int]:
    if not isinstance(period, str):
        raise ValidationError("Period must be formatted as MM-YYYY", field="period")
    m = _PERIOD.match(period)
    if not m:
        raise ValidationError("Period must be formatted as MM-YYYY", field="period")
    month = parse_month(m.group(1))
    year = parse_year(m.group(2))
    return year, month


def format_period(year: int, month: int) -> str:
    return f"{int(month):02d}-{int(year):04d}"


def normalize_period(period: Any) -> str:
    """Canonical zero-padded form, e.g. "6-2025" -> "06-2025"."""
    year, month = split_period(period)
    return format_period(year, month)


def trailing_months(months: int, *, today: date) -> DateInterval:
    """From `months` calendar months before today through the end of today."""
    if months <= 0:
        raise ValidationError("months must be a positive number", field="months")
    if months > MAX_TREND_MONTHS:
        raise ValidationError(f"months cannot exceed {MAX_TREND_MONTHS}", field="months")
    start = start_of_day(add_months(today, -int(months)))
    return DateInterval(start=start, end=start_of_day(today) + timedelta(days=1))
