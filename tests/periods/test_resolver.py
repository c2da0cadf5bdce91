from datetime import date, datetime

import pytest

from src.backoffice.backoffice.core.exceptions import ValidationError
from src.backoffice.backoffice.periods.resolver import (
    format_period,
    normalize_period,
    parse_period,
    resolve_interval,
    trailing_months,
)


def test_year_and_month_span_exactly_that_month():
    interval = resolve_interval(year=2025, month=2)
    assert interval.start == datetime(2025, 2, 1, 0, 0, 0)
    assert interval.end == datetime(2025, 3, 1, 0, 0, 0)


@pytest.mark.parametrize("year, last_day", [(2024, 29), (2025, 28)])
def test_february_boundary_in_leap_and_common_years(year, last_day):
    interval = resolve_interval(year=year, month=2)
    assert interval.contains(date(year, 2, last_day))
    assert not interval.contains(date(year, 3, 1))
    assert (interval.end - interval.start).days == last_day


def test_december_rolls_into_next_year():
    interval = resolve_interval(year="2025", month="12")
    assert interval.end == datetime(2026, 1, 1)


def test_year_only_spans_calendar_year():
    interval = resolve_interval(year=2025)
    assert interval.start == datetime(2025, 1, 1)
    assert interval.end == datetime(2026, 1, 1)


def test_month_without_year_uses_current_year():
    interval = resolve_interval(month=3, today=date(2031, 7, 15))
    assert interval.start == datetime(2031, 3, 1)


def test_explicit_range_wins_over_year_month():
    interval = resolve_interval(start="2025-01-10", end="2025-01-12", year=2024, month=5)
    assert interval.start == datetime(2025, 1, 10)
    # end day is inclusive
    assert interval.end == datetime(2025, 1, 13)


def test_nothing_given_resolves_to_none():
    assert resolve_interval() is None


@pytest.mark.parametrize("month", [0, 13, "abc"])
def test_invalid_month_rejected(month):
    with pytest.raises(ValidationError):
        resolve_interval(year=2025, month=month)


def test_unparseable_year_rejected():
    with pytest.raises(ValidationError):
        resolve_interval(year="twenty", month=1)


def test_range_end_before_start_rejected():
    with pytest.raises(ValidationError):
        resolve_interval(start="2025-02-10", end="2025-02-01")


def test_parse_period_string():
    interval = parse_period("06-2025")
    assert interval.start == datetime(2025, 6, 1)
    assert interval.end == datetime(2025, 7, 1)


@pytest.mark.parametrize("bad", ["2025-06", "13-2025", "", None, "June 2025"])
def test_malformed_period_rejected(bad):
    with pytest.raises(ValidationError):
        parse_period(bad)


def test_period_normalisation():
    assert normalize_period("6-2025") == "06-2025"
    assert format_period(2025, 1) == "01-2025"


def test_trailing_months_window():
    interval = trailing_months(6, today=date(2025, 8, 31))
    assert interval.start == datetime(2025, 2, 28)
    assert interval.end == datetime(2025, 9, 1)


def test_trailing_months_window_is_capped():
    with pytest.raises(ValidationError):
        trailing_months(100000, today=date(2025, 6, 1))
