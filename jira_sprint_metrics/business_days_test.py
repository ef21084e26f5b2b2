"""Tests for the business day calendar in Jira Sprint Metrics."""

import datetime

import pytest

from .business_days import (
    business_days_between,
    is_business_day,
    iter_days,
    shift_business_days,
)

MONDAY = datetime.date(2024, 1, 1)
FRIDAY = datetime.date(2024, 1, 5)
SATURDAY = datetime.date(2024, 1, 6)
SUNDAY = datetime.date(2024, 1, 7)
NEXT_MONDAY = datetime.date(2024, 1, 8)


def test_is_business_day():
    """Test is_business_day functionality."""
    assert is_business_day(MONDAY)
    assert is_business_day(FRIDAY)
    assert not is_business_day(SATURDAY)
    assert not is_business_day(SUNDAY)
    assert is_business_day(datetime.datetime(2024, 1, 2, 23, 59))


def test_business_days_between_same_day():
    """Test the start day itself is never credited."""
    assert business_days_between(MONDAY, MONDAY) == 0


def test_business_days_between_within_a_week():
    """Test counting within a week."""
    assert business_days_between(MONDAY, datetime.date(2024, 1, 2)) == 1
    assert business_days_between(MONDAY, FRIDAY) == 4


def test_business_days_between_skips_weekends():
    """Test weekends are not counted."""
    assert business_days_between(FRIDAY, SATURDAY) == 0
    assert business_days_between(FRIDAY, SUNDAY) == 0
    assert business_days_between(FRIDAY, NEXT_MONDAY) == 1
    assert business_days_between(SATURDAY, NEXT_MONDAY) == 1


def test_business_days_between_two_week_sprint():
    """Test a Monday to Friday two-week sprint."""
    assert business_days_between(MONDAY, datetime.date(2024, 1, 12)) == 9
    assert business_days_between(MONDAY, NEXT_MONDAY) == 5


def test_business_days_between_end_before_start():
    """Test a reversed range counts nothing."""
    assert business_days_between(FRIDAY, MONDAY) == 0


def test_business_days_between_accepts_datetimes():
    """Test the time of day is ignored."""
    start = datetime.datetime(2024, 1, 1, 17, 30, tzinfo=datetime.timezone.utc)
    end = datetime.datetime(2024, 1, 5, 8, 0, tzinfo=datetime.timezone.utc)
    assert business_days_between(start, end) == 4


def test_shift_business_days_forward():
    """Test shifting forward skips the weekend."""
    assert shift_business_days(FRIDAY, 1) == NEXT_MONDAY
    assert shift_business_days(MONDAY, 5) == NEXT_MONDAY
    assert shift_business_days(SATURDAY, 1) == NEXT_MONDAY


def test_shift_business_days_backward():
    """Test shifting backward skips the weekend."""
    assert shift_business_days(NEXT_MONDAY, -1) == FRIDAY
    assert shift_business_days(NEXT_MONDAY, -5) == MONDAY


def test_shift_business_days_zero():
    """Test a zero shift is the identity."""
    assert shift_business_days(SUNDAY, 0) == SUNDAY


@pytest.mark.parametrize("start", [MONDAY, FRIDAY, SATURDAY, SUNDAY])
@pytest.mark.parametrize("n", [0, 1, 4, 5, 6, 12])
def test_shift_then_count_is_identity(start, n):
    """Test counting the days of a shift gives the shift back."""
    assert business_days_between(start, shift_business_days(start, n)) == n


def test_iter_days():
    """Test iter_days is inclusive at both ends."""
    assert list(iter_days(FRIDAY, NEXT_MONDAY)) == [FRIDAY, SATURDAY, SUNDAY, NEXT_MONDAY]
    assert not list(iter_days(NEXT_MONDAY, FRIDAY))
