"""Period parsing and default date ranges."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

from .models import Period, ISO_DATE_FORMAT
from .exceptions import InvalidDateFormatError, InvalidRangeError, ParameterValidationError


MONTH_FORMAT = "%Y-%m"

DAY_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
MONTH_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}")


def _today(now: Optional[datetime] = None) -> date:
    if now is None:
        now = datetime.now(timezone.utc)
    if isinstance(now, datetime):
        return now.date()
    return now


def _add_months(day: date, months: int) -> date:
    """Shift a first-of-month date by a number of months."""
    month_index = day.year * 12 + (day.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def month_period(day: date) -> Period:
    """Calendar month containing the given day."""
    start = date(day.year, day.month, 1)
    return Period(start=start, end=_add_months(start, 1))


def parse_period(text: str, option: Optional[str] = None) -> Period:
    """
    Parse a period from user input.

    Args:
        text: YYYY-MM-DD for a single day or YYYY-MM for a full month
        option: Name of the CLI option the value came from, used in errors

    Returns:
        Period covering the day or month

    Raises:
        InvalidDateFormatError: If the text matches neither format
    """
    value = text or ""

    # strptime alone accepts unpadded fields such as 2024-1-5
    try:
        if DAY_PATTERN.fullmatch(value):
            day = datetime.strptime(value, ISO_DATE_FORMAT).date()
            return Period(start=day, end=day + timedelta(days=1))

        if MONTH_PATTERN.fullmatch(value):
            month = datetime.strptime(value, MONTH_FORMAT).date()
            return month_period(month)
    except ValueError:
        pass

    raise InvalidDateFormatError(text, option)


def default_comparison_periods(now: Optional[datetime] = None) -> Tuple[Period, Period]:
    """Previous calendar month and current calendar month."""
    current = month_period(_today(now))
    previous = Period(start=_add_months(current.start, -1), end=current.start)
    return previous, current


def default_top_period(now: Optional[datetime] = None) -> Period:
    """Current calendar month."""
    return month_period(_today(now))


def trend_window(days: int, now: Optional[datetime] = None) -> Period:
    """
    Window of the last `days` complete days, ending before today.

    Raises:
        ParameterValidationError: If days is less than 1
    """
    if days < 1:
        raise ParameterValidationError("--days must be at least 1", field="days")

    end = _today(now)
    return Period(start=end - timedelta(days=days), end=end)


def validate_period_order(from_period: Period, to_period: Period) -> None:
    """
    Reject comparisons where the from period does not start first.

    Raises:
        InvalidRangeError: If from_period.start >= to_period.start
    """
    if from_period.start >= to_period.start:
        raise InvalidRangeError(
            from_period.start.strftime(ISO_DATE_FORMAT),
            to_period.start.strftime(ISO_DATE_FORMAT),
        )


def resolve_comparison_periods(
    from_text: Optional[str] = None,
    to_text: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[Period, Period]:
    """
    Build the (from, to) pair from optional user input.

    Missing values fall back to the previous and current calendar months.
    """
    default_from, default_to = default_comparison_periods(now)

    from_period = parse_period(from_text, "--from") if from_text else default_from
    to_period = parse_period(to_text, "--to") if to_text else default_to

    validate_period_order(from_period, to_period)
    return from_period, to_period


def resolve_top_period(text: Optional[str] = None, now: Optional[datetime] = None) -> Period:
    """Period for the top view: the given one or the current month."""
    if text:
        return parse_period(text, "--from")
    return default_top_period(now)
