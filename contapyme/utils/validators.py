from __future__ import annotations

import datetime as dt

from contapyme.core.config import settings
from contapyme.core.exceptions import InvalidAmountError, InvalidPeriodError

MAX_AMOUNT = 10**12


def validate_period(month: int | None, year: int, today: dt.date | None = None) -> None:
    """Check a filing period; ``month`` is None for annual forms.

    Years run from ``settings.MIN_FILING_YEAR`` to next year inclusive.
    """
    if month is not None and not 1 <= month <= 12:
        raise InvalidPeriodError("month", month, 1, 12)
    max_year = (today or dt.date.today()).year + 1
    if not settings.MIN_FILING_YEAR <= year <= max_year:
        raise InvalidPeriodError("year", year, settings.MIN_FILING_YEAR, max_year)


def validate_amount(value: int | None, field: str, allow_zero: bool = False) -> int:
    """Whole-peso amount: positive (or zero when allowed) and below one trillion."""
    if value is None:
        raise InvalidAmountError(field, value, "is required")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidAmountError(field, value, "must be greater than 0" if not allow_zero else "must not be negative")
    if value > MAX_AMOUNT:
        raise InvalidAmountError(field, value, f"must not exceed {MAX_AMOUNT}")
    return value


def month_bounds(month: int, year: int) -> tuple[dt.datetime, dt.datetime]:
    """First instant and last second of a month, both inclusive."""
    start = dt.datetime(year, month, 1)
    next_month = dt.datetime(year + 1, 1, 1) if month == 12 else dt.datetime(year, month + 1, 1)
    return start, next_month - dt.timedelta(seconds=1)
