"""Billing period calculation.

The invoice covers one calendar month in the account's timezone, from the
first day at 00:00:00 to the last day at 23:59:59. The start can be moved
back by a number of weeks to pick up entries that were logged late.
"""

import datetime as dt
from calendar import monthrange
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class InvalidTimezoneError(ValueError):
    """Raised when the account timezone is missing or not a known IANA name."""


@dataclass
class BillingWindow:
    """Time window whose entries are considered for the invoice.

    Attributes:
        start: Window start (inclusive), timezone-aware
        end: Window end (inclusive), timezone-aware
        year: Invoiced year
        month: Invoiced month
    """

    start: dt.datetime
    end: dt.datetime
    year: int
    month: int

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def last_day_of_month(year: int, month: int) -> int:
    """Return the last day of the month, accounting for leap years.

    Example:
        >>> last_day_of_month(2024, 2)
        29
    """
    return monthrange(year, month)[1]


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """Turn an IANA timezone name into a ``ZoneInfo``.

    Raises:
        InvalidTimezoneError: If the name is empty or unknown
    """
    if not name:
        raise InvalidTimezoneError("Account has no timezone set")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimezoneError(f"Unknown timezone: {name}") from e


def parse_month(value: str) -> tuple:
    """Parse ``YYYY-MM`` into ``(year, month)``.

    Raises:
        ValueError: If the format is invalid
    """
    try:
        parsed = dt.datetime.strptime(value, "%Y-%m")
    except ValueError:
        raise ValueError(f"Invalid month format: {value}. Expected YYYY-MM")
    return parsed.year, parsed.month


def compute_billing_window(
    timezone: str,
    now: Optional[dt.datetime] = None,
    lookback_weeks: int = 0,
    month: Optional[str] = None,
) -> BillingWindow:
    """Compute the invoice window for a month in the given timezone.

    Args:
        timezone: IANA timezone name of the account (e.g. "Europe/Berlin")
        now: Reference time; defaults to the current time. Naive values are
            taken to be in ``timezone``
        lookback_weeks: Weeks to move the window start back by
        month: Explicit month as ``YYYY-MM``; overrides ``now``

    Returns:
        BillingWindow for the month

    Raises:
        InvalidTimezoneError: If the timezone is unknown
        ValueError: If ``month`` is malformed or ``lookback_weeks`` negative

    Example:
        >>> window = compute_billing_window("UTC", month="2024-02")
        >>> window.start_iso, window.end_iso
        ('2024-02-01T00:00:00+00:00', '2024-02-29T23:59:59+00:00')
    """
    if lookback_weeks < 0:
        raise ValueError("lookback_weeks must be >= 0")

    tz = resolve_timezone(timezone)

    if month is not None:
        year, month_num = parse_month(month)
    else:
        if now is None:
            now = dt.datetime.now(tz)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=tz)
        else:
            now = now.astimezone(tz)
        year, month_num = now.year, now.month

    start = dt.datetime(year, month_num, 1, 0, 0, 0, tzinfo=tz)
    end = dt.datetime(
        year, month_num, last_day_of_month(year, month_num), 23, 59, 59, tzinfo=tz
    )

    if lookback_weeks:
        start = start - dt.timedelta(weeks=lookback_weeks)

    return BillingWindow(start=start, end=end, year=year, month=month_num)
