"""Time calculation utilities for the billing engine.

This module provides low-level utilities for time calculations including:
- Rounding instants to a configured resolution
- Normalizing an entry's start/end (rounding plus overnight correction)
- Combining dates and wall-clock times
- Converting between timedelta and decimal hours

These utilities work with naive dt.datetime and dt.timedelta values.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

ONE_DAY = dt.timedelta(days=1)
ONE_HOUR = dt.timedelta(hours=1)
HOURS_PRECISION = Decimal("0.01")


def round_time(value: dt.datetime, resolution_minutes: int) -> dt.datetime:
    """Round an instant to the nearest multiple of the resolution.

    The candidates are the multiple at or below the instant (``down``) and
    the next one (``up``), both counted from midnight of the instant's day.
    Ties go to the later candidate. An instant already on a multiple is
    returned unchanged, so rounding is idempotent.

    Args:
        value: The instant to round
        resolution_minutes: Resolution in minutes (must be positive)

    Returns:
        The rounded instant

    Raises:
        ValueError: If the resolution is not positive

    Example:
        >>> round_time(dt.datetime(2024, 1, 8, 9, 7), 15)
        datetime.datetime(2024, 1, 8, 9, 0)
        >>> round_time(dt.datetime(2024, 1, 8, 9, 8), 15)
        datetime.datetime(2024, 1, 8, 9, 15)
        >>> round_time(dt.datetime(2024, 1, 8, 9, 7, 30), 15)
        datetime.datetime(2024, 1, 8, 9, 15)
        >>> round_time(dt.datetime(2024, 1, 8, 23, 55), 15)
        datetime.datetime(2024, 1, 9, 0, 0)
    """
    if resolution_minutes <= 0:
        raise ValueError(
            f"resolution_minutes must be positive, got {resolution_minutes}"
        )

    resolution = dt.timedelta(minutes=resolution_minutes)
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    down = midnight + ((value - midnight) // resolution) * resolution
    up = down + resolution

    if (up - value) <= (value - down):
        return up
    return down


def normalize_entry_span(
    start: dt.datetime, end: dt.datetime, resolution_minutes: int
) -> Tuple[dt.datetime, dt.datetime]:
    """Round start and end and correct spans that cross midnight.

    Both instants are rounded independently. If afterwards the end is not
    after the start, the entry is taken to span midnight and a day is added
    to the end.

    Args:
        start: Raw start instant
        end: Raw end instant
        resolution_minutes: Resolution in minutes

    Returns:
        Tuple of (rounded start, rounded and corrected end)

    Example:
        >>> normalize_entry_span(
        ...     dt.datetime(2024, 1, 8, 22, 2), dt.datetime(2024, 1, 8, 1, 58), 5
        ... )
        (datetime.datetime(2024, 1, 8, 22, 0), datetime.datetime(2024, 1, 9, 2, 0))
    """
    rounded_start = round_time(start, resolution_minutes)
    rounded_end = round_time(end, resolution_minutes)

    if rounded_end <= rounded_start:
        rounded_end = rounded_end + ONE_DAY

    return rounded_start, rounded_end


def combine_date_time(date: dt.date, time: dt.time) -> dt.datetime:
    """Combine a registration date and a wall-clock time into an instant.

    Example:
        >>> combine_date_time(dt.date(2024, 1, 8), dt.time(9, 30))
        datetime.datetime(2024, 1, 8, 9, 30)
    """
    return dt.datetime.combine(date, time)


def timedelta_to_hours(td: dt.timedelta) -> Decimal:
    """Convert a timedelta to unrounded decimal hours.

    Amounts are computed from these hours; round only for display.

    Example:
        >>> timedelta_to_hours(dt.timedelta(minutes=15))
        Decimal('0.25')
    """
    return Decimal(td // dt.timedelta(microseconds=1)) / Decimal(
        ONE_HOUR // dt.timedelta(microseconds=1)
    )


def round_hours(hours: Decimal) -> Decimal:
    """Round decimal hours to 2 places, halves up."""
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def timedelta_to_decimal_hours(td: dt.timedelta) -> Decimal:
    """Convert a timedelta to decimal hours with 2 decimal precision.

    Args:
        td: Timedelta to convert

    Returns:
        Decimal hours (rounded to 2 decimal places)

    Example:
        >>> timedelta_to_decimal_hours(dt.timedelta(hours=8))
        Decimal('8.00')
        >>> timedelta_to_decimal_hours(dt.timedelta(hours=7, minutes=30))
        Decimal('7.50')
        >>> timedelta_to_decimal_hours(dt.timedelta(minutes=10))
        Decimal('0.17')

    Note:
        For display only. Sums and amounts use timedelta_to_hours.
    """
    return round_hours(timedelta_to_hours(td))
