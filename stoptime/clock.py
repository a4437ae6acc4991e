"""Injectable clock used for due-date derivation and default entry dates."""

import datetime as dt
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> dt.datetime:
        ...

    def today(self) -> dt.date:
        ...


class SystemClock:
    """Clock backed by the local system time (naive datetimes)."""

    def now(self) -> dt.datetime:
        return dt.datetime.now()

    def today(self) -> dt.date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant, for deterministic tests and replays.

    Example:
        >>> clock = FixedClock(dt.datetime(2024, 3, 1, 9, 0))
        >>> clock.today()
        datetime.date(2024, 3, 1)
    """

    def __init__(self, instant: dt.datetime):
        self.instant = instant

    def now(self) -> dt.datetime:
        return self.instant

    def today(self) -> dt.date:
        return self.instant.date()

    def advance(self, **kwargs) -> None:
        """Move the clock forward by a timedelta built from ``kwargs``."""
        self.instant = self.instant + dt.timedelta(**kwargs)


def local_now() -> dt.datetime:
    """Return the current local time for column defaults and onupdate hooks."""
    return dt.datetime.now()
