"""Time entry data model.

A time entry is a single recorded span of work on a task. Its start and
end are stored already rounded to the configured resolution; the duration
is always derived from them.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from stoptime.calculators.time_utils import timedelta_to_decimal_hours
from stoptime.models.base import BaseDataModel


class TimeEntry(BaseDataModel):
    """Represents a single span of recorded work.

    Attributes:
        id: Storage id (None until persisted)
        task_id: Id of the owning task
        date: Date the work was registered for
        start: Rounded start instant
        end: Rounded end instant (after overnight correction)
        comment: Free-text description of the work
        bill: Operator's default billing intent for this entry

    Example:
        >>> entry = TimeEntry(
        ...     task_id=1,
        ...     date=dt.date(2024, 3, 4),
        ...     start=dt.datetime(2024, 3, 4, 9, 0),
        ...     end=dt.datetime(2024, 3, 4, 11, 30),
        ... )
        >>> entry.hours_total
        Decimal('2.50')
    """

    id: Optional[int] = None
    task_id: Optional[int] = None
    date: dt.date = Field(..., description="Date of work")
    start: dt.datetime = Field(..., description="Rounded start instant")
    end: dt.datetime = Field(..., description="Rounded end instant")
    comment: Optional[str] = Field(None, description="Free-text comment")
    bill: bool = Field(True, description="Whether the entry should be billed")

    @model_validator(mode="after")
    def validate_time_logic(self) -> "TimeEntry":
        """Validate that the entry spans a positive amount of time.

        Returns:
            The validated model instance

        Raises:
            ValueError: If end is not after start
        """
        if self.end <= self.start:
            raise ValueError(
                f"end ({self.end}) must be after start ({self.start})"
            )
        return self

    @property
    def duration(self) -> dt.timedelta:
        return self.end - self.start

    @property
    def hours_total(self) -> Decimal:
        return timedelta_to_decimal_hours(self.duration)
