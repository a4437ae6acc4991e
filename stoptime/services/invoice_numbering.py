"""Invoice numbering.

Invoice numbers have the form ``YYYYSS``: the four-digit year followed by a
sequence number of at least two digits that restarts at 01 every year.
The sequence is derived from the last stored invoice; no counter is kept.
"""

import datetime as dt
from typing import Optional

FIRST_SEQUENCE = 1


def invoice_year(number: int) -> int:
    """Year encoded in the first four digits of an invoice number."""
    return int(str(number)[:4])


def invoice_sequence(number: int) -> int:
    """Sequence number within the year of an invoice number."""
    return int(str(number)[4:])


def next_invoice_number(last_number: Optional[int], today: dt.date) -> int:
    """Return the number for the next invoice.

    Args:
        last_number: Number of the most recently created invoice, if any
        today: Current date

    Returns:
        The next sequence number within the same year, otherwise the
        first number of ``today``'s year

    Example:
        >>> next_invoice_number(None, dt.date(2024, 5, 1))
        202401
        >>> next_invoice_number(202407, dt.date(2024, 5, 1))
        202408
        >>> next_invoice_number(202407, dt.date(2025, 1, 2))
        202501
        >>> next_invoice_number(202499, dt.date(2024, 12, 1))
        2024100
    """
    if last_number is None or invoice_year(last_number) != today.year:
        return int(f"{today.year}{FIRST_SEQUENCE:02d}")
    return int(f"{today.year}{invoice_sequence(last_number) + 1:02d}")
