"""Utility functions for the amortization engine.

This module holds the numeric policy shared by every calculator (money and
rate rounding), calendar helpers for payment dates and the small parsers used
by the command line and web front ends to turn user input into ``Decimal`` and
``date`` values.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Optional

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

logger = logging.getLogger(__name__)

MONEY_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.000000000000001")  # 15 decimal places
HUNDRED = Decimal(100)
MONTHS_IN_YEAR = Decimal(12)


def round_money(value: Decimal) -> Decimal:
    """Round ``value`` half-up to cents."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    """Round a ratio (rate, proportion, annuity factor) half-up to 15 places."""
    return value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def monthly_interest_rate(annual_rate: Decimal) -> Decimal:
    """Convert a nominal annual percentage into a monthly decimal rate.

    Both divisions are carried to 15 decimal places, e.g. ``4.56`` becomes
    ``0.0038``.
    """
    return round_rate(round_rate(annual_rate / HUNDRED) / MONTHS_IN_YEAR)


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` (or ``YYYY-MM``) string into a ``date``.

    A missing day component defaults to the first day of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. Shorthand ``k``/``m`` suffixes (``500k``) are expanded. It raises
    ``ValueError`` if conversion fails.
    """
    cleaned = str(value).strip().lower().replace(",", "")
    factor = Decimal(1)
    if cleaned.endswith("k"):
        factor = Decimal(1_000)
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = Decimal(1_000_000)
        cleaned = cleaned[:-1]
    try:
        number = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not number.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return number * factor


def payment_date_for(first_payment_date: Optional[date], month: int) -> Optional[date]:
    """Return the date of payment ``month`` (zero based), or ``None`` if undated.

    Every payment falls on the day of month of the first payment, or on the
    last day of shorter months.
    """
    if first_payment_date is None:
        return None
    payment_date = add_months(first_payment_date, month)
    if payment_date.day != first_payment_date.day:
        logger.info(
            "Cannot use day %s in %s; the last day of the month is used instead",
            first_payment_date.day,
            payment_date.strftime("%Y-%m"),
        )
    return payment_date
