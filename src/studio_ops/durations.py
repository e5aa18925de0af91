"""
Calendar duration arithmetic for subscription plans.

Plans are sold as a whole number of days, months or years. End dates are
inclusive: a subscription is valid through the whole of its end date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Union

from dateutil.relativedelta import relativedelta


class InvalidArgument(ValueError):
    """
    Raised for a negative or non-integer amount, an unknown unit, or an end
    date outside the representable range.
    """


class DurationUnit(Enum):
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"

    @classmethod
    def parse(cls, value: Any) -> "DurationUnit":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            for member in cls:
                if text in (member.value, member.value[:-1]):
                    return member
        raise InvalidArgument(
            f"Invalid duration unit: {value!r}. Use 'days', 'months', or 'years'"
        )


UnitLike = Union[DurationUnit, str]


def calendar_date(value: Any) -> date:
    """
    The calendar day of a ``date`` or ``datetime``; the time part is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgument(f"Expected a date, got {value!r}")


def _check_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgument(f"Duration amount must be an integer, got {amount!r}")
    if amount < 0:
        raise InvalidArgument(f"Duration amount must be >= 0, got {amount}")
    return amount


def calculate_end_date(start: date, amount: int, unit: UnitLike) -> date:
    """
    Compute the last valid day of a subscription.

    Parameters
    ----------
    start:
        First valid day.
    amount:
        Whole number of units, >= 0.
    unit:
        ``DurationUnit`` or one of ``'days'``, ``'months'``, ``'years'``.

    Returns
    -------
    date
        Days are counted inclusively (a 1-day pass ends on ``start``).
        Months and years keep the day-of-month, clamped to the last day of
        the target month: Jan 31 + 1 month is Feb 28, Feb 29 + 1 year is
        Feb 28.
    """

    start = calendar_date(start)
    amount = _check_amount(amount)
    unit = DurationUnit.parse(unit)

    try:
        if unit is DurationUnit.DAYS:
            return start + timedelta(days=amount - 1)
        if unit is DurationUnit.MONTHS:
            # relativedelta clamps to the month end rather than rolling over
            return start + relativedelta(months=amount)
        return start + relativedelta(years=amount)
    except (OverflowError, ValueError) as exc:
        raise InvalidArgument(
            f"End date out of range for {start} + {amount} {unit.value}"
        ) from exc


@dataclass(frozen=True)
class DurationSpec:
    """
    A plan duration such as "3 months".
    """

    amount: int
    unit: DurationUnit

    def __post_init__(self) -> None:
        _check_amount(self.amount)
        object.__setattr__(self, "unit", DurationUnit.parse(self.unit))

    def end_date(self, start: date) -> date:
        return calculate_end_date(start, self.amount, self.unit)

    def describe(self) -> str:
        return readable_duration(self.amount, self.unit)


def readable_duration(amount: int, unit: UnitLike) -> str:
    unit = DurationUnit.parse(unit)
    if amount == 1:
        return f"1 {unit.value[:-1]}"
    return f"{amount} {unit.value}"


def days_until(end: date, today: date) -> int:
    """Whole calendar days from ``today`` to ``end``; negative once past."""
    return (calendar_date(end) - calendar_date(today)).days


def is_expired(end: date, today: date) -> bool:
    return calendar_date(end) < calendar_date(today)
