"""
Symbolic time aliases ("today", "last-week", ...).

An alias is a function of "now" returning the start of the period it names.
Weeks start on Sunday; weekends start on Saturday. "next-weekend" is the
first Saturday after today, so midweek it equals "this-weekend".

The default table starts as a copy of CORE_ALIASES. register_alias() changes
it for parsers constructed afterwards; parsers already built keep the table
they captured.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta

AliasFunc = Callable[[datetime], datetime]


def truncate_to_day(moment: datetime) -> datetime:
    """Zero the hour, minute, second and microsecond."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment: datetime) -> datetime:
    """Midnight of the Sunday starting *moment*'s week."""
    days_since_sunday = (moment.weekday() + 1) % 7
    return truncate_to_day(moment) - timedelta(days=days_since_sunday)


def start_of_month(moment: datetime) -> datetime:
    return truncate_to_day(moment).replace(day=1)


def start_of_year(moment: datetime) -> datetime:
    return truncate_to_day(moment).replace(month=1, day=1)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = moment.day
    while True:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


def _this_weekend(now: datetime) -> datetime:
    return start_of_week(now) + timedelta(days=6)


def _next_weekend(now: datetime) -> datetime:
    """The first Saturday after today."""
    days_ahead = (5 - now.weekday()) % 7 or 7
    return truncate_to_day(now) + timedelta(days=days_ahead)


CORE_ALIASES: Mapping[str, AliasFunc] = {
    "today": truncate_to_day,
    "yesterday": lambda now: truncate_to_day(now - timedelta(days=1)),
    "tomorrow": lambda now: truncate_to_day(now + timedelta(days=1)),
    "this-week": start_of_week,
    "last-week": lambda now: start_of_week(now) - timedelta(weeks=1),
    "next-week": lambda now: start_of_week(now) + timedelta(weeks=1),
    "this-weekend": _this_weekend,
    "last-weekend": lambda now: _this_weekend(now) - timedelta(weeks=1),
    "next-weekend": _next_weekend,
    "this-month": start_of_month,
    "last-month": lambda now: add_months(start_of_month(now), -1),
    "next-month": lambda now: add_months(start_of_month(now), 1),
    "this-year": start_of_year,
    "last-year": lambda now: start_of_year(now).replace(year=now.year - 1),
    "next-year": lambda now: start_of_year(now).replace(year=now.year + 1),
}

_default_aliases: dict[str, AliasFunc] = dict(CORE_ALIASES)


def default_aliases() -> dict[str, AliasFunc]:
    """Return a copy of the process-wide alias table."""
    return dict(_default_aliases)


def register_alias(name: str, func: AliasFunc) -> None:
    """Add or replace an alias in the process-wide table."""
    _default_aliases[name] = func


def unregister_alias(name: str) -> None:
    _default_aliases.pop(name, None)


def reset_aliases() -> None:
    _default_aliases.clear()
    _default_aliases.update(CORE_ALIASES)
