"""Recognise reporting windows in free-text commands."""

import re
from calendar import monthrange
from datetime import date, datetime, time, timedelta

from intellectory.core.entities.commands import DateRange

_YESTERDAY = re.compile(r"history for yesterday|report for yesterday", re.IGNORECASE)
_LAST_MONTH = re.compile(r"last month", re.IGNORECASE)
_LAST_N_DAYS = re.compile(r"last (\d+) days?", re.IGNORECASE)
_EXPLICIT = re.compile(r"from (\d{4}-\d{2}-\d{2}) to (\d{4}-\d{2}-\d{2})", re.IGNORECASE)


def day_window(start: date, end: date, title: str) -> DateRange:
    """Whole days from `start` 00:00 through the last instant of `end`."""
    return DateRange(
        start=datetime.combine(start, time.min),
        end=datetime.combine(end, time.max),
        title=title,
    )


def parse_date_range(command: str, today: date | None = None) -> DateRange | None:
    """
    Return the reporting window named in `command`, or None.

    Checked in order: yesterday, last month, last N days, explicit
    from/to dates. Every window runs from 00:00 on its first day to the
    last instant of its final day.
    """
    today = today or date.today()

    if _YESTERDAY.search(command):
        yesterday = today - timedelta(days=1)
        return day_window(yesterday, yesterday, "Report for Yesterday")

    if _LAST_MONTH.search(command):
        year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
        last_day = monthrange(year, month)[1]
        return day_window(date(year, month, 1), date(year, month, last_day), "Report for Last Month")

    match = _LAST_N_DAYS.search(command)
    if match:
        days = int(match.group(1))
        if days < 1:
            return None
        start = today - timedelta(days=days - 1)
        return day_window(start, today, f"Report for Last {days} Days")

    match = _EXPLICIT.search(command)
    if match:
        try:
            start = date.fromisoformat(match.group(1))
            end = date.fromisoformat(match.group(2))
        except ValueError:
            return None
        return day_window(start, end, f"Report from {match.group(1)} to {match.group(2)}")

    return None
