# src/todo_tracker/tasks/date_rules.py

"""
Calendar rules for tasks.

- strict YYYY-MM-DD parsing/formatting
- overdue / due-soon status (day granularity, local calendar)
- recurrence rollover

Month and year steps keep the day-of-month and let it overflow into the
following month (Jan 31 + 1 month -> Mar 3 in a non-leap year), the same
normalization a C `mktime` applies to an out-of-range `tm_mday`.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from ..core.errors import InvalidDateFormat
from .task_models import NO_DUE_DATE, Recurrence, Task

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

_DAY_STEPS = {
    Recurrence.DAILY: 1,
    Recurrence.WEEKLY: 7,
    Recurrence.BIWEEKLY: 14,
}


def parse_date(text: str) -> date:
    m = _DATE_RE.fullmatch(text or "")
    if not m:
        raise InvalidDateFormat(text)
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError as e:
        raise InvalidDateFormat(text) from e


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def _try_parse(text: str) -> date | None:
    if text == NO_DUE_DATE:
        return None
    try:
        return parse_date(text)
    except InvalidDateFormat:
        return None


def _today(now: date | datetime | None) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def is_overdue(task: Task, now: date | datetime | None = None) -> bool:
    due = _try_parse(task.due_date)
    if due is None:
        return False
    return _today(now) > due


def is_due_soon(task: Task, now: date | datetime | None = None) -> bool:
    """Due today or tomorrow (0..24h ahead once both sides sit at midnight)."""
    due = _try_parse(task.due_date)
    if due is None:
        return False
    return 0 <= (due - _today(now)).days <= 1


def _carry(year: int, month: int, day: int) -> date:
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def advance(d: date, recurrence: Recurrence) -> date:
    if recurrence in _DAY_STEPS:
        return d + timedelta(days=_DAY_STEPS[recurrence])
    if recurrence == Recurrence.MONTHLY:
        return _carry(d.year, d.month + 1, d.day)
    if recurrence == Recurrence.YEARLY:
        return _carry(d.year + 1, d.month, d.day)
    return d


def advance_text(due_date: str, recurrence: Recurrence) -> str:
    """Roll a stored due date forward; the sentinel and unparseable dates stay as they are."""
    due = _try_parse(due_date)
    if due is None or recurrence == Recurrence.NONE:
        return due_date
    return format_date(advance(due, recurrence))
