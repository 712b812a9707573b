# task_utils.py
# Derived task properties. None of these are stored; they are computed on read.
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional

import pytz

logger = logging.getLogger(__name__)

DUE_SOON_WINDOW = timedelta(hours=24)


def get_zone(tz_name: str):
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, using UTC", tz_name)
        return pytz.utc


def now_in(tz_name: str = "UTC") -> datetime:
    return datetime.now(get_zone(tz_name))


def parse_due(value: Optional[str]) -> Optional[datetime]:
    """Due date string -> naive datetime (date-only means midnight). Unparseable -> None."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(value.strip()[:10]), datetime.min.time())
    except ValueError:
        return None


def is_overdue(task: Any, today: date) -> bool:
    # active and due strictly before today
    if task.completed:
        return False
    due = parse_due(task.due_date)
    return due is not None and due.date() < today


def is_due_soon(task: Any, now: datetime) -> bool:
    if task.completed:
        return False
    due = parse_due(task.due_date)
    if due is None:
        return False
    # due dates carry no zone: compare against local wall-clock time
    now = now.replace(tzinfo=None)
    return now < due <= now + DUE_SOON_WINDOW


def count_tasks(tasks: Iterable[Any], now: datetime) -> Dict[str, int]:
    today = now.date()
    counts = {"active": 0, "completed": 0, "overdue": 0, "due_soon": 0}
    for task in tasks:
        if task.completed:
            counts["completed"] += 1
        else:
            counts["active"] += 1
            if is_overdue(task, today):
                counts["overdue"] += 1
            if is_due_soon(task, now):
                counts["due_soon"] += 1
    return counts
