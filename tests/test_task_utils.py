# tests/test_task_utils.py
from datetime import date, datetime
from types import SimpleNamespace

import pytz

from task_utils import count_tasks, get_zone, is_due_soon, is_overdue, now_in, parse_due


def _task(due_date=None, completed=False):
    return SimpleNamespace(due_date=due_date, completed=completed)


def test_parse_due():
    assert parse_due("2026-02-15") == datetime(2026, 2, 15)
    assert parse_due("2026-02-15T09:30:00") == datetime(2026, 2, 15, 9, 30)
    assert parse_due("tomorrow") is None
    assert parse_due(None) is None
    assert parse_due("") is None


def test_is_overdue_only_for_active_tasks_due_before_today():
    today = date(2026, 2, 15)

    assert is_overdue(_task("2026-02-14"), today)
    assert not is_overdue(_task("2026-02-15"), today)
    assert not is_overdue(_task("2026-02-14", completed=True), today)
    assert not is_overdue(_task(None), today)
    assert not is_overdue(_task("someday"), today)


def test_is_due_soon_within_24_hours():
    now = datetime(2026, 2, 14, 12, 0)

    assert is_due_soon(_task("2026-02-15"), now)
    assert not is_due_soon(_task("2026-02-16"), now)
    assert not is_due_soon(_task("2026-02-14"), now)
    assert not is_due_soon(_task("2026-02-15", completed=True), now)


def test_is_due_soon_with_aware_now():
    now = pytz.timezone("Asia/Seoul").localize(datetime(2026, 2, 14, 12, 0))

    assert is_due_soon(_task("2026-02-15"), now)


def test_count_tasks():
    now = pytz.utc.localize(datetime(2026, 2, 15, 12, 0))
    tasks = [
        _task("2026-01-01"),
        _task(None),
        _task("2026-02-16"),
        _task("2026-02-16", completed=True),
        _task("2026-01-01", completed=True),
    ]

    assert count_tasks(tasks, now) == {"active": 3, "completed": 2, "overdue": 1, "due_soon": 1}
    assert count_tasks([], now) == {"active": 0, "completed": 0, "overdue": 0, "due_soon": 0}


def test_unknown_zone_falls_back_to_utc():
    assert get_zone("Mars/Olympus_Mons") is pytz.utc
    assert now_in("Mars/Olympus_Mons").tzinfo is not None
    assert now_in("Asia/Seoul").tzinfo.zone == "Asia/Seoul"
