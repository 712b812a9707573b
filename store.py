# store.py
"""SQLAlchemy-backed task store.

Every public method is one unit of work: it opens a session from the
factory it was built with, commits, and returns detached ``Task`` rows that
are fully loaded. Callers never see a session.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from sqlalchemy import case

from models import PRIORITY_RANK, Priority, SortKey, StatusFilter, Task, utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "priority", "due_date", "completed"})

# SQLite INTEGER PRIMARY KEY range; ids outside it can never exist
MIN_TASK_ID = -(2 ** 63)
MAX_TASK_ID = 2 ** 63 - 1

_PRIORITY_ORDER = case(
    {p.value: rank for p, rank in PRIORITY_RANK.items()},
    value=Task.priority,
    else_=len(PRIORITY_RANK) + 1,
)


class TaskNotFound(LookupError):
    def __init__(self, task_id: int):
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


def _enum_or_none(enum_cls: Type[enum.Enum], raw: Any):
    if raw is None:
        return None
    try:
        return enum_cls(raw)
    except (ValueError, TypeError):
        return None


@dataclass(frozen=True)
class TaskQuery:
    """Filter + sort for ``TaskStore.query``.

    ``status`` and ``priority`` combine with AND; ``None`` means no filter.
    """

    status: Optional[StatusFilter] = None
    priority: Optional[Priority] = None
    sort: SortKey = SortKey.CREATED_AT

    @classmethod
    def from_params(
        cls,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> "TaskQuery":
        """Build a query from raw query-string values; unknown values are ignored."""
        return cls(
            status=_enum_or_none(StatusFilter, status),
            priority=_enum_or_none(Priority, priority),
            sort=_enum_or_none(SortKey, sort) or SortKey.CREATED_AT,
        )

    def order_by(self) -> tuple:
        if self.sort is SortKey.DUE_DATE:
            # tasks without a due date go last
            return (Task.due_date.is_(None), Task.due_date.asc(), Task.id.asc())
        if self.sort is SortKey.PRIORITY:
            return (_PRIORITY_ORDER, Task.id.asc())
        if self.sort is SortKey.TITLE:
            return (Task.title.asc(), Task.id.asc())
        return (Task.created_at.desc(), Task.id.desc())


class TaskStore:
    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory
        # one shared in-memory connection: keep statements from interleaving
        self._lock = threading.RLock()

    # ---- helpers ----

    @staticmethod
    def _storable(task_id: int) -> bool:
        return MIN_TASK_ID <= task_id <= MAX_TASK_ID

    @classmethod
    def _get(cls, db, task_id: int) -> Optional[Task]:
        if not cls._storable(task_id):
            return None
        return db.query(Task).filter(Task.id == task_id).first()

    @staticmethod
    def _touch(task: Task) -> None:
        now = utcnow()
        if task.updated_at is not None and now <= task.updated_at:
            now = task.updated_at + timedelta(microseconds=1)
        task.updated_at = now

    # ---- public API ----

    def insert(
        self,
        *,
        title: str,
        description: Optional[str] = None,
        priority: str = Priority.MEDIUM.value,
        due_date: Optional[str] = None,
    ) -> Task:
        now = utcnow()
        with self._lock, self._session_factory() as db:
            task = Task(
                title=title,
                description=description,
                priority=priority,
                due_date=due_date,
                completed=False,
                created_at=now,
                updated_at=now,
            )
            db.add(task)
            db.commit()
            db.refresh(task)
            logger.debug("Task added id=%s priority=%s due_date=%s", task.id, task.priority, task.due_date)
            return task

    def find_by_id(self, task_id: int) -> Optional[Task]:
        with self._lock, self._session_factory() as db:
            return self._get(db, task_id)

    def query(self, query: Optional[TaskQuery] = None) -> List[Task]:
        query = query or TaskQuery()
        with self._lock, self._session_factory() as db:
            q = db.query(Task)
            if query.status is not None:
                q = q.filter(Task.completed == (query.status is StatusFilter.COMPLETED))
            if query.priority is not None:
                q = q.filter(Task.priority == query.priority.value)
            return q.order_by(*query.order_by()).all()

    def update(self, task_id: int, fields: Mapping[str, Any]) -> Task:
        """Merge only the keys present in ``fields``; ``updated_at`` is always refreshed."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update fields: {sorted(unknown)}")

        with self._lock, self._session_factory() as db:
            task = self._get(db, task_id)
            if task is None:
                raise TaskNotFound(task_id)
            for key, value in fields.items():
                if key == "completed":
                    value = bool(value)
                setattr(task, key, value)
            self._touch(task)
            db.commit()
            db.refresh(task)
            logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
            return task

    def toggle_completed(self, task_id: int) -> Task:
        with self._lock, self._session_factory() as db:
            task = self._get(db, task_id)
            if task is None:
                raise TaskNotFound(task_id)
            task.completed = not task.completed
            self._touch(task)
            db.commit()
            db.refresh(task)
            logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)
            return task

    def delete(self, task_id: int) -> bool:
        if not self._storable(task_id):
            return False
        with self._lock, self._session_factory() as db:
            n = db.query(Task).filter(Task.id == task_id).delete(synchronize_session=False)
            db.commit()
            if n:
                logger.debug("Task deleted id=%s", task_id)
            return n > 0

    def count(self) -> int:
        with self._lock, self._session_factory() as db:
            return db.query(Task).count()

    def seed(self, tasks: Iterable[Dict[str, Any]]) -> int:
        added = 0
        for fields in tasks:
            self.insert(**fields)
            added += 1
        logger.info("Seeded %s sample tasks", added)
        return added
