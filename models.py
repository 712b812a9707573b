# models.py
import enum
from datetime import datetime

import pytz
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text

from database import Base


def utcnow() -> datetime:
    # stored naive, always UTC
    return datetime.now(pytz.utc).replace(tzinfo=None)


class Priority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_RANK = {Priority.HIGH: 1, Priority.MEDIUM: 2, Priority.LOW: 3}


class StatusFilter(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class SortKey(str, enum.Enum):
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"
    CREATED_AT = "created_at"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String(10), nullable=False, default=Priority.MEDIUM.value)
    due_date = Column(String, nullable=True)  # date string as sent by the client
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Task id={self.id} title={self.title!r} completed={self.completed}>"
