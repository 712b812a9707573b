# schemas.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator


# client -> server (create)
class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_as_text(cls, v: Any) -> Optional[str]:
        # a non-string title counts as missing
        return v if isinstance(v, str) else None

    @field_validator("priority", mode="before")
    @classmethod
    def priority_as_text(cls, v: Any) -> Optional[str]:
        return v if v is None or isinstance(v, str) else str(v)


# client -> server (update)
# only keys present in the body are applied: read with model_dump(exclude_unset=True)
class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_as_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("priority", mode="before")
    @classmethod
    def priority_as_text(cls, v: Any) -> Optional[str]:
        return v if v is None or isinstance(v, str) else str(v)


# server -> client
class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    completed: int  # 0/1 on the wire, not a JSON boolean
    priority: str
    due_date: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("completed", mode="before")
    @classmethod
    def completed_as_int(cls, v: Any) -> int:
        return 1 if v else 0

    class Config:
        from_attributes = True


class TaskDeleted(BaseModel):
    message: str
    id: int


class TaskCounts(BaseModel):
    active: int
    completed: int
    overdue: int
    due_soon: int


class HealthStatus(BaseModel):
    status: str
    message: str


class ErrorResponse(BaseModel):
    error: str
