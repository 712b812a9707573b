# validation.py
"""Input rules applied by the HTTP layer before anything reaches the store."""

import re
from typing import Any, Optional

from models import Priority

MAX_TITLE_LENGTH = 200

TITLE_REQUIRED = "Task title is required"
TITLE_TOO_LONG = f"Task title must be {MAX_TITLE_LENGTH} characters or less"
INVALID_PRIORITY = "Invalid priority level"
INVALID_ID = "Valid task ID is required"

VALID_PRIORITIES = frozenset(p.value for p in Priority)

_ID_RE = re.compile(r"-?[0-9]+")


class TaskValidationError(ValueError):
    """Rejected input. ``message`` is what the client sees."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def validate_title(raw: Any) -> str:
    """Return the trimmed title or raise.

    Checked in order: present and non-blank, then at most 200 characters
    after trimming.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise TaskValidationError(TITLE_REQUIRED)
    title = raw.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise TaskValidationError(TITLE_TOO_LONG)
    return title


def normalize_priority(raw: Any) -> str:
    # create: anything unknown quietly becomes medium
    if isinstance(raw, str) and raw in VALID_PRIORITIES:
        return raw
    return Priority.MEDIUM.value


def require_priority(raw: Any) -> str:
    # update: unknown priority is an error
    if isinstance(raw, str) and raw in VALID_PRIORITIES:
        return raw
    raise TaskValidationError(INVALID_PRIORITY)


def parse_task_id(raw: Optional[str]) -> int:
    text = "" if raw is None else str(raw).strip()
    if not _ID_RE.fullmatch(text):
        raise TaskValidationError(INVALID_ID)
    return int(text)
