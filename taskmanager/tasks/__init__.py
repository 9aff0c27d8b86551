from __future__ import annotations

from .errors import InvalidArgument, MalformedInput, NotFound, TaskStoreError, ValidationError
from .models import PRIORITIES, Priority, Task, Violation
from .store import InMemoryTaskStore, TaskStore
from .validation import parse_priority, parse_task_id, validate_task

__all__ = [
    "InMemoryTaskStore",
    "InvalidArgument",
    "MalformedInput",
    "NotFound",
    "PRIORITIES",
    "Priority",
    "Task",
    "TaskStore",
    "TaskStoreError",
    "ValidationError",
    "Violation",
    "parse_priority",
    "parse_task_id",
    "validate_task",
]
