from __future__ import annotations

import datetime as _dt
import threading
from collections.abc import Callable, Mapping
from typing import Any

from .errors import NotFound, ValidationError
from .models import DEFAULT_PRIORITY, Task
from .validation import parse_priority, parse_task_id, validate_task

SORT_FIELDS = {"createdAt", "created_at"}
TASK_NOT_FOUND = "Task not found"

_MUTABLE_FIELDS = ("title", "description", "completed", "priority")


class TaskStore:
    """Pluggable task store interface.

    Ids may be passed as ints or as raw path segments; raw segments are parsed
    with ``parse_task_id``. Failures are raised as ``TaskStoreError`` subclasses.
    """

    def list_tasks(
        self, *, completed: bool | None = None, sort: str | None = None, order: str | None = None
    ) -> list[Task]:  # pragma: no cover - interface only
        raise NotImplementedError

    def list_by_priority(self, level: str) -> list[Task]:  # pragma: no cover - interface only
        raise NotImplementedError

    def get_task(self, task_id: int | str) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def create_task(self, payload: Mapping[str, Any]) -> Task:  # pragma: no cover
        raise NotImplementedError

    def update_task(
        self, task_id: int | str, payload: Mapping[str, Any]
    ) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def delete_task(self, task_id: int | str) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError


class InMemoryTaskStore(TaskStore):
    """Process-local task store.

    - Tasks are kept in insertion order; reads return copies of the list
    - New ids are ``max(existing ids) + 1`` (or 1), recomputed on each create,
      so deleting the highest id lets that id be handed out again
    - A single re-entrant lock serializes every operation
    """

    def __init__(self, *, clock: Callable[[], _dt.datetime] | None = None) -> None:
        self._tasks: list[Task] = []
        self._lock = threading.RLock()
        self._clock = clock or (lambda: _dt.datetime.now(_dt.UTC))

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    # helpers
    @staticmethod
    def _coerce_id(task_id: int | str) -> int:
        if isinstance(task_id, int) and not isinstance(task_id, bool):
            return task_id
        return parse_task_id(str(task_id))

    def _index_of(self, task_id: int | str) -> int:
        tid = self._coerce_id(task_id)
        for i, task in enumerate(self._tasks):
            if task.id == tid:
                return i
        raise NotFound(TASK_NOT_FOUND)

    def _next_id(self) -> int:
        if not self._tasks:
            return 1
        return max(t.id for t in self._tasks) + 1

    def list_tasks(
        self, *, completed: bool | None = None, sort: str | None = None, order: str | None = None
    ) -> list[Task]:
        with self._lock:
            tasks = list(self._tasks)
        if completed is not None:
            tasks = [t for t in tasks if t.completed is completed]
        if sort in SORT_FIELDS:
            # sorted() is stable for both directions, so equal timestamps keep insertion order
            tasks = sorted(tasks, key=lambda t: t.created_at, reverse=order == "desc")
        return tasks

    def list_by_priority(self, level: str) -> list[Task]:
        wanted = parse_priority(level)
        with self._lock:
            return [t for t in self._tasks if (t.priority or DEFAULT_PRIORITY) == wanted]

    def get_task(self, task_id: int | str) -> Task:
        with self._lock:
            return self._tasks[self._index_of(task_id)]

    def create_task(self, payload: Mapping[str, Any]) -> Task:
        violations = validate_task(payload)
        if violations:
            raise ValidationError(violations)
        with self._lock:
            task = Task(
                id=self._next_id(),
                title=payload["title"].strip(),
                description=payload["description"].strip(),
                completed=payload["completed"],
                priority=(payload.get("priority") or DEFAULT_PRIORITY).lower(),
                created_at=self._clock(),
            )
            self._tasks.append(task)
        return task

    def update_task(self, task_id: int | str, payload: Mapping[str, Any]) -> Task:
        with self._lock:
            index = self._index_of(task_id)
            violations = validate_task(payload, partial=True)
            if violations:
                raise ValidationError(violations)
            current = self._tasks[index]
            changes: dict[str, Any] = {}
            for name in _MUTABLE_FIELDS:
                if name in payload:
                    changes[name] = payload[name]
            for name in ("title", "description"):
                if name in changes:
                    changes[name] = changes[name].strip()
            if changes.get("priority"):
                changes["priority"] = changes["priority"].lower()
            else:
                # null or "" keeps the stored priority instead of blanking it
                changes.pop("priority", None)
            # id and created_at are never taken from the payload
            updated = current.model_copy(update=changes)
            self._tasks[index] = updated
        return updated

    def delete_task(self, task_id: int | str) -> Task:
        with self._lock:
            index = self._index_of(task_id)
            return self._tasks.pop(index)


__all__ = ["InMemoryTaskStore", "SORT_FIELDS", "TASK_NOT_FOUND", "TaskStore"]
