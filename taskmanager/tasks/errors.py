from __future__ import annotations

from collections.abc import Sequence

from .models import Violation


class TaskStoreError(Exception):
    """Base for errors that map onto a client-facing HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskStoreError):
    status_code = 400

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations: list[Violation] = list(violations)
        super().__init__(", ".join(v.message for v in self.violations))


class InvalidArgument(TaskStoreError):
    status_code = 400


class NotFound(TaskStoreError):
    status_code = 404


class MalformedInput(TaskStoreError):
    status_code = 400


__all__ = [
    "InvalidArgument",
    "MalformedInput",
    "NotFound",
    "TaskStoreError",
    "ValidationError",
]
