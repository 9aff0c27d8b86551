from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .errors import InvalidArgument
from .models import PRIORITIES, Violation

TITLE_REQUIRED = "Title is required and must be a non-empty string"
DESCRIPTION_REQUIRED = "Description is required and must be a non-empty string"
COMPLETED_BOOLEAN = "Completed must be a boolean value"
PRIORITY_CHOICE = "Priority must be one of: low, medium, high"

INVALID_TASK_ID = "Invalid task ID"
INVALID_PRIORITY_LEVEL = "Invalid priority level. Must be one of: low, medium, high"

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_task(payload: Mapping[str, Any], *, partial: bool = False) -> list[Violation]:
    """Check a task payload and return every violated rule, in field order.

    With ``partial=True`` only the keys present in ``payload`` are checked,
    which is how updates are validated. An empty priority counts as omitted.
    """
    violations: list[Violation] = []

    if not partial or "title" in payload:
        if not _is_non_empty_str(payload.get("title")):
            violations.append(Violation("title", "non_empty_string", TITLE_REQUIRED))

    if not partial or "description" in payload:
        if not _is_non_empty_str(payload.get("description")):
            violations.append(Violation("description", "non_empty_string", DESCRIPTION_REQUIRED))

    if not partial or "completed" in payload:
        if not isinstance(payload.get("completed"), bool):
            violations.append(Violation("completed", "boolean", COMPLETED_BOOLEAN))

    priority = payload.get("priority")
    if priority not in (None, ""):
        if not isinstance(priority, str) or priority.lower() not in PRIORITIES:
            violations.append(Violation("priority", "choice", PRIORITY_CHOICE))

    return violations


def parse_task_id(raw: str) -> int:
    """Parse the leading integer of a path segment ("12", " 7", "3abc" -> 3)."""
    match = _LEADING_INT.match(raw)
    if match is None:
        raise InvalidArgument(INVALID_TASK_ID)
    return int(match.group(1))


def parse_priority(raw: str) -> str:
    level = raw.lower()
    if level not in PRIORITIES:
        raise InvalidArgument(INVALID_PRIORITY_LEVEL)
    return level


__all__ = [
    "COMPLETED_BOOLEAN",
    "DESCRIPTION_REQUIRED",
    "INVALID_PRIORITY_LEVEL",
    "INVALID_TASK_ID",
    "PRIORITY_CHOICE",
    "TITLE_REQUIRED",
    "parse_priority",
    "parse_task_id",
    "validate_task",
]
