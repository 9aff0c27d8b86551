from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["low", "medium", "high"]

PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_PRIORITY: Priority = "medium"


def _to_camel(string: str) -> str:
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class Task(BaseModel):
    """A task record held by the store.

    - ``id`` and ``created_at`` are fixed at creation
    - Serialized with camelCase keys (``createdAt``) via ``to_json``
    """

    model_config = ConfigDict(alias_generator=_to_camel, populate_by_name=True)

    id: int = Field(gt=0)
    title: str
    description: str
    completed: bool = False
    priority: Priority = DEFAULT_PRIORITY
    created_at: _dt.datetime = Field(default_factory=lambda: _dt.datetime.now(_dt.UTC))

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True, slots=True)
class Violation:
    """One failed validation rule, tagged by field and rule name."""

    field: str
    rule: str
    message: str


__all__ = ["DEFAULT_PRIORITY", "PRIORITIES", "Priority", "Task", "Violation"]
