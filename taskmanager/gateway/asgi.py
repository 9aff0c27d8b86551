from __future__ import annotations

from taskmanager.tasks.store import InMemoryTaskStore

from .app import create_app

_store = InMemoryTaskStore()
app = create_app(_store)
