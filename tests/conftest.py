from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi import FastAPI

from taskmanager.gateway.app import create_app
from taskmanager.observability import reset_metrics
from taskmanager.tasks.store import InMemoryTaskStore
from tests.helpers.clock import SteppingClock


@pytest.fixture(autouse=True)
def _fresh_metrics() -> Generator[None, None, None]:
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture()
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore(clock=SteppingClock())


@pytest.fixture()
def app(store: InMemoryTaskStore) -> FastAPI:
    return create_app(store)


@pytest.fixture()
def valid_payload() -> dict[str, object]:
    return {"title": "Write docs", "description": "Document the API", "completed": False}
