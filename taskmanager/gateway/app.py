from __future__ import annotations

import json
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskmanager.observability import (
    configure_uvicorn_logging,
    get_json_logger,
    get_metrics,
    use_request_context,
)
from taskmanager.tasks.errors import MalformedInput, TaskStoreError, ValidationError
from taskmanager.tasks.store import TaskStore

WELCOME_MESSAGE = "Welcome to the Task Manager API"
INVALID_JSON = "Invalid JSON format"
ROUTE_NOT_FOUND = "Route not found"
INTERNAL_ERROR = "Internal server error"
REQUEST_ID_HEADER = "X-Request-ID"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


async def _read_json_object(request: Request) -> dict[str, Any]:
    """Decode the request body as a JSON object; an empty body reads as ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedInput(INVALID_JSON) from exc
    if not isinstance(data, dict):
        raise MalformedInput(INVALID_JSON)
    return data


def create_app(store: TaskStore) -> FastAPI:
    # Slash variants read as unknown routes rather than redirects
    app = FastAPI(title="Task Manager API", redirect_slashes=False)
    # Configure uvicorn logging at app creation to avoid import-time side effects
    configure_uvicorn_logging()
    logger = get_json_logger("taskmanager.gateway")

    @app.middleware("http")
    async def request_boundary(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        started = time.perf_counter()
        with use_request_context(request_id, request.method, request.url.path):
            try:
                response = await call_next(request)
            except Exception:
                logger.error(
                    "unhandled error",
                    exc_info=True,
                    extra={"event": "http_error", "service": "gateway"},
                )
                get_metrics().increment("http_errors", {"method": request.method})
                response = _error(500, INTERNAL_ERROR)
            duration_ms = (time.perf_counter() - started) * 1000.0
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "request handled",
                extra={
                    "event": "http_request",
                    "service": "gateway",
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 3),
                },
            )
            get_metrics().increment(
                "http_requests", {"method": request.method, "status": str(response.status_code)}
            )
        return response

    @app.exception_handler(TaskStoreError)
    async def _task_error(request: Request, exc: TaskStoreError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            logger.warning(
                "task rejected",
                extra={
                    "event": "task_rejected",
                    "service": "gateway",
                    "attributes": {"violations": [v.field for v in exc.violations]},
                },
            )
            get_metrics().increment("task_validation_errors", {"method": request.method})
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown paths and unsupported methods on known paths both read as "no such route"
        if exc.status_code in (404, 405):
            return _error(404, ROUTE_NOT_FOUND)
        return _error(exc.status_code, str(exc.detail))

    @app.api_route("/", methods=["GET", "HEAD"])
    async def root() -> dict[str, str]:
        return {"message": WELCOME_MESSAGE}

    @app.api_route("/health", methods=["GET", "HEAD"])
    async def health() -> dict[str, str]:  # lightweight healthcheck endpoint
        return {"status": "ok"}

    @app.api_route("/tasks", methods=["GET", "HEAD"])
    async def list_tasks(
        completed: str | None = None, sort: str | None = None, order: str | None = None
    ) -> list[dict[str, Any]]:
        wanted = None if completed is None else completed == "true"
        tasks = store.list_tasks(completed=wanted, sort=sort, order=order)
        return [t.to_json() for t in tasks]

    # Registered before /tasks/{task_id} so "priority" is not read as an id
    @app.api_route("/tasks/priority/{level}", methods=["GET", "HEAD"])
    async def list_by_priority(level: str) -> list[dict[str, Any]]:
        return [t.to_json() for t in store.list_by_priority(level)]

    @app.api_route("/tasks/{task_id}", methods=["GET", "HEAD"])
    async def get_task(task_id: str) -> dict[str, Any]:
        return store.get_task(task_id).to_json()

    @app.post("/tasks", status_code=201)
    async def create_task(request: Request) -> dict[str, Any]:
        payload = await _read_json_object(request)
        task = store.create_task(payload)
        logger.info(
            "task created",
            extra={"event": "task_created", "service": "gateway", "task_id": task.id},
        )
        get_metrics().increment("tasks_created", {"priority": task.priority})
        return task.to_json()

    @app.put("/tasks/{task_id}")
    async def update_task(task_id: str, request: Request) -> dict[str, Any]:
        payload = await _read_json_object(request)
        task = store.update_task(task_id, payload)
        logger.info(
            "task updated",
            extra={
                "event": "task_updated",
                "service": "gateway",
                "task_id": task.id,
                "attributes": {"fields": sorted(payload)},
            },
        )
        get_metrics().increment("tasks_updated", {})
        return task.to_json()

    @app.delete("/tasks/{task_id}")
    async def delete_task(task_id: str) -> dict[str, Any]:
        task = store.delete_task(task_id)
        logger.info(
            "task deleted",
            extra={"event": "task_deleted", "service": "gateway", "task_id": task.id},
        )
        get_metrics().increment("tasks_deleted", {})
        return task.to_json()

    return app


__all__ = ["create_app"]
