from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "info"


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int
    log_level: str


def _parse_port(raw: str | None) -> int:
    value = (raw or "").strip()
    if not value:
        return DEFAULT_PORT
    try:
        port = int(value)
    except ValueError:
        return DEFAULT_PORT
    return port if 0 < port < 65536 else DEFAULT_PORT


def load_config(env: Mapping[str, str] | None = None) -> ServerConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    return ServerConfig(
        host=(e.get("HOST") or "").strip() or DEFAULT_HOST,
        port=_parse_port(e.get("PORT")),
        log_level=(e.get("LOG_LEVEL") or "").strip().lower() or DEFAULT_LOG_LEVEL,
    )


__all__ = ["ServerConfig", "load_config"]
