from __future__ import annotations

import argparse

import uvicorn

from taskmanager.config import ServerConfig, load_config
from taskmanager.gateway.app import create_app
from taskmanager.observability import get_json_logger
from taskmanager.tasks.store import InMemoryTaskStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("taskmanager")
    sub = parser.add_subparsers(dest="cmd")

    p_serve = sub.add_parser("serve", help="Run the Task Manager API server")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    p_serve.add_argument(
        "--log-level", choices=["debug", "info", "warning", "error", "critical"]
    )
    return parser


def resolve_config(args: argparse.Namespace, base: ServerConfig | None = None) -> ServerConfig:
    """Apply command line overrides on top of the environment config."""
    cfg = base or load_config()
    host = getattr(args, "host", None)
    port = getattr(args, "port", None)
    log_level = getattr(args, "log_level", None)
    return ServerConfig(
        host=host or cfg.host,
        port=port if port is not None else cfg.port,
        log_level=log_level or cfg.log_level,
    )


def serve(cfg: ServerConfig) -> None:
    app = create_app(InMemoryTaskStore())
    get_json_logger("taskmanager").info(
        "server starting",
        extra={"event": "server_start", "attributes": {"host": cfg.host, "port": cfg.port}},
    )
    server = uvicorn.Server(
        uvicorn.Config(app, host=cfg.host, port=cfg.port, log_level=cfg.log_level)
    )
    server.run()


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    # "serve" is the only command and also the default
    serve(resolve_config(args))


if __name__ == "__main__":
    main()
