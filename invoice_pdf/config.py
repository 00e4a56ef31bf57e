"""Server configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9000
DEFAULT_MAX_CONCURRENT_RENDERS = max(2, min(8, os.cpu_count() or 2))


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origin: str = "*"
    max_concurrent_renders: int = DEFAULT_MAX_CONCURRENT_RENDERS
    max_inflight_renders: int = DEFAULT_MAX_CONCURRENT_RENDERS * 4
    render_queue_timeout_ms: int = 30000
    render_timeout_ms: int = 60000
    max_body_bytes: int = 20 * 1024 * 1024
    listen_backlog: int = 128


def load_config() -> ServerConfig:
    workers = env_int("INVOICE_MAX_CONCURRENT_RENDERS", DEFAULT_MAX_CONCURRENT_RENDERS)
    return ServerConfig(
        host=env_str("INVOICE_HOST", DEFAULT_HOST),
        port=env_int("INVOICE_PORT", DEFAULT_PORT, minimum=0),
        cors_origin=env_str("INVOICE_CORS_ORIGIN", "*"),
        max_concurrent_renders=workers,
        max_inflight_renders=env_int("INVOICE_MAX_INFLIGHT_RENDERS", workers * 4),
        render_queue_timeout_ms=env_int("INVOICE_RENDER_QUEUE_TIMEOUT_MS", 30000, minimum=0),
        render_timeout_ms=env_int("INVOICE_RENDER_TIMEOUT_MS", 60000, minimum=1000),
        max_body_bytes=env_int("INVOICE_MAX_BODY_BYTES", 20 * 1024 * 1024, minimum=1024),
        listen_backlog=env_int("INVOICE_LISTEN_BACKLOG", 128),
    )
