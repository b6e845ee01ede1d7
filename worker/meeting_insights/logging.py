"""JSON logging for the worker.

Every record is one JSON object per line. Callers attach structured data with
``extra={"fields": {...}}``; those keys are merged into the object, e.g.

    logger.debug("meeting reconciled", extra={"fields": {"meeting_id": 4, "tasks": 3}})
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Any, Dict, Mapping

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

# Loggers used across the package: requests, extraction, reconciliation
APP_LOGGERS = ("app", "app.access", "app.parsing", "app.reconcile")

_RESERVED = frozenset(("level", "ts", "logger", "message", "exc_info"))


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data: Dict[str, Any] = {
            "level": record.levelname,
            "ts": int(record.created * 1000),
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, Mapping):
            data.update((k, v) for k, v in fields.items() if k not in _RESERVED)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


def resolve_level(value: str | None, default: int = logging.INFO) -> int:
    """Level from a name ("debug") or a number ("10"); `default` when unusable."""
    if not value or not value.strip():
        return default
    value = value.strip()
    if value.isdigit():
        return int(value)
    lvl = logging.getLevelName(value.upper())
    return lvl if isinstance(lvl, int) else default


def setup_logging(level: int | None = None) -> None:
    resolved_level = level if level is not None else resolve_level(os.getenv("INSIGHTS_LOG_LEVEL"))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(resolved_level)
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(resolved_level)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request.state.request_id = uuid.uuid4().hex[:12]
        start = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        logging.getLogger("app.access").info(
            "%s %s", request.method, request.url.path,
            extra={"fields": {
                "request_id": request.state.request_id,
                "status": response.status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            }},
        )
        return response


def install_app_logging(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)
