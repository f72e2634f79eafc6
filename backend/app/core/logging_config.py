"""
Structured logging for the employee records service.

Production emits one JSON object per line; development gets a coloured,
human-readable line. Request context (request id, method, path, status,
duration) passed via `extra=` is rendered by both formatters.
"""

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from app.core.config import settings

SERVICE_NAME = "employee-records-service"

# Context fields attached by RequestLoggingMiddleware
REQUEST_FIELDS = ("request_id", "method", "path", "status", "duration_ms")

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiokafka", "httpx")


def _request_context(record: logging.LogRecord) -> dict:
    return {field: getattr(record, field) for field in REQUEST_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """JSON lines for log shipping."""

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "service": self.service_name,
            "env": settings.ENVIRONMENT,
            "where": f"{record.module}:{record.lineno}",
        }
        entry.update(_request_context(record))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Console output for local development."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
        line = f"{color}{stamp} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        request_id = getattr(record, "request_id", None)
        if request_id:
            line += f" [{request_id}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    service_name: str = SERVICE_NAME,
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        service_name: Value of the "service" field in JSON output
        log_level: Override level name; defaults to DEBUG when settings.DEBUG is on
        json_logs: Override output format; defaults to JSON in production
    """
    level = (log_level or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    use_json = settings.IS_PRODUCTION if json_logs is None else json_logs

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service_name) if use_json else ColoredFormatter())
    handler.set_name(SERVICE_NAME)

    # Replace only our own handler on repeat calls
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == SERVICE_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("employees").debug(
        f"Logging ready (level={level}, json={use_json}, env={settings.ENVIRONMENT})"
    )


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestLoggingMiddleware:
    """
    ASGI middleware that writes one access line per request.

    The request id is stored on `request.state.request_id` for handlers
    and returned to the caller in the X-Request-ID header.
    """

    SKIP_PATHS = ("/health", "/metrics")

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger("employees.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["path"] in self.SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        request_id = generate_request_id()
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                message.setdefault("headers", [])
                message["headers"] = list(message["headers"]) + [
                    (b"x-request-id", request_id.encode("latin-1"))
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 1)
            self.logger.log(
                logging.WARNING if status_code >= 400 else logging.INFO,
                f"{scope['method']} {scope['path']} {status_code} {duration_ms}ms",
                extra={
                    "request_id": request_id,
                    "method": scope["method"],
                    "path": scope["path"],
                    "status": status_code,
                    "duration_ms": duration_ms,
                },
            )
