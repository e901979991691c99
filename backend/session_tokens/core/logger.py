"""JSON logging with per-request correlation ids.

Every record carries the id of the request it was emitted in. The id is taken
from an incoming ``X-Request-ID``/``X-Correlation-ID`` header when the caller
(or the proxy in front of us) sent one, otherwise a UUID is minted. It is
echoed back in the ``X-Request-ID`` response header and in problem bodies.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
INCOMING_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra=`` keys copied into the JSON payload
EXTRA_KEYS = ("endpoint", "elapsed_ms", "user_id", "record_id", "email", "password", "deleted")

# Stand-in written instead of secrets
MASK = "******"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        method = getattr(record, "method", None)
        if method:
            payload["method"] = method
            payload["path"] = getattr(record, "path", None)
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp records with the request id, method and path (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            record.method = request.method
            record.path = request.path
        else:
            record.request_id = None
        return True


def _incoming_request_id() -> str | None:
    for header in INCOMING_ID_HEADERS:
        value = request.headers.get(header, "").strip()
        if value:
            return value
    return None


def ensure_request_id() -> str:
    """Return the id of the current request, assigning one on first use."""

    if not has_request_context():
        return str(uuid4())
    request_id = getattr(g, "request_id", None)
    if request_id is None:
        request_id = _incoming_request_id() or str(uuid4())
        g.request_id = request_id
    return request_id


def _level_from(level: str | int) -> int | str:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else level.upper()


def configure_logging(level: str | int = "INFO") -> None:
    """Send all records to stdout as JSON at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_level_from(level))


def init_app(app: Flask) -> None:
    """Assign a request id before each request and echo it on the response."""

    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _assign_request_id() -> None:
        # ``g`` can outlive a request when an app context is already pushed
        g.request_id = _incoming_request_id() or str(uuid4())

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["MASK", "configure_logging", "ensure_request_id", "init_app"]
