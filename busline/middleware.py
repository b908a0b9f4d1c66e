"""
Request logging hooks: a short request id, method and path are bound to
structlog's context for every log line emitted while handling the request.
"""

import time
import uuid

import structlog
from flask import Flask, g, request

from .logger_config import get_logger

logger = get_logger(__name__)


def register_request_logging(app: Flask) -> None:
    @app.before_request
    def _bind_request_context():
        g.request_id = str(uuid.uuid4())[:8]
        g.request_started = time.perf_counter()
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=g.request_id,
            method=request.method,
            path=request.path,
        )

    @app.after_request
    def _log_request(response):
        started = g.get("request_started")
        duration_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        logger.info("request_completed", status_code=response.status_code, duration_ms=duration_ms)
        if "request_id" in g:
            response.headers["X-Request-ID"] = g.request_id
        return response

    @app.teardown_request
    def _clear_request_context(exc):
        if exc is not None:
            logger.error("request_failed", error=str(exc))
        structlog.contextvars.clear_contextvars()
