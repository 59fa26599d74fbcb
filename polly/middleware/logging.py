"""Logging middleware for request tracking."""
import re
import time
import uuid
from typing import Callable, Optional
from urllib.parse import urlencode

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)

# Accept an upstream request id only if it looks like one
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]{8,64}$")

# Query keys whose values never reach the logs
REDACTED_QUERY_KEYS = frozenset({"csrf_token", "password"})


def loggable_query(query_params) -> Optional[str]:
    """Query string for the request log, with token and password values masked."""
    if not query_params:
        return None
    pairs = [
        (key, "***" if key in REDACTED_QUERY_KEYS else value)
        for key, value in query_params.multi_items()
    ]
    return urlencode(pairs, safe="*")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its start, end and duration."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get("X-Request-ID", "")
        request_id = incoming if REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())

        # Endpoints read it from request.state; logs get it from contextvars
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        start_time = time.time()
        logger.info("request_started", query_params=loggable_query(request.query_params))

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round((time.time() - start_time) * 1000, 2),
            )
            raise

        response.headers["X-Request-ID"] = request_id

        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        return response
