"""
Logging Middleware

Binds a request id to the structlog context of every HTTP request and
logs one line per completed request. Written as plain ASGI middleware
so background tasks started by a route inherit the bound request id.
"""

import time
import uuid
from typing import Optional, Set

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from chatrelay.utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware:
    """Middleware for request-id propagation and request logging"""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Set[str]] = None):
        self.app = app
        self.exclude_paths = exclude_paths or {"/health", "/metrics"}

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        scope.setdefault("state", {})["request_id"] = request_id

        start_time = time.monotonic()
        status_code = 500

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).append(REQUEST_ID_HEADER, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            path = scope.get("path", "")
            if path not in self.exclude_paths:
                logger.info(
                    "Request completed",
                    method=scope.get("method"),
                    path=path,
                    status_code=status_code,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2)
                )
