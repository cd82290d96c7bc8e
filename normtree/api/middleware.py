from __future__ import annotations

import logging
import time
from typing import Callable, Optional
from uuid import uuid4

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

log = logging.getLogger("normtree.api")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlate a request with its log record through X-Request-ID.

    A client-supplied id is echoed back only if it is short; otherwise a
    fresh one is generated.
    """

    def __init__(self, app, *, header_name: str = "X-Request-ID", max_len: int = 128):
        super().__init__(app)
        self._header_name = header_name
        self._max_len = max_len

    async def dispatch(self, request: Request, call_next: Callable):
        supplied = request.headers.get(self._header_name) or ""
        request_id = supplied if 0 < len(supplied) <= self._max_len else uuid4().hex
        request.state.request_id = request_id
        response: Response = await call_next(request)
        response.headers[self._header_name] = request_id
        return response


class BodySizeLimitMiddleware:
    """Reject request bodies larger than max_body_bytes with 413.

    A declared Content-Length is checked up front. Bodies without one
    (chunked uploads) are counted as they are received; the endpoint reading
    the body gets a 413 HTTPException once the running total passes the limit.
    """

    def __init__(self, app: ASGIApp, *, max_body_bytes: int):
        self.app = app
        self._max_body_bytes = int(max_body_bytes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Request(scope).headers.get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                await JSONResponse({"detail": "invalid_content_length"}, status_code=400)(scope, receive, send)
                return
            if size > self._max_body_bytes:
                await JSONResponse({"detail": "body_too_large"}, status_code=413)(scope, receive, send)
                return

        received = 0
        response_started = False

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self._max_body_bytes:
                    raise HTTPException(status_code=413, detail="body_too_large")
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except HTTPException as e:
            # only reached when nothing below turned the 413 into a response
            if e.status_code != 413 or response_started:
                raise
            await JSONResponse({"detail": e.detail}, status_code=413)(scope, receive, send)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One structured log record per request. Request bodies are never logged.

    Endpoints that normalize set request.state.entity_count and
    request.state.conflict_count; both are logged when present.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.monotonic()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            return response
        finally:
            log.info(
                "api_request",
                extra={
                    "request_id": getattr(request.state, "request_id", None),
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": int((time.monotonic() - start) * 1000),
                    "entity_count": getattr(request.state, "entity_count", None),
                    "conflict_count": getattr(request.state, "conflict_count", None),
                },
            )
