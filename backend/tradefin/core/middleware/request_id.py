from __future__ import annotations

import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tradefin.core.middleware.context import clear_context, get_logger, set_request_id


log = get_logger(__name__)

# Audit rows store the id in a 64-char column.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def _incoming_or_new(raw: str | None) -> str:
    if raw and _VALID_REQUEST_ID.match(raw):
        return raw
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Binds a request id for logs, audit rows and error bodies; echoes it back."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        clear_context()
        request_id = _incoming_or_new(request.headers.get(self.header_name))
        set_request_id(request_id)

        started = time.perf_counter()
        response = await call_next(request)
        response.headers[self.header_name] = request_id
        log.debug(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
