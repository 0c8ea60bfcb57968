"""
Mushroom Hunter Backend — Request ID Middleware
=================================================

What:  Assigns a short id to each request and returns it as `X-Request-ID`.
How:   A client-provided `X-Request-ID` is reused when it is a plain token
       (letters, digits, `.`, `_`, `-`, at most 64 chars); anything else is
       replaced by the first 8 characters of a UUID4. The id is written
       into access log lines and error envelopes, so raw header text never
       reaches either. It lives in a ContextVar so loggers and exception
       handlers can read it without access to the request.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CLIENT_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


def resolve_request_id(header_value: Optional[str]) -> str:
    """The client's id when it is safe to log, otherwise a fresh one."""
    if header_value and CLIENT_REQUEST_ID.fullmatch(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
