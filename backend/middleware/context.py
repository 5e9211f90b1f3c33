import time
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from config import logger

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id (the caller's X-Request-ID, or a new
    uuid4) so agent and cache log lines for one verification can be
    correlated. The id and the wall time are echoed back as headers.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        elapsed = time.perf_counter() - started

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {elapsed * 1000:.1f}ms",
            extra={"request_id": request_id, "status_code": response.status_code},
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed:.3f}s"
        return response


def get_request_id() -> Optional[str]:
    """Id of the HTTP request being served, or None outside a request."""
    return request_id_var.get()
