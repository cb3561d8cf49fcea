"""
Request context middleware
"""
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
import structlog

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every log line of a request with a request id and logs its outcome.

    The id is taken from the incoming ``X-Request-ID`` header when present and
    echoed back, together with ``X-Process-Time``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request crashed", method=request.method, path=request.url.path)
            raise
        finally:
            elapsed = time.perf_counter() - started
            structlog.contextvars.unbind_contextvars("request_id")

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request handled",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
            client_ip=client_ip(request),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


def client_ip(request: Request) -> str:
    """First address from proxy headers, else the socket peer"""
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")
