"""
Request logging: assigns an X-Request-ID and logs start/end of every request.
"""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("adoptme.http")


class HttpLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        # query params only: bodies and auth headers may carry credentials
        logger.debug(
            f"[{request_id}] {request.method} {request.url.path} - START "
            f"ip={client_ip} query={dict(request.query_params)}"
        )

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        user_id = getattr(request.state, "user_id", None)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"[{request_id}] {request.method} {request.url.path} - {response.status_code} "
            f"{elapsed_ms:.1f}ms user={user_id or '-'}",
        )
        response.headers["X-Request-ID"] = request_id
        return response
