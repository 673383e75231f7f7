"""
Session hardening for cookie sessions: tracks who opened the session and
drops it when the client address changes.
"""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger("adoptme.session")


class SessionSecurityMiddleware(BaseHTTPMiddleware):
    """
    Must sit inside `SessionMiddleware`. Only sessions holding a user are touched.

    - first request: stores `metadata` (created_at, last_activity, ip_address, user_agent)
    - `enforce_ip`: a request from another address clears the session and gets 401
    - after `refresh_after` seconds the session is re-issued with a fresh created_at
    """

    def __init__(self, app: ASGIApp, enforce_ip: bool = False, refresh_after: int = 1800):
        super().__init__(app)
        self.enforce_ip = enforce_ip
        self.refresh_after = refresh_after

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if "session" not in request.scope or not request.session.get("user"):
            return await call_next(request)

        session = request.session
        user_id = session["user"].get("id")
        now = time.time()
        client_ip = request.client.host if request.client else "unknown"

        metadata = session.get("metadata")
        if not metadata:
            metadata = {
                "created_at": now,
                "last_activity": now,
                "ip_address": client_ip,
                "user_agent": request.headers.get("user-agent", "unknown"),
            }

        if self.enforce_ip and metadata["ip_address"] != client_ip:
            logger.warning(
                f"Potential session hijacking for user {user_id}: "
                f"IP changed from {metadata['ip_address']} to {client_ip}"
            )
            session.clear()
            return JSONResponse(status_code=401, content={"detail": "Session security violation detected"})

        if now - metadata["created_at"] > self.refresh_after:
            user = session["user"]
            session.clear()
            session["user"] = user
            metadata["created_at"] = now
            logger.info(f"Session refreshed for user {user_id}")

        metadata["last_activity"] = now
        session["metadata"] = metadata
        return await call_next(request)
