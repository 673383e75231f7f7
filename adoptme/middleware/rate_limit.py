"""
Per-endpoint rate limiting on top of slowapi.
"""
from fastapi import Request, HTTPException
from limits import parse
from slowapi.util import get_remote_address


def apply_rate_limit(request: Request, limit: str) -> None:
    """
    Counts one hit for the caller's IP against `limit` (e.g. "5/minute").

    Does nothing when no limiter is configured on the app or when the
    limiter is disabled (tests install one with `enabled=False`).
    """
    limiter = getattr(request.app.state, "limiter", None)
    if limiter is None or not getattr(limiter, "enabled", True):
        return

    key = f"{request.url.path}:{get_remote_address(request)}"
    if not limiter.limiter.hit(parse(limit), key):
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Limit: {limit}. Try again later.",
        )
