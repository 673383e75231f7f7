from datetime import datetime
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from starlette.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import get_settings
from .db import close_db
from .middleware.http_logger import HttpLoggerMiddleware
from .middleware.session_security import SessionSecurityMiddleware
from .routers import auth, users, pets, adoptions, notifications, stats, health

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# app-wide throttle; register/login add their own tighter limits
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.throttle_limit}/{settings.throttle_ttl} seconds"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.app_name} starting (env={settings.env})")
    yield
    close_db()
    logger.info(f"{settings.app_name} stopped")


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.mount("/media", StaticFiles(directory=settings.media_dir), name="media")


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "status_code": 500,
            "timestamp": datetime.utcnow().isoformat(),
            "path": request.url.path,
            "method": request.method,
            "message": "Internal server error",
        },
    )


# Middleware: the last one added runs first
app.add_middleware(
    SessionSecurityMiddleware,
    enforce_ip=settings.env == "prod",
    refresh_after=settings.session_refresh_seconds,
)
app.add_middleware(SlowAPIMiddleware)

# CORS per environment
if settings.env == "dev":
    cors_origins = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    cors_regex = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"
    cors_headers = ["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With", "X-Request-ID"]
else:
    frontend_url = settings.frontend_base_url
    cors_origins = [frontend_url] if frontend_url else []
    cors_regex = None
    cors_headers = ["Authorization", "Content-Type", "Accept", "X-Request-ID"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=cors_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=cors_headers,
    expose_headers=["Content-Type", "X-Request-ID"],
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    session_cookie=settings.session_name,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.session_https_only,
)
app.add_middleware(HttpLoggerMiddleware)

# Routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(pets.router, prefix="/pets", tags=["pets"])
app.include_router(adoptions.router, prefix="/adoptions", tags=["adoptions"])
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])

# Fake data endpoints (dev only)
if settings.env == "dev":
    from .routers import mocking
    app.include_router(mocking.router, prefix="/mocks", tags=["mocks"])
