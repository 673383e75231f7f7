from datetime import datetime
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config import get_settings
from ..db import get_db
from ..schemas.stats import HealthOut

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


def _base(status: str) -> dict:
    return {
        "status": status,
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.app_name,
        "environment": settings.env,
    }


@router.get("", response_model=HealthOut)
async def health():
    return _base("healthy")


@router.get("/detailed", response_model=HealthOut)
async def health_detailed(db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        await db.command("ping")
    except Exception as exc:
        logger.error(f"Database ping failed: {exc}")
        body = _base("unhealthy")
        body["database"] = {"status": "disconnected", "error": str(exc)}
        return JSONResponse(status_code=503, content=body)

    body = _base("healthy")
    body["database"] = {"status": "connected", "name": settings.db_name}
    return body
