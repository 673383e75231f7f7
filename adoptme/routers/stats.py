from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..services.stats import StatsService
from ..schemas.stats import AppStats, AdoptionSummary

router = APIRouter()


@router.get("", response_model=AppStats)
async def app_stats(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await StatsService(db).get_app_stats()


@router.get("/adoptions", response_model=AdoptionSummary)
async def adoption_summary(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await StatsService(db).get_adoption_summary()
