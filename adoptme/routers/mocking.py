# adoptme/routers/mocking.py
# Development-only endpoints to fill the database with fake data
from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..services.mocking import MockingService
from ..schemas.stats import GenerateData, GenerationSummary, MockResult

router = APIRouter()


def get_mocking_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> MockingService:
    return MockingService(db)


@router.post("/pets", response_model=MockResult)
async def mock_pets(
    count: int = Query(100, ge=1, le=1000),
    service: MockingService = Depends(get_mocking_service),
):
    created = await service.generate_mock_pets(count)
    return {"message": f"{created} mock pets generated", "count": created}


@router.post("/users", response_model=MockResult)
async def mock_users(
    count: int = Query(50, ge=1, le=500),
    service: MockingService = Depends(get_mocking_service),
):
    """Also creates user@adoptme.com / User123! and admin@adoptme.com / Admin123! when missing."""
    created = await service.generate_mock_users(count)
    return {"message": f"{created} mock users generated", "count": created}


@router.post("/generate-data", response_model=GenerationSummary)
async def generate_data(
    payload: GenerateData,
    service: MockingService = Depends(get_mocking_service),
):
    return await service.generate_data(payload.users, payload.pets)


@router.delete("/pets", response_model=MockResult)
async def clear_pets(service: MockingService = Depends(get_mocking_service)):
    deleted = await service.clear_pets()
    return {"message": f"{deleted} pets deleted", "count": deleted}


@router.delete("/users", response_model=MockResult)
async def clear_users(service: MockingService = Depends(get_mocking_service)):
    deleted = await service.clear_users()
    return {"message": f"{deleted} users deleted", "count": deleted}
