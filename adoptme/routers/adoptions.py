from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..security import get_current_user, require_admin
from ..services.adoptions import AdoptionsService
from ..schemas.adoption import (
    AdoptionCreate, AdoptionStatusUpdate, AdoptionOut, AdoptionPage, AdoptionStatus, AdoptionStats,
)

router = APIRouter()


def get_adoptions_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> AdoptionsService:
    return AdoptionsService(db)


@router.post("", response_model=AdoptionOut, status_code=status.HTTP_201_CREATED)
async def create_adoption(
    payload: AdoptionCreate,
    current=Depends(get_current_user),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    return await service.create(payload, current["id"])


@router.get("", response_model=AdoptionPage)
async def list_adoptions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[AdoptionStatus] = Query(None, alias="status"),
    user_id: Optional[str] = None,
    admin=Depends(require_admin),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    return await service.find_all(page, limit, status_filter, user_id)


@router.get("/my-requests", response_model=list[AdoptionOut])
async def my_requests(
    current=Depends(get_current_user),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    return await service.user_adoptions(current["id"])


@router.get("/pending", response_model=list[AdoptionOut])
async def pending_adoptions(
    admin=Depends(require_admin),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    return await service.pending()


@router.get("/stats", response_model=AdoptionStats)
async def adoption_stats(
    admin=Depends(require_admin),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    return await service.stats()


@router.get("/{adoption_id}", response_model=AdoptionOut)
async def get_adoption(
    adoption_id: str,
    current=Depends(get_current_user),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    adoption = await service.find_one(adoption_id)
    owner = (adoption.get("user") or {}).get("id")
    if current["role"] != "admin" and owner != current["id"]:
        raise HTTPException(status_code=403, detail="You can only view your own adoption requests")
    return adoption


@router.patch("/{adoption_id}/status", response_model=AdoptionOut)
async def update_adoption_status(
    adoption_id: str,
    payload: AdoptionStatusUpdate,
    admin=Depends(require_admin),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    return await service.update_status(adoption_id, payload, admin["id"])


@router.delete("/{adoption_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_adoption(
    adoption_id: str,
    current=Depends(get_current_user),
    service: AdoptionsService = Depends(get_adoptions_service),
):
    await service.remove(adoption_id, current)
    return None
