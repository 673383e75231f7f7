from fastapi import APIRouter, Depends, status, Query, UploadFile, File
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..security import get_current_user, require_admin
from ..services.pets import PetsService
from ..uploads import IMAGE_EXTENSIONS, MAX_IMAGE_BYTES, save_upload
from ..schemas.pet import (
    PetCreate, PetUpdate, PetOut, PetPage, PetStatus, PetSpecies, AgeRange, LikeResult,
)

router = APIRouter()


def get_pets_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> PetsService:
    return PetsService(db)


@router.post("", response_model=PetOut, status_code=status.HTTP_201_CREATED)
async def create_pet(
    payload: PetCreate,
    admin=Depends(require_admin),
    service: PetsService = Depends(get_pets_service),
):
    return await service.create(payload, created_by=admin["id"])


@router.get("", response_model=PetPage)
async def list_pets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[PetStatus] = Query(None, alias="status"),
    breed: Optional[str] = None,
    species: Optional[PetSpecies] = None,
    name: Optional[str] = None,
    age_range: Optional[AgeRange] = None,
    service: PetsService = Depends(get_pets_service),
):
    return await service.find_all(page, limit, status_filter, breed, species, name, age_range)


@router.get("/my-pets", response_model=list[PetOut])
async def my_pets(
    current=Depends(get_current_user),
    service: PetsService = Depends(get_pets_service),
):
    return await service.user_pets(current["id"])


@router.get("/my-liked", response_model=list[PetOut])
async def my_liked_pets(
    current=Depends(get_current_user),
    service: PetsService = Depends(get_pets_service),
):
    return await service.liked_pets(current["id"])


@router.get("/{pet_id}", response_model=PetOut)
async def get_pet(pet_id: str, service: PetsService = Depends(get_pets_service)):
    return await service.find_one(pet_id)


@router.patch("/{pet_id}", response_model=PetOut)
async def update_pet(
    pet_id: str,
    payload: PetUpdate,
    admin=Depends(require_admin),
    service: PetsService = Depends(get_pets_service),
):
    return await service.update(pet_id, payload)


@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(
    pet_id: str,
    admin=Depends(require_admin),
    service: PetsService = Depends(get_pets_service),
):
    await service.remove(pet_id)
    return None


@router.post("/{pet_id}/image", response_model=PetOut)
async def upload_pet_image(
    pet_id: str,
    file: UploadFile = File(...),
    admin=Depends(require_admin),
    service: PetsService = Depends(get_pets_service),
):
    await service.find_one(pet_id)
    url, _ = await save_upload(file, "pets", IMAGE_EXTENSIONS, MAX_IMAGE_BYTES, images_only=True)
    return await service.set_image(pet_id, url)


@router.post("/{pet_id}/like", response_model=LikeResult)
async def like_pet(
    pet_id: str,
    current=Depends(get_current_user),
    service: PetsService = Depends(get_pets_service),
):
    await service.like(pet_id, current["id"])
    return {"message": "Pet liked successfully"}


@router.delete("/{pet_id}/like", response_model=LikeResult)
async def unlike_pet(
    pet_id: str,
    current=Depends(get_current_user),
    service: PetsService = Depends(get_pets_service),
):
    await service.unlike(pet_id, current["id"])
    return {"message": "Pet unliked successfully"}
