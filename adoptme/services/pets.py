# adoptme/services/pets.py
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import re

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config import get_settings
from ..schemas.pet import AGE_RANGES, AgeRange, PetCreate, PetSpecies, PetStatus, PetUpdate
from ..schemas.user import UserRole
from ..utils import to_id, to_object_id, page_window, log_business_event
from .notifications import NotificationsService

logger = logging.getLogger(__name__)
settings = get_settings()


class PetsService:
    def __init__(self, db: AsyncIOMotorDatabase, notifications: Optional[NotificationsService] = None):
        self.db = db
        self.notifications = notifications or NotificationsService(db)

    async def _get(self, pet_id: str) -> Dict[str, Any]:
        oid = to_object_id(pet_id, "pet ID")
        doc = await self.db.pets.find_one({"_id": oid})
        if not doc:
            raise HTTPException(status_code=404, detail=f"Pet with ID {pet_id} not found")
        return doc

    async def create(self, payload: PetCreate, created_by: Optional[str] = None) -> Dict[str, Any]:
        now = datetime.utcnow()
        doc = payload.model_dump(mode="json")
        doc.update({"owner": None, "liked_by": [], "created_at": now, "updated_at": now})
        res = await self.db.pets.insert_one(doc)
        doc["_id"] = res.inserted_id
        pet_id = str(res.inserted_id)

        log_business_event(
            logger,
            "pet_created",
            {"pet_id": pet_id, "name": doc["name"], "species": doc["species"]},
            created_by,
        )

        if settings.notify_on_new_pet and doc["status"] == PetStatus.available.value:
            user_ids = [
                d["_id"] async for d in self.db.users.find({"role": UserRole.user.value}, {"_id": 1})
            ]
            sent = await self.notifications.notify_new_pet_available(user_ids, doc["name"], pet_id)
            logger.info(f"Notified {sent} users about new pet {pet_id}")

        return to_id(doc)

    async def find_all(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[PetStatus] = None,
        breed: Optional[str] = None,
        species: Optional[PetSpecies] = None,
        name: Optional[str] = None,
        age_range: Optional[AgeRange] = None,
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value
        if species is not None:
            query["species"] = species.value
        if breed:
            query["breed"] = {"$regex": re.escape(breed), "$options": "i"}
        if name:
            query["name"] = {"$regex": re.escape(name), "$options": "i"}
        if age_range is not None:
            query["age"] = AGE_RANGES[age_range]

        skip, limit = page_window(page, limit)
        docs = await (
            self.db.pets.find(query)
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
            .to_list(limit)
        )
        total = await self.db.pets.count_documents(query)
        return {"pets": [to_id(d) for d in docs], "total": total, "page": max(1, page), "limit": limit}

    async def find_one(self, pet_id: str) -> Dict[str, Any]:
        return to_id(await self._get(pet_id))

    async def update(self, pet_id: str, payload: PetUpdate) -> Dict[str, Any]:
        pet = await self._get(pet_id)
        changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.db.pets.update_one({"_id": pet["_id"]}, {"$set": changes})
            log_business_event(logger, "pet_updated", {"pet_id": pet_id, "fields": sorted(changes)})
        return await self.find_one(pet_id)

    async def remove(self, pet_id: str) -> None:
        pet = await self._get(pet_id)
        if pet.get("status") == PetStatus.adopted.value:
            raise HTTPException(status_code=409, detail="Cannot delete an adopted pet")
        await self.db.pets.delete_one({"_id": pet["_id"]})
        log_business_event(logger, "pet_deleted", {"pet_id": pet_id, "name": pet.get("name")})

    async def set_image(self, pet_id: str, url: str) -> Dict[str, Any]:
        pet = await self._get(pet_id)
        await self.db.pets.update_one(
            {"_id": pet["_id"]},
            {"$set": {"image": url, "updated_at": datetime.utcnow()}},
        )
        return await self.find_one(pet_id)

    async def like(self, pet_id: str, user_id: str) -> None:
        pet = await self._get(pet_id)
        user_oid = to_object_id(user_id, "user ID")
        res = await self.db.pets.update_one(
            {"_id": pet["_id"], "liked_by": {"$ne": user_oid}},
            {"$addToSet": {"liked_by": user_oid}},
        )
        if res.modified_count == 0:
            raise HTTPException(status_code=409, detail="Pet already liked")
        log_business_event(logger, "pet_liked", {"pet_id": pet_id}, user_id)

    async def unlike(self, pet_id: str, user_id: str) -> None:
        pet = await self._get(pet_id)
        user_oid = to_object_id(user_id, "user ID")
        res = await self.db.pets.update_one(
            {"_id": pet["_id"], "liked_by": user_oid},
            {"$pull": {"liked_by": user_oid}},
        )
        if res.modified_count == 0:
            raise HTTPException(status_code=409, detail="Pet not liked yet")
        log_business_event(logger, "pet_unliked", {"pet_id": pet_id}, user_id)

    async def user_pets(self, user_id: str) -> List[Dict[str, Any]]:
        docs = await (
            self.db.pets.find({"owner": to_object_id(user_id, "user ID")})
            .sort("created_at", -1)
            .to_list(500)
        )
        return [to_id(d) for d in docs]

    async def liked_pets(self, user_id: str) -> List[Dict[str, Any]]:
        docs = await (
            self.db.pets.find({"liked_by": to_object_id(user_id, "user ID")})
            .sort("created_at", -1)
            .to_list(500)
        )
        return [to_id(d) for d in docs]

    async def mark_as_adopted(self, pet_id: Any, owner_id: Any) -> Dict[str, Any]:
        """
        Flips an available pet to adopted and records its owner.
        Only one caller can win: the update is conditional on status=available.
        """
        oid = to_object_id(pet_id, "pet ID")
        now = datetime.utcnow()
        res = await self.db.pets.update_one(
            {"_id": oid, "status": PetStatus.available.value},
            {"$set": {
                "status": PetStatus.adopted.value,
                "owner": to_object_id(owner_id, "owner ID"),
                "updated_at": now,
            }},
        )
        if res.modified_count == 0:
            await self._get(str(oid))
            raise HTTPException(status_code=409, detail="Pet is not available for adoption")
        log_business_event(logger, "pet_adopted", {"pet_id": str(oid), "owner": str(owner_id)})
        return await self.find_one(str(oid))
