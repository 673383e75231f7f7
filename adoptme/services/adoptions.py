# adoptme/services/adoptions.py
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.adoption import AdoptionCreate, AdoptionStatus, AdoptionStatusUpdate
from ..schemas.pet import PetStatus
from ..schemas.user import UserRole
from ..utils import to_id, to_object_id, page_window, log_business_event
from .notifications import NotificationsService
from .pets import PetsService

logger = logging.getLogger(__name__)

SIBLING_REJECTION_NOTE = "Pet was adopted by another user"

USER_FIELDS = {"user_name": 1, "first_name": 1, "last_name": 1, "email": 1, "age": 1}
PET_FIELDS = {"name": 1, "breed": 1, "age": 1, "status": 1, "image": 1, "description": 1}


class AdoptionsService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.notifications = NotificationsService(db)
        self.pets = PetsService(db, self.notifications)

    # -------- population --------

    async def _lookup(self, collection: str, ids: Iterable[Any], fields: Dict[str, int]) -> Dict[ObjectId, dict]:
        wanted = list({i for i in ids if isinstance(i, ObjectId)})
        if not wanted:
            return {}
        cursor = self.db[collection].find({"_id": {"$in": wanted}}, fields)
        return {d["_id"]: to_id(d) async for d in cursor}

    async def _populate(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replaces user/pet/admin_approver ids with summaries; missing refs become None."""
        users = await self._lookup(
            "users",
            [d.get("user") for d in docs] + [d.get("admin_approver") for d in docs],
            USER_FIELDS,
        )
        pets = await self._lookup("pets", [d.get("pet") for d in docs], PET_FIELDS)

        out = []
        for d in docs:
            item = to_id({k: v for k, v in d.items() if k not in ("user", "pet", "admin_approver")})
            item["user"] = users.get(d.get("user"))
            item["pet"] = pets.get(d.get("pet"))
            item["admin_approver"] = users.get(d.get("admin_approver"))
            out.append(item)
        return out

    async def _populate_one(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        return (await self._populate([doc]))[0]

    async def _get(self, adoption_id: str) -> Dict[str, Any]:
        oid = to_object_id(adoption_id, "adoption ID")
        doc = await self.db.adoptions.find_one({"_id": oid})
        if not doc:
            raise HTTPException(status_code=404, detail=f"Adoption request with ID {adoption_id} not found")
        return doc

    # -------- operations --------

    async def create(self, payload: AdoptionCreate, user_id: str) -> Dict[str, Any]:
        pet_oid = to_object_id(payload.pet, "pet ID")
        user_oid = to_object_id(user_id, "user ID")

        pet = await self.db.pets.find_one({"_id": pet_oid})
        if not pet:
            raise HTTPException(status_code=404, detail="Pet not found")
        if pet.get("status") != PetStatus.available.value:
            raise HTTPException(status_code=409, detail="Pet is not available for adoption")

        existing = await self.db.adoptions.find_one(
            {"user": user_oid, "pet": pet_oid, "status": AdoptionStatus.pending.value},
            {"_id": 1},
        )
        if existing:
            raise HTTPException(
                status_code=409,
                detail="You already have a pending adoption request for this pet",
            )

        now = datetime.utcnow()
        doc = {
            "user": user_oid,
            "pet": pet_oid,
            "status": AdoptionStatus.pending.value,
            "admin_approver": None,
            "request_date": now,
            "approved_date": None,
            "rejected_date": None,
            "notes": payload.notes,
            "created_at": now,
            "updated_at": now,
        }
        res = await self.db.adoptions.insert_one(doc)
        doc["_id"] = res.inserted_id
        adoption_id = str(res.inserted_id)

        log_business_event(
            logger, "adoption_requested", {"adoption_id": adoption_id, "pet_id": payload.pet}, user_id
        )

        adopter = await self.db.users.find_one({"_id": user_oid}, USER_FIELDS) or {}
        adopter_name = " ".join(
            p for p in (adopter.get("first_name"), adopter.get("last_name")) if p
        ) or adopter.get("user_name", "A user")
        admin_ids = [d["_id"] async for d in self.db.users.find({"role": UserRole.admin.value}, {"_id": 1})]
        await self.notifications.notify_adoption_request(admin_ids, adoption_id, adopter_name, pet["name"])

        return await self._populate_one(doc)

    async def find_all(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[AdoptionStatus] = None,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value
        if user_id:
            query["user"] = to_object_id(user_id, "user ID")

        skip, limit = page_window(page, limit)
        docs = await (
            self.db.adoptions.find(query)
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
            .to_list(limit)
        )
        total = await self.db.adoptions.count_documents(query)
        return {
            "adoptions": await self._populate(docs),
            "total": total,
            "page": max(1, page),
            "limit": limit,
        }

    async def find_one(self, adoption_id: str) -> Dict[str, Any]:
        return await self._populate_one(await self._get(adoption_id))

    async def user_adoptions(self, user_id: str) -> List[Dict[str, Any]]:
        docs = await (
            self.db.adoptions.find({"user": to_object_id(user_id, "user ID")})
            .sort("created_at", -1)
            .to_list(500)
        )
        return await self._populate(docs)

    async def pending(self) -> List[Dict[str, Any]]:
        docs = await (
            self.db.adoptions.find({"status": AdoptionStatus.pending.value})
            .sort("created_at", 1)
            .to_list(500)
        )
        return await self._populate(docs)

    async def stats(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in AdoptionStatus}
        async for row in self.db.adoptions.aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}]):
            if row["_id"] in counts:
                counts[row["_id"]] = row["count"]
        return {"total": sum(counts.values()), **counts}

    async def update_status(
        self, adoption_id: str, payload: AdoptionStatusUpdate, admin_id: str
    ) -> Dict[str, Any]:
        """
        Resolves a pending request.

        Approving marks the pet adopted by the requester, rejects every other
        pending request for the same pet and notifies each affected user.
        Rejecting notifies the requester with the admin notes as reason.
        """
        if payload.status == AdoptionStatus.pending:
            raise HTTPException(status_code=400, detail="Status must be approved or rejected")

        adoption = await self._get(adoption_id)
        if adoption["status"] != AdoptionStatus.pending.value:
            raise HTTPException(status_code=409, detail="Can only update status of pending adoption requests")

        pet = await self.db.pets.find_one({"_id": adoption["pet"]})
        if not pet:
            raise HTTPException(status_code=404, detail="Associated pet not found")

        admin_oid = to_object_id(admin_id, "admin ID")
        now = datetime.utcnow()
        changes: Dict[str, Any] = {
            "status": payload.status.value,
            "admin_approver": admin_oid,
            "updated_at": now,
        }
        if payload.notes is not None:
            changes["notes"] = payload.notes
        if payload.status == AdoptionStatus.approved:
            changes["approved_date"] = now
        else:
            changes["rejected_date"] = now

        # claim the request; a concurrent resolution leaves nothing to match
        res = await self.db.adoptions.update_one(
            {"_id": adoption["_id"], "status": AdoptionStatus.pending.value},
            {"$set": changes},
        )
        if res.modified_count == 0:
            raise HTTPException(status_code=409, detail="Can only update status of pending adoption requests")

        if payload.status == AdoptionStatus.approved:
            await self._approve(adoption, pet, admin_oid, now)
        else:
            await self.notifications.notify_adoption_rejected(
                [adoption["user"]], pet["name"], reason=payload.notes, adoption_id=adoption_id
            )

        log_business_event(
            logger,
            f"adoption_{payload.status.value}",
            {"adoption_id": adoption_id, "pet_id": str(pet["_id"])},
            admin_id,
        )
        return await self.find_one(adoption_id)

    async def _approve(self, adoption: dict, pet: dict, admin_oid: ObjectId, now: datetime) -> None:
        try:
            await self.pets.mark_as_adopted(pet["_id"], adoption["user"])
        except Exception:
            # pet already taken or the write failed: hand the request back untouched
            await self.db.adoptions.update_one(
                {"_id": adoption["_id"]},
                {"$set": {
                    "status": AdoptionStatus.pending.value,
                    "admin_approver": adoption.get("admin_approver"),
                    "approved_date": None,
                    "notes": adoption.get("notes"),
                    "updated_at": adoption.get("updated_at", now),
                }},
            )
            raise

        siblings = [
            d async for d in self.db.adoptions.find(
                {"pet": pet["_id"], "_id": {"$ne": adoption["_id"]}, "status": AdoptionStatus.pending.value},
                {"user": 1},
            )
        ]
        if siblings:
            await self.db.adoptions.update_many(
                {"_id": {"$in": [s["_id"] for s in siblings]}, "status": AdoptionStatus.pending.value},
                {"$set": {
                    "status": AdoptionStatus.rejected.value,
                    "admin_approver": admin_oid,
                    "rejected_date": now,
                    "notes": SIBLING_REJECTION_NOTE,
                    "updated_at": now,
                }},
            )
            logger.info(f"Rejected {len(siblings)} other pending requests for pet {pet['_id']}")

        adoption_id = str(adoption["_id"])
        await self.notifications.notify_adoption_approved(adoption["user"], pet["name"], adoption_id)

        rejected_users = list(dict.fromkeys(s["user"] for s in siblings if s["user"] != adoption["user"]))
        await self.notifications.notify_adoption_rejected(
            rejected_users, pet["name"], reason=SIBLING_REJECTION_NOTE
        )

    async def remove(self, adoption_id: str, current: Dict[str, Any]) -> None:
        adoption = await self._get(adoption_id)
        if current.get("role") != UserRole.admin.value and str(adoption["user"]) != current["id"]:
            raise HTTPException(status_code=403, detail="You can only delete your own adoption requests")
        if adoption["status"] != AdoptionStatus.pending.value:
            raise HTTPException(status_code=409, detail="Can only delete pending adoption requests")
        await self.db.adoptions.delete_one({"_id": adoption["_id"]})
        log_business_event(logger, "adoption_deleted", {"adoption_id": adoption_id}, current["id"])
