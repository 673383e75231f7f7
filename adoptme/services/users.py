# adoptme/services/users.py
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..schemas.user import UserCreate, UserRegister, UserRole, UserUpdate
from ..security import hash_password
from ..uploads import DOCUMENT_EXTENSIONS, MAX_DOCUMENT_BYTES, check_upload_type, delete_upload, save_upload
from ..utils import to_id, to_object_id, page_window, total_pages, log_business_event

logger = logging.getLogger(__name__)

MAX_DOCUMENTS_PER_UPLOAD = 5
PRIVATE_FIELDS = {"password_hash"}


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = to_id(doc)
    for field in PRIVATE_FIELDS:
        out.pop(field, None)
    return out


class UsersService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def _ensure_unique(self, email: Optional[str], user_name: Optional[str], exclude=None) -> None:
        clauses = []
        if email:
            clauses.append({"email": email})
        if user_name:
            clauses.append({"user_name": user_name})
        if not clauses:
            return
        query: Dict[str, Any] = {"$or": clauses}
        if exclude is not None:
            query["_id"] = {"$ne": exclude}
        if await self.db.users.find_one(query, {"_id": 1}):
            raise HTTPException(status_code=409, detail="User with this email or username already exists")

    async def create(self, payload: UserRegister, role: Optional[UserRole] = None) -> Dict[str, Any]:
        """
        Inserts a user with a hashed password. `UserCreate` payloads carry their
        own role; plain registrations are always regular users.
        """
        await self._ensure_unique(payload.email, payload.user_name)

        if role is None:
            role = payload.role if isinstance(payload, UserCreate) else UserRole.user

        now = datetime.utcnow()
        doc = payload.model_dump(exclude={"password", "role"})
        doc.update({
            "password_hash": hash_password(payload.password),
            "role": role.value,
            "is_email_verified": False,
            "documents": [],
            "last_connection": None,
            "created_at": now,
            "updated_at": now,
        })
        try:
            res = await self.db.users.insert_one(doc)
        except DuplicateKeyError:
            raise HTTPException(status_code=409, detail="User with this email or username already exists")
        doc["_id"] = res.inserted_id

        log_business_event(logger, "user_created", {"email": doc["email"], "role": doc["role"]}, str(res.inserted_id))
        return doc

    async def find_all(self, page: int = 1, limit: int = 10, role: Optional[UserRole] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if role is not None:
            query["role"] = role.value

        skip, limit = page_window(page, limit)
        docs = await (
            self.db.users.find(query, {"password_hash": 0})
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
            .to_list(limit)
        )
        total = await self.db.users.count_documents(query)
        return {
            "data": [public_user(d) for d in docs],
            "pagination": {
                "total": total,
                "page": max(1, page),
                "limit": limit,
                "total_pages": total_pages(total, limit),
            },
        }

    async def find_one(self, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id, "user ID")
        doc = await self.db.users.find_one({"_id": oid}, {"password_hash": 0})
        if not doc:
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found")
        return public_user(doc)

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Raw document, password hash included. Only for credential checks."""
        return await self.db.users.find_one({"email": email.strip().lower()})

    async def update(self, user_id: str, payload: UserUpdate) -> Dict[str, Any]:
        oid = to_object_id(user_id, "user ID")
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        if not await self.db.users.find_one({"_id": oid}, {"_id": 1}):
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found")

        await self._ensure_unique(changes.get("email"), changes.get("user_name"), exclude=oid)

        if "password" in changes:
            changes["password_hash"] = hash_password(changes.pop("password"))

        if changes:
            changes["updated_at"] = datetime.utcnow()
            try:
                await self.db.users.update_one({"_id": oid}, {"$set": changes})
            except DuplicateKeyError:
                raise HTTPException(status_code=409, detail="User with this email or username already exists")
            log_business_event(logger, "user_updated", {"fields": sorted(changes)}, user_id)

        return await self.find_one(user_id)

    async def remove(self, user_id: str) -> None:
        oid = to_object_id(user_id, "user ID")
        res = await self.db.users.delete_one({"_id": oid})
        if res.deleted_count == 0:
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found")
        log_business_event(logger, "user_deleted", {"id": user_id})

    async def touch_last_connection(self, user_id: Any) -> None:
        await self.db.users.update_one(
            {"_id": to_object_id(user_id, "user ID")},
            {"$set": {"last_connection": datetime.utcnow()}},
        )

    async def upload_documents(self, user_id: str, files: List[UploadFile]) -> Dict[str, Any]:
        oid = to_object_id(user_id, "user ID")
        if not files:
            raise HTTPException(status_code=400, detail="No files uploaded")
        if len(files) > MAX_DOCUMENTS_PER_UPLOAD:
            raise HTTPException(
                status_code=400,
                detail=f"Too many files (max {MAX_DOCUMENTS_PER_UPLOAD})",
            )
        if not await self.db.users.find_one({"_id": oid}, {"_id": 1}):
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found")

        for file in files:
            check_upload_type(file, DOCUMENT_EXTENSIONS)

        documents = []
        try:
            for file in files:
                url, size = await save_upload(file, "documents", DOCUMENT_EXTENSIONS, MAX_DOCUMENT_BYTES)
                documents.append({
                    "name": file.filename or url.rsplit("/", 1)[-1],
                    "reference": url,
                    "upload_date": datetime.utcnow(),
                    "size": size,
                    "mime_type": file.content_type or "application/octet-stream",
                })
        except Exception:
            # all or nothing: drop what was already written
            for document in documents:
                delete_upload(document["reference"])
            raise

        await self.db.users.update_one(
            {"_id": oid},
            {"$push": {"documents": {"$each": documents}}, "$set": {"updated_at": datetime.utcnow()}},
        )
        log_business_event(logger, "documents_uploaded", {"count": len(documents)}, user_id)
        return await self.find_one(user_id)
