# adoptme/services/notifications.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..schemas.notification import NotificationCreate, NotificationData, NotificationType
from ..utils import to_id, to_object_id, is_object_id, page_window

logger = logging.getLogger(__name__)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class NotificationsService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _build(self, recipient: ObjectId, data: NotificationData) -> Dict[str, Any]:
        now = datetime.utcnow()
        related_id = to_object_id(data.related_id, "related ID") if data.related_id else None
        return {
            "recipient": recipient,
            "type": data.type.value,
            "title": data.title.strip(),
            "message": data.message,
            "is_read": False,
            "related_id": related_id,
            "related_model": data.related_model,
            "action_url": data.action_url,
            "priority": data.priority,
            "expires_at": _naive_utc(data.expires_at),
            "created_at": now,
            "updated_at": now,
        }

    async def create(self, payload: NotificationCreate) -> Dict[str, Any]:
        logger.info(f"Creating notification for user {payload.recipient}")
        recipient = to_object_id(payload.recipient, "recipient ID")

        user = await self.db.users.find_one({"_id": recipient}, {"_id": 1})
        if not user:
            raise HTTPException(status_code=404, detail="Recipient user not found")

        doc = self._build(recipient, payload)
        res = await self.db.notifications.insert_one(doc)
        doc["_id"] = res.inserted_id
        logger.info(f"Notification created with ID: {res.inserted_id}")
        return to_id(doc)

    async def create_bulk(self, recipients: List[Any], data: NotificationData) -> int:
        """One notification per valid recipient id; invalid ids are skipped."""
        logger.info(f"Creating bulk notifications for {len(recipients)} users")
        valid = [ObjectId(str(r)) for r in recipients if is_object_id(r)]
        if not valid:
            raise HTTPException(status_code=400, detail="No valid recipient IDs provided")

        docs = [self._build(r, data) for r in valid]
        res = await self.db.notifications.insert_many(docs)
        logger.info(f"Created {len(res.inserted_ids)} bulk notifications")
        return len(res.inserted_ids)

    async def find_user_notifications(
        self,
        user_id: str,
        is_read: Optional[bool] = None,
        type: Optional[NotificationType] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        recipient = to_object_id(user_id, "user ID")
        query: Dict[str, Any] = {"recipient": recipient}
        if is_read is not None:
            query["is_read"] = is_read
        if type is not None:
            query["type"] = type.value

        skip, limit = page_window(page, limit)
        docs = await (
            self.db.notifications.find(query)
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
            .to_list(limit)
        )
        total = await self.db.notifications.count_documents(query)
        unread = await self.db.notifications.count_documents({"recipient": recipient, "is_read": False})
        return {
            "notifications": [to_id(d) for d in docs],
            "unread_count": unread,
            "total": total,
            "page": max(1, page),
            "limit": limit,
        }

    async def mark_as_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(notification_id, "notification ID")
        doc = await self.db.notifications.find_one_and_update(
            {"_id": oid, "recipient": to_object_id(user_id, "user ID")},
            {"$set": {"is_read": True, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise HTTPException(status_code=404, detail="Notification not found")
        logger.info(f"Notification {notification_id} marked as read by user {user_id}")
        return to_id(doc)

    async def mark_multiple_as_read(self, notification_ids: List[str], user_id: str) -> int:
        valid = [ObjectId(i) for i in notification_ids if is_object_id(i)]
        if not valid:
            return 0
        res = await self.db.notifications.update_many(
            {"_id": {"$in": valid}, "recipient": to_object_id(user_id, "user ID"), "is_read": False},
            {"$set": {"is_read": True, "updated_at": datetime.utcnow()}},
        )
        logger.info(f"Marked {res.modified_count} notifications as read for user {user_id}")
        return res.modified_count

    async def mark_all_as_read(self, user_id: str) -> int:
        res = await self.db.notifications.update_many(
            {"recipient": to_object_id(user_id, "user ID"), "is_read": False},
            {"$set": {"is_read": True, "updated_at": datetime.utcnow()}},
        )
        logger.info(f"Marked all notifications as read for user {user_id}")
        return res.modified_count

    async def remove(self, notification_id: str, user_id: str) -> None:
        oid = to_object_id(notification_id, "notification ID")
        res = await self.db.notifications.delete_one({"_id": oid, "recipient": to_object_id(user_id, "user ID")})
        if res.deleted_count == 0:
            raise HTTPException(status_code=404, detail="Notification not found")
        logger.info(f"Notification {notification_id} deleted by user {user_id}")

    async def cleanup_expired(self) -> int:
        res = await self.db.notifications.delete_many(
            {"expires_at": {"$ne": None, "$lte": datetime.utcnow()}}
        )
        logger.info(f"Cleaned up {res.deleted_count} expired notifications")
        return res.deleted_count

    async def get_stats(self) -> Dict[str, Any]:
        total = await self.db.notifications.count_documents({})
        unread = await self.db.notifications.count_documents({"is_read": False})
        by_type: Dict[str, int] = {}
        async for row in self.db.notifications.aggregate([{"$group": {"_id": "$type", "count": {"$sum": 1}}}]):
            by_type[str(row["_id"])] = row["count"]
        return {
            "total_notifications": total,
            "unread_notifications": unread,
            "notifications_by_type": by_type,
        }

    # -------- adoption helpers --------

    async def notify_adoption_request(
        self, admin_ids: List[Any], adoption_id: str, adopter_name: str, pet_name: str
    ) -> int:
        if not admin_ids:
            return 0
        return await self.create_bulk(
            admin_ids,
            NotificationData(
                type=NotificationType.adoption_request,
                title="New adoption request",
                message=f"{adopter_name} has requested to adopt {pet_name}",
                related_id=adoption_id,
                related_model="Adoption",
                action_url=f"/adoptions/{adoption_id}",
                priority="high",
            ),
        )

    async def notify_adoption_approved(self, adopter_id: Any, pet_name: str, adoption_id: str) -> int:
        return await self.create_bulk(
            [adopter_id],
            NotificationData(
                type=NotificationType.adoption_approved,
                title="Adoption approved!",
                message=f"Your request to adopt {pet_name} has been approved. Congratulations!",
                related_id=adoption_id,
                related_model="Adoption",
                action_url=f"/adoptions/{adoption_id}",
                priority="high",
            ),
        )

    async def notify_adoption_rejected(
        self,
        adopter_ids: List[Any],
        pet_name: str,
        reason: Optional[str] = None,
        adoption_id: Optional[str] = None,
    ) -> int:
        if not adopter_ids:
            return 0
        message = f"Your request to adopt {pet_name} has been rejected."
        if reason:
            message = f"{message} Reason: {reason}"
        return await self.create_bulk(
            adopter_ids,
            NotificationData(
                type=NotificationType.adoption_rejected,
                title="Adoption request rejected",
                message=message,
                related_id=adoption_id,
                related_model="Adoption" if adoption_id else None,
                priority="medium",
            ),
        )

    async def notify_new_pet_available(self, user_ids: List[Any], pet_name: str, pet_id: str) -> int:
        if not user_ids:
            return 0
        return await self.create_bulk(
            user_ids,
            NotificationData(
                type=NotificationType.new_pet_available,
                title="New pet available",
                message=f"{pet_name} is available for adoption",
                related_id=pet_id,
                related_model="Pet",
                action_url=f"/pets/{pet_id}",
                priority="medium",
            ),
        )
