from fastapi import APIRouter, Depends, status, Query
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..security import get_current_user, require_admin
from ..services.notifications import NotificationsService
from ..schemas.notification import (
    NotificationCreate, NotificationBulkCreate, NotificationOut, NotificationPage, NotificationStats,
    NotificationType, MarkAsRead, Modified, BulkCreated, CleanupResult,
)

router = APIRouter()


def get_notifications_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> NotificationsService:
    return NotificationsService(db)


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
async def create_notification(
    payload: NotificationCreate,
    admin=Depends(require_admin),
    service: NotificationsService = Depends(get_notifications_service),
):
    return await service.create(payload)


@router.post("/bulk", response_model=BulkCreated, status_code=status.HTTP_201_CREATED)
async def create_bulk_notifications(
    payload: NotificationBulkCreate,
    admin=Depends(require_admin),
    service: NotificationsService = Depends(get_notifications_service),
):
    created = await service.create_bulk(payload.recipients, payload)
    return {"created": created}


@router.get("", response_model=NotificationPage)
async def my_notifications(
    is_read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current=Depends(get_current_user),
    service: NotificationsService = Depends(get_notifications_service),
):
    return await service.find_user_notifications(current["id"], is_read, type, page, limit)


@router.get("/stats", response_model=NotificationStats)
async def notification_stats(
    admin=Depends(require_admin),
    service: NotificationsService = Depends(get_notifications_service),
):
    return await service.get_stats()


@router.patch("/mark-read", response_model=Modified)
async def mark_multiple_read(
    payload: MarkAsRead,
    current=Depends(get_current_user),
    service: NotificationsService = Depends(get_notifications_service),
):
    return {"modified": await service.mark_multiple_as_read(payload.notification_ids, current["id"])}


@router.patch("/mark-all-read", response_model=Modified)
async def mark_all_read(
    current=Depends(get_current_user),
    service: NotificationsService = Depends(get_notifications_service),
):
    return {"modified": await service.mark_all_as_read(current["id"])}


@router.post("/cleanup", response_model=CleanupResult)
async def cleanup_expired(
    admin=Depends(require_admin),
    service: NotificationsService = Depends(get_notifications_service),
):
    return {"deleted": await service.cleanup_expired()}


@router.patch("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: str,
    current=Depends(get_current_user),
    service: NotificationsService = Depends(get_notifications_service),
):
    return await service.mark_as_read(notification_id, current["id"])


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    current=Depends(get_current_user),
    service: NotificationsService = Depends(get_notifications_service),
):
    await service.remove(notification_id, current["id"])
    return None
