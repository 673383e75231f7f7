from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from typing import Optional, List, Literal, Dict

Priority = Literal["low", "medium", "high"]
RelatedModel = Literal["Pet", "Adoption", "User"]


class NotificationType(str, Enum):
    adoption_request = "adoption_request"
    adoption_approved = "adoption_approved"
    adoption_rejected = "adoption_rejected"
    new_pet_available = "new_pet_available"
    reminder = "reminder"
    system_announcement = "system_announcement"


class NotificationData(BaseModel):
    """Notification body without a recipient, shared by single and bulk creation."""
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    related_id: Optional[str] = None
    related_model: Optional[RelatedModel] = None
    action_url: Optional[str] = None
    priority: Optional[Priority] = None
    expires_at: Optional[datetime] = None


class NotificationCreate(NotificationData):
    recipient: str = Field(..., description="Recipient user id")


class MarkAsRead(BaseModel):
    notification_ids: List[str] = Field(..., min_length=1)


class NotificationOut(BaseModel):
    id: str
    recipient: str
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    related_id: Optional[str] = None
    related_model: Optional[RelatedModel] = None
    action_url: Optional[str] = None
    priority: Optional[Priority] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NotificationPage(BaseModel):
    notifications: List[NotificationOut]
    unread_count: int
    total: int
    page: int
    limit: int


class NotificationStats(BaseModel):
    total_notifications: int
    unread_notifications: int
    notifications_by_type: Dict[str, int]


class Modified(BaseModel):
    modified: int


class NotificationBulkCreate(NotificationData):
    recipients: List[str] = Field(..., min_length=1)


class BulkCreated(BaseModel):
    created: int


class CleanupResult(BaseModel):
    deleted: int
