from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.notification import NotificationType


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    recipient_id: int
    message: str
    type: NotificationType
    read: bool
    created_at: datetime


class NotificationList(BaseModel):
    items: list[NotificationRead]
    count: int
    unread_count: int
