from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from notifications.domain.entities import NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    type: NotificationType
    recipient_id: str
    actor_id: str
    subject_id: UUID
    summary: str
    created_at: datetime | None = None
