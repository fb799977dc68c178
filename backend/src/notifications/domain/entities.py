from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class NotificationType(StrEnum):
    COMMENT = "comment"


@dataclass
class Notification:
    type: NotificationType
    recipient_id: str
    actor_id: str
    subject_id: UUID
    summary: str
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
