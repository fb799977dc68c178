from typing import Protocol

from notifications.domain.entities import Notification


class NotificationSink(Protocol):
    async def record(self, notification: Notification) -> Notification: ...

    async def list_for_recipient(self, recipient_id: str) -> list[Notification]: ...
