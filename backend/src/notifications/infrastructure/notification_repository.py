from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notifications.domain.entities import Notification, NotificationType
from notifications.infrastructure.models import NotificationModel


class DbNotificationRepository:
    """Notifications written in the caller's transaction; the caller commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(self, notification: Notification) -> Notification:
        model = NotificationModel(
            type=notification.type.value,
            recipient_id=notification.recipient_id,
            actor_id=notification.actor_id,
            subject_id=notification.subject_id,
            summary=notification.summary,
        )
        if notification.created_at is not None:
            model.created_at = notification.created_at
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def list_for_recipient(self, recipient_id: str) -> list[Notification]:
        result = await self.session.execute(
            select(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id)
            .order_by(NotificationModel.created_at.desc())
        )
        return [_to_entity(m) for m in result.scalars().all()]


def _to_entity(model: NotificationModel) -> Notification:
    return Notification(
        id=model.id,
        type=NotificationType(model.type),
        recipient_id=model.recipient_id,
        actor_id=model.actor_id,
        subject_id=model.subject_id,
        summary=model.summary,
        created_at=model.created_at,
    )
