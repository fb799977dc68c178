from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notifications.infrastructure.notification_repository import DbNotificationRepository
from notifications.interfaces.schemas import NotificationResponse
from shared.dependencies import get_current_actor, get_db

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationResponse])
async def list_mine(
    actor_id: str = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    repo = DbNotificationRepository(db)
    return await repo.list_for_recipient(actor_id)
