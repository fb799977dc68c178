import itertools
import logging
from dataclasses import dataclass
from uuid import UUID

from drafts.domain.events import DraftCommented, DraftUpdated
from drafts.domain.repository import DraftBroadcaster, EventCallback
from shared.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subscription:
    draft_id: UUID
    token: int


class InProcessBroadcaster:
    """Delivers draft events to callbacks registered in this process."""

    def __init__(self) -> None:
        self._subscribers: dict[UUID, dict[int, EventCallback]] = {}
        self._tokens = itertools.count(1)

    async def publish(self, event: DraftUpdated | DraftCommented) -> None:
        callbacks = list(self._subscribers.get(event.draft_id, {}).values())
        for callback in callbacks:
            try:
                await callback(event)
            except Exception:
                logger.exception("Subscriber failed on %s for draft %s", event.kind, event.draft_id)

    async def subscribe(self, draft_id: UUID, callback: EventCallback) -> Subscription:
        subscription = Subscription(draft_id=draft_id, token=next(self._tokens))
        self._subscribers.setdefault(draft_id, {})[subscription.token] = callback
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        callbacks = self._subscribers.get(subscription.draft_id)
        if callbacks is None:
            return
        callbacks.pop(subscription.token, None)
        if not callbacks:
            del self._subscribers[subscription.draft_id]

    def subscriber_count(self, draft_id: UUID) -> int:
        return len(self._subscribers.get(draft_id, {}))


_broadcaster: DraftBroadcaster | None = None


def get_broadcaster() -> DraftBroadcaster:
    global _broadcaster
    if _broadcaster is None:
        if settings.BROADCAST_BACKEND == "redis":
            from drafts.infrastructure.redis_pubsub import RedisBroadcaster
            from shared.infrastructure.redis import get_redis_pool

            _broadcaster = RedisBroadcaster(get_redis_pool())
        else:
            _broadcaster = InProcessBroadcaster()
    return _broadcaster
