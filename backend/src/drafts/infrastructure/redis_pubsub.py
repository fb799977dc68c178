import asyncio
import logging
from dataclasses import replace
from uuid import UUID

from pydantic import TypeAdapter
from redis.asyncio import Redis

from drafts.domain.events import DraftCommented, DraftEvent, DraftUpdated
from drafts.domain.repository import EventCallback

logger = logging.getLogger(__name__)

_event_adapter: TypeAdapter[DraftUpdated | DraftCommented] = TypeAdapter(DraftEvent)


def _channel_name(draft_id: UUID) -> str:
    return f"draft:{draft_id}:events"


def _without_attachment_payloads(event: DraftUpdated | DraftCommented) -> DraftUpdated | DraftCommented:
    """Attachment bytes stay in the database; events carry their metadata only."""
    if not isinstance(event, DraftUpdated):
        return event
    draft = event.workspace.draft
    stripped = replace(draft, attachments=[replace(a, data_url="") for a in draft.attachments])
    return DraftUpdated(workspace=replace(event.workspace, draft=stripped))


def encode_event(event: DraftUpdated | DraftCommented) -> bytes:
    return _event_adapter.dump_json(_without_attachment_payloads(event))


def decode_event(data: bytes | str) -> DraftUpdated | DraftCommented:
    return _event_adapter.validate_json(data)


class RedisBroadcaster:
    """Fans draft events out through Redis so every app instance sees them."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish(self, event: DraftUpdated | DraftCommented) -> None:
        await self.redis.publish(_channel_name(event.draft_id), encode_event(event))

    async def subscribe(self, draft_id: UUID, callback: EventCallback) -> asyncio.Task:
        """Subscribe to draft events. Returns a task that can be cancelled to unsubscribe."""
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(_channel_name(draft_id))

        async def _listen():
            try:
                async for message in pubsub.listen():
                    if message["type"] != "message":
                        continue
                    try:
                        await callback(decode_event(message["data"]))
                    except Exception:
                        logger.exception("Subscriber failed for draft %s", draft_id)
            except asyncio.CancelledError:
                pass
            finally:
                await pubsub.unsubscribe(_channel_name(draft_id))
                await pubsub.aclose()

        return asyncio.create_task(_listen())

    async def unsubscribe(self, subscription: asyncio.Task) -> None:
        subscription.cancel()
        try:
            await subscription
        except asyncio.CancelledError:
            pass
