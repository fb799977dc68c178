import logging
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from auth.application.services import verify_token
from drafts.application.services import get_draft
from drafts.domain.access import can_view
from drafts.domain.events import DraftCommented, DraftUpdated
from drafts.domain.repository import DraftBroadcaster
from drafts.infrastructure.store import DbDraftStore
from drafts.interfaces.schemas import CommentResponse, DraftWorkspaceResponse
from shared.dependencies import get_broadcaster, get_db
from shared.exceptions import AppError

logger = logging.getLogger(__name__)

router = APIRouter()

ACCESS_REVOKED = 4003


def _serialize(event: DraftUpdated | DraftCommented) -> dict:
    if isinstance(event, DraftUpdated):
        data = DraftWorkspaceResponse.model_validate(jsonable_encoder(event.workspace))
    else:
        data = CommentResponse.model_validate(jsonable_encoder(event.comment))
    return {"event": event.kind, "draft_id": str(event.draft_id), "data": data.model_dump(mode="json")}


@router.websocket("/ws/drafts/{draft_id}")
async def draft_events(
    websocket: WebSocket,
    draft_id: UUID,
    db: AsyncSession = Depends(get_db),
    broadcaster: DraftBroadcaster = Depends(get_broadcaster),
):
    # Public drafts can be followed without a token: ?token=xxx is optional
    token = websocket.query_params.get("token")
    viewer_id = None
    if token:
        try:
            viewer_id = verify_token(token)
        except AppError:
            await websocket.close(code=4001, reason="Invalid token")
            return

    try:
        workspace = await get_draft(DbDraftStore(db), draft_id, viewer_id)
    except AppError as exc:
        await websocket.close(code=ACCESS_REVOKED, reason=exc.message)
        return
    finally:
        # The socket can stay open for hours; give the connection back now
        await db.close()

    await websocket.accept()
    revoked = False

    async def forward(event: DraftUpdated | DraftCommented):
        nonlocal revoked
        if revoked:
            return
        if isinstance(event, DraftUpdated) and not can_view(event.workspace.draft, viewer_id):
            revoked = True
            logger.warning("Viewer %s lost access to draft %s", viewer_id, draft_id)
            await websocket.close(code=ACCESS_REVOKED, reason="Not authorised to view this draft")
            return
        await websocket.send_json(_serialize(event))

    subscription = await broadcaster.subscribe(draft_id, forward)
    logger.info("Viewer %s following draft %s", viewer_id, draft_id)

    try:
        await websocket.send_json({"event": "ready", "draft_id": str(draft_id), "data": {"ok": True}})
        await websocket.send_json(_serialize(DraftUpdated(workspace=workspace)))

        # Events only flow server -> client; reads keep the socket alive until disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await broadcaster.unsubscribe(subscription)
        logger.info("Viewer %s stopped following draft %s", viewer_id, draft_id)
